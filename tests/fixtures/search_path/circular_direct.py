def export(circular_direct):
    return circular_direct
