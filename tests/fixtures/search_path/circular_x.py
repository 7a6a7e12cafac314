def export(circular_y):
    return circular_y
