def export(circular_async_first):
    return circular_async_first
