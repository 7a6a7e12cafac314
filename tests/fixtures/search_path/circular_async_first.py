def export(circular_async_second, callback):
    callback(None, circular_async_second)
