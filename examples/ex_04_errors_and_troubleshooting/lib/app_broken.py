def export(callback):
    callback(ConnectionError("refused"))
