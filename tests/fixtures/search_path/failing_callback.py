def export(callback):
    callback(ValueError("boom"))
