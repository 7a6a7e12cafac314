def export(callback):
    callback(None, {"debug": True})
