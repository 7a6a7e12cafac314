import threading


def export(callback):
    threading.Timer(0.01, callback, args=(None, 5)).start()
