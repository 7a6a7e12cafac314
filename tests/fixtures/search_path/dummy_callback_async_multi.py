import asyncio


def export(dummy, dummy_callback_async, callback):
    asyncio.get_running_loop().call_soon(callback, None, dummy + dummy_callback_async * 2)
