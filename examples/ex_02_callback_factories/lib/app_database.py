import asyncio


def export(app_config, callback):
    def connected():
        callback(None, f"db(debug={app_config['debug']})")

    asyncio.get_running_loop().call_soon(connected)
