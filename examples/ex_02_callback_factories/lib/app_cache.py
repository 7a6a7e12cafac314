import asyncio


async def export(app_database):
    await asyncio.sleep(0)
    return f"cache over {app_database}"
