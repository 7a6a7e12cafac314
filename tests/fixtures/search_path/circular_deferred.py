import asyncio

from dimagic import DIMagicError


def export(_injector, callback):
    def later():
        try:
            callback(None, _injector.inject(lambda circular_deferred: circular_deferred))
        except DIMagicError as error:
            callback(error)

    asyncio.get_running_loop().call_soon(later)
