"""Callback-style and coroutine factories.

A factory whose last parameter is named ``callback`` reports its value with
``callback(error, result)``, right away or later. ``inject`` returns the value
when everything settles synchronously and a ``concurrent.futures.Future``
otherwise; ``ainject`` always waits.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import Future
from pathlib import Path

from dimagic import Injector

LIB = Path(__file__).parent / "lib"


async def main() -> None:
    injector = Injector(search_paths=[LIB])

    config = injector.inject(lambda app_config: app_config)
    print(f"sync_callback={config}")  # => sync_callback={'debug': True}

    pending = injector.inject(lambda app_database: app_database)
    print(f"returned_future={isinstance(pending, Future)}")  # => returned_future=True
    print(f"database={await asyncio.wrap_future(pending)}")  # => database=db(debug=True)

    cache = await injector.ainject(lambda app_cache: app_cache)
    print(f"coroutine_factory={cache}")  # => coroutine_factory=cache over db(debug=True)

    now_cached = injector.inject(lambda app_database: app_database)
    print(f"cached_sync={now_cached}")  # => cached_sync=db(debug=True)


if __name__ == "__main__":
    asyncio.run(main())
