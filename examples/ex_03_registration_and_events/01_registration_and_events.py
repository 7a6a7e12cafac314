"""Explicit registration, removal, markers and the new-dependency event."""

from __future__ import annotations

from pathlib import Path

from dimagic import Dependency, Injector, InjectorEvent

LIB = Path(__file__).parent / "lib"


def main() -> None:
    injector = Injector(search_paths=[LIB])
    created: list[str] = []

    @injector.on(InjectorEvent.NEW_DEPENDENCY)
    def track(dependency: Dependency) -> None:
        created.append(f"{dependency.name}:{dependency.origin.value}")

    injector.add(Dependency("settings", value={"env": "dev"}))
    print(f"explicit={injector.inject(lambda settings: settings['env'])}")  # => explicit=dev

    injector.add(Dependency("web", location_key="http"))
    print(f"by_location={injector.inject(lambda web: web.__name__)}")  # => by_location=http

    injector.add(Dependency("tick_log", value=[]))
    print(f"first_tick={injector.inject(lambda app_clock: app_clock)}")  # => first_tick=1
    print(f"cached_tick={injector.inject(lambda app_clock: app_clock)}")  # => cached_tick=1
    injector.remove("app_clock")
    print(f"after_remove={injector.inject(lambda app_clock: app_clock)}")  # => after_remove=2

    shout = injector.inject(lambda app_helpers: app_helpers)
    print(f"dont_inject={shout('hi')}")  # => dont_inject=HI

    injector.auto_inject_local_factories = False
    injector.remove("app_clock")
    raw = injector.inject(lambda app_clock: app_clock)
    print(f"flag_off_callable={callable(raw)}")  # => flag_off_callable=True

    print(f"events={len(created)}")  # => events=7
    print(f"first_events={','.join(created[:4])}")  # => first_events=settings:explicit,web:explicit,tick_log:explicit,app_clock:local


if __name__ == "__main__":
    main()
