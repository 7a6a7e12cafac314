from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace

from dimagic.dependency import Origin
from dimagic.exceptions import CircularDependencyError

# Tracker of the factory currently being invoked. asyncio callbacks and tasks
# scheduled by the factory inherit it, so nested injections join its stack.
_active_tracker: ContextVar[GraphTracker | None] = ContextVar("active_tracker", default=None)


@dataclass(frozen=True, slots=True)
class ResolutionFrame:
    """An open resolution of one dependency name.

    ``location_key`` is set once the module behind the name is known.
    """

    name: str
    origin: Origin | None = None
    location_key: str | None = None


@dataclass(slots=True)
class GraphTracker:
    """Track names currently being resolved to detect circular requests.

    Frames form a stack. A frame opened for a callback-style factory stays open
    until the factory's continuation fires, so a cycle that crosses the
    callback is still detected.
    """

    _frames: list[ResolutionFrame] = field(default_factory=list)

    def enter(self, name: str, origin: Origin | None = None) -> ResolutionFrame:
        """Open a frame for ``name``.

        Raises:
            CircularDependencyError: If ``name`` already has an open frame.

        """
        if any(frame.name == name for frame in self._frames):
            raise CircularDependencyError(name, self.stack)
        frame = ResolutionFrame(name=name, origin=origin)
        self._frames.append(frame)
        return frame

    def bind(self, frame: ResolutionFrame, location_key: str) -> ResolutionFrame:
        """Record the module ``frame`` resolves to and return the updated frame.

        Two names can lead to the same module (``aliasLoop`` and
        ``alias_loop``), so modules are checked as well as names.

        Raises:
            CircularDependencyError: If another open frame resolves the same
                module.

        """
        index = self._index(frame)
        others = [other for other in self._frames if other is not frame]
        if any(other.location_key == location_key for other in others):
            raise CircularDependencyError(frame.name, [other.name for other in others])
        bound = replace(frame, location_key=location_key)
        self._frames[index] = bound
        return bound

    def leave(self, frame: ResolutionFrame) -> None:
        del self._frames[self._index(frame)]

    def _index(self, frame: ResolutionFrame) -> int:
        for index in range(len(self._frames) - 1, -1, -1):
            if self._frames[index] is frame:
                return index
        msg = f"Frame for {frame.name!r} is not open"
        raise RuntimeError(msg)

    def is_open(self, name: str) -> bool:
        return any(frame.name == name for frame in self._frames)

    @property
    def stack(self) -> list[str]:
        return [frame.name for frame in self._frames]

    def __len__(self) -> int:
        return len(self._frames)


def active_tracker() -> GraphTracker | None:
    """Return the tracker of the factory invocation in progress, if any."""
    return _active_tracker.get()


@contextmanager
def tracking(tracker: GraphTracker) -> Iterator[GraphTracker]:
    """Make ``tracker`` the active tracker while a factory runs."""
    token = _active_tracker.set(tracker)
    try:
        yield tracker
    finally:
        _active_tracker.reset(token)
