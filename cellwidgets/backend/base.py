"""Backend capability set shared by every display/input provider.

A backend owns one ``Screen`` and one ``SessionInfo`` for a single session
and is the only producer of input events. Concrete backends do not inherit
from anything: any object with this shape is a backend.

    class MyBackend:
        @property
        def screen(self) -> Screen: ...
        @property
        def session_info(self) -> SessionInfo: ...
        @property
        def closed(self) -> bool: ...
        def flush_screen(self) -> None: ...
        def get_events(self, queue: list) -> None: ...
        def shutdown(self) -> None: ...

Contract:
    flush_screen()  writes every dirty cell to the device, then marks the
                    screen flushed. Nothing dirty means nothing written. A
                    device or connection failure raises TransportError and
                    the backend stays broken.
    get_events(q)   appends input observed since the last call to the end
                    of ``q`` in the order it happened. Returns in bounded
                    time even when nothing arrived.
    shutdown()      restores terminal modes, closes sockets. A second call
                    is a no-op. flush_screen()/get_events() after shutdown
                    raise BackendClosedError.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from cellwidgets.domain.events import InputEvent
from cellwidgets.domain.session import SessionInfo
from cellwidgets.exceptions import BackendClosedError
from cellwidgets.ui.screen import Screen


@runtime_checkable
class Backend(Protocol):
    @property
    def screen(self) -> Screen:
        ...

    @property
    def session_info(self) -> SessionInfo:
        ...

    @property
    def closed(self) -> bool:
        ...

    def flush_screen(self) -> None:
        ...

    def get_events(self, queue: List[InputEvent]) -> None:
        ...

    def shutdown(self) -> None:
        ...


def ensure_open(backend: Backend, operation: str) -> None:
    """Raise BackendClosedError if ``backend`` has been shut down."""
    if backend.closed:
        raise BackendClosedError(type(backend).__name__, operation)
