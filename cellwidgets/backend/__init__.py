"""Display/input providers.

The image and websocket backends pull in Pillow/luma and aiohttp, so they are
only imported when asked for through ``create_backend``.
"""

from typing import Any

from cellwidgets.backend.base import Backend, ensure_open

BACKEND_NAMES = ("terminal", "web", "image")


def create_backend(name: str, **kwargs: Any) -> Backend:
    if name == "terminal":
        from cellwidgets.backend.terminal import TerminalBackend

        return TerminalBackend(**kwargs)
    if name == "web":
        from cellwidgets.backend.web import WebSocketBackend

        return WebSocketBackend(**kwargs)
    if name == "image":
        from cellwidgets.backend.image import ImageBackend

        return ImageBackend(**kwargs)
    raise ValueError(f"Unknown backend {name!r}, expected one of {', '.join(BACKEND_NAMES)}")


__all__ = ["BACKEND_NAMES", "Backend", "create_backend", "ensure_open"]
