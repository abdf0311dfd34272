from cellwidgets.domain.events import (
    InputEvent,
    Key,
    KeyPress,
    KeypressEvent,
    MenuEvent,
    MouseEvent,
    MouseKind,
    ResizeEvent,
)
from cellwidgets.domain.session import SessionInfo

__all__ = [
    "InputEvent",
    "Key",
    "KeyPress",
    "KeypressEvent",
    "MenuEvent",
    "MouseEvent",
    "MouseKind",
    "ResizeEvent",
    "SessionInfo",
]
