"""Input and semantic events exchanged between backends, widgets and the app.

Backends produce ``KeypressEvent``, ``MouseEvent`` and ``ResizeEvent``.
Widgets produce ``MenuEvent`` for the owning application.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union


# ==============================================================================
# Keys
# ==============================================================================


class Key(Enum):
    """Function keys. The value is the text used in menus and logs."""

    F1 = "F1"
    F2 = "F2"
    F3 = "F3"
    F4 = "F4"
    F5 = "F5"
    F6 = "F6"
    F7 = "F7"
    F8 = "F8"
    F9 = "F9"
    F10 = "F10"
    F11 = "F11"
    F12 = "F12"
    HOME = "Home"
    END = "End"
    PGUP = "PgUp"
    PGDN = "PgDn"
    INS = "Ins"
    DEL = "Del"
    RIGHT = "Right"
    LEFT = "Left"
    UP = "Up"
    DOWN = "Down"
    TAB = "Tab"
    BACKTAB = "BackTab"
    ENTER = "Enter"
    ESC = "Esc"
    BACKSPACE = "Backspace"


@dataclass(frozen=True)
class KeyPress:
    """A key combination: one function key or character plus modifiers."""

    is_key: bool = False
    code: Optional[Key] = None
    ch: str = ""
    alt: bool = False
    ctrl: bool = False
    shift: bool = False

    def __str__(self) -> str:
        if self.is_key:
            name = self.code.value if self.code is not None else "?"
            if self.code is Key.BACKTAB:
                return "Shift-Tab"
        else:
            name = self.ch
            if self.alt or self.ctrl:
                name = name.upper()
        prefix = ""
        if self.ctrl:
            prefix += "Ctrl-"
        if self.alt:
            prefix += "Alt-"
        if self.shift and self.is_key:
            prefix += "Shift-"
        return prefix + name

    def lower(self) -> KeyPress:
        """Case-folded copy, used when matching mnemonics."""
        if self.is_key:
            return self
        return replace(self, ch=self.ch.lower(), shift=False)


def key(code: Key, *, alt: bool = False, ctrl: bool = False, shift: bool = False) -> KeyPress:
    return KeyPress(is_key=True, code=code, alt=alt, ctrl=ctrl, shift=shift)


def char(ch: str, *, shift: bool = False) -> KeyPress:
    return KeyPress(ch=ch, shift=shift)


def alt(ch: str) -> KeyPress:
    return KeyPress(ch=ch.lower(), alt=True)


def ctrl(ch: str) -> KeyPress:
    return KeyPress(ch=ch.lower(), ctrl=True)


KB_ENTER = key(Key.ENTER)
KB_ESC = key(Key.ESC)
KB_TAB = key(Key.TAB)
KB_BACKTAB = key(Key.BACKTAB)
KB_BACKSPACE = key(Key.BACKSPACE)
KB_UP = key(Key.UP)
KB_DOWN = key(Key.DOWN)
KB_LEFT = key(Key.LEFT)
KB_RIGHT = key(Key.RIGHT)
KB_HOME = key(Key.HOME)
KB_END = key(Key.END)
KB_PGUP = key(Key.PGUP)
KB_PGDN = key(Key.PGDN)
KB_INS = key(Key.INS)
KB_DEL = key(Key.DEL)
KB_F1 = key(Key.F1)
KB_F2 = key(Key.F2)
KB_F3 = key(Key.F3)
KB_F4 = key(Key.F4)
KB_F5 = key(Key.F5)
KB_F6 = key(Key.F6)
KB_F7 = key(Key.F7)
KB_F8 = key(Key.F8)
KB_F9 = key(Key.F9)
KB_F10 = key(Key.F10)
KB_F11 = key(Key.F11)
KB_F12 = key(Key.F12)
KB_ALT_X = alt("x")
KB_CTRL_C = ctrl("c")


# ==============================================================================
# Events
# ==============================================================================


@dataclass(frozen=True)
class KeypressEvent:
    key: KeyPress
    time: float = field(default_factory=time.monotonic, compare=False)

    def __str__(self) -> str:
        return f"Keypress: {self.key}"


class MouseKind(Enum):
    MOTION = "motion"
    DOWN = "down"
    UP = "up"


@dataclass(frozen=True)
class MouseEvent:
    """Mouse report. ``x``/``y`` are local to the receiving widget."""

    kind: MouseKind
    x: int
    y: int
    abs_x: int
    abs_y: int
    button1: bool = False
    button2: bool = False
    button3: bool = False
    wheel_up: bool = False
    wheel_down: bool = False
    time: float = field(default_factory=time.monotonic, compare=False)

    @property
    def is_mouse1(self) -> bool:
        return self.button1

    def translate(self, dx: int, dy: int) -> MouseEvent:
        """Copy of this event in a frame offset by (dx, dy)."""
        return replace(self, x=self.x - dx, y=self.y - dy)

    def __str__(self) -> str:
        return f"Mouse {self.kind.value}: ({self.x}, {self.y})"


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int
    time: float = field(default_factory=time.monotonic, compare=False)


@dataclass(frozen=True)
class MenuEvent:
    """A menu item was selected."""

    id: int
    time: float = field(default_factory=time.monotonic, compare=False)


InputEvent = Union[KeypressEvent, MouseEvent, ResizeEvent]
