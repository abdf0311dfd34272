"""ECMA-48 (ANSI/xterm) encoding of screen cells and decoding of terminal input.

Shared by the local terminal backend and the websocket backend, which both
talk to something that behaves like an xterm.

Output:
    encode_cells() turns dirty cells into cursor moves, SGR attribute changes
    and glyphs. The cursor is only repositioned when a run of cells breaks,
    and SGR is only emitted when the attribute changes.

Input:
    InputParser.feed() decodes keyboard text and SGR (mode 1006) mouse
    reports. A lone ESC cannot be told apart from the start of a sequence,
    so it is held until the next feed() or flush().
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from cellwidgets.domain.events import (
    KB_BACKSPACE,
    KB_BACKTAB,
    KB_ENTER,
    KB_ESC,
    KB_TAB,
    InputEvent,
    Key,
    KeyPress,
    KeypressEvent,
    MouseEvent,
    MouseKind,
    ctrl,
    key,
)
from cellwidgets.logging import LoggerFactory
from cellwidgets.ui.glyphs import ASCII_FALLBACK
from cellwidgets.ui.screen import Cell, CellAttributes


log = LoggerFactory.for_input()

CSI = "\x1b["
ENTER_ALT_SCREEN = "\x1b[?1049h"
LEAVE_ALT_SCREEN = "\x1b[?1049l"
MOUSE_ON = "\x1b[?1002h\x1b[?1006h"
MOUSE_OFF = "\x1b[?1002l\x1b[?1006l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
RESET_ATTRIBUTES = "\x1b[0m"
CLEAR_SCREEN = "\x1b[0m\x1b[2J"

_TILDE_KEYS = {
    1: Key.HOME,
    2: Key.INS,
    3: Key.DEL,
    4: Key.END,
    5: Key.PGUP,
    6: Key.PGDN,
    7: Key.HOME,
    8: Key.END,
    11: Key.F1,
    12: Key.F2,
    13: Key.F3,
    14: Key.F4,
    15: Key.F5,
    17: Key.F6,
    18: Key.F7,
    19: Key.F8,
    20: Key.F9,
    21: Key.F10,
    23: Key.F11,
    24: Key.F12,
}

_FINAL_KEYS = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "H": Key.HOME,
    "F": Key.END,
    "P": Key.F1,
    "Q": Key.F2,
    "R": Key.F3,
    "S": Key.F4,
}


# ==============================================================================
# Output
# ==============================================================================


def sgr(attr: CellAttributes) -> str:
    params = ["0"]
    if attr.bold:
        params.append("1")
    if attr.underline:
        params.append("4")
    if attr.reverse:
        params.append("7")
    params.append(str(30 + int(attr.fore)))
    params.append(str(40 + int(attr.back)))
    return f"{CSI}{';'.join(params)}m"


def move_cursor(x: int, y: int) -> str:
    return f"{CSI}{y + 1};{x + 1}H"


def encode_cells(cells: Iterable[Tuple[int, int, Cell]], ascii_only: bool = False) -> str:
    out: List[str] = []
    last_pos: Optional[Tuple[int, int]] = None
    last_attr: Optional[CellAttributes] = None
    for x, y, cell in cells:
        if last_pos is None or last_pos != (x - 1, y):
            out.append(move_cursor(x, y))
        if cell.attr != last_attr:
            out.append(sgr(cell.attr))
            last_attr = cell.attr
        ch = cell.ch
        if ascii_only and not ch.isascii():
            ch = ASCII_FALLBACK.get(ch, "?")
        out.append(ch)
        last_pos = (x, y)
    if out:
        out.append(RESET_ATTRIBUTES)
    return "".join(out)


# ==============================================================================
# Input
# ==============================================================================


def _modifiers(param: Optional[str]) -> Tuple[bool, bool, bool]:
    """Decode an xterm modifier parameter into (shift, alt, ctrl)."""
    if not param:
        return False, False, False
    try:
        bits = int(param) - 1
    except ValueError:
        return False, False, False
    return bool(bits & 1), bool(bits & 2), bool(bits & 4)


def _char_key(ch: str, alt: bool = False) -> KeyPress:
    if ch in ("\r", "\n"):
        return key(Key.ENTER, alt=alt) if alt else KB_ENTER
    if ch == "\t":
        return KB_TAB
    if ch in ("\x7f", "\x08"):
        return KB_BACKSPACE
    code = ord(ch)
    if code == 0:
        return ctrl(" ")
    if code < 32:
        return KeyPress(ch=chr(code + 96), ctrl=True, alt=alt)
    if alt:
        return KeyPress(ch=ch.lower(), alt=True, shift=ch.isupper())
    return KeyPress(ch=ch, shift=ch.isupper())


def _parse_mouse(params: str, final: str) -> Optional[MouseEvent]:
    try:
        button_code, col, row = (int(part) for part in params.split(";"))
    except ValueError:
        return None
    x = col - 1
    y = row - 1
    if button_code & 64:
        return MouseEvent(
            MouseKind.DOWN,
            x,
            y,
            x,
            y,
            wheel_up=(button_code & 3) == 0,
            wheel_down=(button_code & 3) == 1,
        )
    button = button_code & 3
    if final == "m":
        kind = MouseKind.UP
    elif button_code & 32:
        kind = MouseKind.MOTION
    else:
        kind = MouseKind.DOWN
    return MouseEvent(
        kind,
        x,
        y,
        x,
        y,
        button1=button == 0,
        button2=button == 1,
        button3=button == 2,
    )


def _parse_csi(params: str, final: str) -> Optional[InputEvent]:
    if params.startswith("<") and final in "Mm":
        return _parse_mouse(params[1:], final)
    if final == "Z":
        return KeypressEvent(KB_BACKTAB)
    parts = params.split(";") if params else []
    if final == "~":
        try:
            number = int(parts[0]) if parts else 0
        except ValueError:
            return None
        code = _TILDE_KEYS.get(number)
        if code is None:
            return None
        shift, alt, control = _modifiers(parts[1] if len(parts) > 1 else None)
        return KeypressEvent(key(code, alt=alt, ctrl=control, shift=shift))
    code = _FINAL_KEYS.get(final)
    if code is None:
        return None
    shift, alt, control = _modifiers(parts[1] if len(parts) > 1 else None)
    return KeypressEvent(key(code, alt=alt, ctrl=control, shift=shift))


class InputParser:
    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> bool:
        return bool(self._buffer)

    def feed(self, text: str) -> List[InputEvent]:
        self._buffer += text
        events: List[InputEvent] = []
        buf = self._buffer
        i = 0
        while i < len(buf):
            ch = buf[i]
            if ch != "\x1b":
                events.append(KeypressEvent(_char_key(ch)))
                i += 1
                continue
            if i + 1 >= len(buf):
                break
            nxt = buf[i + 1]
            if nxt == "[":
                end = i + 2
                # Parameter bytes (including the '<' of SGR mouse) run up to a final byte
                while end < len(buf) and not ("\x40" <= buf[end] <= "\x7e"):
                    end += 1
                if end >= len(buf):
                    break
                event = _parse_csi(buf[i + 2 : end], buf[end])
                if event is None:
                    log.trace(f"Ignoring unknown key sequence {buf[i:end + 1]!r}")
                else:
                    events.append(event)
                i = end + 1
            elif nxt == "O":
                if i + 2 >= len(buf):
                    break
                code = _FINAL_KEYS.get(buf[i + 2])
                if code is not None:
                    events.append(KeypressEvent(key(code)))
                i += 3
            elif nxt == "\x1b":
                events.append(KeypressEvent(KB_ESC))
                i += 1
            else:
                events.append(KeypressEvent(_char_key(nxt, alt=True)))
                i += 2
        self._buffer = buf[i:]
        for event in events:
            log.trace(f"Decoded key/mouse event: {event}")
        return events

    def flush(self) -> List[InputEvent]:
        """Resolve held input once no more bytes are coming."""
        buf, self._buffer = self._buffer, ""
        if not buf:
            return []
        if buf == "\x1b":
            return [KeypressEvent(KB_ESC)]
        # ESC plus a character that only looked like a sequence start: an Alt key
        events: List[InputEvent] = [KeypressEvent(_char_key(buf[1], alt=True))]
        events.extend(self.feed(buf[2:]))
        events.extend(self.flush())
        return events
