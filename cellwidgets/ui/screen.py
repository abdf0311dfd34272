"""Character-cell screen surface with dirty tracking.

The screen keeps two grids:
    - logical: what widgets have drawn during the current redraw
    - physical: what the backend last pushed to the device

``dirty_cells()`` is the difference between them. A backend writes those
cells and then calls ``mark_flushed()``. Drawing happens in the caller's
local frame: ``offset_x``/``offset_y`` translate to absolute coordinates and
``clip_right``/``clip_bottom`` bound what a widget can touch.

This module is NOT thread-safe. Only the redraw pass writes to it and the
backend flushes it from the same thread.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Optional, Tuple


class Color(IntEnum):
    """The eight ECMA-48 colours. Values are the SGR offsets."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7


@dataclass(frozen=True)
class CellAttributes:
    fore: Color = Color.WHITE
    back: Color = Color.BLACK
    bold: bool = False
    reverse: bool = False
    underline: bool = False


DEFAULT_ATTRIBUTES = CellAttributes()


@dataclass(frozen=True)
class Cell:
    ch: str = " "
    attr: CellAttributes = DEFAULT_ATTRIBUTES


BLANK = Cell()


def _blank_grid(width: int, height: int) -> List[List[Cell]]:
    return [[BLANK] * width for _ in range(height)]


class Screen:
    def __init__(self, width: int = 80, height: int = 24) -> None:
        self.width = max(width, 1)
        self.height = max(height, 1)
        self._logical = _blank_grid(self.width, self.height)
        self._physical: List[List[Optional[Cell]]] = [
            [None] * self.width for _ in range(self.height)
        ]
        self.offset_x = 0
        self.offset_y = 0
        self.clip_right = self.width
        self.clip_bottom = self.height

    # ------------------------------------------------------------------
    # Drawing primitives (local coordinates)
    # ------------------------------------------------------------------

    def put_char_xy(self, x: int, y: int, ch: str, attr: CellAttributes) -> None:
        if x < 0 or y < 0 or x >= self.clip_right or y >= self.clip_bottom:
            return
        abs_x = x + self.offset_x
        abs_y = y + self.offset_y
        if 0 <= abs_x < self.width and 0 <= abs_y < self.height:
            self._logical[abs_y][abs_x] = Cell(ch, attr)

    def put_string_xy(self, x: int, y: int, text: str, attr: CellAttributes) -> None:
        for i, ch in enumerate(text):
            self.put_char_xy(x + i, y, ch, attr)

    def h_line_xy(self, x: int, y: int, n: int, ch: str, attr: CellAttributes) -> None:
        for i in range(max(n, 0)):
            self.put_char_xy(x + i, y, ch, attr)

    def v_line_xy(self, x: int, y: int, n: int, ch: str, attr: CellAttributes) -> None:
        for i in range(max(n, 0)):
            self.put_char_xy(x, y + i, ch, attr)

    def put_all(self, ch: str = " ", attr: CellAttributes = DEFAULT_ATTRIBUTES) -> None:
        cell = Cell(ch, attr)
        self._logical = [[cell] * self.width for _ in range(self.height)]

    def get_char_xy(self, x: int, y: int) -> Cell:
        """Cell at absolute (x, y)."""
        return self._logical[y][x]

    def text_row(self, y: int) -> str:
        return "".join(cell.ch for cell in self._logical[y])

    # ------------------------------------------------------------------
    # Frame and clipping
    # ------------------------------------------------------------------

    def set_frame(self, x: int, y: int, width: int, height: int) -> None:
        """Point local (0, 0) at absolute (x, y) and clip to width x height."""
        self.offset_x = x
        self.offset_y = y
        self.clip_right = width
        self.clip_bottom = height

    def reset_frame(self) -> None:
        self.set_frame(0, 0, self.width, self.height)

    # ------------------------------------------------------------------
    # Synchronisation with the device
    # ------------------------------------------------------------------

    def dirty_cells(self) -> Iterator[Tuple[int, int, Cell]]:
        for y in range(self.height):
            logical_row = self._logical[y]
            physical_row = self._physical[y]
            for x in range(self.width):
                if logical_row[x] != physical_row[x]:
                    yield x, y, logical_row[x]

    def is_dirty(self) -> bool:
        return next(self.dirty_cells(), None) is not None

    def mark_flushed(self) -> None:
        self._physical = [list(row) for row in self._logical]

    def invalidate(self) -> None:
        """Forget what the device shows so the next flush repaints everything."""
        self._physical = [[None] * self.width for _ in range(self.height)]

    def resize(self, width: int, height: int) -> None:
        width = max(width, 1)
        height = max(height, 1)
        logical = _blank_grid(width, height)
        for y in range(min(height, self.height)):
            for x in range(min(width, self.width)):
                logical[y][x] = self._logical[y][x]
        self.width = width
        self.height = height
        self._logical = logical
        self.invalidate()
        self.reset_frame()
