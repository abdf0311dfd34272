"""
Graphics characters used by window and menu borders.

Separated from the widgets so backends that cannot show box-drawing
characters can map them in one place.
"""

WINDOW_SIDE = "│"
WINDOW_TOP = "─"
WINDOW_LEFT_TOP = "┌"
WINDOW_RIGHT_TOP = "┐"
WINDOW_LEFT_BOTTOM = "└"
WINDOW_RIGHT_BOTTOM = "┘"
SINGLE_BAR = "─"
CROSS_LEFT = "├"
CROSS_RIGHT = "┤"
CHECK = "√"

# ASCII replacements for devices without box drawing
ASCII_FALLBACK = {
    WINDOW_SIDE: "|",
    WINDOW_TOP: "-",
    WINDOW_LEFT_TOP: "+",
    WINDOW_RIGHT_TOP: "+",
    WINDOW_LEFT_BOTTOM: "+",
    WINDOW_RIGHT_BOTTOM: "+",
    CROSS_LEFT: "+",
    CROSS_RIGHT: "+",
    CHECK: "x",
}

__all__ = [
    "WINDOW_SIDE",
    "WINDOW_TOP",
    "WINDOW_LEFT_TOP",
    "WINDOW_RIGHT_TOP",
    "WINDOW_LEFT_BOTTOM",
    "WINDOW_RIGHT_BOTTOM",
    "SINGLE_BAR",
    "CROSS_LEFT",
    "CROSS_RIGHT",
    "CHECK",
    "ASCII_FALLBACK",
]
