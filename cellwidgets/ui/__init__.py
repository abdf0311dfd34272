from cellwidgets.ui.mnemonic import MnemonicString
from cellwidgets.ui.screen import Cell, CellAttributes, Color, Screen
from cellwidgets.ui.theme import ColorTheme
from cellwidgets.ui.widget import Widget

__all__ = [
    "Cell",
    "CellAttributes",
    "Color",
    "ColorTheme",
    "MnemonicString",
    "Screen",
    "Widget",
]
