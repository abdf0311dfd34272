"""Reserved menu ids and their default item configuration.

Ids below ``MID_RESERVED_LIMIT`` are reserved for well-known system actions.
Applications number their own items from ``MID_RESERVED_LIMIT`` upwards.

The menu item itself knows nothing about these ids: the menu container looks
up a ``MenuItemConfig`` here and hands it to the item at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional, Tuple

from cellwidgets.domain.events import (
    KB_ALT_X,
    KB_DEL,
    KB_F5,
    KB_F6,
    Key,
    KeyPress,
    ctrl,
    key,
)

MID_RESERVED_LIMIT = 1024
MID_UNUSED = -1


class MenuId(IntEnum):
    EXIT = 1
    OPEN_FILE = 2
    SHELL = 3
    CUT = 10
    COPY = 11
    PASTE = 12
    CLEAR = 13
    TILE = 20
    CASCADE = 21
    CLOSE_ALL = 22
    WINDOW_MOVE = 23
    WINDOW_ZOOM = 24
    WINDOW_NEXT = 25
    WINDOW_PREVIOUS = 26
    WINDOW_CLOSE = 27


@dataclass(frozen=True)
class MenuItemConfig:
    id: int
    default_enabled: bool = True
    checkable: bool = False


# Clipboard actions start disabled: there is nothing to act on yet.
DEFAULT_ITEM_CONFIGS: Dict[int, MenuItemConfig] = {
    MenuId.CUT: MenuItemConfig(MenuId.CUT, default_enabled=False),
    MenuId.COPY: MenuItemConfig(MenuId.COPY, default_enabled=False),
    MenuId.PASTE: MenuItemConfig(MenuId.PASTE, default_enabled=False),
    MenuId.CLEAR: MenuItemConfig(MenuId.CLEAR, default_enabled=False),
}

# Stock label and accelerator for add_default_item()
DEFAULT_ITEMS: Dict[int, Tuple[str, Optional[KeyPress]]] = {
    MenuId.EXIT: ("E&xit", KB_ALT_X),
    MenuId.OPEN_FILE: ("&Open...", None),
    MenuId.SHELL: ("O&S Shell", None),
    MenuId.CUT: ("Cu&t", ctrl("x")),
    MenuId.COPY: ("&Copy", ctrl("c")),
    MenuId.PASTE: ("&Paste", ctrl("v")),
    MenuId.CLEAR: ("C&lear", KB_DEL),
    MenuId.TILE: ("&Tile", None),
    MenuId.CASCADE: ("C&ascade", None),
    MenuId.CLOSE_ALL: ("Cl&ose All", None),
    MenuId.WINDOW_MOVE: ("&Size/Move", key(Key.F5, ctrl=True)),
    MenuId.WINDOW_ZOOM: ("&Zoom", KB_F5),
    MenuId.WINDOW_NEXT: ("&Next", KB_F6),
    MenuId.WINDOW_PREVIOUS: ("&Previous", key(Key.F6, shift=True)),
    MenuId.WINDOW_CLOSE: ("&Close", ctrl("w")),
}


def is_reserved(menu_id: int) -> bool:
    return 0 <= menu_id < MID_RESERVED_LIMIT


def config_for(menu_id: int, checkable: bool = False) -> MenuItemConfig:
    config = DEFAULT_ITEM_CONFIGS.get(menu_id)
    if config is None:
        return MenuItemConfig(menu_id, checkable=checkable)
    if checkable and not config.checkable:
        return MenuItemConfig(menu_id, config.default_enabled, checkable=True)
    return config
