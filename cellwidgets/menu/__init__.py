from cellwidgets.menu.definitions import (
    DEFAULT_ITEM_CONFIGS,
    MID_RESERVED_LIMIT,
    MenuId,
    MenuItemConfig,
    config_for,
)
from cellwidgets.menu.item import MenuItem, MenuItemState, MenuSeparator
from cellwidgets.menu.menu import Menu

__all__ = [
    "DEFAULT_ITEM_CONFIGS",
    "MID_RESERVED_LIMIT",
    "Menu",
    "MenuId",
    "MenuItem",
    "MenuItemConfig",
    "MenuItemState",
    "MenuSeparator",
    "config_for",
]
