"""Pull-down menu: a bordered column of menu items.

Keyboard:
    Up/Down     previous/next enabled item, stopping at the ends
    Home/End    first/last enabled item
    letter      dispatch the enabled item with that mnemonic
    Esc         close the menu
    Enter       handled by the active item
"""

from __future__ import annotations

from typing import List, Optional

from cellwidgets.domain.events import (
    KB_DOWN,
    KB_END,
    KB_ESC,
    KB_HOME,
    KB_UP,
    KeyPress,
    KeypressEvent,
    MouseEvent,
)
from cellwidgets.logging import LoggerFactory
from cellwidgets.menu.definitions import DEFAULT_ITEMS, config_for
from cellwidgets.menu.item import MenuItem, MenuSeparator
from cellwidgets.ui import glyphs
from cellwidgets.ui.mnemonic import MnemonicString
from cellwidgets.ui.widget import Widget


log = LoggerFactory.for_menu()

# Frame rows above and below the items
BORDER = 1


class Menu(Widget):
    def __init__(
        self,
        parent: Optional[Widget] = None,
        x: int = 0,
        y: int = 0,
        title: str = "",
    ) -> None:
        super().__init__(parent, x, y)
        self.title = MnemonicString(title)
        self.width = len(self.title.raw_label) + 4
        self.height = 2 * BORDER

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @property
    def items(self) -> List[MenuItem]:
        return [child for child in self.children if isinstance(child, MenuItem)]

    def add_item(
        self,
        menu_id: int,
        label: str,
        key: Optional[KeyPress] = None,
        checkable: bool = False,
    ) -> MenuItem:
        item = MenuItem(self, config_for(menu_id, checkable), 0, self.height - BORDER, label)
        if key is not None:
            item.set_key(key)
            self._register_accelerator(key, item)
        self._grow(item)
        return item

    def add_default_item(self, menu_id: int) -> MenuItem:
        label, key = DEFAULT_ITEMS[menu_id]
        return self.add_item(menu_id, label, key)

    def add_separator(self) -> MenuSeparator:
        separator = MenuSeparator(self, 0, self.height - BORDER, self.width)
        self._grow(separator)
        return separator

    def _grow(self, item: MenuItem) -> None:
        self.height += 1
        if item.width > self.width:
            self.width = item.width
        for child in self.items:
            if child.width < self.width:
                child.width = self.width

    def _register_accelerator(self, key: KeyPress, item: MenuItem) -> None:
        try:
            application = self.get_application()
        except RuntimeError:
            # Registered later by Application.add_menu()
            return
        application.add_accelerator(key, item)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _enabled_items(self) -> List[MenuItem]:
        return [item for item in self.items if item.enabled]

    def move_selection(self, delta: int) -> None:
        enabled = self._enabled_items()
        if not enabled:
            return
        current = self.active_child
        if current in enabled:
            index = enabled.index(current)
        else:
            index = 0 if delta > 0 else len(enabled) - 1
            self.activate(enabled[index])
            return
        new_index = max(0, min(len(enabled) - 1, index + delta))
        self.activate(enabled[new_index])

    def select_first(self) -> None:
        enabled = self._enabled_items()
        if enabled:
            self.activate(enabled[0])

    def select_last(self) -> None:
        enabled = self._enabled_items()
        if enabled:
            self.activate(enabled[-1])

    def item_for_mnemonic(self, ch: str) -> Optional[MenuItem]:
        for item in self._enabled_items():
            if item.mnemonic.matches(ch):
                return item
        return None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on_keypress(self, event: KeypressEvent) -> None:
        pressed = event.key
        if pressed == KB_UP:
            self.move_selection(-1)
            return
        if pressed == KB_DOWN:
            self.move_selection(1)
            return
        if pressed == KB_HOME:
            self.select_first()
            return
        if pressed == KB_END:
            self.select_last()
            return
        if pressed == KB_ESC:
            self.get_application().close_menu(self)
            return
        if not pressed.is_key and not pressed.alt and not pressed.ctrl:
            item = self.item_for_mnemonic(pressed.ch)
            if item is not None:
                log.trace(f"Mnemonic key {pressed} selects menu item {item.id}")
                self.activate(item)
                item.dispatch()
                return

        super().on_keypress(event)

    def on_mouse_motion(self, event: MouseEvent) -> None:
        for item in self._enabled_items():
            if item.mouse_on_item(event.translate(item.x, item.y)):
                self.activate(item)
                return

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self) -> None:
        theme = self.get_theme()
        background = theme.get_color("menu")
        title_color = theme.get_color("menu.title")
        screen = self.get_screen()
        bottom = self.height - 1
        right = self.width - 1

        screen.put_char_xy(0, 0, glyphs.WINDOW_LEFT_TOP, background)
        screen.h_line_xy(1, 0, self.width - 2, glyphs.WINDOW_TOP, background)
        screen.put_char_xy(right, 0, glyphs.WINDOW_RIGHT_TOP, background)
        screen.put_char_xy(0, bottom, glyphs.WINDOW_LEFT_BOTTOM, background)
        screen.h_line_xy(1, bottom, self.width - 2, glyphs.WINDOW_TOP, background)
        screen.put_char_xy(right, bottom, glyphs.WINDOW_RIGHT_BOTTOM, background)

        title = self.title.raw_label
        if title:
            title_x = max((self.width - len(title) - 2) // 2, 1)
            screen.put_string_xy(title_x, 0, f" {title} ", title_color)
