"""A single selectable row inside a pull-down menu.

State machine::

    DISABLED  <-- set_enabled(False) --  ENABLED_UNCHECKED  <-- dispatch() -->  ENABLED_CHECKED
                                                                  (checkable items only)

``dispatch()`` is the only transition driven by input. It posts a
``MenuEvent`` with the item's id to the owning application and, for
checkable items, flips ``checked``. Calling it on a disabled item is a
contract violation; the mouse and keyboard handlers never do.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from cellwidgets.domain.events import KB_ENTER, KeyPress, KeypressEvent, MenuEvent, MouseEvent
from cellwidgets.exceptions import DisabledDispatchError, NotCheckableError
from cellwidgets.logging import LoggerFactory
from cellwidgets.menu.definitions import MID_UNUSED, MenuItemConfig
from cellwidgets.ui import glyphs
from cellwidgets.ui.mnemonic import MnemonicString
from cellwidgets.ui.widget import Widget


log = LoggerFactory.for_menu()

# Columns taken by the side borders and the inset around the label
LABEL_PADDING = 4
LABEL_INSET = 2
KEY_GAP = 2
KEY_INSET = 2


class MenuItemState(Enum):
    DISABLED = "disabled"
    ENABLED_UNCHECKED = "enabled_unchecked"
    ENABLED_CHECKED = "enabled_checked"


class MenuItem(Widget):
    def __init__(
        self,
        parent: Optional[Widget],
        config: MenuItemConfig,
        x: int,
        y: int,
        label: str,
    ) -> None:
        super().__init__()
        self.mnemonic = MnemonicString(label)
        self.label = self.mnemonic.raw_label
        self.id = config.id
        self.x = x
        self.y = y
        self.height = 1
        self.width = len(self.label) + LABEL_PADDING
        self.key: Optional[KeyPress] = None
        self._checkable = config.checkable
        self._checked = False
        self.enabled = config.default_enabled
        if parent is not None:
            parent.add_child(self)

    # ------------------------------------------------------------------
    # Toggle state
    # ------------------------------------------------------------------

    @property
    def checkable(self) -> bool:
        return self._checkable

    def set_checkable(self, checkable: bool) -> None:
        self._checkable = bool(checkable)
        if not self._checkable:
            self._checked = False

    @property
    def checked(self) -> bool:
        return self._checked

    def set_checked(self, checked: bool) -> None:
        if checked and not self._checkable:
            raise NotCheckableError(self.id)
        self._checked = bool(checked)

    @property
    def state(self) -> MenuItemState:
        if not self.enabled:
            return MenuItemState.DISABLED
        if self._checked:
            return MenuItemState.ENABLED_CHECKED
        return MenuItemState.ENABLED_UNCHECKED

    # ------------------------------------------------------------------
    # Accelerator
    # ------------------------------------------------------------------

    def set_key(self, key: Optional[KeyPress]) -> None:
        """Attach a global accelerator, widening the item so its text fits."""
        self.key = key
        if key is not None:
            new_width = len(self.label) + LABEL_PADDING + len(str(key)) + KEY_GAP
            if new_width > self.width:
                self.width = new_width

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def mouse_on_item(self, event: MouseEvent) -> bool:
        return event.y == 0 and 0 <= event.x < self.width

    def dispatch(self) -> None:
        if not self.enabled:
            raise DisabledDispatchError(self.id)

        self.get_application().post_menu_event(MenuEvent(self.id))
        if self._checkable:
            self._checked = not self._checked
        log.debug(f"Menu item {self.id} ({self.label}) dispatched, checked={self._checked}")

    def on_mouse_up(self, event: MouseEvent) -> None:
        if self.enabled and self.mouse_on_item(event) and event.is_mouse1:
            self.dispatch()

    def on_keypress(self, event: KeypressEvent) -> None:
        if self.enabled and event.key == KB_ENTER:
            self.dispatch()
            return

        # Pass to the base widget for the things we don't care about.
        super().on_keypress(event)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self) -> None:
        theme = self.get_theme()
        background = theme.get_color("menu")
        if self.is_absolute_active():
            menu_color = theme.get_color("menu.highlighted")
            mnemonic_color = theme.get_color("menu.mnemonic.highlighted")
        elif self.enabled:
            menu_color = theme.get_color("menu")
            mnemonic_color = theme.get_color("menu.mnemonic")
        else:
            menu_color = theme.get_color("menu.disabled")
            mnemonic_color = theme.get_color("menu.disabled")

        screen = self.get_screen()
        screen.v_line_xy(0, 0, 1, glyphs.WINDOW_SIDE, background)
        screen.v_line_xy(self.width - 1, 0, 1, glyphs.WINDOW_SIDE, background)

        screen.h_line_xy(1, 0, self.width - 2, " ", menu_color)
        screen.put_string_xy(LABEL_INSET, 0, self.label, menu_color)
        if self.key is not None:
            key_label = str(self.key)
            screen.put_string_xy(self.width - len(key_label) - KEY_INSET, 0, key_label, menu_color)
        if self.mnemonic.shortcut_idx >= 0:
            screen.put_char_xy(
                LABEL_INSET + self.mnemonic.shortcut_idx,
                0,
                self.mnemonic.shortcut,
                mnemonic_color,
            )
        if self._checked:
            if not self._checkable:
                raise NotCheckableError(self.id)
            screen.put_char_xy(LABEL_INSET - 1, 0, glyphs.CHECK, menu_color)


class MenuSeparator(MenuItem):
    """A horizontal rule between groups of items. Never focusable."""

    def __init__(self, parent: Optional[Widget], x: int, y: int, width: int) -> None:
        super().__init__(parent, MenuItemConfig(MID_UNUSED, default_enabled=False), x, y, "")
        self.width = width

    def draw(self) -> None:
        background = self.get_theme().get_color("menu")
        screen = self.get_screen()
        screen.put_char_xy(0, 0, glyphs.CROSS_LEFT, background)
        screen.h_line_xy(1, 0, self.width - 2, glyphs.SINGLE_BAR, background)
        screen.put_char_xy(self.width - 1, 0, glyphs.CROSS_RIGHT, background)
