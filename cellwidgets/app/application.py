"""Application: owns the backend, the menus and the event loop.

Loop Cycle (run_once):
    1. backend.get_events()   waits at most the backend's poll timeout
    2. route every input event synchronously, in arrival order, draining
       the MenuEvents it posted to the menu handlers before the next one
    3. redraw the desktop, the menu bar and the open menus
    4. backend.flush_screen()

Menu handlers are called in registration order until one returns True.
An unclaimed ``MenuId.EXIT`` stops the loop.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from cellwidgets.backend.base import Backend
from cellwidgets.domain.events import (
    KB_F10,
    KB_LEFT,
    KB_RIGHT,
    InputEvent,
    KeyPress,
    KeypressEvent,
    MenuEvent,
    MouseEvent,
    MouseKind,
    ResizeEvent,
)
from cellwidgets.exceptions import TransportError
from cellwidgets.logging import LoggerFactory
from cellwidgets.menu.definitions import MenuId
from cellwidgets.menu.item import MenuItem
from cellwidgets.menu.menu import Menu
from cellwidgets.ui.theme import ColorTheme


MenuHandler = Callable[[MenuEvent], Optional[bool]]

# Blank columns between titles on the menu bar
MENU_BAR_GAP = 2
MENU_BAR_ROW = 0


class Application:
    def __init__(self, backend: Backend, theme: Optional[ColorTheme] = None) -> None:
        self.backend = backend
        self.theme = theme if theme is not None else ColorTheme.from_settings()
        self.menus: List[Menu] = []
        self.open_menus: List[Menu] = []
        self._menu_events: List[MenuEvent] = []
        self._handlers: List[MenuHandler] = []
        self._accelerators: Dict[KeyPress, MenuItem] = {}
        self._quit = False
        self._log = LoggerFactory.for_system()
        self._menu_log = LoggerFactory.for_menu()

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def _next_bar_x(self) -> int:
        x = 1
        for menu in self.menus:
            x += len(menu.title.raw_label) + MENU_BAR_GAP
        return x

    def add_menu(self, menu: Menu) -> Menu:
        """Put ``menu`` on the menu bar and attach it to this application."""
        menu.x = self._next_bar_x()
        menu.y = MENU_BAR_ROW + 1
        menu.active = False
        menu.set_application(self)
        self.menus.append(menu)
        for item in menu.items:
            if item.key is not None:
                self.add_accelerator(item.key, item)
        return menu

    def title_span(self, menu: Menu) -> Tuple[int, int]:
        """Columns [start, end) of the menu's title on the menu bar."""
        return menu.x, menu.x + len(menu.title.raw_label)

    @property
    def active_menu(self) -> Optional[Menu]:
        return self.open_menus[-1] if self.open_menus else None

    def open_menu(self, menu: Menu) -> None:
        if menu not in self.menus:
            self.add_menu(menu)
        self.close_menus()
        self.open_menus.append(menu)
        menu.active = True
        if menu.active_child is None or not menu.active_child.enabled:
            menu.select_first()
        self._menu_log.debug(f"Opened menu {menu.title.raw_label!r}")

    def close_menu(self, menu: Menu) -> None:
        if menu in self.open_menus:
            self.open_menus.remove(menu)
            menu.active = False
            self._menu_log.debug(f"Closed menu {menu.title.raw_label!r}")

    def close_menus(self) -> None:
        for menu in list(self.open_menus):
            self.close_menu(menu)

    def _open_neighbour(self, step: int) -> None:
        current = self.active_menu
        if current is None or current not in self.menus:
            return
        index = (self.menus.index(current) + step) % len(self.menus)
        self.open_menu(self.menus[index])

    def _menu_for_title_mnemonic(self, pressed: KeyPress) -> Optional[Menu]:
        if pressed.is_key or not pressed.alt or pressed.ctrl:
            return None
        for menu in self.menus:
            if menu.title.matches(pressed.ch):
                return menu
        return None

    # ------------------------------------------------------------------
    # Semantic events
    # ------------------------------------------------------------------

    def post_menu_event(self, event: MenuEvent) -> None:
        self._menu_events.append(event)

    def add_menu_handler(self, handler: MenuHandler) -> None:
        self._handlers.append(handler)

    def add_accelerator(self, key: KeyPress, item: MenuItem) -> None:
        self._accelerators[key.lower()] = item

    def _dispatch_menu_events(self) -> None:
        while self._menu_events:
            event = self._menu_events.pop(0)
            self.close_menus()
            claimed = False
            for handler in self._handlers:
                if handler(event):
                    claimed = True
                    break
            self._menu_log.debug(f"Menu event {event.id} handled, claimed={claimed}")
            if event.id == MenuId.EXIT and not claimed:
                self.quit()

    # ------------------------------------------------------------------
    # Input routing
    # ------------------------------------------------------------------

    def _on_keypress(self, event: KeypressEvent) -> None:
        pressed = event.key
        item = self._accelerators.get(pressed.lower())
        if item is not None and item.enabled:
            self._menu_log.debug(f"Accelerator {pressed} dispatches menu item {item.id}")
            item.dispatch()
            return

        menu = self._menu_for_title_mnemonic(pressed)
        if menu is not None:
            self.open_menu(menu)
            return

        if self.active_menu is not None:
            if pressed == KB_LEFT:
                self._open_neighbour(-1)
            elif pressed == KB_RIGHT:
                self._open_neighbour(1)
            else:
                self.active_menu.handle_event(event)
            return

        if pressed == KB_F10 and self.menus:
            self.open_menu(self.menus[0])

    def _on_mouse(self, event: MouseEvent) -> None:
        if event.abs_y == MENU_BAR_ROW and event.kind is MouseKind.DOWN:
            for menu in self.menus:
                start, end = self.title_span(menu)
                if start <= event.abs_x < end:
                    if menu is self.active_menu:
                        self.close_menu(menu)
                    else:
                        self.open_menu(menu)
                    return

        for menu in reversed(self.open_menus):
            if menu.contains(event.abs_x, event.abs_y):
                menu.handle_event(event.translate(menu.x, menu.y))
                return

        if event.kind is MouseKind.DOWN and self.open_menus:
            self.close_menus()

    def handle_event(self, event: InputEvent) -> None:
        if isinstance(event, ResizeEvent):
            self._log.debug(f"Screen resized to {event.width}x{event.height}")
        elif isinstance(event, KeypressEvent):
            self._on_keypress(event)
        elif isinstance(event, MouseEvent):
            self._on_mouse(event)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _draw_menu_bar(self) -> None:
        screen = self.backend.screen
        bar = self.theme.get_color("menu")
        screen.h_line_xy(0, MENU_BAR_ROW, screen.width, " ", bar)
        for menu in self.menus:
            if menu is self.active_menu:
                color = self.theme.get_color("menu.highlighted")
                mnemonic_color = self.theme.get_color("menu.mnemonic.highlighted")
            else:
                color = bar
                mnemonic_color = self.theme.get_color("menu.mnemonic")
            start, _ = self.title_span(menu)
            screen.put_string_xy(start, MENU_BAR_ROW, menu.title.raw_label, color)
            if menu.title.shortcut_idx >= 0:
                screen.put_char_xy(
                    start + menu.title.shortcut_idx,
                    MENU_BAR_ROW,
                    menu.title.shortcut,
                    mnemonic_color,
                )

    def draw(self) -> None:
        screen = self.backend.screen
        screen.reset_frame()
        screen.put_all(" ", self.theme.get_color("desktop"))
        if self.menus:
            self._draw_menu_bar()
        for menu in self.open_menus:
            menu.render()
        screen.reset_frame()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run_once(self) -> None:
        events: List[InputEvent] = []
        self.backend.get_events(events)
        # Events posted outside of input routing
        self._dispatch_menu_events()
        for event in events:
            self.handle_event(event)
            # Handlers run before the next event so it sees their item changes
            self._dispatch_menu_events()
        self.draw()
        self.backend.flush_screen()

    def run(self) -> None:
        self._quit = False
        self._log.info(
            f"Application started on {type(self.backend).__name__} "
            f"({self.backend.screen.width}x{self.backend.screen.height})"
        )
        try:
            while not self._quit:
                self.run_once()
        except TransportError as error:
            self._log.error(f"Backend transport failed: {error}")
            raise
        finally:
            self.backend.shutdown()
            self._log.info("Application stopped")

    def quit(self) -> None:
        self._quit = True

    @property
    def quitting(self) -> bool:
        return self._quit
