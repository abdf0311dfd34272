"""
Tests for cellwidgets.menu.menu and cellwidgets.menu.definitions.

This test suite covers:
- Building menus from default and custom items
- Keyboard navigation clamped at the ends, skipping disabled items
- Mnemonic dispatch
- Mouse highlighting
- Frame drawing
"""

import pytest

from cellwidgets.domain.events import (
    KB_DOWN,
    KB_END,
    KB_ESC,
    KB_HOME,
    KB_UP,
    KeypressEvent,
    MenuEvent,
    MouseEvent,
    MouseKind,
    alt,
    char,
)
from cellwidgets.menu import Menu, MenuId, MenuSeparator
from cellwidgets.menu.definitions import DEFAULT_ITEMS, config_for, is_reserved
from cellwidgets.ui import glyphs


def press(widget, pressed):
    widget.on_keypress(KeypressEvent(pressed))


@pytest.fixture
def edit_menu(menu):
    """Open, Cut(disabled), separator, Paste(disabled), Word Wrap, Exit."""
    menu.add_default_item(MenuId.OPEN_FILE)
    menu.add_default_item(MenuId.CUT)
    menu.add_separator()
    menu.add_default_item(MenuId.PASTE)
    menu.add_item(2000, "&Word Wrap", checkable=True)
    menu.add_default_item(MenuId.EXIT)
    return menu


def active_id(menu):
    return menu.active_child.id


class TestDefinitions:
    def test_clipboard_actions_start_disabled(self):
        for menu_id in (MenuId.CUT, MenuId.COPY, MenuId.PASTE, MenuId.CLEAR):
            assert config_for(menu_id).default_enabled is False

    def test_unknown_id_is_enabled(self):
        config = config_for(5000)

        assert config.id == 5000
        assert config.default_enabled is True
        assert config.checkable is False

    def test_checkable_request_keeps_table_enablement(self):
        config = config_for(MenuId.CUT, checkable=True)

        assert config.checkable is True
        assert config.default_enabled is False

    def test_reserved_range(self):
        assert is_reserved(MenuId.EXIT)
        assert not is_reserved(1024)

    def test_every_reserved_id_has_a_default_item(self):
        assert set(DEFAULT_ITEMS) == set(MenuId)


class TestBuilding:
    def test_items_stack_below_the_border(self, edit_menu):
        rows = [item.y for item in edit_menu.children]

        assert rows == [1, 2, 3, 4, 5, 6]
        assert edit_menu.height == 8

    def test_width_follows_widest_item(self, edit_menu):
        widest = max(item.width for item in edit_menu.children)

        assert edit_menu.width == widest
        assert all(item.width == edit_menu.width for item in edit_menu.children)

    def test_separator_is_never_focusable(self, edit_menu):
        separator = edit_menu.children[2]

        assert isinstance(separator, MenuSeparator)
        assert separator.enabled is False

    def test_items_property_lists_menu_items(self, edit_menu):
        assert len(edit_menu.items) == 6

    def test_accelerator_registered_with_attached_application(self, app, menu):
        item = menu.add_default_item(MenuId.EXIT)

        assert app._accelerators[alt("x")] is item


class TestNavigation:
    def test_first_enabled_item_starts_active(self, edit_menu):
        assert active_id(edit_menu) == MenuId.OPEN_FILE

    def test_down_skips_disabled_items(self, edit_menu):
        press(edit_menu, KB_DOWN)

        assert active_id(edit_menu) == 2000

    def test_down_clamps_at_the_end(self, edit_menu):
        for _ in range(5):
            press(edit_menu, KB_DOWN)

        assert active_id(edit_menu) == MenuId.EXIT

    def test_up_clamps_at_the_start(self, edit_menu):
        press(edit_menu, KB_UP)

        assert active_id(edit_menu) == MenuId.OPEN_FILE

    def test_home_and_end(self, edit_menu):
        press(edit_menu, KB_END)
        assert active_id(edit_menu) == MenuId.EXIT

        press(edit_menu, KB_HOME)
        assert active_id(edit_menu) == MenuId.OPEN_FILE

    def test_navigation_in_menu_without_enabled_items(self, menu):
        menu.add_default_item(MenuId.CUT)

        press(menu, KB_DOWN)

        assert menu.active_child is None


class TestMnemonics:
    def test_letter_dispatches_matching_item(self, edit_menu, posted_events):
        press(edit_menu, char("w"))

        assert posted_events == [MenuEvent(2000)]
        assert active_id(edit_menu) == 2000

    def test_match_is_case_insensitive(self, edit_menu, posted_events):
        press(edit_menu, char("X", shift=True))

        assert posted_events == [MenuEvent(MenuId.EXIT)]

    def test_disabled_item_mnemonic_is_ignored(self, edit_menu, posted_events):
        press(edit_menu, char("t"))

        assert posted_events == []

    def test_alt_letter_is_not_a_mnemonic(self, edit_menu, posted_events):
        press(edit_menu, alt("w"))

        assert posted_events == []

    def test_escape_closes_menu(self, app, edit_menu):
        app.open_menu(edit_menu)

        press(edit_menu, KB_ESC)

        assert edit_menu not in app.open_menus
        assert not edit_menu.active


class TestMouse:
    def test_motion_highlights_enabled_item(self, edit_menu):
        exit_item = edit_menu.children[5]

        edit_menu.on_mouse_motion(MouseEvent(MouseKind.MOTION, 3, exit_item.y, 3, exit_item.y))

        assert edit_menu.active_child is exit_item

    def test_motion_over_disabled_item_keeps_selection(self, edit_menu):
        edit_menu.on_mouse_motion(MouseEvent(MouseKind.MOTION, 3, 2, 3, 2))

        assert active_id(edit_menu) == MenuId.OPEN_FILE

    def test_click_dispatches_item_under_pointer(self, edit_menu, posted_events):
        y = edit_menu.children[4].y

        edit_menu.handle_event(MouseEvent(MouseKind.DOWN, 2, y, 2, y, button1=True))
        edit_menu.handle_event(MouseEvent(MouseKind.UP, 2, y, 2, y, button1=True))

        assert posted_events == [MenuEvent(2000)]


class TestDraw:
    def test_frame_and_title(self, app, edit_menu):
        screen = app.backend.screen

        edit_menu.render()

        right = edit_menu.width - 1
        bottom = edit_menu.height - 1
        assert screen.get_char_xy(0, 0).ch == glyphs.WINDOW_LEFT_TOP
        assert screen.get_char_xy(right, 0).ch == glyphs.WINDOW_RIGHT_TOP
        assert screen.get_char_xy(0, bottom).ch == glyphs.WINDOW_LEFT_BOTTOM
        assert screen.get_char_xy(right, bottom).ch == glyphs.WINDOW_RIGHT_BOTTOM
        assert " Test " in screen.text_row(0)

    def test_separator_row(self, app, edit_menu):
        screen = app.backend.screen

        edit_menu.render()

        row = screen.text_row(3)[: edit_menu.width]
        assert row[0] == glyphs.CROSS_LEFT
        assert row[-1] == glyphs.CROSS_RIGHT
        assert set(row[1:-1]) == {glyphs.SINGLE_BAR}
