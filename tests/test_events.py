"""Tests for cellwidgets.domain.events."""

import pytest

from cellwidgets.domain.events import (
    KB_ALT_X,
    KB_BACKTAB,
    KB_CTRL_C,
    KB_ENTER,
    KB_F10,
    KB_PGDN,
    Key,
    KeypressEvent,
    MenuEvent,
    MouseEvent,
    MouseKind,
    alt,
    char,
    ctrl,
    key,
)


class TestKeyPressText:
    """Tests for the textual form shown next to menu items."""

    @pytest.mark.parametrize(
        "pressed,text",
        [
            (KB_ENTER, "Enter"),
            (KB_F10, "F10"),
            (KB_PGDN, "PgDn"),
            (KB_ALT_X, "Alt-X"),
            (KB_CTRL_C, "Ctrl-C"),
            (KB_BACKTAB, "Shift-Tab"),
            (key(Key.F5, ctrl=True), "Ctrl-F5"),
            (key(Key.F6, shift=True), "Shift-F6"),
            (char("q"), "q"),
        ],
    )
    def test_str(self, pressed, text):
        assert str(pressed) == text


class TestKeyPressEquality:
    def test_helpers_build_equal_keys(self):
        assert alt("X") == alt("x") == KB_ALT_X
        assert ctrl("C") == KB_CTRL_C

    def test_lower_folds_case(self):
        assert char("Q", shift=True).lower() == char("q")

    def test_lower_keeps_function_keys(self):
        assert KB_F10.lower() is KB_F10

    def test_keys_are_hashable(self):
        table = {KB_ALT_X: "exit"}
        assert table[alt("x")] == "exit"


class TestEvents:
    def test_timestamps_do_not_affect_equality(self):
        assert KeypressEvent(KB_ENTER) == KeypressEvent(KB_ENTER)
        assert MenuEvent(5) == MenuEvent(5)
        assert MenuEvent(5) != MenuEvent(6)

    def test_mouse_translate_keeps_absolute_position(self):
        event = MouseEvent(MouseKind.DOWN, 10, 5, 10, 5, button1=True)

        local = event.translate(3, 2)

        assert (local.x, local.y) == (7, 3)
        assert (local.abs_x, local.abs_y) == (10, 5)
        assert local.is_mouse1

    def test_mouse1_flag(self):
        assert not MouseEvent(MouseKind.UP, 0, 0, 0, 0, button2=True).is_mouse1
