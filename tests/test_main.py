"""
Tests for the cellwidgets demo entry point.

This test suite covers:
- The demo menus and their accelerators
- The demo menu handler enabling and disabling clipboard items
- Command-line parsing and backend selection
- Error exits
"""

import pytest

from cellwidgets import main as main_module
from cellwidgets.app import Application
from cellwidgets.domain.events import KB_ALT_X, KeypressEvent, MenuEvent, ctrl
from cellwidgets.exceptions import TransportError
from cellwidgets.menu import MenuId


@pytest.fixture
def demo(app):
    items = main_module.build_menus(app)
    app.add_menu_handler(main_module.make_demo_handler(items))
    return items


@pytest.fixture
def quiet_logging(mocker):
    return mocker.patch("cellwidgets.main.setup_logging")


class TestBuildMenus:
    """Tests for the demo menu layout."""

    def test_menu_titles_in_bar_order(self, app, demo):
        assert [menu.title.raw_label for menu in app.menus] == ["File", "Edit", "View"]

    def test_item_ids(self, demo):
        assert set(demo) == {
            MenuId.OPEN_FILE,
            MenuId.EXIT,
            main_module.MID_SELECT_ALL,
            MenuId.CUT,
            MenuId.COPY,
            MenuId.PASTE,
            MenuId.CLEAR,
            main_module.MID_WORD_WRAP,
        }

    def test_clipboard_items_start_disabled(self, demo):
        for menu_id in (MenuId.CUT, MenuId.COPY, MenuId.PASTE, MenuId.CLEAR):
            assert demo[menu_id].enabled is False

    def test_word_wrap_is_checkable(self, demo):
        assert demo[main_module.MID_WORD_WRAP].checkable is True

    def test_accelerators_registered(self, demo):
        assert demo[main_module.MID_SELECT_ALL].key == ctrl("a")
        assert demo[MenuId.EXIT].key == KB_ALT_X


class TestDemoHandler:
    """Tests for the demo menu handler."""

    def test_select_all_enables_clipboard_actions(self, app, fake_backend, demo):
        fake_backend.feed(KeypressEvent(ctrl("a")))

        app.run_once()

        assert demo[MenuId.CUT].enabled is True
        assert demo[MenuId.COPY].enabled is True
        assert demo[MenuId.CLEAR].enabled is True
        assert demo[MenuId.PASTE].enabled is False

    def test_cut_disables_selection_actions_and_enables_paste(self, app, fake_backend, demo):
        fake_backend.feed(KeypressEvent(ctrl("a")), KeypressEvent(ctrl("x")))

        app.run_once()

        assert demo[MenuId.CUT].enabled is False
        assert demo[MenuId.COPY].enabled is False
        assert demo[MenuId.PASTE].enabled is True

    def test_copy_enables_paste(self, app, fake_backend, demo):
        fake_backend.feed(KeypressEvent(ctrl("a")), KeypressEvent(ctrl("c")))

        app.run_once()

        assert demo[MenuId.COPY].enabled is True
        assert demo[MenuId.PASTE].enabled is True

    def test_clear_leaves_paste_disabled(self, demo):
        handler = main_module.make_demo_handler(demo)

        assert handler(MenuEvent(MenuId.CLEAR)) is True

        assert demo[MenuId.PASTE].enabled is False

    def test_exit_is_left_to_the_application(self, app, fake_backend, demo):
        fake_backend.feed(KeypressEvent(KB_ALT_X))

        app.run_once()

        assert app.quitting is True


class TestMain:
    """Tests for main() argument handling."""

    def test_runs_selected_backend(self, mocker, fake_backend, quiet_logging):
        create = mocker.patch("cellwidgets.main.create_backend", return_value=fake_backend)
        run = mocker.patch.object(Application, "run")

        assert main_module.main(["--backend", "web", "--port", "9001"]) == 0

        create.assert_called_once_with("web", host=None, port=9001)
        run.assert_called_once()
        quiet_logging.assert_called_once_with(debug=False, trace=False, console=True)

    def test_terminal_backend_logs_to_files_only(self, mocker, fake_backend, quiet_logging):
        mocker.patch("cellwidgets.main.create_backend", return_value=fake_backend)
        mocker.patch.object(Application, "run")

        main_module.main(["--debug"])

        quiet_logging.assert_called_once_with(debug=True, trace=False, console=False)

    def test_unknown_backend_is_rejected(self, quiet_logging):
        with pytest.raises(SystemExit) as exc_info:
            main_module.main(["--backend", "curses"])

        assert exc_info.value.code == 2

    def test_backend_startup_failure(self, mocker, quiet_logging):
        mocker.patch(
            "cellwidgets.main.create_backend",
            side_effect=TransportError("WebSocketBackend", "cannot listen"),
        )

        assert main_module.main(["--backend", "web"]) == 1

    def test_transport_failure_during_run(self, mocker, fake_backend, quiet_logging, capsys):
        mocker.patch("cellwidgets.main.create_backend", return_value=fake_backend)
        mocker.patch.object(
            Application, "run", side_effect=TransportError("WebSocketBackend", "client disconnected")
        )

        assert main_module.main(["--backend", "web"]) == 1
        assert "TransportError" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_cleanly(self, mocker, fake_backend, quiet_logging):
        mocker.patch("cellwidgets.main.create_backend", return_value=fake_backend)
        mocker.patch.object(Application, "run", side_effect=KeyboardInterrupt)

        assert main_module.main([]) == 0

    def test_gpio_keypad_for_image_backend(self, mocker, fake_backend, quiet_logging):
        keypad = mocker.patch("cellwidgets.hardware.gpio.GpioKeypad")
        create = mocker.patch("cellwidgets.main.create_backend", return_value=fake_backend)
        mocker.patch.object(Application, "run")

        main_module.main(["--backend", "image", "--gpio"])

        create.assert_called_once_with("image", keypad=keypad.return_value)
