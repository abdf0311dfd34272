import argparse
import sys
from typing import Any, Dict, List, Optional

from cellwidgets.app import Application
from cellwidgets.backend import BACKEND_NAMES, create_backend
from cellwidgets.domain.events import MenuEvent, ctrl
from cellwidgets.exceptions import ToolkitError
from cellwidgets.logging import LoggerFactory, setup_logging
from cellwidgets.menu import MID_RESERVED_LIMIT, Menu, MenuId, MenuItem, MenuSeparator

MID_WORD_WRAP = MID_RESERVED_LIMIT
MID_SELECT_ALL = MID_RESERVED_LIMIT + 1


def build_menus(app: Application) -> Dict[int, MenuItem]:
    """Create the File/Edit/View demo menus and return their items by id."""
    file_menu = Menu(title="&File")
    file_menu.add_default_item(MenuId.OPEN_FILE)
    file_menu.add_separator()
    file_menu.add_default_item(MenuId.EXIT)

    edit_menu = Menu(title="&Edit")
    edit_menu.add_item(MID_SELECT_ALL, "Select &All", ctrl("a"))
    edit_menu.add_separator()
    for menu_id in (MenuId.CUT, MenuId.COPY, MenuId.PASTE, MenuId.CLEAR):
        edit_menu.add_default_item(menu_id)

    view_menu = Menu(title="&View")
    view_menu.add_item(MID_WORD_WRAP, "&Word Wrap", checkable=True)

    items: Dict[int, MenuItem] = {}
    for menu in (file_menu, edit_menu, view_menu):
        app.add_menu(menu)
        for item in menu.items:
            if not isinstance(item, MenuSeparator):
                items[item.id] = item
    return items


def make_demo_handler(items: Dict[int, MenuItem]):
    log = LoggerFactory.for_menu()

    def handle(event: MenuEvent) -> Optional[bool]:
        if event.id == MID_SELECT_ALL:
            # A selection makes the clipboard actions meaningful
            for menu_id in (MenuId.CUT, MenuId.COPY, MenuId.CLEAR):
                items[menu_id].set_enabled(True)
            log.info("Selected everything, clipboard actions enabled")
            return True
        if event.id == MID_WORD_WRAP:
            log.info(f"Word wrap {'on' if items[MID_WORD_WRAP].checked else 'off'}")
            return True
        if event.id in (MenuId.CUT, MenuId.CLEAR):
            for menu_id in (MenuId.CUT, MenuId.COPY, MenuId.CLEAR):
                items[menu_id].set_enabled(False)
            items[MenuId.PASTE].set_enabled(event.id == MenuId.CUT)
            return True
        if event.id == MenuId.COPY:
            items[MenuId.PASTE].set_enabled(True)
            return True
        log.info(f"Menu item {event.id} selected")
        return None

    return handle


def _backend_options(args: argparse.Namespace) -> Dict[str, Any]:
    if args.backend == "web":
        return {"host": args.host, "port": args.port}
    if args.backend == "image" and args.gpio:
        from cellwidgets.hardware.gpio import GpioKeypad

        return {"keypad": GpioKeypad()}
    return {}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="cellwidgets menu demo")
    parser.add_argument("--backend", choices=BACKEND_NAMES, default="terminal", help="Display/input provider")
    parser.add_argument("--host", default=None, help="Listen address for the web backend")
    parser.add_argument("--port", type=int, default=None, help="Listen port for the web backend")
    parser.add_argument("--gpio", action="store_true", help="Read the GPIO keypad (image backend)")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Log every key and mouse event")
    args = parser.parse_args(argv)

    # The terminal backend owns the tty; log to files only
    setup_logging(debug=args.debug, trace=args.trace, console=args.backend != "terminal")
    log = LoggerFactory.for_system()

    try:
        backend = create_backend(args.backend, **_backend_options(args))
    except ToolkitError as error:
        log.error(f"Could not start the {args.backend} backend: {error}")
        return 1

    app = Application(backend)
    items = build_menus(app)
    app.add_menu_handler(make_demo_handler(items))

    try:
        app.run()
    except KeyboardInterrupt:
        pass
    except ToolkitError as error:
        print(f"An error occurred: {type(error).__name__}", file=sys.stderr)
        print(str(error), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
