"""Colour theme: named cell attributes resolved by widgets at draw time.

Theme entries can be written as text, one per line in theme files and as
values in the ``theme`` setting:

    menu = black on white
    menu.highlighted = bold white on green

The grammar is ``[bold] [reverse] [underline] <fore> on <back>``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional

from cellwidgets.config.settings import get_setting
from cellwidgets.logging import LoggerFactory
from cellwidgets.ui.screen import CellAttributes, Color


log = LoggerFactory.for_menu()

_FLAGS = ("bold", "reverse", "underline")

DEFAULT_THEME: Dict[str, str] = {
    "desktop": "blue on blue",
    "application": "white on black",
    "menu": "black on white",
    "menu.highlighted": "black on green",
    "menu.mnemonic": "red on white",
    "menu.mnemonic.highlighted": "red on green",
    "menu.disabled": "bold black on white",
    "menu.title": "bold black on white",
}


def parse_attributes(text: str) -> CellAttributes:
    """Parse ``"bold yellow on blue"`` into CellAttributes.

    Raises:
        ValueError: if the text is not in the theme grammar.
    """
    words = text.lower().split()
    flags = {name: False for name in _FLAGS}
    while words and words[0] in flags:
        flags[words.pop(0)] = True
    if len(words) != 3 or words[1] != "on":
        raise ValueError(f"Invalid colour spec: {text!r}")
    try:
        fore = Color[words[0].upper()]
        back = Color[words[2].upper()]
    except KeyError as exc:
        raise ValueError(f"Unknown colour in {text!r}: {exc.args[0].lower()}") from exc
    return CellAttributes(fore=fore, back=back, **flags)


def format_attributes(attr: CellAttributes) -> str:
    flags = [name for name in _FLAGS if getattr(attr, name)]
    return " ".join(flags + [attr.fore.name.lower(), "on", attr.back.name.lower()])


class ColorTheme:
    def __init__(self, entries: Optional[Mapping[str, str]] = None) -> None:
        self._colors: Dict[str, CellAttributes] = {}
        self._missing_reported: set[str] = set()
        for name, spec in DEFAULT_THEME.items():
            self._colors[name] = parse_attributes(spec)
        if entries:
            for name, spec in entries.items():
                self.set_from_string(name, spec)

    @classmethod
    def from_settings(cls) -> ColorTheme:
        overrides = get_setting("theme") or {}
        theme = cls()
        if not isinstance(overrides, dict):
            log.warning(f"Ignoring theme setting of type {type(overrides).__name__}")
            return theme
        for name, spec in overrides.items():
            try:
                theme.set_from_string(name, spec)
            except ValueError as error:
                log.warning(f"Ignoring theme entry {name}: {error}")
        return theme

    def get_color(self, name: str) -> CellAttributes:
        attr = self._colors.get(name)
        if attr is None:
            if name not in self._missing_reported:
                self._missing_reported.add(name)
                log.debug(f"Theme has no entry for {name}, using default")
            return CellAttributes()
        return attr

    def set_color(self, name: str, attr: CellAttributes) -> None:
        self._colors[name] = attr

    def set_from_string(self, name: str, spec: str) -> None:
        self.set_color(name, parse_attributes(spec))

    def names(self) -> list[str]:
        return sorted(self._colors)

    def save(self, path: Path) -> None:
        lines = [f"{name} = {format_attributes(self._colors[name])}" for name in self.names()]
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    def load(self, path: Path) -> None:
        """Merge entries from a theme file. Blank lines and ``#`` comments are skipped."""
        for number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            name, sep, spec = line.partition("=")
            if not sep:
                raise ValueError(f"{path}:{number}: expected 'name = spec'")
            self.set_from_string(name.strip(), spec.strip())
