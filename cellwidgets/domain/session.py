"""Session metadata owned by a backend."""

from __future__ import annotations

import getpass
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24


@dataclass
class SessionInfo:
    """Who is connected and what the device looks like.

    Widgets read this; only the owning backend updates the window size.
    """

    username: str = ""
    language: str = "en_US"
    window_width: int = DEFAULT_WIDTH
    window_height: int = DEFAULT_HEIGHT
    encoding: str = "utf-8"

    @classmethod
    def for_local_terminal(cls, fd: Optional[int] = None) -> SessionInfo:
        try:
            username = getpass.getuser()
        except (KeyError, OSError):
            username = ""
        language = os.environ.get("LANG", "en_US").split(".")[0] or "en_US"
        info = cls(username=username, language=language)
        info.query_window_size(fd)
        return info

    def query_window_size(self, fd: Optional[int] = None) -> bool:
        """Refresh the window size from a tty. Returns True when it changed."""
        try:
            size = os.get_terminal_size(fd) if fd is not None else os.get_terminal_size()
        except (OSError, ValueError):
            return False
        changed = (size.columns, size.lines) != (self.window_width, self.window_height)
        self.window_width = size.columns
        self.window_height = size.lines
        return changed
