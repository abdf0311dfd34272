"""Local terminal backend: raw-mode tty in, ECMA-48 out.

Startup puts the tty in raw mode, switches to the alternate screen, hides the
cursor and (optionally) turns on xterm mouse reporting. ``shutdown()`` undoes
all of it. Window size changes are picked up by polling the tty size on each
``get_events()`` call; they resize the screen and produce a ResizeEvent.

POSIX only (termios).
"""

from __future__ import annotations

import codecs
import os
import select
import sys
import termios
import tty
from typing import List, Optional, TextIO

from cellwidgets.backend import ecma48
from cellwidgets.backend.base import ensure_open
from cellwidgets.config.settings import DEFAULT_POLL_TIMEOUT, get_bool, get_float
from cellwidgets.domain.events import InputEvent, ResizeEvent
from cellwidgets.domain.session import SessionInfo
from cellwidgets.exceptions import TransportError
from cellwidgets.logging import LoggerFactory, ThrottledLogger
from cellwidgets.ui.screen import Screen


READ_SIZE = 4096


class TerminalBackend:
    def __init__(
        self,
        input_fd: Optional[int] = None,
        output: Optional[TextIO] = None,
        *,
        poll_timeout: Optional[float] = None,
        mouse: Optional[bool] = None,
    ) -> None:
        self._fd = sys.stdin.fileno() if input_fd is None else input_fd
        self._output = sys.stdout if output is None else output
        self._poll_timeout = (
            get_float("poll_timeout", DEFAULT_POLL_TIMEOUT) if poll_timeout is None else poll_timeout
        )
        self._mouse = get_bool("mouse_enabled", True) if mouse is None else mouse
        self._log = LoggerFactory.for_backend("terminal")
        self._flush_log = ThrottledLogger(self._log, interval_seconds=5.0)
        self._is_tty = os.isatty(self._fd)
        self._saved_attrs: Optional[list] = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._parser = ecma48.InputParser()
        self._closed = False
        self._broken = False

        if self._is_tty:
            self._session_info = SessionInfo.for_local_terminal(self._fd)
        else:
            self._session_info = SessionInfo()
        self._screen = Screen(self._session_info.window_width, self._session_info.window_height)

        self._start()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def screen(self) -> Screen:
        return self._screen

    @property
    def session_info(self) -> SessionInfo:
        return self._session_info

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _start(self) -> None:
        if self._is_tty:
            self._saved_attrs = termios.tcgetattr(self._fd)
            tty.setraw(self._fd)
        modes = ecma48.ENTER_ALT_SCREEN + ecma48.HIDE_CURSOR + ecma48.CLEAR_SCREEN
        if self._mouse:
            modes += ecma48.MOUSE_ON
        self._write(modes)
        self._screen.invalidate()
        self._log.info(
            f"Terminal session started for {self._session_info.username or 'unknown user'} "
            f"({self._screen.width}x{self._screen.height}, tty={self._is_tty})"
        )

    def shutdown(self) -> None:
        if self._closed:
            self._log.debug("Terminal backend already shut down")
            return
        self._closed = True
        restore = ecma48.RESET_ATTRIBUTES + ecma48.SHOW_CURSOR + ecma48.LEAVE_ALT_SCREEN
        if self._mouse:
            restore = ecma48.MOUSE_OFF + restore
        try:
            self._output.write(restore)
            self._output.flush()
        except (OSError, ValueError) as error:
            self._log.warning(f"Could not reset terminal modes: {error}")
        if self._saved_attrs is not None:
            try:
                termios.tcsetattr(self._fd, termios.TCSAFLUSH, self._saved_attrs)
            except (OSError, termios.error) as error:
                self._log.warning(f"Could not restore tty attributes: {error}")
        self._log.info("Terminal session ended")

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def _check_usable(self, operation: str) -> None:
        ensure_open(self, operation)
        if self._broken:
            raise TransportError("TerminalBackend", "terminal is no longer usable")

    def _fail(self, reason: str, error: BaseException) -> TransportError:
        self._broken = True
        self._log.error(f"Terminal transport failed: {reason}: {error}")
        return TransportError("TerminalBackend", f"{reason}: {error}")

    def _write(self, data: str) -> None:
        try:
            self._output.write(data)
            self._output.flush()
        except (OSError, ValueError) as error:
            raise self._fail("write failed", error) from error

    def flush_screen(self) -> None:
        self._check_usable("flush_screen")
        cells = list(self._screen.dirty_cells())
        if not cells:
            return
        ascii_only = self._session_info.encoding.lower().replace("-", "") != "utf8"
        self._write(ecma48.encode_cells(cells, ascii_only=ascii_only))
        self._screen.mark_flushed()
        self._flush_log.debug("flush", f"Flushed {len(cells)} cells")

    def get_events(self, queue: List[InputEvent]) -> None:
        self._check_usable("get_events")
        events: List[InputEvent] = []

        if self._is_tty and self._session_info.query_window_size(self._fd):
            width = self._session_info.window_width
            height = self._session_info.window_height
            self._screen.resize(width, height)
            events.append(ResizeEvent(width, height))
            self._log.debug(f"Terminal resized to {width}x{height}")

        try:
            readable, _, _ = select.select([self._fd], [], [], self._poll_timeout)
        except (OSError, ValueError) as error:
            raise self._fail("select failed", error) from error

        if readable:
            try:
                data = os.read(self._fd, READ_SIZE)
            except OSError as error:
                raise self._fail("read failed", error) from error
            if not data:
                raise self._fail("read failed", EOFError("input closed"))
            events.extend(self._parser.feed(self._decoder.decode(data)))
        elif self._parser.pending:
            events.extend(self._parser.flush())

        queue.extend(events)
