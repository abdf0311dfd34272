"""Networked backend: one terminal session carried over a websocket.

The server runs on its own thread and event loop (aiohttp). A browser-side
terminal emulator such as xterm.js connects to ``/ws``:

    client -> server
        text frames         raw terminal input (keys, SGR mouse reports)
        {"type": "resize", "cols": 100, "rows": 30}
                            the client window changed size
    server -> client
        text frames         ECMA-48 output produced by flush_screen()

``?user=<name>`` on the websocket URL fills in SessionInfo.username.

Only one client may hold the session. Until a client connects, flushing is a
no-op and the screen stays dirty. Once a session has started, losing the
client makes the backend broken: the next get_events() delivers whatever
arrived before the drop and then raises TransportError.

The websocket thread never touches the screen or the input parser. It only
puts raw messages on a thread-safe inbox that get_events() drains on the
application thread.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import queue
import threading
from typing import Any, List, Optional, Tuple

from aiohttp import WSCloseCode, web

from cellwidgets.backend import ecma48
from cellwidgets.backend.base import ensure_open
from cellwidgets.config.settings import (
    DEFAULT_POLL_TIMEOUT,
    DEFAULT_WEB_HOST,
    DEFAULT_WEB_PORT,
    get_bool,
    get_float,
    get_int,
    get_setting,
)
from cellwidgets.domain.events import InputEvent, ResizeEvent
from cellwidgets.domain.session import SessionInfo
from cellwidgets.exceptions import TransportError
from cellwidgets.logging import LoggerFactory, ThrottledLogger
from cellwidgets.ui.screen import Screen


SEND_TIMEOUT_SECONDS = 5.0
STARTUP_TIMEOUT_SECONDS = 5.0
# How long a closing handshake waits for the client to answer
CLOSE_TIMEOUT_SECONDS = 1.0

# Largest window a client may ask for
MAX_COLUMNS = 1000
MAX_ROWS = 1000

# Inbox message kinds
_CONNECT = "connect"
_TEXT = "text"
_RESIZE = "resize"
_DISCONNECT = "disconnect"


class WebSocketBackend:
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        *,
        columns: int = 80,
        rows: int = 24,
        poll_timeout: Optional[float] = None,
        mouse: Optional[bool] = None,
        start: bool = True,
    ) -> None:
        self.host = host or get_setting("web_host", DEFAULT_WEB_HOST)
        self.port = port if port is not None else get_int("web_port", DEFAULT_WEB_PORT)
        self._poll_timeout = (
            get_float("poll_timeout", DEFAULT_POLL_TIMEOUT) if poll_timeout is None else poll_timeout
        )
        self._mouse = get_bool("mouse_enabled", True) if mouse is None else mouse
        self._log = LoggerFactory.for_backend("web")
        self._flush_log = ThrottledLogger(self._log, interval_seconds=5.0)
        self._session_info = SessionInfo(window_width=columns, window_height=rows)
        self._screen = Screen(columns, rows)
        self._parser = ecma48.InputParser()
        self._inbox: queue.Queue[Tuple[str, Any]] = queue.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ws: Optional[web.WebSocketResponse] = None
        self._session_started = False
        self._closed = False
        self._broken = False
        if start:
            self.start()

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

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/ws", self.handle_session)
        app.on_shutdown.append(self._on_shutdown)
        return app

    async def _on_shutdown(self, app: Optional[web.Application]) -> None:
        ws = self._ws
        if ws is None or ws.closed:
            return
        try:
            await ws.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
        except (ConnectionError, RuntimeError) as exc:
            self._log.debug(f"Error closing websocket: {exc}", tags=["ws", "shutdown"])

    async def handle_session(self, request: web.Request) -> web.StreamResponse:
        log = LoggerFactory.for_web(str(request.remote))
        if self.connected:
            log.warning(f"Rejecting second session from {request.remote}")
            return web.Response(status=409, text="A session is already active")

        ws = web.WebSocketResponse(autoping=True, timeout=CLOSE_TIMEOUT_SECONDS)
        await ws.prepare(request)
        self._loop = asyncio.get_running_loop()
        self._ws = ws
        self._inbox.put((_CONNECT, request.query.get("user", "")))
        log.info(f"Session websocket connected from {request.remote}")

        modes = ecma48.ENTER_ALT_SCREEN + ecma48.HIDE_CURSOR + ecma48.CLEAR_SCREEN
        if self._mouse:
            modes += ecma48.MOUSE_ON
        try:
            await ws.send_str(modes)
            async for msg in ws:
                if msg.type == web.WSMsgType.TEXT:
                    self._inbox.put(self._decode_message(msg.data))
                elif msg.type == web.WSMsgType.BINARY:
                    self._inbox.put((_TEXT, msg.data.decode("utf-8", errors="replace")))
                elif msg.type == web.WSMsgType.ERROR:
                    log.warning(f"Session websocket error: {ws.exception()}")
                    break
        except asyncio.CancelledError:
            raise
        except ConnectionError as exc:
            log.warning(f"Session websocket failed: {exc}")
        finally:
            self._inbox.put((_DISCONNECT, None))
            if not ws.closed:
                await ws.close()
            log.info(f"Session websocket disconnected from {request.remote}")
        return ws

    @staticmethod
    def _decode_message(data: str) -> Tuple[str, Any]:
        if data.startswith("{"):
            try:
                payload = json.loads(data)
            except json.JSONDecodeError:
                return _TEXT, data
            if isinstance(payload, dict) and payload.get("type") == "resize":
                try:
                    columns, rows = int(payload["cols"]), int(payload["rows"])
                except (KeyError, TypeError, ValueError):
                    return _TEXT, ""
                return _RESIZE, (
                    max(1, min(columns, MAX_COLUMNS)),
                    max(1, min(rows, MAX_ROWS)),
                )
        return _TEXT, data

    def start(self) -> None:
        """Start the server thread and wait until it is listening."""
        startup: queue.Queue[Tuple[str, Any]] = queue.Queue(maxsize=1)

        def run_app() -> None:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            app = self.build_app()

            async def start_site() -> web.AppRunner:
                runner = web.AppRunner(app)
                await runner.setup()
                site = web.TCPSite(runner, self.host, self.port)
                await site.start()
                # Port 0 asks the OS for a free port
                self.port = runner.addresses[0][1]
                return runner

            try:
                runner = loop.run_until_complete(start_site())
            except OSError as exc:
                startup.put(("error", exc))
                loop.close()
                return
            self._loop = loop
            startup.put(("ok", runner))
            self._log.info(f"Session server listening on ws://{self.host}:{self.port}/ws")
            try:
                loop.run_forever()
            finally:
                loop.run_until_complete(runner.cleanup())
                loop.close()
                self._log.info("Session server stopped")

        self._thread = threading.Thread(target=run_app, name="cellwidgets-web", daemon=True)
        self._thread.start()
        try:
            status, payload = startup.get(timeout=STARTUP_TIMEOUT_SECONDS)
        except queue.Empty as exc:
            raise TimeoutError("Session server failed to start within timeout.") from exc
        if status == "error":
            raise TransportError("WebSocketBackend", f"cannot listen on {self.host}:{self.port}: {payload}")

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def _check_usable(self, operation: str) -> None:
        ensure_open(self, operation)
        if self._broken:
            raise TransportError("WebSocketBackend", "session connection was lost")

    def flush_screen(self) -> None:
        self._check_usable("flush_screen")
        ws = self._ws
        if ws is None or self._loop is None:
            return
        cells = list(self._screen.dirty_cells())
        if not cells:
            return
        data = ecma48.encode_cells(cells, ascii_only=self._session_info.encoding != "utf-8")
        future = asyncio.run_coroutine_threadsafe(ws.send_str(data), self._loop)
        try:
            future.result(timeout=SEND_TIMEOUT_SECONDS)
        except (ConnectionError, RuntimeError, TimeoutError, concurrent.futures.TimeoutError) as error:
            self._broken = True
            self._log.error(f"Sending screen update failed: {error!r}")
            raise TransportError("WebSocketBackend", f"send failed: {error!r}") from error
        self._screen.mark_flushed()
        self._flush_log.debug("flush", f"Sent {len(cells)} cells ({len(data)} bytes)")

    def _next_message(self, block: bool) -> Optional[Tuple[str, Any]]:
        try:
            if block:
                return self._inbox.get(timeout=self._poll_timeout)
            return self._inbox.get_nowait()
        except queue.Empty:
            return None

    def get_events(self, queue_: List[InputEvent]) -> None:
        self._check_usable("get_events")
        events: List[InputEvent] = []
        got_text = False
        lost = False
        message = self._next_message(block=True)
        while message is not None:
            kind, payload = message
            if kind == _TEXT:
                got_text = True
                events.extend(self._parser.feed(payload))
            elif kind == _RESIZE:
                width, height = payload
                self._session_info.window_width = width
                self._session_info.window_height = height
                self._screen.resize(width, height)
                events.append(ResizeEvent(width, height))
            elif kind == _CONNECT:
                self._session_started = True
                self._session_info.username = payload
                self._screen.invalidate()
                events.append(ResizeEvent(self._screen.width, self._screen.height))
            elif kind == _DISCONNECT:
                if self._session_started:
                    lost = True
                    break
            message = self._next_message(block=False)

        if not got_text and self._parser.pending:
            events.extend(self._parser.flush())
        queue_.extend(events)

        if lost:
            self._broken = True
            self._ws = None
            self._log.error("Session client disconnected")
            raise TransportError("WebSocketBackend", "client disconnected")

    def shutdown(self) -> None:
        if self._closed:
            self._log.debug("Websocket backend already shut down")
            return
        self._closed = True
        loop = self._loop
        if self._thread is not None and loop is not None and loop.is_running():
            # Runner cleanup aborts open connections, so close the session first
            future = asyncio.run_coroutine_threadsafe(self._on_shutdown(None), loop)
            try:
                future.result(timeout=CLOSE_TIMEOUT_SECONDS + 1)
            except (RuntimeError, concurrent.futures.TimeoutError) as error:
                self._log.warning(f"Closing the session websocket failed: {error!r}")
            loop.call_soon_threadsafe(loop.stop)
            self._thread.join(timeout=STARTUP_TIMEOUT_SECONDS)
        self._ws = None
        self._log.info("Websocket backend shut down")
