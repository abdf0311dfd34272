"""Embedded display backend: screen cells rendered with Pillow, pushed to a luma device.

Rendering Pipeline:
    1. Each dirty cell is painted into a PIL Image buffer: a background
       rectangle, then the glyph in the foreground colour
    2. The whole buffer is handed to ``device.display(image)``
    3. The device (an SSD1306 OLED, an LCD, or luma's in-memory ``dummy``)
       updates its pixels

Without an explicit device the backend renders into a ``luma.core`` dummy
device sized to the configured columns x rows, which makes it usable for
screenshots and tests. With a real device the grid size follows from the
device resolution and the font's cell size.

Input:
    - an optional GpioKeypad polled on every get_events() call
    - inject_event() for a host program (thread-safe)

Thread Safety:
    Only inject_event() may be called from another thread.
"""

from __future__ import annotations

import queue
from io import BytesIO
from typing import TYPE_CHECKING, Any, List, Optional, Tuple, Union

from luma.core.device import dummy
from PIL import Image, ImageDraw, ImageFont

from cellwidgets.backend.base import ensure_open
from cellwidgets.config.settings import (
    DEFAULT_IMAGE_COLUMNS,
    DEFAULT_IMAGE_FONT_SIZE,
    DEFAULT_IMAGE_ROWS,
    DEFAULT_POLL_TIMEOUT,
    get_float,
    get_int,
    get_setting,
)
from cellwidgets.domain.events import InputEvent
from cellwidgets.domain.session import SessionInfo
from cellwidgets.exceptions import TransportError
from cellwidgets.logging import LoggerFactory, ThrottledLogger
from cellwidgets.ui.glyphs import ASCII_FALLBACK
from cellwidgets.ui.screen import CellAttributes, Color, Screen

if TYPE_CHECKING:
    from cellwidgets.hardware.gpio import GpioKeypad


Font = Union[ImageFont.ImageFont, ImageFont.FreeTypeFont]

# VGA text-mode palette: (normal, bold)
PALETTE = {
    Color.BLACK: ((0, 0, 0), (85, 85, 85)),
    Color.RED: ((170, 0, 0), (255, 85, 85)),
    Color.GREEN: ((0, 170, 0), (85, 255, 85)),
    Color.YELLOW: ((170, 85, 0), (255, 255, 85)),
    Color.BLUE: ((0, 0, 170), (85, 85, 255)),
    Color.MAGENTA: ((170, 0, 170), (255, 85, 255)),
    Color.CYAN: ((0, 170, 170), (85, 255, 255)),
    Color.WHITE: ((170, 170, 170), (255, 255, 255)),
}


def _get_cell_size(font: Font, min_height: int = 8) -> Tuple[int, int]:
    width = 6
    line_height = min_height
    try:
        bbox = font.getbbox("M")
        width = max(bbox[2] - bbox[0], 1)
        bbox = font.getbbox("Ag")
        line_height = max(bbox[3] - bbox[1], line_height)
    except AttributeError:
        if hasattr(font, "getmetrics"):
            ascent, descent = font.getmetrics()
            line_height = max(ascent + descent, line_height)
    return width, line_height + 1


def load_font(path: Optional[str] = None, size: Optional[int] = None) -> Font:
    path = path if path is not None else get_setting("image_font_path")
    size = size if size is not None else get_int("image_font_size", DEFAULT_IMAGE_FONT_SIZE)
    if path:
        try:
            return ImageFont.truetype(str(path), size)
        except OSError:
            LoggerFactory.for_backend("image").warning(
                f"Font {path} could not be loaded, using the default font"
            )
    return ImageFont.load_default()


class ImageBackend:
    def __init__(
        self,
        device: Any = None,
        *,
        columns: Optional[int] = None,
        rows: Optional[int] = None,
        font: Optional[Font] = None,
        keypad: Optional[GpioKeypad] = None,
        poll_timeout: Optional[float] = None,
    ) -> None:
        self._log = LoggerFactory.for_backend("image")
        self._flush_log = ThrottledLogger(self._log, interval_seconds=5.0)
        self._font = font if font is not None else load_font()
        self._cell_width, self._cell_height = _get_cell_size(self._font)
        # Bitmap fonts only cover Latin-1
        self._ascii_only = not isinstance(self._font, ImageFont.FreeTypeFont)
        self._poll_timeout = (
            get_float("poll_timeout", DEFAULT_POLL_TIMEOUT) if poll_timeout is None else poll_timeout
        )

        if device is None:
            columns = columns or get_int("image_columns", DEFAULT_IMAGE_COLUMNS)
            rows = rows or get_int("image_rows", DEFAULT_IMAGE_ROWS)
            device = dummy(
                width=columns * self._cell_width,
                height=rows * self._cell_height,
                mode="RGB",
            )
        else:
            columns = max(device.width // self._cell_width, 1)
            rows = max(device.height // self._cell_height, 1)
        self._device = device
        self._image = Image.new(device.mode, device.size)
        self._draw = ImageDraw.Draw(self._image)

        self._session_info = SessionInfo(window_width=columns, window_height=rows)
        self._screen = Screen(columns, rows)
        self._injected: queue.Queue[InputEvent] = queue.Queue()
        self._keypad = keypad
        self._closed = False
        self._broken = False

        if self._keypad is not None:
            self._keypad.setup()
        self._log.info(
            f"Image backend started: {columns}x{rows} cells on a "
            f"{device.width}x{device.height} {device.mode} device"
        )

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
    def device(self) -> Any:
        return self._device

    @property
    def cell_size(self) -> Tuple[int, int]:
        return self._cell_width, self._cell_height

    def get_png_bytes(self) -> bytes:
        """Return the current frame buffer as PNG bytes."""
        buffer = BytesIO()
        self._image.copy().save(buffer, format="PNG")
        return buffer.getvalue()

    def inject_event(self, event: InputEvent) -> None:
        self._injected.put(event)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _ink(self, color: Color, bright: bool) -> Any:
        rgb = PALETTE[color][1 if bright else 0]
        if self._image.mode == "RGB":
            return rgb
        luminance = int(0.299 * rgb[0] + 0.587 * rgb[1] + 0.114 * rgb[2])
        if self._image.mode == "1":
            return 255 if luminance >= 128 else 0
        return luminance

    def _paint_cell(self, x: int, y: int, ch: str, attr: CellAttributes) -> None:
        fore, back = attr.fore, attr.back
        if attr.reverse:
            fore, back = back, fore
        left = x * self._cell_width
        top = y * self._cell_height
        self._draw.rectangle(
            (left, top, left + self._cell_width - 1, top + self._cell_height - 1),
            fill=self._ink(back, False),
        )
        if self._ascii_only and not ch.isascii():
            ch = ASCII_FALLBACK.get(ch, "?")
        if ch != " ":
            self._draw.text((left, top), ch, font=self._font, fill=self._ink(fore, attr.bold))
        if attr.underline:
            baseline = top + self._cell_height - 1
            self._draw.line(
                (left, baseline, left + self._cell_width - 1, baseline),
                fill=self._ink(fore, attr.bold),
            )

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def _check_usable(self, operation: str) -> None:
        ensure_open(self, operation)
        if self._broken:
            raise TransportError("ImageBackend", "display device is no longer usable")

    def flush_screen(self) -> None:
        self._check_usable("flush_screen")
        cells = list(self._screen.dirty_cells())
        if not cells:
            return
        for x, y, cell in cells:
            self._paint_cell(x, y, cell.ch, cell.attr)
        try:
            self._device.display(self._image)
        except (OSError, RuntimeError) as error:
            self._broken = True
            self._log.error(f"Display device failed: {error}")
            raise TransportError("ImageBackend", str(error)) from error
        self._screen.mark_flushed()
        self._flush_log.debug("flush", f"Flushed {len(cells)} cells to the display")

    def get_events(self, queue_: List[InputEvent]) -> None:
        self._check_usable("get_events")
        events: List[InputEvent] = []
        if self._keypad is not None:
            events.extend(self._keypad.poll())
        if not events:
            try:
                events.append(self._injected.get(timeout=self._poll_timeout))
            except queue.Empty:
                pass
        while True:
            try:
                events.append(self._injected.get_nowait())
            except queue.Empty:
                break
        # Keypad and injected events interleave by when they happened
        events.sort(key=lambda event: event.time)
        queue_.extend(events)

    def shutdown(self) -> None:
        if self._closed:
            self._log.debug("Image backend already shut down")
            return
        self._closed = True
        if self._keypad is not None:
            self._keypad.cleanup()
        try:
            self._device.cleanup()
        except (OSError, RuntimeError) as error:
            self._log.warning(f"Display cleanup failed: {error}")
        self._log.info("Image backend shut down")
