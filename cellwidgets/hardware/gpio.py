"""GPIO push-button keypad for embedded displays.

Buttons are wired active-low with the internal pull-ups enabled, as on the
Adafruit OLED bonnet: a pin reads LOW while its button is held.
``GpioKeypad.poll()`` reports each falling edge once, translated to a
keypress through the pin map.
"""

from typing import Dict, List, Mapping, Optional

import RPi.GPIO as GPIO

from cellwidgets.domain.events import (
    KB_DOWN,
    KB_ENTER,
    KB_ESC,
    KB_LEFT,
    KB_RIGHT,
    KB_UP,
    KeyPress,
    KeypressEvent,
)
from cellwidgets.logging import LoggerFactory

PIN_A = 5
PIN_B = 6
PIN_L = 27
PIN_R = 23
PIN_U = 17
PIN_D = 22
PIN_C = 4

PINS = (PIN_A, PIN_B, PIN_L, PIN_R, PIN_U, PIN_D, PIN_C)

DEFAULT_PIN_MAP: Dict[int, KeyPress] = {
    PIN_U: KB_UP,
    PIN_D: KB_DOWN,
    PIN_L: KB_LEFT,
    PIN_R: KB_RIGHT,
    PIN_C: KB_ENTER,
    PIN_B: KB_ENTER,
    PIN_A: KB_ESC,
}


log = LoggerFactory.for_gpio()


class GpioKeypad:
    def __init__(self, pin_map: Optional[Mapping[int, KeyPress]] = None) -> None:
        self.pin_map = dict(DEFAULT_PIN_MAP if pin_map is None else pin_map)
        self._previous: Dict[int, int] = {}
        self._active = False

    def setup(self) -> None:
        GPIO.setmode(GPIO.BCM)
        GPIO.setwarnings(False)
        for pin in self.pin_map:
            GPIO.setup(pin, GPIO.IN, pull_up_down=GPIO.PUD_UP)
        # Buttons held during setup must be released before they count
        self._previous = {pin: GPIO.input(pin) for pin in self.pin_map}
        self._active = True
        log.info(f"GPIO keypad ready on pins {sorted(self.pin_map)}")

    def poll(self) -> List[KeypressEvent]:
        """Return one keypress per button that went from HIGH to LOW since the last poll."""
        if not self._active:
            return []
        events = []
        for pin, pressed_key in self.pin_map.items():
            current = GPIO.input(pin)
            previous = self._previous.get(pin, GPIO.HIGH)
            if previous != GPIO.LOW and current == GPIO.LOW:
                log.trace(f"Button press on pin {pin} -> {pressed_key}")
                events.append(KeypressEvent(pressed_key))
            self._previous[pin] = current
        return events

    def cleanup(self) -> None:
        if not self._active:
            return
        self._active = False
        GPIO.cleanup(list(self.pin_map))
