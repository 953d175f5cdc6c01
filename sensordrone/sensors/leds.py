# sensordrone/sensors/leds.py
from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Tuple

from sensordrone.protocol.defs import Opcode
from sensordrone.protocol.frames import RequestFrame

from .base import Capability

RGB = Tuple[int, int, int]


def _clamp(value: int) -> int:
    return max(0, min(255, int(value)))


class LEDs(Capability):
    """
    The two RGB indicator LEDs.

    Both LEDs are written by one frame, so the last requested colour of the
    other side is remembered and resent.
    """

    name = "leds"

    def __init__(self, session, **kwargs):
        super().__init__(session, **kwargs)
        self._lock = threading.Lock()
        self._left: RGB = (0, 0, 0)
        self._right: RGB = (0, 0, 0)

    @property
    def left(self) -> RGB:
        return self._left

    @property
    def right(self) -> RGB:
        return self._right

    def set_left(self, red: int, green: int, blue: int) -> Future:
        return self._set(left=(red, green, blue))

    def set_right(self, red: int, green: int, blue: int) -> Future:
        return self._set(right=(red, green, blue))

    def set_both(self, red: int, green: int, blue: int) -> Future:
        return self._set(left=(red, green, blue), right=(red, green, blue))

    def _set(self, left: RGB | None = None, right: RGB | None = None) -> Future:
        self._require_connected()
        with self._lock:
            if left is not None:
                self._left = tuple(_clamp(v) for v in left)
            if right is not None:
                self._right = tuple(_clamp(v) for v in right)
            # frame is built now so queued writes keep the colours of their own call
            frame = RequestFrame.command(Opcode.LED_WRITE, *self._left, *self._right)
            return self._submit(lambda: self._call(frame))
