# sensordrone/sensors/capacitance.py
from __future__ import annotations

from concurrent.futures import Future

from sensordrone.events.types import EventType
from sensordrone.protocol.defs import ADDR_CAPACITANCE, I2CBank
from sensordrone.protocol.frames import i2c_read, i2c_write

from . import compute
from .base import Capability

_BANK = I2CBank.CAPACITANCE
_ADDR = ADDR_CAPACITANCE

REG_DATA = 0x00
REG_OFFSET = 0x05
REG_RANGE = 0x0B
REG_SETUP = 0x0F

# Offset and range survive power cycles on the chip, so enable always rewrites them.
RESET_OFFSET = i2c_write(_BANK, _ADDR, REG_OFFSET, b"\x30\x00", write_length=1)
SET_RANGE_4PF = i2c_write(_BANK, _ADDR, REG_RANGE, b"\xC0")
ENABLE = i2c_write(_BANK, _ADDR, REG_SETUP, b"\x11")
DISABLE = i2c_write(_BANK, _ADDR, REG_SETUP, b"\x00")
READ_STATUS = i2c_read(_BANK, _ADDR, REG_DATA, 0x10)
MEASURE = i2c_read(_BANK, _ADDR, REG_DATA, 0x03)


class Capacitance(Capability):
    """Capacitive proximity sensor, single-ended 0-4 pF range."""

    name = "capacitance"

    def enable(self) -> Future:
        self._require_connected()
        return self._submit(self._enable)

    def disable(self) -> Future:
        self._require_connected()
        return self._submit(self._disable)

    def status(self) -> Future:
        self._require_connected()
        return self._submit(self._status)

    def measure(self) -> Future:
        self._require_enabled("capacitance")
        return self._submit(self._measure)

    def _enable(self) -> None:
        self._call(RESET_OFFSET)
        self._call(SET_RANGE_4PF)
        if self._call(ENABLE) is None:
            return
        self._set_flag("capacitance", True)
        self._notify(EventType.CAPACITANCE_ENABLED)

    def _disable(self) -> None:
        if self._call(DISABLE) is None:
            return
        self._set_flag("capacitance", False)
        self._notify(EventType.CAPACITANCE_DISABLED)

    def _status(self) -> None:
        data = self._call(READ_STATUS)
        if data is None:
            return
        self._expect(data, 1)
        self._set_flag("capacitance", bool(data[0] & 0x80))
        self._notify(EventType.CAPACITANCE_STATUS_CHECKED)

    def _measure(self) -> None:
        data = self._call(MEASURE)
        if data is None:
            return
        self._expect(data, 3)
        adc = compute.u16_be(data[1], data[2])
        self._readings.capacitance_femtofarad = compute.capacitance_femtofarad(adc)
        self._notify(EventType.CAPACITANCE_MEASURED)
