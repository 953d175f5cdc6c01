# sensordrone/sensors/rgbc.py
from __future__ import annotations

from concurrent.futures import Future

from sensordrone.events.types import EventType
from sensordrone.protocol.defs import ADDR_RGBC, I2CBank, Opcode
from sensordrone.protocol.frames import RequestFrame, i2c_read, i2c_write

from . import compute
from .base import Capability

_BANK = I2CBank.MAIN
_ADDR = ADDR_RGBC

REG_CONTROL = 0x80
REG_TIMING = 0x81
REG_DATA = 0x90

TRANSISTOR_ON = RequestFrame.command(Opcode.RGBC_TRANSISTOR, 0x01)
TRANSISTOR_OFF = RequestFrame.command(Opcode.RGBC_TRANSISTOR, 0x00)
POWER_ON = i2c_write(_BANK, _ADDR, REG_CONTROL, b"\x01")
INTEGRATION_100MS = i2c_write(_BANK, _ADDR, REG_TIMING, b"\x01")
INIT_ADC = i2c_write(_BANK, _ADDR, REG_CONTROL, b"\x03")
POWER_OFF = i2c_write(_BANK, _ADDR, REG_CONTROL, b"\x00")
READ_STATUS = RequestFrame.command(Opcode.RGBC_STATUS, 0x01)
MEASURE = i2c_read(_BANK, _ADDR, REG_DATA, 8)


class RGBC(Capability):
    """Ambient light / colour sensor behind a switchable supply transistor."""

    name = "rgbc"

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
        self._require_enabled("rgbc")
        return self._submit(self._measure)

    def _enable(self) -> None:
        self._call(TRANSISTOR_ON)
        self._call(POWER_ON)
        self._call(INTEGRATION_100MS)
        if self._call(INIT_ADC) is None:
            return
        self._set_flag("rgbc", True)
        self._notify(EventType.RGBC_ENABLED)

    def _disable(self) -> None:
        self._call(POWER_OFF)
        if self._call(TRANSISTOR_OFF) is None:
            return
        self._set_flag("rgbc", False)
        self._notify(EventType.RGBC_DISABLED)

    def _status(self) -> None:
        # reports the supply transistor only, not the chip's own state
        data = self._call(READ_STATUS)
        if data is None:
            return
        self._expect(data, 1)
        self._set_flag("rgbc", data[0] == 0x01)
        self._notify(EventType.RGBC_STATUS_CHECKED)

    def _measure(self) -> None:
        data = self._call(MEASURE)
        if data is None:
            return
        self._expect(data, 8)
        color = compute.rgbc_reading(data)
        r = self._readings
        r.rgbc_red = color.red
        r.rgbc_green = color.green
        r.rgbc_blue = color.blue
        r.rgbc_clear = color.clear
        r.rgbc_lux = color.lux
        r.rgbc_color_temperature = color.color_temperature
        self._notify(EventType.RGBC_MEASURED)
