# sensordrone/sensors/pressure.py
from __future__ import annotations

from concurrent.futures import Future

from sensordrone.events.types import EventType
from sensordrone.protocol.defs import ADDR_PRESSURE, I2CBank, Opcode
from sensordrone.protocol.frames import RequestFrame, i2c_read, i2c_write

from . import compute
from .base import Capability

_BANK = I2CBank.MAIN
_ADDR = ADDR_PRESSURE

REG_CTRL1 = 0x26
REG_DATA_FLAGS = 0x13

MODE_512MS = 0x38

POWER_ON = i2c_write(_BANK, _ADDR, REG_CTRL1, b"\x3F")
SET_MODE = i2c_write(_BANK, _ADDR, REG_CTRL1, bytes([MODE_512MS]))
ENABLE_DATA_FLAGS = i2c_write(_BANK, _ADDR, REG_DATA_FLAGS, b"\x07")
SET_ACTIVE = i2c_write(_BANK, _ADDR, REG_CTRL1, bytes([MODE_512MS + 0x01]))
POWER_OFF = i2c_write(_BANK, _ADDR, REG_CTRL1, b"\x00")
READ_STATUS = i2c_read(_BANK, _ADDR, REG_CTRL1, 2)
# sent without terminator, exactly as the firmware expects it
MEASURE = RequestFrame(Opcode.I2C_READ, bytes([_BANK, _ADDR, 0x01, 0x05]), terminated=False)

_SIBLING = {"pressure": "altitude", "altitude": "pressure"}

_EVENTS = {
    "pressure": (
        EventType.PRESSURE_ENABLED,
        EventType.PRESSURE_DISABLED,
        EventType.PRESSURE_STATUS_CHECKED,
        EventType.PRESSURE_MEASURED,
    ),
    "altitude": (
        EventType.ALTITUDE_ENABLED,
        EventType.ALTITUDE_DISABLED,
        EventType.ALTITUDE_STATUS_CHECKED,
        EventType.ALTITUDE_MEASURED,
    ),
}


class PressureAltitude(Capability):
    """
    Barometer serving two logical sensors: pressure and (derived) altitude.

    The chip is powered while either one is enabled. Sibling checks run on
    the worker so back-to-back enables see each other's result.
    """

    name = "pressure"

    def enable(self, sensor: str = "pressure") -> Future:
        self._check(sensor)
        self._require_connected()
        return self._submit(lambda: self._enable(sensor))

    def disable(self, sensor: str = "pressure") -> Future:
        self._check(sensor)
        self._require_connected()
        return self._submit(lambda: self._disable(sensor))

    def status(self, sensor: str = "pressure") -> Future:
        self._check(sensor)
        self._require_connected()
        return self._submit(lambda: self._status(sensor))

    def measure(self, sensor: str = "pressure") -> Future:
        self._check(sensor)
        self._require_enabled(sensor)
        if sensor == "altitude":
            return self._submit(self._measure_altitude)
        return self._submit(self._measure_pressure)

    @staticmethod
    def _check(sensor: str) -> None:
        if sensor not in _SIBLING:
            raise ValueError(f"unknown barometer sensor '{sensor}'")

    def _sibling_on(self, sensor: str) -> bool:
        return getattr(self._session.enabled, _SIBLING[sensor])

    # ---------------- Worker ----------------
    def _power_up(self) -> bool:
        if self._call(POWER_ON) is None:
            return False
        self._call(SET_MODE)
        self._call(ENABLE_DATA_FLAGS)
        return self._call(SET_ACTIVE) is not None

    def _enable(self, sensor: str) -> None:
        if not self._sibling_on(sensor) and not self._power_up():
            return
        self._set_flag(sensor, True)
        self._notify(_EVENTS[sensor][0])

    def _disable(self, sensor: str) -> None:
        if not self._sibling_on(sensor) and self._call(POWER_OFF) is None:
            return
        self._set_flag(sensor, False)
        self._notify(_EVENTS[sensor][1])

    def _status(self, sensor: str) -> None:
        data = self._call(READ_STATUS)
        if data is None:
            return
        self._expect(data, 1)
        self._set_flag(sensor, bool(data[0] & 0x01))
        self._notify(_EVENTS[sensor][2])

    def _read_pascals(self) -> float | None:
        data = self._call(MEASURE)
        if data is None:
            return None
        self._expect(data, 3)
        return compute.pressure_pascals(data)

    def _measure_pressure(self) -> None:
        pa = self._read_pascals()
        if pa is None:
            return
        r = self._readings
        r.pressure_pascals = pa
        r.pressure_atmospheres = pa * compute.PA_TO_ATM
        r.pressure_torr = pa * compute.PA_TO_TORR
        self._notify(EventType.PRESSURE_MEASURED)

    def _measure_altitude(self) -> None:
        pa = self._read_pascals()
        if pa is None:
            return
        meters = compute.altitude_meters(pa)
        self._readings.altitude_meters = meters
        self._readings.altitude_feet = meters * compute.METERS_TO_FEET
        self._notify(EventType.ALTITUDE_MEASURED)
