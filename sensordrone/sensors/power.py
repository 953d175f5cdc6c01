# sensordrone/sensors/power.py
from __future__ import annotations

from concurrent.futures import Future

from sensordrone.events.types import EventType
from sensordrone.protocol.defs import ADDR_POWER, I2CBank, Opcode
from sensordrone.protocol.frames import RequestFrame, i2c_read

from . import compute
from .base import Capability

READ_CHARGER = i2c_read(I2CBank.POWER, ADDR_POWER, 0x01, 0x02)
READ_BATTERY = RequestFrame.command(Opcode.BATTERY_READ)

CHARGING_BIT = 0x04
DEFAULT_LOW_BATTERY_VOLTS = 3.25


class Power(Capability):
    """Battery voltage and charger state. Needs no enable."""

    name = "power"

    def __init__(self, session, *, low_battery_volts: float = DEFAULT_LOW_BATTERY_VOLTS, **kwargs):
        super().__init__(session, **kwargs)
        self.low_battery_volts = float(low_battery_volts)

    def check_charging(self) -> Future:
        self._require_connected()
        return self._submit(self._charging)

    def measure_battery_voltage(self) -> Future:
        self._require_connected()
        return self._submit(self._battery)

    def _charging(self) -> None:
        data = self._call(READ_CHARGER)
        if data is None:
            return
        self._expect(data, 1)
        self._readings.is_charging = bool(data[0] & CHARGING_BIT)
        self._notify(EventType.CHARGING_STATUS)

    def _battery(self) -> None:
        data = self._call(READ_BATTERY)
        if data is None:
            return
        self._expect(data, 2)
        volts = compute.battery_volts(compute.u16_le(data[0], data[1]))
        self._readings.battery_voltage_volts = volts
        self._notify(EventType.BATTERY_VOLTAGE_MEASURED)
        if volts < self.low_battery_volts:
            self._log.warning("LOW_BATTERY volts=%.3f threshold=%.2f", volts, self.low_battery_volts)
            self._notify(EventType.LOW_BATTERY)
