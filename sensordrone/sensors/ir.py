# sensordrone/sensors/ir.py
from __future__ import annotations

from concurrent.futures import Future

from sensordrone.events.types import EventType
from sensordrone.protocol.defs import ADDR_IR_THERMOMETER, I2CBank
from sensordrone.protocol.frames import i2c_read, i2c_write

from . import compute
from .base import Capability

_BANK = I2CBank.MAIN
_ADDR = ADDR_IR_THERMOMETER

REG_VOBJ = 0x00
REG_TDIE = 0x01
REG_CONFIG = 0x02

ENABLE = i2c_write(_BANK, _ADDR, REG_CONFIG, b"\x75")
DISABLE = i2c_write(_BANK, _ADDR, REG_CONFIG, b"\x00")
READ_STATUS = i2c_read(_BANK, _ADDR, REG_CONFIG, 1)
READ_DIE = i2c_read(_BANK, _ADDR, REG_TDIE, 2)
READ_VOBJ = i2c_read(_BANK, _ADDR, REG_VOBJ, 2)


class IRThermometer(Capability):
    """Thermopile IR thermometer: object temperature from die temperature + sensor voltage."""

    name = "ir_temperature"

    def enable(self) -> Future:
        self._require_connected()
        return self._submit(lambda: self._write_config(on=True))

    def disable(self) -> Future:
        self._require_connected()
        return self._submit(lambda: self._write_config(on=False))

    def status(self) -> Future:
        self._require_connected()
        return self._submit(self._status)

    def measure(self) -> Future:
        self._require_enabled("ir_temperature")
        return self._submit(self._measure)

    def _write_config(self, *, on: bool) -> None:
        if self._call(ENABLE if on else DISABLE) is None:
            return
        self._set_flag("ir_temperature", on)
        self._notify(EventType.IR_TEMPERATURE_ENABLED if on else EventType.IR_TEMPERATURE_DISABLED)

    def _status(self) -> None:
        data = self._call(READ_STATUS)
        if data is None:
            return
        self._expect(data, 1)
        self._set_flag("ir_temperature", (data[0] & 0x0E) == 0x0E)
        self._notify(EventType.IR_TEMPERATURE_STATUS_CHECKED)

    def _measure(self) -> None:
        # two separate reads, die temperature first
        die = self._call(READ_DIE)
        if die is None:
            return
        vobj = self._call(READ_VOBJ)
        if vobj is None:
            return
        self._expect(die, 2, "die temperature")
        self._expect(vobj, 2, "object voltage")

        t_die = compute.ir_die_kelvin(compute.s16_be(die))
        v_obj = compute.ir_object_volts(compute.s16_be(vobj))
        k = compute.ir_object_kelvin(t_die, v_obj)
        self._log.debug("IR_RAW t_die_k=%.3f v_obj=%.4e t_obj_k=%.3f", t_die, v_obj, k)

        r = self._readings
        r.ir_temperature_kelvin = k
        r.ir_temperature_celsius = k - 273.15
        r.ir_temperature_fahrenheit = compute.celsius_to_fahrenheit(k - 273.15)
        self._notify(EventType.IR_TEMPERATURE_MEASURED)
