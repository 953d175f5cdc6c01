# sensordrone/sensors/humidity.py
from __future__ import annotations

from concurrent.futures import Future

from sensordrone.events.types import EventType
from sensordrone.protocol.defs import ADDR_HUMIDITY, I2CBank
from sensordrone.protocol.frames import i2c_read

from . import compute
from .base import Capability

MEASURE_HUMIDITY = i2c_read(I2CBank.MAIN, ADDR_HUMIDITY, 0xE5, 2)
MEASURE_TEMPERATURE = i2c_read(I2CBank.MAIN, ADDR_HUMIDITY, 0xE3, 2)


class HumidityTemperature(Capability):
    """
    Combined relative humidity / ambient temperature chip.

    The chip is always on; enable, disable and status only maintain the
    client-side flags of the two logical sensors.
    """

    name = "humidity"

    # ---------------- Humidity ----------------
    def enable_humidity(self) -> Future:
        return self._toggle("humidity", True, EventType.HUMIDITY_ENABLED)

    def disable_humidity(self) -> Future:
        return self._toggle("humidity", False, EventType.HUMIDITY_DISABLED)

    def humidity_status(self) -> Future:
        return self._notify_later(EventType.HUMIDITY_STATUS_CHECKED)

    def measure_humidity(self) -> Future:
        self._require_enabled("humidity")
        return self._submit(self._measure_humidity)

    # ---------------- Temperature ----------------
    def enable_temperature(self) -> Future:
        return self._toggle("temperature", True, EventType.TEMPERATURE_ENABLED)

    def disable_temperature(self) -> Future:
        return self._toggle("temperature", False, EventType.TEMPERATURE_DISABLED)

    def temperature_status(self) -> Future:
        return self._notify_later(EventType.TEMPERATURE_STATUS_CHECKED)

    def measure_temperature(self) -> Future:
        self._require_enabled("temperature")
        return self._submit(self._measure_temperature)

    # ---------------- Worker ----------------
    def _read_adc(self, frame) -> int | None:
        data = self._call(frame)
        if data is None:
            return None
        self._expect(data, 2)
        return compute.humidity_adc(data[0], data[1])

    def _measure_humidity(self) -> None:
        adc = self._read_adc(MEASURE_HUMIDITY)
        if adc is None:
            return
        self._readings.humidity_percent = compute.relative_humidity(adc)
        self._notify(EventType.HUMIDITY_MEASURED)

    def _measure_temperature(self) -> None:
        adc = self._read_adc(MEASURE_TEMPERATURE)
        if adc is None:
            return
        c = compute.humidity_temperature_celsius(adc)
        r = self._readings
        r.temperature_celsius = c
        r.temperature_kelvin = compute.celsius_to_kelvin(c)
        r.temperature_fahrenheit = compute.celsius_to_fahrenheit(c)
        self._notify(EventType.TEMPERATURE_MEASURED)
