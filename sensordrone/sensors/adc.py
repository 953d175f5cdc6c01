# sensordrone/sensors/adc.py
from __future__ import annotations

from concurrent.futures import Future

from sensordrone.events.types import EventType
from sensordrone.protocol.defs import Opcode
from sensordrone.protocol.frames import RequestFrame

from . import compute
from .base import Capability

MEASURE = RequestFrame.command(Opcode.ADC_READ)


class ExternalADC(Capability):
    """External 12-bit ADC pin, 0-3 V. Always powered: enable/disable are bookkeeping."""

    name = "adc"

    def enable(self) -> Future:
        return self._toggle("adc", True, EventType.ADC_ENABLED)

    def disable(self) -> Future:
        return self._toggle("adc", False, EventType.ADC_DISABLED)

    def status(self) -> Future:
        return self._notify_later(EventType.ADC_STATUS_CHECKED)

    def measure(self) -> Future:
        self._require_connected()
        return self._submit(self._measure)

    def _measure(self) -> None:
        data = self._call(MEASURE)
        if data is None:
            return
        self._expect(data, 2)
        adc = compute.u16_le(data[0], data[1])
        self._readings.external_adc = adc
        self._readings.external_adc_volts = compute.adc_volts(adc)
        self._log.debug("ADC_MEASURED adc=%d volts=%.4f", adc, self._readings.external_adc_volts)
        self._notify(EventType.ADC_MEASURED)
