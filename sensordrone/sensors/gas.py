# sensordrone/sensors/gas.py
from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from typing import Dict

from sensordrone.events.types import EventType
from sensordrone.protocol.defs import Opcode
from sensordrone.protocol.frames import RequestFrame

from . import compute
from .base import Capability


@dataclass(frozen=True)
class GasChannel:
    """Wire recipe and bookkeeping of one metal-oxide sensor."""
    flag: str
    heater_on: RequestFrame
    heater_off: RequestFrame
    status: RequestFrame
    read: RequestFrame
    load_ohm: float
    reading: str
    enabled_event: EventType
    disabled_event: EventType
    status_event: EventType
    measured_event: EventType


OXIDIZING = GasChannel(
    flag="oxidizing_gas",
    heater_on=RequestFrame.command(Opcode.OXIDIZING_HEATER, 0x84),
    heater_off=RequestFrame.command(Opcode.OXIDIZING_HEATER, 0x00),
    status=RequestFrame.command(Opcode.OXIDIZING_STATUS),
    read=RequestFrame.command(Opcode.OXIDIZING_READ),
    load_ohm=compute.OXIDIZING_LOAD_OHM,
    reading="oxidizing_gas_ohm",
    enabled_event=EventType.OXIDIZING_GAS_ENABLED,
    disabled_event=EventType.OXIDIZING_GAS_DISABLED,
    status_event=EventType.OXIDIZING_GAS_STATUS_CHECKED,
    measured_event=EventType.OXIDIZING_GAS_MEASURED,
)

REDUCING = GasChannel(
    flag="reducing_gas",
    heater_on=RequestFrame.command(Opcode.REDUCING_HEATER, 0xBA),
    heater_off=RequestFrame.command(Opcode.REDUCING_HEATER, 0x00),
    status=RequestFrame.command(Opcode.REDUCING_STATUS),
    read=RequestFrame.command(Opcode.REDUCING_READ),
    load_ohm=compute.REDUCING_LOAD_OHM,
    reading="reducing_gas_ohm",
    enabled_event=EventType.REDUCING_GAS_ENABLED,
    disabled_event=EventType.REDUCING_GAS_DISABLED,
    status_event=EventType.REDUCING_GAS_STATUS_CHECKED,
    measured_event=EventType.REDUCING_GAS_MEASURED,
)


class GeneralGas(Capability):
    """Oxidizing and reducing metal-oxide gas sensors (heater control + resistance)."""

    name = "general_gas"

    CHANNELS: Dict[str, GasChannel] = {
        "oxidizing": OXIDIZING,
        "reducing": REDUCING,
    }

    def enable(self, channel: str) -> Future:
        ch = self.CHANNELS[channel]
        self._require_connected()
        return self._submit(lambda: self._heater(ch, on=True))

    def disable(self, channel: str) -> Future:
        ch = self.CHANNELS[channel]
        self._require_connected()
        return self._submit(lambda: self._heater(ch, on=False))

    def status(self, channel: str) -> Future:
        ch = self.CHANNELS[channel]
        self._require_connected()
        return self._submit(lambda: self._status(ch))

    def measure(self, channel: str) -> Future:
        ch = self.CHANNELS[channel]
        self._require_enabled(ch.flag)
        return self._submit(lambda: self._measure(ch))

    def _heater(self, ch: GasChannel, *, on: bool) -> None:
        if self._call(ch.heater_on if on else ch.heater_off) is None:
            return
        self._set_flag(ch.flag, on)
        self._notify(ch.enabled_event if on else ch.disabled_event)

    def _status(self, ch: GasChannel) -> None:
        data = self._call(ch.status)
        if data is None:
            return
        self._expect(data, 1)
        self._set_flag(ch.flag, data[0] != 0x00)
        self._notify(ch.status_event)

    def _measure(self, ch: GasChannel) -> None:
        data = self._call(ch.read)
        if data is None:
            return
        self._expect(data, 2)
        adc = compute.u16_le(data[0], data[1])
        setattr(self._readings, ch.reading, compute.gas_resistance(adc, ch.load_ohm))
        self._notify(ch.measured_event)
