# sensordrone/sensors/registry.py
from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, NamedTuple, Optional

from sensordrone.core.errors import UnsupportedHardwareError

from .adc import ExternalADC
from .base import SessionPort
from .capacitance import Capacitance
from .gas import GeneralGas
from .humidity import HumidityTemperature
from .ir import IRThermometer
from .leds import LEDs
from .power import Power
from .precision_gas import PrecisionGas
from .pressure import PressureAltitude
from .rgbc import RGBC
from .uart import USBUART, ExternalUART


class SensorKind(IntEnum):
    """Logical sensors, numbered as the quick-access API expects."""
    ALTITUDE = 0
    CAPACITANCE = 1
    HUMIDITY = 2
    IR_TEMPERATURE = 3
    OXIDIZING_GAS = 4
    PRECISION_GAS = 5
    PRESSURE = 6
    REDUCING_GAS = 7
    RGBC = 8
    TEMPERATURE = 9
    ADC = 10


Op = Callable[[], Future]


class SensorOps(NamedTuple):
    """Uniform enable/disable/status/measure entry points of one logical sensor."""
    enable: Op
    disable: Op
    status: Op
    measure: Op


@dataclass(frozen=True)
class Capabilities:
    """The capability instances of one connected drone."""
    hardware_version: int
    adc: ExternalADC
    capacitance: Capacitance
    gas: GeneralGas
    humidity: HumidityTemperature
    ir: IRThermometer
    leds: LEDs
    power: Power
    precision_gas: PrecisionGas
    pressure: PressureAltitude
    rgbc: RGBC
    uart: ExternalUART
    usb_uart: USBUART

    def initialize(self) -> None:
        for cap in (
            self.adc, self.capacitance, self.gas, self.humidity, self.ir, self.leds,
            self.power, self.precision_gas, self.pressure, self.rgbc, self.uart, self.usb_uart,
        ):
            cap.initialize()

    def ops(self, kind: SensorKind) -> SensorOps:
        kind = SensorKind(kind)
        if kind is SensorKind.ALTITUDE or kind is SensorKind.PRESSURE:
            p, name = self.pressure, kind.name.lower()
            return SensorOps(
                lambda: p.enable(name), lambda: p.disable(name),
                lambda: p.status(name), lambda: p.measure(name),
            )
        if kind is SensorKind.OXIDIZING_GAS or kind is SensorKind.REDUCING_GAS:
            g, ch = self.gas, "oxidizing" if kind is SensorKind.OXIDIZING_GAS else "reducing"
            return SensorOps(
                lambda: g.enable(ch), lambda: g.disable(ch),
                lambda: g.status(ch), lambda: g.measure(ch),
            )
        if kind is SensorKind.HUMIDITY:
            h = self.humidity
            return SensorOps(h.enable_humidity, h.disable_humidity, h.humidity_status, h.measure_humidity)
        if kind is SensorKind.TEMPERATURE:
            h = self.humidity
            return SensorOps(h.enable_temperature, h.disable_temperature, h.temperature_status, h.measure_temperature)

        cap = {
            SensorKind.CAPACITANCE: self.capacitance,
            SensorKind.IR_TEMPERATURE: self.ir,
            SensorKind.PRECISION_GAS: self.precision_gas,
            SensorKind.RGBC: self.rgbc,
            SensorKind.ADC: self.adc,
        }[kind]
        return SensorOps(cap.enable, cap.disable, cap.status, cap.measure)


def _build_v1(
    session: SessionPort,
    *,
    low_battery_volts: float,
    uart_buffer_size: int,
    logger: Optional[logging.Logger],
) -> Capabilities:
    kw = {"logger": logger}
    return Capabilities(
        hardware_version=1,
        adc=ExternalADC(session, **kw),
        capacitance=Capacitance(session, **kw),
        gas=GeneralGas(session, **kw),
        humidity=HumidityTemperature(session, **kw),
        ir=IRThermometer(session, **kw),
        leds=LEDs(session, **kw),
        power=Power(session, low_battery_volts=low_battery_volts, **kw),
        precision_gas=PrecisionGas(session, **kw),
        pressure=PressureAltitude(session, **kw),
        rgbc=RGBC(session, **kw),
        uart=ExternalUART(session, buffer_size=uart_buffer_size, **kw),
        usb_uart=USBUART(session, buffer_size=uart_buffer_size, **kw),
    )


HARDWARE_BUILDERS: Dict[int, Callable[..., Capabilities]] = {
    1: _build_v1,
}


def build_capabilities(
    session: SessionPort,
    hardware_version: int,
    *,
    low_battery_volts: float = 3.25,
    uart_buffer_size: int = 1024,
    logger: Optional[logging.Logger] = None,
) -> Capabilities:
    """Instantiate the capability set for the hardware version reported at connect."""
    builder = HARDWARE_BUILDERS.get(int(hardware_version))
    if builder is None:
        raise UnsupportedHardwareError(
            f"no capability set for hardware version {hardware_version}",
            hint=f"Supported versions: {sorted(HARDWARE_BUILDERS)}",
            details={"hardware_version": hardware_version},
        )
    return builder(
        session,
        low_battery_volts=low_battery_volts,
        uart_buffer_size=uart_buffer_size,
        logger=logger,
    )
