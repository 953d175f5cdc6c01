# sensordrone/runtime/state.py
from __future__ import annotations

from dataclasses import asdict, dataclass, fields


@dataclass
class EnabledFlags:
    """
    Per logical sensor enabled flags.

    Written by the worker after a successful enable/disable/status exchange.
    """
    capacitance: bool = False
    adc: bool = False
    rgbc: bool = False
    pressure: bool = False
    altitude: bool = False
    ir_temperature: bool = False
    humidity: bool = False
    temperature: bool = False
    reducing_gas: bool = False
    oxidizing_gas: bool = False
    precision_gas: bool = False

    def reset(self) -> None:
        for f in fields(self):
            setattr(self, f.name, False)

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class Readings:
    """
    Last decoded value of every measurement.

    Owned by the worker thread; read it from listener callbacks after the
    matching *_MEASURED / status event fires.
    """
    temperature_celsius: float = 0.0
    temperature_fahrenheit: float = 0.0
    temperature_kelvin: float = 0.0

    humidity_percent: float = 0.0

    pressure_pascals: float = 0.0
    pressure_atmospheres: float = 0.0
    pressure_torr: float = 0.0

    altitude_meters: float = 0.0
    altitude_feet: float = 0.0

    rgbc_red: float = 0.0
    rgbc_green: float = 0.0
    rgbc_blue: float = 0.0
    rgbc_clear: float = 0.0
    rgbc_lux: float = 0.0
    rgbc_color_temperature: float = 0.0

    capacitance_femtofarad: float = 0.0

    oxidizing_gas_ohm: float = 0.0
    reducing_gas_ohm: float = 0.0

    precision_gas_ppm_carbon_monoxide: float = 0.0
    precision_gas_adc: int = 0
    precision_gas_baseline_candidate: float = 0.0
    precision_gas_sensitivity_candidate: float = 0.0
    precision_gas_register: bytes = b""

    ir_temperature_celsius: float = 0.0
    ir_temperature_fahrenheit: float = 0.0
    ir_temperature_kelvin: float = 0.0

    external_adc: int = 0
    external_adc_volts: float = 0.0

    battery_voltage_volts: float = 0.0
    is_charging: bool = False

    uart_read_buffer: bytes = b""
    usb_uart_read_buffer: bytes = b""

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DroneStatus:
    """A snapshot of the session, safe to share across threads."""
    connected: bool
    last_address: str
    hardware_version: int
    firmware_version: int
    firmware_revision: int
    enabled: dict
