# sensordrone/events/listeners.py
"""
Listener flavours.

Subclass DroneEventListener / DroneStatusListener and override only the
methods you care about, or register any callable as a catch-all handler.
All methods run on the session's worker thread.
"""
from __future__ import annotations

from typing import Callable, Dict, Union

from .types import DroneEvent, EventType

E = EventType


class DroneEventListener:
    """Fine-grained listener for measurements, UART reads and connection changes."""

    def capacitance_measured(self, event: DroneEvent) -> None: ...
    def adc_measured(self, event: DroneEvent) -> None: ...
    def rgbc_measured(self, event: DroneEvent) -> None: ...
    def pressure_measured(self, event: DroneEvent) -> None: ...
    def altitude_measured(self, event: DroneEvent) -> None: ...
    def ir_temperature_measured(self, event: DroneEvent) -> None: ...
    def humidity_measured(self, event: DroneEvent) -> None: ...
    def temperature_measured(self, event: DroneEvent) -> None: ...
    def reducing_gas_measured(self, event: DroneEvent) -> None: ...
    def oxidizing_gas_measured(self, event: DroneEvent) -> None: ...
    def precision_gas_measured(self, event: DroneEvent) -> None: ...
    def uart_read(self, event: DroneEvent) -> None: ...
    def usb_uart_read(self, event: DroneEvent) -> None: ...
    def custom_event(self, event: DroneEvent) -> None: ...
    def connect_event(self, event: DroneEvent) -> None: ...
    def disconnect_event(self, event: DroneEvent) -> None: ...
    def connection_lost_event(self, event: DroneEvent) -> None: ...
    def unknown(self, event: DroneEvent) -> None: ...


class DroneStatusListener:
    """Fine-grained listener for enable/disable/status and power telemetry."""

    def capacitance_status(self, event: DroneEvent) -> None: ...
    def adc_status(self, event: DroneEvent) -> None: ...
    def rgbc_status(self, event: DroneEvent) -> None: ...
    def pressure_status(self, event: DroneEvent) -> None: ...
    def altitude_status(self, event: DroneEvent) -> None: ...
    def ir_status(self, event: DroneEvent) -> None: ...
    def humidity_status(self, event: DroneEvent) -> None: ...
    def temperature_status(self, event: DroneEvent) -> None: ...
    def reducing_gas_status(self, event: DroneEvent) -> None: ...
    def oxidizing_gas_status(self, event: DroneEvent) -> None: ...
    def precision_gas_status(self, event: DroneEvent) -> None: ...
    def battery_voltage_status(self, event: DroneEvent) -> None: ...
    def charging_status(self, event: DroneEvent) -> None: ...
    def low_battery_status(self, event: DroneEvent) -> None: ...
    def custom_status(self, event: DroneEvent) -> None: ...
    def unknown_status(self, event: DroneEvent) -> None: ...


class DroneEventHandler:
    """Catch-all listener: every event arrives at parse_event()."""

    def parse_event(self, event: DroneEvent) -> None: ...


HandlerLike = Union[DroneEventHandler, Callable[[DroneEvent], None]]


EVENT_LISTENER_METHODS: Dict[EventType, str] = {
    E.CAPACITANCE_MEASURED: "capacitance_measured",
    E.ADC_MEASURED: "adc_measured",
    E.RGBC_MEASURED: "rgbc_measured",
    E.PRESSURE_MEASURED: "pressure_measured",
    E.ALTITUDE_MEASURED: "altitude_measured",
    E.IR_TEMPERATURE_MEASURED: "ir_temperature_measured",
    E.HUMIDITY_MEASURED: "humidity_measured",
    E.TEMPERATURE_MEASURED: "temperature_measured",
    E.REDUCING_GAS_MEASURED: "reducing_gas_measured",
    E.OXIDIZING_GAS_MEASURED: "oxidizing_gas_measured",
    E.PRECISION_GAS_MEASURED: "precision_gas_measured",
    E.UART_READ: "uart_read",
    E.USB_UART_READ: "usb_uart_read",
    E.CUSTOM_EVENT: "custom_event",
    E.CONNECTED: "connect_event",
    E.DISCONNECTED: "disconnect_event",
    E.CONNECTION_LOST: "connection_lost_event",
}


def _sensor_status(prefix: str, method: str) -> Dict[EventType, str]:
    return {E[f"{prefix}_{suffix}"]: method for suffix in ("ENABLED", "DISABLED", "STATUS_CHECKED")}


STATUS_LISTENER_METHODS: Dict[EventType, str] = {
    **_sensor_status("CAPACITANCE", "capacitance_status"),
    **_sensor_status("ADC", "adc_status"),
    **_sensor_status("RGBC", "rgbc_status"),
    **_sensor_status("PRESSURE", "pressure_status"),
    **_sensor_status("ALTITUDE", "altitude_status"),
    **_sensor_status("IR_TEMPERATURE", "ir_status"),
    **_sensor_status("HUMIDITY", "humidity_status"),
    **_sensor_status("TEMPERATURE", "temperature_status"),
    **_sensor_status("REDUCING_GAS", "reducing_gas_status"),
    **_sensor_status("OXIDIZING_GAS", "oxidizing_gas_status"),
    **_sensor_status("PRECISION_GAS", "precision_gas_status"),
    E.BATTERY_VOLTAGE_MEASURED: "battery_voltage_status",
    E.CHARGING_STATUS: "charging_status",
    E.LOW_BATTERY: "low_battery_status",
    E.CUSTOM_STATUS: "custom_status",
}
