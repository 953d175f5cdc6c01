# sensordrone/events/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Channel(Enum):
    """Which fine-grained listener flavour an event is routed to."""
    EVENT = "event"
    STATUS = "status"


class EventType(Enum):
    CAPACITANCE_MEASURED = "capacitance_measured"
    CAPACITANCE_ENABLED = "capacitance_enabled"
    CAPACITANCE_DISABLED = "capacitance_disabled"
    CAPACITANCE_STATUS_CHECKED = "capacitance_status_checked"

    ADC_MEASURED = "adc_measured"
    ADC_ENABLED = "adc_enabled"
    ADC_DISABLED = "adc_disabled"
    ADC_STATUS_CHECKED = "adc_status_checked"

    RGBC_MEASURED = "rgbc_measured"
    RGBC_ENABLED = "rgbc_enabled"
    RGBC_DISABLED = "rgbc_disabled"
    RGBC_STATUS_CHECKED = "rgbc_status_checked"

    PRESSURE_MEASURED = "pressure_measured"
    PRESSURE_ENABLED = "pressure_enabled"
    PRESSURE_DISABLED = "pressure_disabled"
    PRESSURE_STATUS_CHECKED = "pressure_status_checked"

    ALTITUDE_MEASURED = "altitude_measured"
    ALTITUDE_ENABLED = "altitude_enabled"
    ALTITUDE_DISABLED = "altitude_disabled"
    ALTITUDE_STATUS_CHECKED = "altitude_status_checked"

    IR_TEMPERATURE_MEASURED = "ir_temperature_measured"
    IR_TEMPERATURE_ENABLED = "ir_temperature_enabled"
    IR_TEMPERATURE_DISABLED = "ir_temperature_disabled"
    IR_TEMPERATURE_STATUS_CHECKED = "ir_temperature_status_checked"

    HUMIDITY_MEASURED = "humidity_measured"
    HUMIDITY_ENABLED = "humidity_enabled"
    HUMIDITY_DISABLED = "humidity_disabled"
    HUMIDITY_STATUS_CHECKED = "humidity_status_checked"

    TEMPERATURE_MEASURED = "temperature_measured"
    TEMPERATURE_ENABLED = "temperature_enabled"
    TEMPERATURE_DISABLED = "temperature_disabled"
    TEMPERATURE_STATUS_CHECKED = "temperature_status_checked"

    REDUCING_GAS_MEASURED = "reducing_gas_measured"
    REDUCING_GAS_ENABLED = "reducing_gas_enabled"
    REDUCING_GAS_DISABLED = "reducing_gas_disabled"
    REDUCING_GAS_STATUS_CHECKED = "reducing_gas_status_checked"

    OXIDIZING_GAS_MEASURED = "oxidizing_gas_measured"
    OXIDIZING_GAS_ENABLED = "oxidizing_gas_enabled"
    OXIDIZING_GAS_DISABLED = "oxidizing_gas_disabled"
    OXIDIZING_GAS_STATUS_CHECKED = "oxidizing_gas_status_checked"

    PRECISION_GAS_MEASURED = "precision_gas_measured"
    PRECISION_GAS_ENABLED = "precision_gas_enabled"
    PRECISION_GAS_DISABLED = "precision_gas_disabled"
    PRECISION_GAS_STATUS_CHECKED = "precision_gas_status_checked"

    UART_READ = "uart_read"
    USB_UART_READ = "usb_uart_read"

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    CONNECTION_LOST = "connection_lost"

    BATTERY_VOLTAGE_MEASURED = "battery_voltage_measured"
    CHARGING_STATUS = "charging_status"
    LOW_BATTERY = "low_battery"

    CUSTOM_EVENT = "custom_event"
    CUSTOM_STATUS = "custom_status"

    @property
    def channel(self) -> Channel:
        return Channel.STATUS if self in _STATUS_CHANNEL else Channel.EVENT


_STATUS_CHANNEL = frozenset(
    t for t in EventType
    if t.name.endswith(("_ENABLED", "_DISABLED", "_STATUS_CHECKED"))
) | {
    EventType.BATTERY_VOLTAGE_MEASURED,
    EventType.CHARGING_STATUS,
    EventType.LOW_BATTERY,
    EventType.CUSTOM_STATUS,
}


@dataclass(frozen=True)
class DroneEvent:
    """
    A tagged notification. It carries no measurement data: listeners read the
    updated values from `source.readings`.
    """
    type: EventType
    source: Any = field(default=None, compare=False, repr=False)
