# sensordrone/protocol/defs.py
"""
Wire-level constants of the Sensordrone serial protocol.

Request:  [START, N, opcode, args..., 0x00]   N = len(opcode..terminator)
Response: [h0, L, payload(L)]                 payload = [echo, data..., 0x00]
Error:    [h0, L, 0x99, code, ...]
"""
from __future__ import annotations

from enum import IntEnum

START_BYTE = 0x50
TERMINATOR = 0x00
ERROR_MARKER = 0x99

HEADER_LEN = 2

#: Maximum payload of one external/USB UART write or read.
UART_CHUNK = 32


class Opcode(IntEnum):
    I2C_READ = 0x10
    I2C_WRITE = 0x11
    LED_WRITE = 0x15
    OXIDIZING_HEATER = 0x18
    REDUCING_HEATER = 0x19
    REDUCING_STATUS = 0x1A
    OXIDIZING_STATUS = 0x1B
    OXIDIZING_READ = 0x1C
    REDUCING_READ = 0x1D
    PRECISION_GAS_READ = 0x20
    ADC_READ = 0x21
    BATTERY_READ = 0x22
    UART_WRITE = 0x24
    UART_READ = 0x25
    UART_BAUD = 0x26
    USB_UART_WRITE = 0x2A
    USB_UART_READ = 0x2B
    VERSION = 0x33
    RGBC_TRANSISTOR = 0x35
    PRECISION_GAS_CAL_READ = 0x40
    PRECISION_GAS_CAL_WRITE = 0x41
    RGBC_STATUS = 0x60


class DeviceErrorCode(IntEnum):
    GENERIC = 0x00
    UNRECOGNIZED_COMMAND = 0x01
    LOW_BATTERY = 0x02
    I2C_TIMEOUT = 0x03


class I2CBank(IntEnum):
    MAIN = 0x00
    CAPACITANCE = 0x01
    POWER = 0x02


# I2C slave addresses (7-bit)
ADDR_RGBC = 0x39
ADDR_HUMIDITY = 0x40
ADDR_IR_THERMOMETER = 0x41
ADDR_CAPACITANCE = 0x48
ADDR_POWER = 0x48
ADDR_PRECISION_GAS = 0x48
ADDR_PRESSURE = 0x60
