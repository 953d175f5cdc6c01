# sensordrone/sensors/uart.py
from __future__ import annotations

import time
from concurrent.futures import Future
from enum import IntEnum
from typing import Optional

from sensordrone.core.errors import ArgumentOutOfRangeError
from sensordrone.events.types import EventType
from sensordrone.protocol.defs import UART_CHUNK, Opcode
from sensordrone.protocol.frames import RequestFrame

from .base import Capability
from .ring import ByteRing


class BaudRate(IntEnum):
    """External UART baud rates and their wire codes."""
    B2400 = 0x00
    B9600 = 0x01
    B19200 = 0x02
    B38400 = 0x03
    B115200 = 0x04

    @classmethod
    def from_rate(cls, rate: int) -> "BaudRate":
        try:
            return cls[f"B{int(rate)}"]
        except KeyError:
            raise ArgumentOutOfRangeError(
                f"unsupported UART baud rate {rate}",
                hint="Use one of 2400, 9600, 19200, 38400, 115200.",
            ) from None


class SerialBridge(Capability):
    """
    A UART tunnelled through the drone: reads land in `input`, a bounded
    ring the application drains at its own pace.
    """

    name = "serial_bridge"
    write_opcode: int = Opcode.UART_WRITE
    read_opcode: int = Opcode.UART_READ
    read_event: EventType = EventType.UART_READ
    buffer_attr: str = "uart_read_buffer"

    def __init__(self, session, *, buffer_size: int = 1024, **kwargs):
        super().__init__(session, **kwargs)
        self.input = ByteRing(buffer_size, reserve=UART_CHUNK)
        self._read_frame = RequestFrame.command(self.read_opcode)

    def write_frame(self, data: bytes) -> RequestFrame:
        data = bytes(data)
        if len(data) > UART_CHUNK:
            raise ArgumentOutOfRangeError(
                f"{self.name} write of {len(data)} bytes exceeds {UART_CHUNK}",
                hint="Split the payload into chunks of at most 32 bytes.",
            )
        return RequestFrame(self.write_opcode, data)

    def read(self) -> Future:
        self._require_connected()
        return self._submit(self._read)

    def write(self, data: bytes) -> Future:
        self._require_connected()
        frame = self.write_frame(data)
        return self._submit(lambda: self._call(frame))

    def write_for_read(self, data: bytes, delay_ms: int = 0) -> Optional[bytes]:
        """
        Write, wait delay_ms on the caller thread, read; returns the read bytes.

        Both exchanges go through the executor, so other queued work may run
        in between but never inside either exchange. Returns None when the
        write or the read was not answered.
        """
        self._require_connected()
        frame = self.write_frame(data)

        if self._session.submit_and_wait(lambda: self._call(frame)) is None:
            self._log.warning("WRITE_FOR_READ_FAILED bridge=%s stage=write", self.name)
            return None

        if delay_ms > 0:
            time.sleep(delay_ms / 1000.0)

        response = self._session.submit_and_wait(lambda: self._call(self._read_frame))
        if response is None:
            self._log.warning("WRITE_FOR_READ_FAILED bridge=%s stage=read", self.name)
            return None
        return bytes(response)

    def _read(self) -> None:
        data = self._call(self._read_frame)
        if data is None:
            return
        data = bytes(data)
        setattr(self._readings, self.buffer_attr, data)
        dropped = self.input.put(data)
        if dropped:
            self._log.debug("INPUT_OVERFLOW bridge=%s dropped=%d", self.name, dropped)
        self._notify(self.read_event)


class ExternalUART(SerialBridge):
    """The drone's external UART header."""

    name = "uart"

    def set_baud_rate(self, rate: int) -> Future:
        self._require_connected()
        code = BaudRate.from_rate(rate)
        frame = RequestFrame.command(Opcode.UART_BAUD, code)
        return self._submit(lambda: self._call(frame))


class USBUART(SerialBridge):
    """USB-UART bridge, fixed at 9600 baud."""

    name = "usb_uart"
    write_opcode = Opcode.USB_UART_WRITE
    read_opcode = Opcode.USB_UART_READ
    read_event = EventType.USB_UART_READ
    buffer_attr = "usb_uart_read_buffer"
