# sensordrone/transport/uart.py
from __future__ import annotations

from typing import Optional

import serial
from serial import SerialException

from .base import Transport
from .errors import TransportIOError, TransportOpenError


class UARTTransport(Transport):
    """
    Serial transport implemented via pyserial.

    `port` is anything serial.serial_for_url accepts: a device path such as
    /dev/rfcomm0 or COM5, or a URL such as socket://host:port.

    timeout=None blocks until the requested byte count arrives; a finite
    timeout makes read(n) return whatever was collected when it expires.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
    ):
        self.port = port
        self.address = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.write_timeout = write_timeout
        self.ser: Optional[serial.SerialBase] = None

    def open(self) -> None:
        if self.ser is not None:
            return
        try:
            self.ser = serial.serial_for_url(
                self.port,
                baudrate=self.baudrate,
                timeout=self.timeout,
                write_timeout=self.write_timeout,
            )
            self.ser.reset_input_buffer()
            self.ser.reset_output_buffer()
        except SerialException as e:
            self.ser = None
            raise TransportOpenError(str(e)) from None

    def close(self) -> None:
        if self.ser is None:
            return
        ser, self.ser = self.ser, None
        try:
            ser.close()
        except SerialException as e:
            raise TransportIOError(f"UART close failed: {e}") from None

    def is_open(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def read(self, n: int) -> bytes:
        if self.ser is None:
            raise TransportIOError("read while transport not open")

        try:
            buf = b""
            while len(buf) < n:
                chunk = self.ser.read(n - len(buf))
                if not chunk:
                    # timeout or peer closed: hand back what we have
                    break
                buf += chunk
            return buf
        except SerialException as e:
            self.ser = None
            raise TransportIOError(f"UART read failed: {e}") from None

    def write(self, data: bytes) -> int:
        if self.ser is None:
            raise TransportIOError("write while transport not open")

        try:
            return self.ser.write(data)
        except SerialException as e:
            self.ser = None
            raise TransportIOError(f"UART write failed: {e}") from None

    def flush(self) -> None:
        if self.ser is None:
            raise TransportIOError("flush while transport not open")

        try:
            self.ser.flush()
        except SerialException as e:
            self.ser = None
            raise TransportIOError(f"UART flush failed: {e}") from None
