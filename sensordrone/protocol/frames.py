# sensordrone/protocol/frames.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sensordrone.core.errors import DeviceError, PayloadTooShortError

from .defs import ERROR_MARKER, START_BYTE, TERMINATOR, Opcode


@dataclass(frozen=True)
class RequestFrame:
    """
    One outgoing request: [0x50, N, opcode, args..., 0x00].

    N counts everything after itself. A few recipes are sent without the
    trailing terminator (terminated=False); the device accepts them as-is.
    """
    opcode: int
    args: bytes = b""
    terminated: bool = True

    def encode(self) -> bytes:
        body = bytes([self.opcode]) + bytes(self.args)
        if self.terminated:
            body += bytes([TERMINATOR])
        if len(body) > 0xFF:
            raise ValueError(f"frame body too long: {len(body)} bytes")
        return bytes([START_BYTE, len(body)]) + body

    def __bytes__(self) -> bytes:
        return self.encode()

    @classmethod
    def command(cls, opcode: int, *args: int) -> "RequestFrame":
        return cls(int(opcode), bytes(args))


def i2c_read(bank: int, address: int, register: int, length: int) -> RequestFrame:
    """I2C block read of `length` bytes starting at `register`."""
    return RequestFrame(Opcode.I2C_READ, bytes([bank, address, register, length]))


def i2c_write(
    bank: int,
    address: int,
    register: int,
    data: bytes,
    *,
    write_length: Optional[int] = None,
) -> RequestFrame:
    """
    I2C register write: (bank, addr, wlen, reg, data...).

    wlen defaults to len(data); the capacitance offset write declares 1 while
    carrying two data bytes, so it can be given explicitly.
    """
    wlen = len(data) if write_length is None else write_length
    return RequestFrame(Opcode.I2C_WRITE, bytes([bank, address, wlen, register]) + bytes(data))


@dataclass(frozen=True)
class ResponseFrame:
    """A raw response as read off the wire: 2 header bytes + L payload bytes."""
    header: bytes
    payload: bytes

    @property
    def is_error(self) -> bool:
        return len(self.payload) >= 1 and self.payload[0] == ERROR_MARKER

    @property
    def error_code(self) -> Optional[int]:
        if not self.is_error or len(self.payload) < 2:
            return None
        return self.payload[1]

    def data(self, *, opcode: Optional[int] = None) -> bytes:
        """
        Return the payload with command echo and trailing zero stripped.

        Raises DeviceError for 0x99 frames and PayloadTooShortError when the
        payload cannot hold echo + terminator.
        """
        if self.is_error:
            code = self.error_code
            if code is None:
                raise PayloadTooShortError(2, len(self.payload), what="error frame")
            raise DeviceError(code, opcode=opcode)
        if len(self.payload) < 2:
            raise PayloadTooShortError(2, len(self.payload))
        return self.payload[1:-1]
