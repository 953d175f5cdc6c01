# sensordrone/tests/protocol/test_link.py
from __future__ import annotations

import logging

import pytest

from sensordrone.core.errors import DeviceError, LinkIOError, PayloadTooShortError
from sensordrone.protocol.defs import DeviceErrorCode, Opcode
from sensordrone.protocol.frames import RequestFrame
from sensordrone.protocol.link import FrameLink
from sensordrone.transport.errors import TransportIOError


class FakeTransport:
    """Minimal TransportIO stub serving staged bytes in small chunks."""
    def __init__(self, rx: bytes = b"", chunk: int = 1):
        self.writes: list[bytes] = []
        self.rx = bytearray(rx)
        self.chunk = chunk
        self.flushes = 0
        self.raise_on_write: Exception | None = None
        self.raise_on_read: Exception | None = None

    def write(self, data: bytes) -> int:
        if self.raise_on_write:
            raise self.raise_on_write
        self.writes.append(bytes(data))
        return len(data)

    def read(self, size: int) -> bytes:
        if self.raise_on_read:
            raise self.raise_on_read
        n = min(size, self.chunk)
        out = bytes(self.rx[:n])
        del self.rx[:n]
        return out

    def flush(self) -> None:
        self.flushes += 1


ADC = RequestFrame.command(Opcode.ADC_READ)


def test_transact_writes_frame_and_reassembles_chunked_response():
    """
    Algorithm:
      - the request is written and flushed once
      - header then exactly L payload bytes are read, even 1 byte at a time
      - echo and trailing zero are stripped
    """
    t = FakeTransport(rx=b"\x50\x04\x21\xFF\x0F\x00" + b"\xAA", chunk=1)
    link = FrameLink(t, logger=logging.getLogger("test"))

    assert link.transact(ADC) == b"\xFF\x0F"
    assert t.writes == [bytes([0x50, 0x02, 0x21, 0x00])]
    assert t.flushes == 1
    # bytes past the declared length stay on the stream
    assert bytes(t.rx) == b"\xAA"


def test_low_battery_frame_fires_callback_once_and_fails_call():
    calls = []
    t = FakeTransport(rx=b"\x50\x02\x99\x02", chunk=4)
    link = FrameLink(t, on_low_battery=lambda: calls.append(1))

    with pytest.raises(DeviceError) as ei:
        link.transact(ADC)

    assert ei.value.error_code == DeviceErrorCode.LOW_BATTERY
    assert calls == [1]


@pytest.mark.parametrize("code", [DeviceErrorCode.GENERIC, DeviceErrorCode.UNRECOGNIZED_COMMAND, DeviceErrorCode.I2C_TIMEOUT])
def test_other_device_errors_do_not_fire_low_battery(code, caplog):
    calls = []
    t = FakeTransport(rx=bytes([0x50, 0x02, 0x99, code]), chunk=4)
    link = FrameLink(t, on_low_battery=lambda: calls.append(1), logger=logging.getLogger("test.link"))

    with caplog.at_level(logging.WARNING, logger="test.link"):
        with pytest.raises(DeviceError):
            link.transact(ADC)

    assert calls == []
    assert any("DEVICE_ERROR" in r.getMessage() and code.name in r.getMessage() for r in caplog.records)


def test_write_failure_becomes_link_io_error():
    t = FakeTransport()
    t.raise_on_write = TransportIOError("gone")
    link = FrameLink(t)

    with pytest.raises(LinkIOError) as ei:
        link.transact(ADC)
    assert ei.value.details["opcode"] == Opcode.ADC_READ


def test_read_oserror_becomes_link_io_error():
    t = FakeTransport()
    t.raise_on_read = OSError("socket reset")
    with pytest.raises(LinkIOError):
        FrameLink(t).transact(ADC)


def test_stream_ending_inside_payload_is_too_short():
    t = FakeTransport(rx=b"\x50\x04\x21\xFF", chunk=8)
    with pytest.raises(PayloadTooShortError) as ei:
        FrameLink(t).transact(ADC)
    assert ei.value.expected == 4
    assert ei.value.actual == 2


def test_stream_ending_inside_header_is_too_short():
    t = FakeTransport(rx=b"\x50", chunk=8)
    with pytest.raises(PayloadTooShortError):
        FrameLink(t).transact(ADC)
