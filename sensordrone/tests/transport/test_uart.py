# sensordrone/tests/transport/test_uart.py
from __future__ import annotations

import pytest

import sensordrone.transport.uart as uart_mod
from sensordrone.transport.errors import TransportIOError, TransportOpenError


class FakeSerial:
    def __init__(self, url, baudrate, timeout, write_timeout):
        self.url = url
        self.baudrate = baudrate
        self.timeout = timeout
        self.write_timeout = write_timeout
        self.is_open = True

        self._read_chunks = []
        self._raise_on_read = None
        self._raise_on_write = None
        self._raise_on_flush = None
        self._raise_on_close = None

        self.writes = []
        self.reset_in_called = 0
        self.reset_out_called = 0
        self.flush_called = 0
        self.close_called = 0

    def reset_input_buffer(self):
        self.reset_in_called += 1

    def reset_output_buffer(self):
        self.reset_out_called += 1

    def read(self, n: int) -> bytes:
        if self._raise_on_read is not None:
            raise self._raise_on_read
        if not self._read_chunks:
            return b""
        chunk = self._read_chunks.pop(0)
        return chunk[:n]

    def write(self, data: bytes) -> int:
        if self._raise_on_write is not None:
            raise self._raise_on_write
        self.writes.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        self.flush_called += 1
        if self._raise_on_flush is not None:
            raise self._raise_on_flush

    def close(self) -> None:
        self.close_called += 1
        if self._raise_on_close is not None:
            raise self._raise_on_close
        self.is_open = False


@pytest.fixture
def fake_serial(monkeypatch):
    created = {}

    def fake_for_url(url, baudrate, timeout, write_timeout):
        s = FakeSerial(url, baudrate, timeout, write_timeout)
        created["ser"] = s
        return s

    monkeypatch.setattr(uart_mod.serial, "serial_for_url", fake_for_url)
    return created


def test_open_passes_settings_and_resets_buffers(fake_serial):
    t = uart_mod.UARTTransport("/dev/rfcomm0", baudrate=9600, timeout=0.5)
    t.open()

    ser = fake_serial["ser"]
    assert t.ser is ser
    assert t.is_open() is True
    assert t.address == "/dev/rfcomm0"
    assert (ser.url, ser.baudrate, ser.timeout) == ("/dev/rfcomm0", 9600, 0.5)
    assert ser.reset_in_called == 1
    assert ser.reset_out_called == 1


def test_open_is_idempotent(fake_serial):
    t = uart_mod.UARTTransport("COM5")
    t.open()
    first = fake_serial["ser"]
    t.open()
    assert fake_serial["ser"] is first


def test_open_serial_exception_raises_transport_open_error(monkeypatch):
    def fake_for_url(*a, **k):
        raise uart_mod.SerialException("no port")

    monkeypatch.setattr(uart_mod.serial, "serial_for_url", fake_for_url)

    t = uart_mod.UARTTransport("/dev/missing")
    with pytest.raises(TransportOpenError):
        t.open()
    assert t.ser is None
    assert t.is_open() is False


def test_read_collects_chunks_until_n(fake_serial):
    t = uart_mod.UARTTransport("loop://")
    t.open()
    fake_serial["ser"]._read_chunks = [b"\x50", b"\x04", b"\x21\x01\x00"]

    assert t.read(2) == b"\x50\x04"
    assert t.read(3) == b"\x21\x01\x00"


def test_read_returns_short_on_timeout(fake_serial):
    t = uart_mod.UARTTransport("loop://", timeout=0.01)
    t.open()
    fake_serial["ser"]._read_chunks = [b"\x50"]
    assert t.read(2) == b"\x50"


def test_read_error_raises_and_drops_port(fake_serial):
    t = uart_mod.UARTTransport("loop://")
    t.open()
    fake_serial["ser"]._raise_on_read = uart_mod.SerialException("boom")

    with pytest.raises(TransportIOError):
        t.read(1)
    assert t.ser is None
    assert t.is_open() is False


def test_write_and_flush(fake_serial):
    t = uart_mod.UARTTransport("loop://")
    t.open()
    assert t.write(b"\x50\x02\x33\x00") == 4
    t.flush()
    assert fake_serial["ser"].writes == [b"\x50\x02\x33\x00"]
    assert fake_serial["ser"].flush_called == 1


@pytest.mark.parametrize("op", ["write", "flush"])
def test_write_side_errors_raise_transport_io_error(fake_serial, op):
    t = uart_mod.UARTTransport("loop://")
    t.open()
    setattr(fake_serial["ser"], f"_raise_on_{op}", uart_mod.SerialException("boom"))

    with pytest.raises(TransportIOError):
        t.write(b"x") if op == "write" else t.flush()
    assert t.ser is None


def test_io_before_open_raises():
    t = uart_mod.UARTTransport("loop://")
    with pytest.raises(TransportIOError):
        t.read(1)
    with pytest.raises(TransportIOError):
        t.write(b"x")
    with pytest.raises(TransportIOError):
        t.flush()


def test_close_is_idempotent(fake_serial):
    t = uart_mod.UARTTransport("loop://")
    t.open()
    ser = fake_serial["ser"]
    t.close()
    t.close()
    assert ser.close_called == 1
    assert t.is_open() is False


def test_close_error_is_wrapped(fake_serial):
    t = uart_mod.UARTTransport("loop://")
    t.open()
    fake_serial["ser"]._raise_on_close = uart_mod.SerialException("busy")
    with pytest.raises(TransportIOError):
        t.close()
    assert t.ser is None


def test_context_manager_opens_and_closes(fake_serial):
    with uart_mod.UARTTransport("loop://") as t:
        assert t.is_open()
    assert fake_serial["ser"].close_called == 1
