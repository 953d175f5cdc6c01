# sensordrone/tests/transport/test_transport_registry.py
from __future__ import annotations

import pytest

from sensordrone.transport.base import Transport
from sensordrone.transport.errors import TransportError
from sensordrone.transport.registry import TransportDriverRegistry
from sensordrone.transport.uart import UARTTransport


class LoopTransport(Transport):
    def __init__(self, name: str = "loop"):
        self.address = name

    def open(self): ...
    def close(self): ...
    def is_open(self): return True
    def read(self, n): return b""
    def write(self, data): return len(data)
    def flush(self): ...


def test_default_drivers_are_case_insensitive():
    reg = TransportDriverRegistry.default()
    assert reg.drivers() == ["rfcomm", "uart"]
    assert reg.has("UART")
    assert reg.get_class("RfComm") is UARTTransport


def test_create_builds_unopened_transport():
    reg = TransportDriverRegistry.default()
    t = reg.create("uart", port="/dev/rfcomm0", baudrate=9600)
    assert isinstance(t, UARTTransport)
    assert t.port == "/dev/rfcomm0"
    assert t.is_open() is False


def test_unknown_driver_raises():
    reg = TransportDriverRegistry.default()
    assert not reg.has("ble")
    with pytest.raises(TransportError):
        reg.get_class("ble")


def test_register_custom_driver():
    reg = TransportDriverRegistry({})
    reg.register("Loop", LoopTransport)
    t = reg.create("loop", name="x")
    assert isinstance(t, LoopTransport)
    assert t.address == "x"
