# sensordrone/tests/conftest.py
from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Union

import pytest

from sensordrone.events.types import DroneEvent, EventType
from sensordrone.protocol.defs import Opcode
from sensordrone.protocol.frames import RequestFrame
from sensordrone.runtime.drone import Drone
from sensordrone.transport.base import Transport
from sensordrone.transport.errors import TransportIOError

# sensitivity 3000/1000 = 3.0 nA/ppm, baseline 0x0800 = 2048 counts
DEFAULT_CALIBRATION = b"\xB8\x0B\x00\x08"
DEFAULT_VERSION = b"\x01\x02\x01"


@dataclass
class Reply:
    """How the fake device answers one request."""
    data: bytes = b""
    error: Optional[int] = None
    truncate: Optional[int] = None
    io_error: bool = False
    cut: bool = False
    hold: Optional[threading.Event] = None


Key = Union[int, bytes, RequestFrame]


class FakeDevice(Transport):
    """
    Scripted drone behind an in-memory byte stream.

    Replies are looked up by the exact request bytes first, then by opcode.
    Anything unscripted is acknowledged with an empty data section. Every
    written frame is recorded in `writes`.
    """

    def __init__(self, *, version: bytes = DEFAULT_VERSION, calibration: Optional[bytes] = DEFAULT_CALIBRATION):
        self.address = "fake://drone"
        self.writes: List[bytes] = []
        self.open_calls = 0
        self.close_calls = 0
        self._open = False
        self._rx = bytearray()
        self._script: Dict[Union[int, bytes], Reply] = {}
        self._once: Dict[Union[int, bytes], Deque[Reply]] = {}
        self._lock = threading.Lock()
        self.error_for_all: Optional[int] = None
        self._cut = False

        self.reply(Opcode.VERSION, version)
        if calibration is not None:
            self.reply(Opcode.PRECISION_GAS_CAL_READ, calibration)
        else:
            self.reply(Opcode.PRECISION_GAS_CAL_READ, error=0x00)

    # ---------------- Scripting ----------------
    @staticmethod
    def _key(key: Key) -> Union[int, bytes]:
        if isinstance(key, RequestFrame):
            return key.encode()
        if isinstance(key, (bytes, bytearray)):
            return bytes(key)
        return int(key)

    def reply(self, key: Key, data: bytes = b"", *, once: bool = False, **kwargs) -> None:
        r = Reply(bytes(data), **kwargs)
        k = self._key(key)
        with self._lock:
            if once:
                self._once.setdefault(k, deque()).append(r)
            else:
                self._script[k] = r

    def clear_writes(self) -> None:
        with self._lock:
            self.writes.clear()

    def opcodes(self) -> List[int]:
        return [w[2] for w in self.writes]

    def _lookup(self, raw: bytes) -> Reply:
        with self._lock:
            for k in (raw, raw[2]):
                pending = self._once.get(k)
                if pending:
                    return pending.popleft()
            for k in (raw, raw[2]):
                if k in self._script:
                    return self._script[k]
        return Reply()

    # ---------------- Transport ----------------
    def open(self) -> None:
        self.open_calls += 1
        self._open = True

    def close(self) -> None:
        self.close_calls += 1
        self._open = False

    def is_open(self) -> bool:
        return self._open

    def write(self, data: bytes) -> int:
        if not self._open:
            raise TransportIOError("write on closed fake device")
        raw = bytes(data)
        r = self._lookup(raw)
        with self._lock:
            self.writes.append(raw)
        if r.io_error:
            raise TransportIOError("link cut")
        if r.hold is not None:
            r.hold.wait(5.0)

        opcode = raw[2]
        code = r.error if r.error is not None else self.error_for_all
        if code is not None:
            payload = bytes([0x99, code])
        else:
            payload = bytes([opcode]) + r.data + b"\x00"
        response = bytes([0x50, len(payload)]) + payload
        if r.truncate is not None:
            response = response[: r.truncate]
        with self._lock:
            self._rx += response
            self._cut = self._cut or r.cut
        return len(raw)

    def read(self, n: int) -> bytes:
        if not self._open:
            raise TransportIOError("read on closed fake device")
        with self._lock:
            if not self._rx and self._cut:
                raise TransportIOError("link cut mid-read")
            out = bytes(self._rx[:n])
            del self._rx[:n]
        return out

    def flush(self) -> None:
        return None


class EventRecorder:
    """Catch-all handler remembering every event type in delivery order."""

    def __init__(self):
        self.events: List[EventType] = []
        self._lock = threading.Lock()

    def __call__(self, event: DroneEvent) -> None:
        with self._lock:
            self.events.append(event.type)

    def count(self, event_type: EventType) -> int:
        with self._lock:
            return self.events.count(event_type)

    def __contains__(self, event_type: EventType) -> bool:
        return self.count(event_type) > 0


@pytest.fixture
def make_device():
    return FakeDevice


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def drone(device, recorder):
    """A connected Drone over the fake device, handshake writes cleared."""
    d = Drone(shutdown_grace_s=1.0)
    assert d.connect(device) is True
    d.register_handler(recorder)
    device.clear_writes()
    yield d
    d.disconnect_now(grace_s=1.0)
