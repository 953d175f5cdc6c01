# sensordrone/tests/sensors/test_ring.py
from __future__ import annotations

import pytest

from sensordrone.sensors.ring import ByteRing


def test_fifo_read():
    ring = ByteRing(16, reserve=4)
    ring.put(b"abc")
    ring.put(b"de")
    assert ring.available() == 5
    assert ring.read(2) == b"ab"
    assert ring.read() == b"cde"
    assert len(ring) == 0


def test_full_ring_drops_just_enough_oldest_bytes_for_a_chunk():
    """
    Algorithm: before appending, make room for max(len(data), reserve);
    anything beyond that is kept.
    """
    ring = ByteRing(64, reserve=32)
    ring.put(bytes(range(40)))

    dropped = ring.put(b"\xFF" * 10)

    assert dropped == 8
    assert ring.dropped == 8
    assert ring.peek() == bytes(range(8, 40)) + b"\xFF" * 10


def test_no_drop_while_room_remains():
    ring = ByteRing(64, reserve=32)
    assert ring.put(bytes(32)) == 0
    assert ring.put(bytes(32)) == 0
    assert ring.available() == 64


def test_oversized_put_keeps_newest_bytes():
    ring = ByteRing(8, reserve=4)
    ring.put(bytes(range(12)))
    assert ring.peek() == bytes(range(4, 12))


def test_clear_and_capacity_validation():
    ring = ByteRing(8)
    ring.put(b"xy")
    ring.clear()
    assert ring.read() == b""
    with pytest.raises(ValueError):
        ByteRing(0)
