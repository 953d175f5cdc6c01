# sensordrone/sensors/ring.py
from __future__ import annotations

import threading


class ByteRing:
    """
    Fixed-capacity byte FIFO fed by the worker and drained by the application.

    put() makes room for at least `reserve` bytes by dropping the oldest
    data, so a full buffer always accepts the next chunk.
    """

    def __init__(self, capacity: int = 1024, *, reserve: int = 32):
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = int(capacity)
        self.reserve = min(int(reserve), self.capacity)
        self._buf = bytearray()
        self._lock = threading.Lock()
        self.dropped = 0

    def __len__(self) -> int:
        return self.available()

    def available(self) -> int:
        with self._lock:
            return len(self._buf)

    def put(self, data: bytes) -> int:
        """Append data; returns how many old bytes were discarded."""
        data = bytes(data)[-self.capacity:]
        with self._lock:
            room = self.capacity - len(self._buf)
            need = max(len(data), self.reserve)
            drop = max(0, need - room)
            if drop:
                del self._buf[:drop]
                self.dropped += drop
            self._buf += data
            return drop

    def read(self, n: int = -1) -> bytes:
        """Remove and return up to n bytes (everything when n < 0)."""
        with self._lock:
            if n < 0 or n >= len(self._buf):
                out = bytes(self._buf)
                self._buf.clear()
            else:
                out = bytes(self._buf[:n])
                del self._buf[:n]
            return out

    def peek(self) -> bytes:
        with self._lock:
            return bytes(self._buf)

    def clear(self) -> None:
        with self._lock:
            self._buf.clear()
