# sensordrone/transport/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Transport(ABC):
    """
    Abstract byte-stream transport (serial port, RFCOMM device, socket bridge).

    Contract:
      - open()/close() manage the underlying stream; close() is idempotent.
      - read(n) returns 0..n bytes. Fewer than n means the adapter's timeout
        expired or the peer closed the stream.
      - write(data) returns the number of bytes written.
      - flush() forces pending output to be transmitted.
      - Failures on an open stream raise TransportIOError.
    """

    #: Peer address (port path, MAC, URL) reported as the session's last address.
    address: str = ""

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def is_open(self) -> bool: ...

    @abstractmethod
    def read(self, n: int) -> bytes: ...

    @abstractmethod
    def write(self, data: bytes) -> int: ...

    @abstractmethod
    def flush(self) -> None: ...

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()
