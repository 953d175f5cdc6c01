# sensordrone/protocol/link.py
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol as TypingProtocol

from sensordrone.core.errors import DeviceError, LinkIOError, PayloadTooShortError
from sensordrone.transport.errors import TransportError

from .defs import HEADER_LEN, DeviceErrorCode
from .frames import RequestFrame, ResponseFrame


class TransportIO(TypingProtocol):
    """Minimal I/O interface for FrameLink."""
    def write(self, data: bytes) -> int: ...
    def read(self, size: int) -> bytes: ...
    def flush(self) -> None: ...


class FrameLink:
    """
    Request/response exchange over the drone byte stream.

    Not thread-safe: exactly one exchange may be in flight, which the
    session guarantees by only calling transact() from its executor worker
    (or from the connecting thread before the worker starts).
    """

    def __init__(
        self,
        transport: TransportIO,
        *,
        on_low_battery: Optional[Callable[[], None]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.on_low_battery = on_low_battery
        self._log = logger or logging.getLogger(__name__)

    def transact(self, frame: RequestFrame) -> bytes:
        """
        Send one request and return the response data (echo/terminator stripped).

        Raises:
          LinkIOError          - transport read/write failed (link is gone)
          DeviceError          - device answered with a 0x99 frame
          PayloadTooShortError - stream delivered fewer bytes than declared
        """
        raw = frame.encode()
        self._log.debug("TX opcode=0x%02X raw=%s", frame.opcode, raw.hex())

        try:
            self.transport.write(raw)
            self.transport.flush()
            header = self._read_exact(HEADER_LEN, "header")
            payload = self._read_exact(header[1], "payload")
        except (TransportError, OSError) as e:
            raise LinkIOError(
                f"link I/O failed during opcode 0x{frame.opcode:02X}: {e}",
                details={"opcode": frame.opcode},
            ) from e

        self._log.debug("RX opcode=0x%02X raw=%s", frame.opcode, (header + payload).hex())

        try:
            return ResponseFrame(header, payload).data(opcode=frame.opcode)
        except DeviceError as e:
            self._on_device_error(e)
            raise

    def _on_device_error(self, err: DeviceError) -> None:
        try:
            name = DeviceErrorCode(err.error_code).name
        except ValueError:
            name = f"0x{err.error_code:02X}"
        self._log.warning("DEVICE_ERROR opcode=0x%02X code=%s", err.opcode or 0, name)

        if err.error_code == DeviceErrorCode.LOW_BATTERY and self.on_low_battery is not None:
            self.on_low_battery()

    def _read_exact(self, n: int, what: str) -> bytes:
        buf = b""
        while len(buf) < n:
            chunk = self.transport.read(n - len(buf))
            if not chunk:
                break
            buf += chunk
        if len(buf) < n:
            raise PayloadTooShortError(n, len(buf), what=what)
        return buf
