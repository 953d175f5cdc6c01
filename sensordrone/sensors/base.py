# sensordrone/sensors/base.py
from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, Callable, Optional, Protocol as TypingProtocol

from sensordrone.core.errors import (
    DeviceError,
    NotConnectedError,
    NotEnabledError,
    PayloadTooShortError,
)
from sensordrone.events.types import EventType
from sensordrone.protocol.frames import RequestFrame
from sensordrone.runtime.state import EnabledFlags, Readings


class SessionPort(TypingProtocol):
    """What a capability needs from the session that owns it."""
    readings: Readings
    enabled: EnabledFlags

    @property
    def is_connected(self) -> bool: ...

    def submit(self, task: Callable[[], Any]) -> Future: ...
    def submit_and_wait(self, task: Callable[[], Any]) -> Any: ...
    def exchange(self, frame: RequestFrame) -> bytes: ...
    def broadcast(self, event_type: EventType) -> None: ...


class Capability:
    """
    A sensor or peripheral module bound to one session.

    Public methods run on the caller thread: they validate liveness, then
    enqueue a task and return its Future. Tasks run on the session worker,
    talk to the device through _call() and publish results via _notify().
    """

    name = "capability"

    def __init__(self, session: SessionPort, *, logger: Optional[logging.Logger] = None):
        self._session = session
        self._log = logger or logging.getLogger(type(self).__module__)

    def initialize(self) -> None:
        """One-time setup run on the connecting thread, before the worker starts."""

    # ---------------- Caller side ----------------
    def _require_connected(self) -> None:
        if not self._session.is_connected:
            raise NotConnectedError(f"{self.name}: drone is not connected")

    def _require_enabled(self, flag: str) -> None:
        self._require_connected()
        if not getattr(self._session.enabled, flag):
            raise NotEnabledError(
                f"{flag} is not enabled",
                hint=f"Call enable_{flag}() and wait for the enabled event first.",
            )

    def _submit(self, task: Callable[[], Any]) -> Future:
        return self._session.submit(task)

    def _toggle(self, flag: str, value: bool, event_type: EventType) -> Future:
        """Client-side enable/disable: no wire traffic, flag + event on the worker."""
        self._require_connected()

        def task() -> None:
            setattr(self._session.enabled, flag, value)
            self._notify(event_type)

        return self._submit(task)

    def _notify_later(self, event_type: EventType) -> Future:
        """Queue an event behind pending work (status checks without wire traffic)."""
        self._require_connected()
        return self._submit(lambda: self._notify(event_type))

    # ---------------- Worker side ----------------
    def _call(self, frame: RequestFrame) -> Optional[bytes]:
        """Exchange one frame; None when the device rejected it or the reply was short."""
        try:
            return self._session.exchange(frame)
        except (DeviceError, PayloadTooShortError) as e:
            self._log.warning("CALL_FAILED sensor=%s opcode=0x%02X err=%s", self.name, frame.opcode, e)
            return None

    def _notify(self, event_type: EventType) -> None:
        self._session.broadcast(event_type)

    def _set_flag(self, flag: str, value: bool) -> None:
        setattr(self._session.enabled, flag, value)

    @property
    def _readings(self) -> Readings:
        return self._session.readings

    @staticmethod
    def _expect(data: bytes, n: int, what: str = "payload") -> bytes:
        if len(data) < n:
            raise PayloadTooShortError(n, len(data), what=what)
        return data
