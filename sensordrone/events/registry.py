# sensordrone/events/registry.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from .listeners import (
    EVENT_LISTENER_METHODS,
    STATUS_LISTENER_METHODS,
    DroneEventHandler,
    HandlerLike,
)
from .types import Channel, DroneEvent


class ListenerKind(Enum):
    EVENT = "event"
    STATUS = "status"
    HANDLER = "handler"


@dataclass(frozen=True)
class Listener:
    """
    One registration: the listener flavour plus the object registered.

    For HANDLER entries `callback` is the resolved catch-all callable;
    EVENT/STATUS entries resolve their method per event tag.
    """
    kind: ListenerKind
    owner: Any
    callback: Optional[Callable[[DroneEvent], None]] = None

    @classmethod
    def event(cls, listener: Any) -> "Listener":
        return cls(ListenerKind.EVENT, listener)

    @classmethod
    def status(cls, listener: Any) -> "Listener":
        return cls(ListenerKind.STATUS, listener)

    @classmethod
    def handler(cls, handler: HandlerLike) -> "Listener":
        cb = handler.parse_event if isinstance(handler, DroneEventHandler) else handler
        if not callable(cb):
            raise TypeError(f"handler must be callable or a DroneEventHandler, got {handler!r}")
        return cls(ListenerKind.HANDLER, handler, cb)

    def deliver(self, event: DroneEvent) -> None:
        if self.kind is ListenerKind.HANDLER:
            self.callback(event)
            return

        channel = event.type.channel
        if self.kind is ListenerKind.EVENT and channel is Channel.EVENT:
            getattr(self.owner, EVENT_LISTENER_METHODS.get(event.type, "unknown"))(event)
        elif self.kind is ListenerKind.STATUS and channel is Channel.STATUS:
            getattr(self.owner, STATUS_LISTENER_METHODS.get(event.type, "unknown_status"))(event)


class ListenerRegistry:
    """
    Ordered, copy-on-write list of listener registrations.

    add/remove swap in a new tuple under the lock; dispatch iterates a
    snapshot without holding it, so listeners may (un)register from callbacks.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None):
        self._log = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._listeners: Tuple[Listener, ...] = ()

    def __len__(self) -> int:
        return len(self._listeners)

    def snapshot(self) -> Tuple[Listener, ...]:
        with self._lock:
            return self._listeners

    def add(self, listener: Listener) -> bool:
        """Register; returns False if the same (kind, owner) is already present."""
        with self._lock:
            for existing in self._listeners:
                if existing.kind is listener.kind and existing.owner == listener.owner:
                    return False
            self._listeners = self._listeners + (listener,)
        return True

    def remove(self, owner: Any, kind: Optional[ListenerKind] = None) -> int:
        """Remove registrations of `owner` (all kinds, or only `kind`); returns count removed."""
        with self._lock:
            kept = tuple(
                entry for entry in self._listeners
                if not (entry.owner == owner and (kind is None or entry.kind is kind))
            )
            removed = len(self._listeners) - len(kept)
            self._listeners = kept
        return removed

    def clear(self) -> None:
        with self._lock:
            self._listeners = ()

    def dispatch(self, event: DroneEvent) -> None:
        for entry in self.snapshot():
            try:
                entry.deliver(event)
            except Exception:
                self._log.exception(
                    "LISTENER_ERROR event=%s kind=%s listener=%r",
                    event.type.name,
                    entry.kind.value,
                    entry.owner,
                )
