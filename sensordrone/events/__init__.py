# sensordrone/events/__init__.py

from .listeners import DroneEventHandler, DroneEventListener, DroneStatusListener
from .registry import Listener, ListenerKind, ListenerRegistry
from .types import Channel, DroneEvent, EventType

__all__ = [
    "DroneEventHandler", "DroneEventListener", "DroneStatusListener",
    "Listener", "ListenerKind", "ListenerRegistry",
    "Channel", "DroneEvent", "EventType",
]
