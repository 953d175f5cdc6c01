# sensordrone/sensors/__init__.py

from .registry import Capabilities, SensorKind, SensorOps, build_capabilities
from .ring import ByteRing
from .uart import BaudRate

__all__ = [
    "Capabilities", "SensorKind", "SensorOps", "build_capabilities",
    "ByteRing",
    "BaudRate",
]
