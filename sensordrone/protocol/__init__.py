# sensordrone/protocol/__init__.py

from .defs import DeviceErrorCode, Opcode
from .executor import CommandExecutor
from .frames import RequestFrame, ResponseFrame, i2c_read, i2c_write
from .link import FrameLink

__all__ = [
    "DeviceErrorCode", "Opcode",
    "CommandExecutor",
    "RequestFrame", "ResponseFrame", "i2c_read", "i2c_write",
    "FrameLink",
]
