# sensordrone/transport/registry.py
from __future__ import annotations

from typing import Dict, Type

from .base import Transport
from .errors import TransportError
from .uart import UARTTransport


class TransportDriverRegistry:
    """
    Maps driver keys (case-insensitive) -> concrete Transport classes.

    "rfcomm" is the usual Linux/Windows route to a paired drone: the OS
    exposes the RFCOMM channel as a serial device, so it shares the UART driver.
    """

    def __init__(self, drivers: Dict[str, Type[Transport]]):
        self._drivers: Dict[str, Type[Transport]] = {k.lower(): v for k, v in drivers.items()}

    @classmethod
    def default(cls) -> "TransportDriverRegistry":
        return cls(
            drivers={
                "uart": UARTTransport,
                "rfcomm": UARTTransport,
            }
        )

    def drivers(self) -> list[str]:
        return sorted(self._drivers)

    def has(self, driver: str) -> bool:
        return driver.lower() in self._drivers

    def register(self, driver: str, transport_cls: Type[Transport]) -> None:
        self._drivers[driver.lower()] = transport_cls

    def get_class(self, driver: str) -> Type[Transport]:
        key = driver.lower()
        if key not in self._drivers:
            raise TransportError(f"Transport driver '{driver}' not registered")
        return self._drivers[key]

    def create(self, driver: str, **params) -> Transport:
        """Instantiate (but do not open) a transport by driver key."""
        transport_cls = self.get_class(driver)
        return transport_cls(**params)
