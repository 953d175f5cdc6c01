# sensordrone/app/runner.py
from __future__ import annotations

import logging
from typing import Optional

from sensordrone.app.config import DroneConfig
from sensordrone.core.errors import ConfigError, DeviceConnectError
from sensordrone.runtime.drone import Drone
from sensordrone.transport.errors import TransportError
from sensordrone.transport.registry import TransportDriverRegistry


def open_drone(
    config: DroneConfig,
    *,
    registry: Optional[TransportDriverRegistry] = None,
    logger: Optional[logging.Logger] = None,
) -> Drone:
    """
    Build the configured transport, open it and connect a Drone over it.

    Raises ConfigError for an unknown driver or bad driver params, and
    DeviceConnectError when the port cannot be opened or the handshake fails.
    """
    log = logger or logging.getLogger(__name__)
    registry = registry or TransportDriverRegistry.default()
    tcfg = config.transport

    if not registry.has(tcfg.driver):
        raise ConfigError(
            f"Unknown transport driver '{tcfg.driver}'.",
            hint=f"Known drivers: {', '.join(registry.drivers())}",
        )

    try:
        transport = registry.create(tcfg.driver, **tcfg.params)
    except TypeError as e:
        raise ConfigError(
            f"Bad params for transport driver '{tcfg.driver}': {e}",
            details={"params": dict(tcfg.params)},
        ) from None

    try:
        transport.open()
    except TransportError as e:
        raise DeviceConnectError(
            f"Could not open transport '{tcfg.driver}': {e}",
            hint="Check the drone is paired and the port/URL is correct.",
            details={"address": getattr(transport, "address", "")},
        ) from None

    drone = Drone.from_config(config, logger=logger)
    if not drone.connect(transport):
        try:
            transport.close()
        except TransportError as e:
            log.warning("TRANSPORT_CLOSE_FAILED err=%s", e)
        raise DeviceConnectError(
            f"Handshake with {getattr(transport, 'address', '') or tcfg.driver} failed.",
            hint="See the CONNECT_FAILED log record for the cause.",
        )

    log.info("DRONE_OPEN driver=%s address=%s", tcfg.driver, drone.last_address)
    return drone
