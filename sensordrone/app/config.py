# sensordrone/app/config.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from sensordrone.core.errors import ConfigError


@dataclass(frozen=True)
class TransportConfig:
    driver: str = "uart"
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DroneConfig:
    transport: TransportConfig = field(default_factory=TransportConfig)
    shutdown_grace_s: float = 5.0
    low_battery_volts: float = 3.25
    uart_buffer_size: int = 1024


def _number(node: Mapping[str, Any], key: str, default: float, *, minimum: float) -> float:
    raw = node.get(key, default)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"'drone.{key}' must be a number, got {raw!r}")
    if raw < minimum:
        raise ConfigError(f"'drone.{key}' must be >= {minimum}, got {raw!r}")
    return raw


def config_from_mapping(node: Mapping[str, Any]) -> DroneConfig:
    """Validate the `drone:` mapping of a config document."""
    if not isinstance(node, Mapping):
        raise ConfigError(
            "'drone' must be a mapping",
            hint="Expected:\n  drone:\n    transport:\n      driver: uart\n      params: {port: /dev/rfcomm0}",
        )

    tnode = node.get("transport") or {}
    if not isinstance(tnode, Mapping):
        raise ConfigError("'drone.transport' must be a mapping")

    driver = tnode.get("driver", "uart")
    if not isinstance(driver, str) or not driver.strip():
        raise ConfigError(f"'drone.transport.driver' must be a non-empty string, got {driver!r}")

    params = tnode.get("params") or {}
    if not isinstance(params, Mapping):
        raise ConfigError("'drone.transport.params' must be a mapping")

    return DroneConfig(
        transport=TransportConfig(driver=driver.strip(), params=dict(params)),
        shutdown_grace_s=float(_number(node, "shutdown_grace_s", 5.0, minimum=0.0)),
        low_battery_volts=float(_number(node, "low_battery_volts", 3.25, minimum=0.0)),
        uart_buffer_size=int(_number(node, "uart_buffer_size", 1024, minimum=32)),
    )


def load_config(path: str | Path) -> DroneConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}", hint="Pass the path of a YAML file with a 'drone:' section.")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", details={"error": str(e)}) from None

    if not isinstance(data, Mapping) or "drone" not in data:
        raise ConfigError(f"{path} is missing 'drone' root node")

    return config_from_mapping(data["drone"])
