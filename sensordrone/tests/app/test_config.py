# sensordrone/tests/app/test_config.py
from __future__ import annotations

import textwrap

import pytest

from sensordrone.app.config import DroneConfig, TransportConfig, config_from_mapping, load_config
from sensordrone.app.runner import open_drone
from sensordrone.core.errors import ConfigError, DeviceConnectError
from sensordrone.events.types import EventType as E
from sensordrone.transport.errors import TransportOpenError
from sensordrone.transport.registry import TransportDriverRegistry


def _write(tmp_path, text: str):
    p = tmp_path / "drone.yaml"
    p.write_text(textwrap.dedent(text), encoding="utf-8")
    return p


# ---------------- load_config ----------------

def test_load_config_full_document(tmp_path):
    p = _write(
        tmp_path,
        """
        drone:
          transport:
            driver: rfcomm
            params:
              port: /dev/rfcomm0
              baudrate: 115200
          shutdown_grace_s: 2.5
          low_battery_volts: 3.4
          uart_buffer_size: 256
        """,
    )
    cfg = load_config(p)

    assert cfg.transport == TransportConfig(driver="rfcomm", params={"port": "/dev/rfcomm0", "baudrate": 115200})
    assert cfg.shutdown_grace_s == 2.5
    assert cfg.low_battery_volts == 3.4
    assert cfg.uart_buffer_size == 256


def test_load_config_defaults(tmp_path):
    p = _write(
        tmp_path,
        """
        drone:
          transport:
            params: {port: "loop://"}
        """,
    )
    cfg = load_config(p)

    assert cfg.transport.driver == "uart"
    assert cfg.transport.params == {"port": "loop://"}
    assert (cfg.shutdown_grace_s, cfg.low_battery_volts, cfg.uart_buffer_size) == (5.0, 3.25, 1024)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError) as ei:
        load_config(tmp_path / "nope.yaml")
    assert "Missing config file" in str(ei.value)
    assert ei.value.hint


def test_load_config_missing_root(tmp_path):
    p = _write(tmp_path, "other: {}\n")
    with pytest.raises(ConfigError, match="missing 'drone' root node"):
        load_config(p)


def test_load_config_invalid_yaml(tmp_path):
    p = _write(tmp_path, "drone: [unclosed\n")
    with pytest.raises(ConfigError) as ei:
        load_config(p)
    assert "Invalid YAML" in str(ei.value)
    assert "error" in ei.value.details


@pytest.mark.parametrize(
    "node, needle",
    [
        ([], "must be a mapping"),
        ({"transport": "uart"}, "drone.transport"),
        ({"transport": {"driver": "  "}}, "driver"),
        ({"transport": {"params": [1, 2]}}, "params"),
        ({"shutdown_grace_s": "soon"}, "shutdown_grace_s"),
        ({"shutdown_grace_s": True}, "shutdown_grace_s"),
        ({"shutdown_grace_s": -1}, "shutdown_grace_s"),
        ({"low_battery_volts": -0.1}, "low_battery_volts"),
        ({"uart_buffer_size": 16}, "uart_buffer_size"),
    ],
)
def test_config_from_mapping_rejects(node, needle):
    with pytest.raises(ConfigError) as ei:
        config_from_mapping(node)
    assert needle in str(ei.value)


def test_config_from_mapping_strips_driver():
    cfg = config_from_mapping({"transport": {"driver": " RFCOMM "}})
    assert cfg.transport.driver == "RFCOMM"


# ---------------- open_drone ----------------

def _registry_for(device) -> TransportDriverRegistry:
    return TransportDriverRegistry({"fake": lambda **params: device})


def test_open_drone_connects(device):
    cfg = DroneConfig(transport=TransportConfig(driver="fake"), shutdown_grace_s=1.0)
    drone = open_drone(cfg, registry=_registry_for(device))
    try:
        assert drone.is_connected
        assert drone.hardware_version == 1
        assert device.open_calls == 1
    finally:
        drone.disconnect_now(grace_s=1.0)
    assert device.is_open() is False


def test_open_drone_applies_session_settings(device):
    cfg = DroneConfig(transport=TransportConfig(driver="fake"), shutdown_grace_s=0.5, uart_buffer_size=64)
    drone = open_drone(cfg, registry=_registry_for(device))
    try:
        assert drone.shutdown_grace_s == 0.5
        assert drone.uart_input.capacity == 64
    finally:
        drone.disconnect_now(grace_s=1.0)


def test_open_drone_unknown_driver(device):
    cfg = DroneConfig(transport=TransportConfig(driver="usb"))
    with pytest.raises(ConfigError) as ei:
        open_drone(cfg, registry=_registry_for(device))
    assert "fake" in ei.value.hint


def test_open_drone_bad_params():
    cfg = DroneConfig(transport=TransportConfig(driver="uart", params={"bogus": 1}))
    with pytest.raises(ConfigError) as ei:
        open_drone(cfg)
    assert ei.value.details == {"params": {"bogus": 1}}


def test_open_drone_open_failure(device, monkeypatch):
    def fail_open():
        raise TransportOpenError("port busy")

    monkeypatch.setattr(device, "open", fail_open)
    cfg = DroneConfig(transport=TransportConfig(driver="fake"))
    with pytest.raises(DeviceConnectError) as ei:
        open_drone(cfg, registry=_registry_for(device))
    assert ei.value.details == {"address": "fake://drone"}


def test_open_drone_handshake_failure_closes_port(make_device, recorder):
    device = make_device(version=b"\x01")
    cfg = DroneConfig(transport=TransportConfig(driver="fake"))
    with pytest.raises(DeviceConnectError, match="Handshake"):
        open_drone(cfg, registry=_registry_for(device))
    assert device.is_open() is False
    assert E.CONNECTED not in recorder
