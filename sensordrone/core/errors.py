# sensordrone/core/errors.py
from __future__ import annotations


class SensordroneError(Exception):
    """
    Base class for all expected operational errors in the Sensordrone client.
    """

    #: Stable machine-readable identifier (for exit mapping, logs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / setup errors (no hardware access yet)
# ---------------------------------------------------------------------------

class ConfigError(SensordroneError):
    """
    Configuration is invalid or refers to something that does not exist.

    Examples:
      - config file missing or not a mapping
      - unknown transport driver key
      - negative grace period
    """
    code = "config_error"


class DeviceConnectError(SensordroneError):
    """
    Transport could not be opened or the connect handshake failed.

    Examples:
      - serial/RFCOMM port not found
      - device answered the handshake with too few bytes
      - precision gas calibration block missing
    """
    code = "device_connect_error"


class UnsupportedHardwareError(SensordroneError):
    """Handshake reported a hardware version with no capability set."""
    code = "unsupported_hardware"


# ---------------------------------------------------------------------------
# Submission-time errors (mapped to False at the public API)
# ---------------------------------------------------------------------------

class NotConnectedError(SensordroneError):
    """API call while the session is disconnected."""
    code = "not_connected"


class NotEnabledError(SensordroneError):
    """Measurement requested for a sensor whose enabled flag is clear."""
    code = "not_enabled"


class RejectedByExecutorError(SensordroneError):
    """Work submitted after the command executor was shut down."""
    code = "rejected_by_executor"


class ArgumentOutOfRangeError(SensordroneError):
    """
    Argument outside what the device accepts.

    Examples:
      - UART write longer than 32 bytes
      - calibration block that is not exactly 4 bytes
      - baud rate the external UART does not support
    """
    code = "argument_out_of_range"


# ---------------------------------------------------------------------------
# Link / device errors (raised on the worker thread)
# ---------------------------------------------------------------------------

class LinkIOError(SensordroneError):
    """
    Reading or writing the byte stream failed.

    The session treats this as link loss: queue cancelled, streams closed,
    CONNECTION_LOST broadcast.
    """
    code = "link_io"


class DeviceError(SensordroneError):
    """Device answered with a 0x99 error frame."""
    code = "device_error"

    def __init__(self, error_code: int, *, opcode: int | None = None):
        from sensordrone.protocol.defs import DeviceErrorCode

        try:
            name = DeviceErrorCode(error_code).name
        except ValueError:
            name = f"0x{error_code:02X}"
        op = f" opcode=0x{opcode:02X}" if opcode is not None else ""
        super().__init__(
            f"device error {name}{op}",
            details={"error_code": error_code, "opcode": opcode},
        )
        self.error_code = error_code
        self.opcode = opcode


class PayloadTooShortError(SensordroneError):
    """Fewer bytes were read than the frame declared or the recipe needs."""
    code = "payload_too_short"

    def __init__(self, expected: int, actual: int, *, what: str = "payload"):
        super().__init__(
            f"{what} too short: expected {expected} bytes, got {actual}",
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class SensorDecodeError(SensordroneError):
    """
    Sensor data was received but could not be decoded.

    Examples:
      - precision gas gain stage outside the resistor table
    """
    code = "sensor_decode_error"
