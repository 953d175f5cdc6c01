# sensordrone/sensors/precision_gas.py
from __future__ import annotations

from concurrent.futures import Future
from typing import Optional

from sensordrone.core.errors import (
    ArgumentOutOfRangeError,
    DeviceConnectError,
    SensorDecodeError,
)
from sensordrone.events.types import EventType
from sensordrone.protocol.defs import ADDR_PRECISION_GAS, I2CBank, Opcode
from sensordrone.protocol.frames import RequestFrame, i2c_read

from . import compute
from .base import Capability

READ_CALIBRATION = RequestFrame.command(Opcode.PRECISION_GAS_CAL_READ)
MEASURE = RequestFrame.command(Opcode.PRECISION_GAS_READ)

CALIBRATION_BLOCK_LEN = 4
CALIBRATION_GAS_PPM = 50.0


class PrecisionGas(Capability):
    """
    Electrochemical CO sensor.

    Sensitivity (nA/ppm) and baseline (ADC counts) are factory calibration
    stored on the drone and read once at connect.
    """

    name = "precision_gas"

    def __init__(self, session, **kwargs):
        super().__init__(session, **kwargs)
        self.calibration: Optional[compute.Calibration] = None

    def initialize(self) -> None:
        self.calibration = self._read_calibration()
        if self.calibration is None:
            raise DeviceConnectError(
                "precision gas calibration block could not be read",
                hint="The drone did not answer opcode 0x40; power-cycle it and reconnect.",
            )
        self._log.info(
            "PRECISION_GAS_CALIBRATION sensitivity=%.3f baseline=%.0f",
            self.calibration.sensitivity,
            self.calibration.baseline,
        )

    # ---------------- Public ----------------
    def enable(self) -> Future:
        return self._toggle("precision_gas", True, EventType.PRECISION_GAS_ENABLED)

    def disable(self) -> Future:
        return self._toggle("precision_gas", False, EventType.PRECISION_GAS_DISABLED)

    def status(self) -> Future:
        return self._notify_later(EventType.PRECISION_GAS_STATUS_CHECKED)

    def measure(self) -> Future:
        self._require_enabled("precision_gas")
        return self._submit(self._measure)

    def measure_calibration(self, concentration_ppm: float = CALIBRATION_GAS_PPM) -> Future:
        """Measure while exposed to a known gas and keep baseline/sensitivity candidates."""
        self._require_connected()
        if concentration_ppm <= 0:
            raise ArgumentOutOfRangeError(f"calibration concentration must be > 0, got {concentration_ppm}")
        return self._submit(lambda: self._measure(concentration_ppm=concentration_ppm))

    def write_calibration(self, block: bytes) -> Future:
        """Store a new [sL, sM, bL, bM] calibration block on the drone."""
        self._require_connected()
        block = bytes(block)
        if len(block) != CALIBRATION_BLOCK_LEN:
            raise ArgumentOutOfRangeError(
                f"calibration block must be {CALIBRATION_BLOCK_LEN} bytes, got {len(block)}",
            )
        frame = RequestFrame(Opcode.PRECISION_GAS_CAL_WRITE, block)
        return self._submit(lambda: self._write_calibration(frame))

    def read_register(self, register: int) -> Future:
        self._require_connected()
        frame = i2c_read(I2CBank.MAIN, ADDR_PRECISION_GAS, register, 0x02)
        return self._submit(lambda: self._read_register(register, frame))

    # ---------------- Worker ----------------
    def _read_calibration(self) -> Optional[compute.Calibration]:
        data = self._call(READ_CALIBRATION)
        if data is None or len(data) < CALIBRATION_BLOCK_LEN:
            return None
        return compute.precision_gas_calibration(data)

    def _write_calibration(self, frame: RequestFrame) -> None:
        if self._call(frame) is None:
            return
        cal = self._read_calibration()
        if cal is not None:
            self.calibration = cal
            self._log.info("PRECISION_GAS_CALIBRATION_WRITTEN sensitivity=%.3f baseline=%.0f", cal.sensitivity, cal.baseline)

    def _read_register(self, register: int, frame: RequestFrame) -> None:
        data = self._call(frame)
        if data is None:
            return
        self._readings.precision_gas_register = bytes(data)
        self._log.debug("PRECISION_GAS_REGISTER reg=0x%02X data=%s", register, bytes(data).hex())

    def _measure(self, concentration_ppm: Optional[float] = None) -> None:
        data = self._call(MEASURE)
        if data is None:
            return
        self._expect(data, 3)
        adc = compute.u16_le(data[0], data[1])
        gain = data[2]
        if gain >= len(compute.GAIN_RESISTORS):
            raise SensorDecodeError(
                f"precision gas gain stage {gain} outside resistor table",
                details={"gain": gain, "adc": adc},
            )

        cal = self.calibration
        r = self._readings
        r.precision_gas_adc = adc
        r.precision_gas_ppm_carbon_monoxide = compute.precision_gas_ppm(adc, gain, cal)
        if concentration_ppm is not None:
            r.precision_gas_baseline_candidate = float(adc)
            r.precision_gas_sensitivity_candidate = compute.precision_gas_sensitivity(
                adc, gain, cal.baseline, concentration_ppm
            )
        self._notify(EventType.PRECISION_GAS_MEASURED)
