# sensordrone/sensors/compute.py
"""
Pure decoders and unit conversions for sensor payloads.

Nothing here touches the transport; recipes hand in the stripped payload.
"""
from __future__ import annotations

import math
from typing import NamedTuple, Sequence

# ---------------- Shared helpers ----------------

def u16_le(lsb: int, msb: int) -> int:
    return (msb << 8) | lsb


def u16_be(msb: int, lsb: int) -> int:
    return (msb << 8) | lsb


def s16_be(data: bytes) -> int:
    return int.from_bytes(bytes(data[:2]), "big", signed=True)


def celsius_to_fahrenheit(c: float) -> float:
    return c * 9.0 / 5.0 + 32.0


def celsius_to_kelvin(c: float) -> float:
    return c + 273.15


def _safe_div(num: float, denom: float) -> float:
    return float(num / denom) if denom != 0.0 else float("inf")


# ---------------- ADC / battery ----------------

ADC_FULL_SCALE = 4095.0
EXTERNAL_ADC_VREF = 3.0
BATTERY_DIVIDER_SCALE = 6.0


def adc_volts(adc: int, vref: float = EXTERNAL_ADC_VREF) -> float:
    return adc / ADC_FULL_SCALE * vref


def battery_volts(adc: int) -> float:
    return adc / ADC_FULL_SCALE * BATTERY_DIVIDER_SCALE


# ---------------- Capacitance ----------------

def capacitance_femtofarad(adc: int) -> float:
    # 4 pF span mapped onto the converter's 0..65520 range
    return adc / 65520.0 * 4000.0


# ---------------- Metal-oxide gas ----------------

GAS_VREF = 3.3
OXIDIZING_LOAD_OHM = 18000.0
REDUCING_LOAD_OHM = 270000.0


def gas_resistance(adc: int, load_ohm: float) -> float:
    """Sensor resistance from the divider voltage; infinite when the ADC reads 0."""
    volts = adc / ADC_FULL_SCALE * GAS_VREF
    return _safe_div(load_ohm * GAS_VREF, volts) - load_ohm


# ---------------- Humidity / temperature ----------------

def humidity_adc(msb: int, lsb: int) -> int:
    # status bits live in the low two bits of the LSB
    return (msb << 8) | (lsb & 0xFC)


def relative_humidity(adc: int) -> float:
    return -6.0 + 125.0 * (adc / 65536.0)


def humidity_temperature_celsius(adc: int) -> float:
    return -46.85 + 175.72 * (adc / 65536.0)


# ---------------- IR thermometer ----------------

IR_TREF = 298.15
IR_A1 = 1.75e-3
IR_A2 = -1.678e-5
IR_B0 = -2.94e-5
IR_B1 = -5.7e-7
IR_B2 = 4.63e-9
IR_C2 = 13.4
IR_S0 = 2.51e-14
IR_VOLT_LSB = 156.25e-9


def ir_die_kelvin(raw: int) -> float:
    # empirical /128 scaling; keep as-is until checked against hardware
    return raw / 128.0 + 273.15


def ir_object_volts(raw: int) -> float:
    return raw * IR_VOLT_LSB


def ir_object_kelvin(t_die_k: float, v_obj: float) -> float:
    """Object temperature from die temperature and thermopile voltage; NaN if undefined."""
    d = t_die_k - IR_TREF
    s = IR_S0 * (1.0 + IR_A1 * d + IR_A2 * d * d)
    v_os = IR_B0 + IR_B1 * d + IR_B2 * d * d
    dv = v_obj - v_os
    f = dv + IR_C2 * dv * dv
    t4 = t_die_k ** 4 + f / s
    if t4 < 0:
        return math.nan
    return math.sqrt(math.sqrt(t4))


# ---------------- Pressure / altitude ----------------

PA_TO_ATM = 9.86923267e-6
PA_TO_TORR = 0.00750061683
SEA_LEVEL_PA = 101326.0
METERS_TO_FEET = 3.2084


def pressure_pascals(data: bytes) -> float:
    """
    Decode the barometer's 20-bit result.

    Bytes 0-1 hold the signed integer part; byte 2 bits 3:2 extend it and
    bits 1:0 are quarter-pascal fractions.
    """
    whole = s16_be(data)
    ext = data[2]
    return float((whole << 2) + (ext & 0x0C)) + (ext & 0x03) / 4.0


def altitude_meters(pascals: float) -> float:
    ratio = pascals / SEA_LEVEL_PA
    if ratio < 0:
        return math.nan
    return (1.0 - ratio ** 0.1902632) * 44330.77


# ---------------- Precision gas ----------------

GAIN_RESISTORS: Sequence[int] = (2200000, 301961, 113793, 34452, 13911, 6978, 3494, 2747)


class Calibration(NamedTuple):
    sensitivity: float  # nA/ppm
    baseline: float     # ADC counts


def precision_gas_calibration(data: bytes) -> Calibration:
    sens = u16_le(data[0], data[1]) / 1000.0
    base = float(u16_le(data[2], data[3]))
    return Calibration(sens, base)


def precision_gas_response(adc: int, baseline: float) -> float:
    return (adc - baseline) * 3e9 / 4096.0


def precision_gas_ppm(adc: int, gain_stage: int, cal: Calibration) -> float:
    response = precision_gas_response(adc, cal.baseline)
    return _safe_div(response, cal.sensitivity * GAIN_RESISTORS[gain_stage])


def precision_gas_sensitivity(adc: int, gain_stage: int, baseline: float, concentration_ppm: float) -> float:
    """Sensitivity (nA/ppm) implied by exposing the sensor to a known concentration."""
    response = precision_gas_response(adc, baseline)
    return _safe_div(response, concentration_ppm * GAIN_RESISTORS[gain_stage])


# ---------------- RGBC ----------------

RGBC_CAL_RED = 0.2639626007
RGBC_CAL_GREEN = 0.2935368922
RGBC_CAL_BLUE = 0.379682891
RGBC_CAL_CLEAR = 0.2053011829


class ColorReading(NamedTuple):
    red: float
    green: float
    blue: float
    clear: float
    lux: float
    color_temperature: float


def rgbc_reading(data: bytes) -> ColorReading:
    """Calibrated channels, illuminance and correlated colour temperature from 8 raw bytes."""
    green = u16_le(data[0], data[1])
    red = u16_le(data[2], data[3])
    blue = u16_le(data[4], data[5])
    clear = u16_le(data[6], data[7])

    r = red + red * RGBC_CAL_RED
    g = green + green * RGBC_CAL_GREEN
    b = blue + blue * RGBC_CAL_BLUE
    c = clear + clear * RGBC_CAL_CLEAR

    x_ = -0.14282 * r + 1.54924 * g + -0.95641 * b
    y_ = -0.32466 * r + 1.57837 * g + -0.73191 * b
    z_ = -0.68202 * r + 0.77073 * g + 0.56332 * b

    return ColorReading(r, g, b, c, y_, color_temperature(x_, y_, z_))


def color_temperature(x_: float, y_: float, z_: float) -> float:
    """Correlated colour temperature (K) from XYZ; NaN where the chromaticity fit is singular."""
    total = x_ + y_ + z_
    if total == 0:
        return math.nan
    x = x_ / total
    y = y_ / total
    if abs(0.1858 - y) < 1e-12:
        return math.nan
    n = (x - 0.3320) / (0.1858 - y)
    return 449.0 * n ** 3 + 3525.0 * n ** 2 + 6823.3 * n + 5520.33
