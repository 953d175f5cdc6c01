# sensordrone/tests/sensors/test_compute.py
from __future__ import annotations

import math

import pytest

from sensordrone.sensors import compute as c


def test_adc_and_battery_scaling():
    assert c.adc_volts(0) == 0.0
    assert c.adc_volts(4095) == pytest.approx(3.0)
    assert c.battery_volts(2730) == pytest.approx(4.0)


def test_capacitance_full_scale_is_4pf():
    assert c.capacitance_femtofarad(65520) == pytest.approx(4000.0)
    assert c.capacitance_femtofarad(c.u16_be(0x7F, 0xF8)) == pytest.approx(2000.0)


@pytest.mark.parametrize("load", [c.OXIDIZING_LOAD_OHM, c.REDUCING_LOAD_OHM])
def test_gas_resistance_divider(load):
    # full-scale ADC means the sensor has no resistance left
    assert c.gas_resistance(4095, load) == pytest.approx(0.0, abs=1e-6)
    # half-scale: sensor equals the load resistor
    assert c.gas_resistance(2047.5, load) == pytest.approx(load)


def test_gas_resistance_zero_adc_is_infinite():
    assert math.isinf(c.gas_resistance(0, c.OXIDIZING_LOAD_OHM))


def test_humidity_adc_masks_status_bits_of_lsb():
    assert c.humidity_adc(0x80, 0xFF) == 0x80FC
    assert c.humidity_adc(0x12, 0x03) == 0x1200


def test_humidity_and_temperature_formulas():
    adc = c.humidity_adc(0x80, 0x00)
    assert c.relative_humidity(adc) == pytest.approx(-6.0 + 125.0 * 0.5)
    assert c.humidity_temperature_celsius(adc) == pytest.approx(-46.85 + 175.72 * 0.5)


def test_temperature_unit_conversions():
    assert c.celsius_to_kelvin(0.0) == pytest.approx(273.15)
    assert c.celsius_to_fahrenheit(100.0) == pytest.approx(212.0)
    assert c.celsius_to_fahrenheit(-40.0) == pytest.approx(-40.0)


def test_signed_big_endian():
    assert c.s16_be(b"\xFF\xFF") == -1
    assert c.s16_be(b"\x0C\x80") == 0x0C80


def test_ir_die_temperature_scaling():
    assert c.ir_die_kelvin(25 * 128) == pytest.approx(298.15)
    assert c.ir_object_volts(64) == pytest.approx(1e-5)


def test_ir_object_equals_die_when_voltage_matches_offset():
    """
    Algorithm: at Tdie == Tref the offset is b0, so Vobj == b0 gives f == 0
    and the object temperature collapses to the die temperature.
    """
    assert c.ir_object_kelvin(c.IR_TREF, c.IR_B0) == pytest.approx(c.IR_TREF)


def test_ir_object_hotter_for_positive_voltage():
    assert c.ir_object_kelvin(c.IR_TREF, 1e-4) > c.IR_TREF


def test_ir_object_undefined_is_nan():
    assert math.isnan(c.ir_object_kelvin(c.IR_TREF, -0.03))


def test_pressure_decoding_uses_extension_bits():
    # 0x6300 << 2 = 101376; (0x0B & 0x0C) = 8; (0x0B & 0x03) / 4 = 0.75
    assert c.pressure_pascals(bytes([0x63, 0x00, 0x0B, 0, 0, 0, 0, 0])) == pytest.approx(101384.75)


def test_altitude_from_pressure():
    assert c.altitude_meters(c.SEA_LEVEL_PA) == pytest.approx(0.0)
    expected = (1 - (90000 / 101326) ** 0.1902632) * 44330.77
    assert c.altitude_meters(90000.0) == pytest.approx(expected)
    assert math.isnan(c.altitude_meters(-1.0))


def test_precision_gas_calibration_block():
    cal = c.precision_gas_calibration(b"\xB8\x0B\x00\x08")
    assert cal.sensitivity == pytest.approx(3.0)
    assert cal.baseline == 2048.0


def test_precision_gas_ppm():
    cal = c.Calibration(3.0, 2048.0)
    assert c.precision_gas_ppm(2048, 0, cal) == 0.0
    assert c.precision_gas_ppm(2048 + 4096, 7, cal) == pytest.approx(3e9 / (3.0 * 2747))


def test_precision_gas_zero_sensitivity_is_infinite():
    assert math.isinf(c.precision_gas_ppm(4096, 0, c.Calibration(0.0, 0.0)))


def test_precision_gas_sensitivity_candidate():
    s = c.precision_gas_sensitivity(2048 + 4096, 3, 2048.0, 50.0)
    assert s == pytest.approx(3e9 / (50.0 * 34452))


def test_rgbc_channel_order_and_calibration():
    data = bytes([100, 0, 200, 0, 50, 0, 0x00, 0x01])
    color = c.rgbc_reading(data)

    assert color.green == pytest.approx(100 * (1 + c.RGBC_CAL_GREEN))
    assert color.red == pytest.approx(200 * (1 + c.RGBC_CAL_RED))
    assert color.blue == pytest.approx(50 * (1 + c.RGBC_CAL_BLUE))
    assert color.clear == pytest.approx(256 * (1 + c.RGBC_CAL_CLEAR))

    y = -0.32466 * color.red + 1.57837 * color.green - 0.73191 * color.blue
    assert color.lux == pytest.approx(y)
    assert math.isfinite(color.color_temperature)


def test_rgbc_darkness_has_no_color_temperature():
    color = c.rgbc_reading(bytes(8))
    assert color.lux == 0.0
    assert math.isnan(color.color_temperature)


def test_color_temperature_at_reference_chromaticity():
    # x == 0.3320 puts n at zero, leaving the constant term
    assert c.color_temperature(0.3320, 0.3, 0.368) == pytest.approx(5520.33)


def test_color_temperature_singular_chromaticity_is_nan():
    # y within rounding of 0.1858 must not divide by (almost) zero
    assert math.isnan(c.color_temperature(0.3, 0.1858, 1.0 - 0.3 - 0.1858))
    assert math.isnan(c.color_temperature(0.0, 0.0, 0.0))
