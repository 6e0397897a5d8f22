"""
Unit Tests for DimensionedValue

Arithmetic with dimension checks, power legality, parsing and formatting.
"""

import pytest

from dimensions import Dimension, DIMENSIONLESS
from dimreal import DimensionedValue, cost
from errors import (
    DimensionMismatch,
    NonDimensionlessExponent,
    FractionalExponentOnDimensionedBase,
    FractionalExponentOnNegativeBase,
    UnitParseError,
)


class TestAddSub:
    """Tests for add / sub."""

    @pytest.mark.parametrize("a, b", [
        ("3.5 m", "1250 m"),
        ("-7 kg", "0.25 kg"),
        ("12", "0.5"),
        ("1 km", "4 m"),
    ])
    def test_add_then_sub_when_same_dimension_then_returns_original(self, dv, a, b):
        a, b = dv(a), dv(b)
        assert (a + b) - b == a

    @pytest.mark.parametrize("a, b", [
        ("3.14159 m", "2.71828 m"),
        ("0.1", "0.2"),
        ("9.8 m/s^2", "1.62 m/s^2"),
    ])
    def test_add_when_swapped_then_equal(self, dv, a, b):
        a, b = dv(a), dv(b)
        assert a + b == b + a

    def test_add_when_dimensions_differ_then_raises(self, dv):
        with pytest.raises(DimensionMismatch, match="add"):
            dv("1 m") + dv("1 s")

    def test_sub_when_dimensions_differ_then_raises(self, dv):
        with pytest.raises(DimensionMismatch, match="subtract"):
            dv("1 kg").sub(dv("1"))

    def test_add_when_scales_differ_then_normalised(self, dv):
        assert (dv("1 km") + dv("1 m")) == dv("1001 m")


class TestMulDiv:
    """Tests for mul / div / neg."""

    def test_mul_when_dimensioned_then_exponents_add(self, dv):
        result = dv("2 m") * dv("3 m")
        assert result.magnitude == 6
        assert result.dimension == Dimension(length=2)

    def test_div_when_dimensioned_then_exponents_subtract(self, dv):
        result = dv("10 m").div(dv("4 s"))
        assert result.magnitude == 2.5
        assert result.dimension == Dimension(length=1, time=-1)

    def test_div_when_same_dimension_then_dimensionless(self, dv):
        assert (dv("3 kg") / dv("1 kg")).dimension.is_dimensionless()

    def test_neg_when_called_then_keeps_dimension(self, dv):
        result = -dv("4 s")
        assert result.magnitude == -4
        assert result.dimension == Dimension(time=1)


class TestPow:
    """Tests for pow legality and results."""

    @pytest.mark.parametrize("base, exponent", [
        ("2", "1 m"),
        ("2 m", "3 s"),
        ("-1", "2 kg"),
        ("0.5", "1 m/s"),
    ])
    def test_pow_when_exponent_dimensioned_then_raises(self, dv, base, exponent):
        with pytest.raises(NonDimensionlessExponent):
            dv(base) ** dv(exponent)

    def test_pow_when_fractional_exponent_on_dimensioned_base_then_raises(self, dv):
        with pytest.raises(FractionalExponentOnDimensionedBase):
            dv("4 m").pow(dv("0.5"))

    def test_pow_when_fractional_exponent_on_negative_base_then_raises(self, dv):
        with pytest.raises(FractionalExponentOnNegativeBase):
            dv("-4").pow(dv("0.5"))

    def test_pow_when_integer_exponent_on_dimensioned_base_then_scales_dimension(self, dv):
        result = dv("2 m") ** dv("3")
        assert result.magnitude == 8
        assert result.dimension == Dimension(length=3)

    def test_pow_when_negative_integer_exponent_then_inverts_dimension(self, dv):
        result = dv("2 s") ** dv("-1")
        assert result.magnitude == 0.5
        assert result.dimension == Dimension(time=-1)

    def test_pow_when_negative_base_integer_exponent_then_real(self, dv):
        assert (dv("-2") ** dv("3")).magnitude == -8

    def test_pow_when_dimensionless_fractional_then_root(self, dv, ctx):
        result = dv("2") ** dv("0.5")
        assert abs(result.magnitude - ctx.sqrt(2)) < ctx.mpf(10) ** -20
        assert result.dimension == DIMENSIONLESS


class TestEquality:
    """Tests for equals."""

    def test_equals_when_magnitude_and_dimension_match_then_true(self, dv):
        assert dv("3 m").equals(dv("3 m"))

    def test_equals_when_dimension_differs_then_false(self, dv):
        assert not dv("3 m").equals(dv("3 s"))
        assert dv("3") != dv("3 m")

    def test_equals_when_magnitude_differs_then_false(self, dv):
        assert dv("3 m") != dv("4 m")


class TestParse:
    """Tests for DimensionedValue.parse."""

    def test_parse_when_plain_numeral_then_dimensionless(self, dv, ctx):
        value = dv("6.2832")
        assert value.magnitude == ctx.mpf("6.2832")
        assert value.dimension.is_dimensionless()

    @pytest.mark.parametrize("text", ["9.8 m/s^2", "9.8m/s^2", "  9.8   m/s**2 "])
    def test_parse_when_unit_suffix_then_dimensioned(self, dv, ctx, text):
        value = dv(text)
        assert value.magnitude == ctx.mpf("9.8")
        assert value.dimension == Dimension(length=1, time=-2)

    def test_parse_when_scaled_unit_then_normalised_to_base(self, dv):
        value = dv("1 km")
        assert value.magnitude == 1000
        assert value.dimension == Dimension(length=1)

    def test_parse_when_exponent_numeral_then_reads_exponent(self, dv, ctx):
        value = dv("9.1093837e-31 kg")
        assert value.magnitude == ctx.mpf("9.1093837e-31")
        assert value.dimension == Dimension(mass=1)

    def test_parse_when_derived_unit_then_base_dimension(self, dv):
        assert dv("2 N").dimension == Dimension(mass=1, length=1, time=-2)

    def test_parse_when_no_numeral_then_raises(self, dv):
        with pytest.raises(UnitParseError):
            dv("meters")

    def test_parse_when_unknown_unit_then_raises(self, dv):
        with pytest.raises(UnitParseError):
            dv("3 florps")

    @pytest.mark.parametrize("text", ["20 degC", "68 degF"])
    def test_parse_when_offset_temperature_unit_then_raises(self, dv, text):
        with pytest.raises(UnitParseError, match="offset unit"):
            dv(text)

    def test_parse_when_kelvin_or_delta_unit_then_scaled(self, dv):
        assert dv("293.15 K").magnitude == dv("293.15").magnitude
        assert dv("5 delta_degC").magnitude == 5
        assert dv("5 delta_degC").dimension == Dimension(temperature=1)

    def test_parse_when_no_context_then_uses_global_precision(self):
        assert DimensionedValue.parse("2.5").magnitude == 2.5


class TestFormat:
    """Tests for format."""

    def test_format_when_integral_then_no_trailing_zero(self, ctx):
        assert DimensionedValue(ctx.mpf(2)).format() == "2"

    def test_format_when_dimensioned_then_unit_suffix(self, dv):
        assert dv("9.8 m/s^2").format(3) == "9.8 m/s^2"

    def test_format_when_precision_given_then_rounds(self, ctx):
        assert DimensionedValue(+ctx.pi).format(5) == "3.1416"

    def test_format_when_output_parsed_then_same_dimension(self, dv):
        force = dv("3 N")
        assert dv(force.format()) == force


def test_cost_when_called_then_absolute_difference(dv):
    assert cost(dv("3 m"), dv("5 m")) == 2
    assert cost(dv("5 m"), dv("3 m")) == 2
