#
# MPFloat - Value Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import math
from decimal import Decimal
from fractions import Fraction

# Third-party ----------------------------------------------------------------------------------------------------------
import gmpy2
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from mpfloat.rounding import RoundingMode, Ternary
from mpfloat.value import MPFloat, rdiv, rsub


# Constants ------------------------------------------------------------------------------------------------------------

ALL_MODES = list(RoundingMode)


def third(precision: int = 53) -> MPFloat:
    return MPFloat(1, precision=precision).div(3)[0]


# Tests ----------------------------------------------------------------------------------------------------------------

class TestConstruction:

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(7, 7, id="int"),
            pytest.param(True, 1, id="bool"),
            pytest.param(2.5, 2.5, id="float"),
            pytest.param(Fraction(3, 4), 0.75, id="fraction"),
            pytest.param(Decimal("0.1"), 0.1, id="decimal"),
            pytest.param(gmpy2.mpz(5), 5, id="mpz"),
            pytest.param(gmpy2.mpq(1, 8), 0.125, id="mpq"),
            pytest.param(gmpy2.mpfr("1.5"), 1.5, id="mpfr"),
            pytest.param("1.5", 1.5, id="str"),
            pytest.param("  -2.5 ", -2.5, id="str-whitespace"),
        ],
    )
    def test_from_scalar(self, value, expected):
        x = MPFloat(value)
        assert x == expected
        assert x.precision == 53

    @pytest.mark.parametrize(
        "value, signbit",
        [
            pytest.param(Decimal("-0"), True, id="negative-zero"),
            pytest.param(Decimal("-0.000"), True, id="negative-zero-exponent"),
            pytest.param(Decimal("0"), False, id="positive-zero"),
        ],
    )
    def test_decimal_signed_zero(self, value, signbit):
        x = MPFloat(value)
        assert x.is_zero
        assert x.signbit is signbit

    @pytest.mark.parametrize("text", ["NaN", "-NaN", "sNaN"])
    def test_decimal_nan(self, text):
        x = MPFloat(Decimal(text))
        assert x.is_nan

    def test_none_is_nan(self):
        assert MPFloat().is_nan
        assert MPFloat(None).is_nan

    def test_precision_argument(self):
        assert MPFloat(1, precision=200).precision == 200
        assert MPFloat("0.1", precision=10).precision == 10

    def test_rounds_to_precision(self):
        assert MPFloat(2 ** 100 + 1) == 2 ** 100
        assert MPFloat(2 ** 100 + 1, precision=101) == 2 ** 100 + 1

    def test_rounding_argument(self):
        down = MPFloat(Fraction(1, 3), precision=10, rounding="toward_zero")
        up = MPFloat(Fraction(1, 3), precision=10, rounding="toward_positive_infinity")
        assert down < Fraction(1, 3) < up

    def test_from_mpfloat_keeps_precision(self):
        x = MPFloat(1, precision=80)
        assert MPFloat(x).precision == 80

    def test_from_mpfloat_with_new_precision(self):
        x = third(100)
        y = MPFloat(x, precision=20)
        assert y.precision == 20
        assert y._cell is not x._cell
        assert x.precision == 100

    @pytest.mark.parametrize(
        "text",
        [
            pytest.param("abc", id="letters"),
            pytest.param("1.5x", id="trailing"),
            pytest.param("", id="empty"),
            pytest.param("ff", id="hex-in-base-10"),
        ],
    )
    def test_invalid_string(self, text):
        with pytest.raises(ValueError, match=r"(?i).*could not convert.*"):
            MPFloat(text)

    @pytest.mark.parametrize(
        "value",
        [
            pytest.param([1], id="list"),
            pytest.param(1 + 2j, id="complex"),
            pytest.param(object(), id="object"),
        ],
    )
    def test_unsupported_type(self, value):
        with pytest.raises(TypeError, match=r"(?i).*unsupported.*"):
            MPFloat(value)

    def test_invalid_precision(self):
        with pytest.raises(ValueError):
            MPFloat(1, precision=1)
        with pytest.raises(TypeError):
            MPFloat(1, precision=2.5)


class TestArithmetic:

    def test_add(self):
        result, _ = MPFloat(3.14).add(MPFloat(2.71))
        assert result.to_float() == pytest.approx(5.85)

    def test_exact_division(self):
        result, ternary = MPFloat(6).div(2)
        assert result == 3
        assert ternary is Ternary.EXACT

    def test_inexact_division_ternary(self):
        assert MPFloat(1, precision=10).div(3, "toward_zero")[1] is Ternary.BELOW
        assert MPFloat(1, precision=10).div(3, "toward_positive_infinity")[1] is Ternary.ABOVE

    @pytest.mark.parametrize(
        "numerator, denominator, check",
        [
            pytest.param(3.14, 0, lambda r: r.is_inf and r.sign == 1, id="positive-by-zero"),
            pytest.param(-1, 0, lambda r: r.is_inf and r.sign == -1, id="negative-by-zero"),
            pytest.param(0, 0, lambda r: r.is_nan, id="zero-by-zero"),
            pytest.param(1, float("inf"), lambda r: r.is_zero, id="by-infinity"),
        ],
    )
    def test_ieee_division(self, numerator, denominator, check):
        assert check(MPFloat(numerator).div(denominator)[0])

    def test_inf_minus_inf_is_nan(self):
        inf = MPFloat(float("inf"))
        assert inf.sub(inf)[0].is_nan
        assert inf.add(inf)[0].is_inf

    def test_zero_times_inf_is_nan(self):
        assert MPFloat(0).mul(float("inf"))[0].is_nan

    def test_nan_propagates(self):
        nan = MPFloat()
        assert nan.add(1)[0].is_nan
        assert MPFloat(1).mul(nan)[0].is_nan

    @pytest.mark.parametrize("mode", ALL_MODES, ids=[m.value for m in ALL_MODES])
    @pytest.mark.parametrize(
        "value",
        [
            pytest.param(third(), id="third"),
            pytest.param(MPFloat(-2.5), id="negative"),
            pytest.param(MPFloat(1e300), id="large"),
            pytest.param(MPFloat(0), id="zero"),
            pytest.param(third(200), id="third-200"),
            pytest.param(MPFloat(float("inf")), id="inf"),
            pytest.param(MPFloat(float("-inf")), id="negative-inf"),
            pytest.param(MPFloat(), id="nan"),
        ],
    )
    def test_exact_operations_report_exact(self, value, mode):
        assert value.neg(mode)[1] is Ternary.EXACT
        assert value.absolute(mode)[1] is Ternary.EXACT
        assert value.sub(value, mode)[1] is Ternary.EXACT
        assert value.mul(1, mode)[1] is Ternary.EXACT
        assert value.div(1, mode)[1] is Ternary.EXACT

    def test_operands_unchanged(self):
        a, b = MPFloat(1.5), MPFloat(2)
        a.add(b)
        a.div(b)
        a.neg()
        assert a == 1.5
        assert b == 2

    @pytest.mark.parametrize("mode", ALL_MODES, ids=[m.value for m in ALL_MODES])
    @pytest.mark.parametrize("name", ["add", "sub", "mul", "div"])
    def test_pure_and_inplace_agree(self, name, mode):
        x = MPFloat(1, precision=20)
        pure, ternary = getattr(x, name)(3, mode)
        target = MPFloat(x)
        assert getattr(target, f"{name}_inplace")(3, mode) is ternary
        assert target == pure
        assert target.precision == pure.precision == 20
        assert x == 1

    def test_result_takes_receiver_precision(self):
        narrow = MPFloat(1, precision=20)
        wide = third(200)
        assert narrow.add(wide)[0].precision == 20
        assert wide.add(narrow)[0].precision == 200

    def test_neg_and_absolute(self):
        assert MPFloat(2.5).neg()[0] == -2.5
        assert MPFloat(-2.5).absolute()[0] == 2.5
        x = MPFloat(4)
        assert x.neg_inplace() is Ternary.EXACT
        assert x == -4

    def test_mul_2exp(self):
        assert MPFloat(3).mul_2exp(4) == (48, Ternary.EXACT)
        assert MPFloat(3).mul_2exp(-1)[0] == 1.5

    def test_div_2exp(self):
        assert MPFloat(3).div_2exp(2)[0] == 0.75
        with pytest.raises(ValueError, match=r"(?i).*exponent.*"):
            MPFloat(3).div_2exp(-1)

    def test_shift_requires_int(self):
        with pytest.raises(TypeError):
            MPFloat(3).mul_2exp(1.5)
        with pytest.raises(TypeError):
            MPFloat(3).div_2exp(True)

    def test_rsub_and_rdiv(self):
        assert rsub(1, MPFloat(0.25))[0] == 0.75
        assert rdiv(1, MPFloat(4))[0] == 0.25
        assert rsub(1, MPFloat(0.25, precision=10))[0].precision == 10

    def test_assign_reversed(self):
        y = MPFloat(0, precision=30)
        assert y.assign_rsub(10, MPFloat(4)) is Ternary.EXACT
        assert y == 6
        assert y.precision == 30
        y.assign_rdiv(1, 8)
        assert y == 0.125

    def test_string_operand_rejected(self):
        with pytest.raises(TypeError, match=r"(?i).*string.*"):
            MPFloat(1).add("1")


class TestOperators:

    def test_binary(self):
        x = MPFloat(6)
        assert x + 1 == 7
        assert x - 1 == 5
        assert x * 2 == 12
        assert x / 4 == 1.5
        assert x ** 2 == 36

    def test_reflected(self):
        x = MPFloat(4)
        assert 1 + x == 5
        assert 1 - x == -3
        assert 2 * x == 8
        assert 1 / x == 0.25
        assert 2 ** MPFloat(3) == 8
        assert 0.5 + MPFloat(1) == 1.5

    def test_unary(self):
        x = MPFloat(-2)
        assert -x == 2
        assert abs(x) == 2
        assert +x == -2
        assert (+x)._cell is x._cell

    def test_inplace_keeps_identity(self):
        x = MPFloat(1)
        ref = x
        x += 2
        x *= 4
        x -= 2
        x /= 5
        x **= 2
        assert x is ref
        assert x == 4

    def test_inplace_does_not_touch_aliases(self):
        x = MPFloat(1)
        y = MPFloat(x)
        x += 1
        assert y == 1

    @pytest.mark.parametrize(
        "other",
        [
            pytest.param("1", id="str"),
            pytest.param([1], id="list"),
            pytest.param(None, id="none"),
        ],
    )
    def test_unsupported_operands(self, other):
        x = MPFloat(1)
        with pytest.raises(TypeError):
            x + other
        with pytest.raises(TypeError):
            other * x
        with pytest.raises(TypeError):
            x += other


class TestComparison:

    def test_ordering(self):
        assert MPFloat(1) < 2
        assert MPFloat(2) <= 2.0
        assert MPFloat(3) > Fraction(5, 2)
        assert MPFloat(3) >= MPFloat(3, precision=100)
        assert MPFloat(1) == 1.0
        assert MPFloat(1) != 2

    def test_nan_is_unordered(self):
        nan = MPFloat()
        assert not nan == nan
        assert nan != nan
        assert not nan < 1
        assert not nan >= 1

    def test_decimal_nan_is_unordered(self):
        assert (MPFloat(1) == Decimal("sNaN")) is False
        assert MPFloat(1) != Decimal("NaN")
        assert MPFloat(1).compare(Decimal("sNaN")) == 0

    def test_non_numbers_are_never_equal(self):
        assert MPFloat(1) != "1"
        with pytest.raises(TypeError):
            MPFloat(1) < "1"

    @pytest.mark.parametrize(
        "value, other, expected",
        [
            pytest.param(1, 2, -1, id="less"),
            pytest.param(1, MPFloat(1), 0, id="equal"),
            pytest.param(1, 0.5, 1, id="greater"),
            pytest.param(None, 1, 0, id="nan-self"),
            pytest.param(1, float("nan"), 0, id="nan-other"),
            pytest.param(0, -0.0, 0, id="signed-zeros"),
        ],
    )
    def test_compare(self, value, other, expected):
        assert MPFloat(value).compare(other) == expected

    def test_hash_matches_equality(self):
        assert hash(MPFloat(1.5, precision=20)) == hash(MPFloat(1.5, precision=200)) == hash(1.5)
        assert hash(MPFloat(3)) == hash(3)
        table = {MPFloat(1): "one"}
        assert table[MPFloat(1, precision=100)] == "one"

    def test_hash_nan(self):
        hash(MPFloat())

    def test_equals_to_bits(self):
        one = MPFloat(1, precision=64)
        near = one + MPFloat(1).mul_2exp(-20)[0]
        assert one.equals_to_bits(near, 10)
        assert not one.equals_to_bits(near, 30)

    @pytest.mark.parametrize(
        "a, b",
        [
            pytest.param(None, None, id="nan"),
            pytest.param(1, -1, id="opposite-signs"),
            pytest.param(1, 2, id="different-exponents"),
            pytest.param(float("inf"), 1, id="infinity"),
        ],
    )
    def test_equals_to_bits_mismatch(self, a, b):
        assert not MPFloat(a).equals_to_bits(MPFloat(b), 0)

    def test_equals_to_bits_special_values(self):
        inf = MPFloat(float("inf"))
        assert inf.equals_to_bits(MPFloat(float("inf")), 10)
        assert MPFloat(0).equals_to_bits(MPFloat(0), 10)
        with pytest.raises(ValueError):
            inf.equals_to_bits(inf, -1)


class TestClassification:

    @pytest.mark.parametrize(
        "value, sign, nan, inf, zero, finite, regular, integer",
        [
            pytest.param(2.5, 1, False, False, False, True, True, False, id="positive"),
            pytest.param(-3, -1, False, False, False, True, True, True, id="negative-integer"),
            pytest.param(0, 0, False, False, True, True, False, True, id="zero"),
            pytest.param(-0.0, 0, False, False, True, True, False, True, id="negative-zero"),
            pytest.param(float("inf"), 1, False, True, False, False, False, False, id="inf"),
            pytest.param(float("-inf"), -1, False, True, False, False, False, False, id="negative-inf"),
            pytest.param(None, 0, True, False, False, False, False, False, id="nan"),
        ],
    )
    def test_predicates(self, value, sign, nan, inf, zero, finite, regular, integer):
        x = MPFloat(value)
        assert x.sign == sign
        assert x.is_nan is nan
        assert x.is_inf is inf
        assert x.is_zero is zero
        assert x.is_finite is finite
        assert x.is_regular is regular
        assert x.is_integer is integer

    def test_signbit(self):
        assert MPFloat(-0.0).signbit
        assert not MPFloat(0).signbit
        assert MPFloat(-1).signbit

    def test_negative_zero_is_neither_sign(self):
        x = MPFloat(-0.0)
        assert not x.is_negative
        assert not x.is_positive
        assert MPFloat(-1).is_negative
        assert MPFloat(1).is_positive


class TestConversion:

    def test_to_float_nearest(self):
        assert third().to_float() == 1 / 3
        assert float(MPFloat(2.5)) == 2.5

    def test_to_float_directions(self):
        x = third(100)
        down = x.to_float("toward_zero")
        up = x.to_float("toward_positive_infinity")
        assert down < up
        assert math.nextafter(down, 1) == up
        assert x.to_float("toward_negative_infinity") == down

    @pytest.mark.parametrize(
        "value, expected",
        [
            pytest.param(8, (0.5, 4), id="eight"),
            pytest.param(-3, (-0.75, 2), id="negative"),
            pytest.param(0.25, (0.5, -1), id="quarter"),
            pytest.param(0, (0.0, 0), id="zero"),
        ],
    )
    def test_to_float_exp(self, value, expected):
        assert MPFloat(value).to_float_exp() == expected

    def test_to_float_exp_matches_frexp(self):
        assert third().to_float_exp() == math.frexp(1 / 3)

    @pytest.mark.parametrize(
        "value, mode, expected",
        [
            pytest.param(2.5, "nearest", 2, id="nearest-tie-even"),
            pytest.param(3.5, "nearest", 4, id="nearest-tie-even-up"),
            pytest.param(2.5, "away_from_zero", 3, id="away"),
            pytest.param(2.5, "toward_negative_infinity", 2, id="down"),
            pytest.param(-2.5, "toward_zero", -2, id="toward-zero"),
            pytest.param(-2.5, "toward_negative_infinity", -3, id="negative-down"),
        ],
    )
    def test_to_int(self, value, mode, expected):
        assert MPFloat(value).to_int(mode) == expected

    def test_int_truncates(self):
        assert int(MPFloat(-2.7)) == -2
        assert int(MPFloat(2.7)) == 2
        assert int(MPFloat(2 ** 80)) == 2 ** 80

    def test_to_int_special_values(self):
        with pytest.raises(ValueError, match=r"(?i).*nan.*"):
            MPFloat().to_int()
        with pytest.raises(OverflowError, match=r"(?i).*infinity.*"):
            MPFloat(float("-inf")).to_int()

    def test_text(self):
        x = MPFloat(3.25)
        assert str(x) == "3.25"
        assert repr(x) == "MPFloat('3.25', precision=53)"
        assert f"{x}" == "3.25"
        assert format(MPFloat(3.14159), ".3f") == "3.142"

    def test_bool(self):
        assert not MPFloat(0)
        assert not MPFloat(-0.0)
        assert MPFloat(0.5)
        assert MPFloat()


class TestAssignment:

    def test_set_keeps_precision(self):
        x = MPFloat(0, precision=10)
        assert x.set(Fraction(1, 3), "toward_zero") is Ternary.BELOW
        assert x.precision == 10
        assert x < Fraction(1, 3)

    def test_set_exact(self):
        x = MPFloat(0)
        assert x.set(MPFloat(2.5, precision=200)) is Ternary.EXACT
        assert x == 2.5

    def test_set_decimal_negative_zero(self):
        x = MPFloat(1)
        assert x.set(Decimal("-0")) is Ternary.EXACT
        assert x.is_zero
        assert x.signbit

    def test_set_string(self):
        x = MPFloat(0, precision=10)
        assert x.set_string("2.5")
        assert x == 2.5
        assert x.set_string("ff", base=16)
        assert x == 255

    @pytest.mark.parametrize(
        "text, base",
        [
            pytest.param("junk", 10, id="junk"),
            pytest.param("1.5 x", 10, id="trailing"),
            pytest.param("12", 2, id="bad-digit"),
            pytest.param("1", 99, id="bad-base"),
        ],
    )
    def test_set_string_failure_leaves_value(self, text, base):
        x = MPFloat(7)
        assert x.set_string(text, base) is False
        assert x == 7

    def test_swap(self):
        a = MPFloat(1, precision=20)
        b = MPFloat(2, precision=30)
        a.swap(b)
        assert (a, a.precision) == (2, 30)
        assert (b, b.precision) == (1, 20)

    def test_swap_requires_mpfloat(self):
        with pytest.raises(TypeError):
            MPFloat(1).swap(1)

    def test_set_precision(self):
        x = MPFloat(1, precision=100)
        x.div_inplace(3)
        assert x.set_precision(10, "toward_zero") is Ternary.BELOW
        assert x.precision == 10
        assert x.set_precision(200) is Ternary.EXACT
        assert x.precision == 200

    def test_set_precision_invalid(self):
        with pytest.raises(ValueError):
            MPFloat(1).set_precision(1)
