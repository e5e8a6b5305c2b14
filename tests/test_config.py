#
# MPFloat - Config Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import dataclasses

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from mpfloat import config
from mpfloat.config import FloatDefaults, local_defaults, resolve_precision, resolve_rounding
from mpfloat.rounding import RoundingMode, Ternary
from mpfloat.utils import PRECISION_MIN
from mpfloat.value import MPFloat


# Tests ----------------------------------------------------------------------------------------------------------------

class TestDefaults:

    def test_initial_defaults(self):
        defaults = config.get_defaults()
        assert defaults == FloatDefaults(precision=53, rounding=RoundingMode.NEAREST)
        assert config.get_default_precision() == 53
        assert config.get_default_rounding() is RoundingMode.NEAREST

    def test_snapshot_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.get_defaults().precision = 10

    def test_set_precision_applies_to_new_values_only(self):
        before = MPFloat(1)
        config.set_default_precision(200)
        after = MPFloat(1)
        assert before.precision == 53
        assert after.precision == 200

    def test_set_rounding_by_name(self):
        config.set_default_rounding("toward_zero")
        assert config.get_default_rounding() is RoundingMode.TOWARD_ZERO

    @pytest.mark.parametrize(
        "precision, exc",
        [
            pytest.param(PRECISION_MIN - 1, ValueError, id="below-min"),
            pytest.param(0, ValueError, id="zero"),
            pytest.param(-53, ValueError, id="negative"),
            pytest.param("53", TypeError, id="str"),
            pytest.param(53.0, TypeError, id="float"),
            pytest.param(True, TypeError, id="bool"),
        ],
    )
    def test_set_precision_invalid(self, precision, exc):
        with pytest.raises(exc, match=r"(?i).*precision.*"):
            config.set_default_precision(precision)
        assert config.get_default_precision() == 53

    def test_set_rounding_invalid(self):
        with pytest.raises(ValueError, match=r"(?i).*unknown rounding mode.*"):
            config.set_default_rounding("sideways")
        with pytest.raises(TypeError):
            config.set_default_rounding(1)

    def test_float_defaults_validates(self):
        with pytest.raises(ValueError):
            FloatDefaults(precision=1)
        with pytest.raises(TypeError):
            FloatDefaults(rounding="nearest")


class TestLocalDefaults:

    def test_overrides_and_restores(self):
        with local_defaults(precision=100, rounding="toward_positive_infinity") as defaults:
            assert defaults.precision == 100
            assert MPFloat(1).precision == 100
            assert config.get_default_rounding() is RoundingMode.TOWARD_POSITIVE_INFINITY
        assert config.get_defaults() == FloatDefaults()

    def test_restores_on_exception(self):
        with pytest.raises(RuntimeError):
            with local_defaults(precision=64):
                raise RuntimeError("boom")
        assert config.get_default_precision() == 53

    def test_partial_override(self):
        with local_defaults(rounding=RoundingMode.TOWARD_ZERO):
            assert config.get_default_precision() == 53
            assert config.get_default_rounding() is RoundingMode.TOWARD_ZERO

    def test_default_rounding_drives_operations(self):
        third_down = MPFloat(1, precision=10)
        third_up = MPFloat(1, precision=10)
        with local_defaults(rounding="toward_zero"):
            assert third_down.div_inplace(3) is Ternary.BELOW
        with local_defaults(rounding="toward_positive_infinity"):
            assert third_up.div_inplace(3) is Ternary.ABOVE
        assert third_down < third_up


class TestResolve:

    def test_resolve_precision(self):
        assert resolve_precision(None) == 53
        assert resolve_precision(80) == 80
        with pytest.raises(ValueError):
            resolve_precision(1)

    def test_resolve_rounding(self):
        assert resolve_rounding(None) is RoundingMode.NEAREST
        assert resolve_rounding("faithful") is RoundingMode.FAITHFUL
        assert resolve_rounding(RoundingMode.AWAY_FROM_ZERO) is RoundingMode.AWAY_FROM_ZERO
