from decimal import Decimal

import pytest

from commissions.pxq import evaluate, select_tier, validate_scales
from commissions.types import PxqTier
from core.exceptions import ConfigError

D = Decimal

SCALE = (
    PxqTier(D("1"), None, D("30"), display_order=3),
    PxqTier(D("0"), D("0.5"), D("10"), display_order=1),
    PxqTier(D("0.5"), D("1"), D("20"), display_order=2),
)


class TestSelectTier:
    @pytest.mark.parametrize("fulfillment, amount", [
        ("0", "10"),
        ("0.4999", "10"),
        ("0.5", "20"),
        ("0.9999", "20"),
        ("1", "30"),
        ("3.2", "30"),
    ])
    def test_lower_bound_inclusive_upper_exclusive(self, fulfillment, amount):
        assert select_tier(SCALE, D(fulfillment)).amount_per_unit == D(amount)

    def test_no_tier_in_gap(self):
        assert select_tier((PxqTier(D("0.5"), None, D("1")),), D("0.2")) is None


class TestEvaluate:
    def test_pays_units_times_rate(self):
        amount, tier = evaluate("7", SCALE, D("12"), D("0.6"))
        assert amount == D("240.00")
        assert tier.display_order == 2

    def test_missing_fulfillment_is_zero(self):
        amount, _ = evaluate("7", SCALE, D("3"), None)
        assert amount == D("30.00")

    def test_empty_scale_raises(self):
        with pytest.raises(ConfigError) as exc_info:
            evaluate("7", (), D("3"), D("1"))
        assert exc_info.value.item_id == "7"

    def test_gap_raises(self):
        with pytest.raises(ConfigError, match="Ningun tramo"):
            evaluate("7", (PxqTier(D("0.5"), None, D("1")),), D("3"), D("0.1"))


class TestValidateScales:
    def test_complete_scale_is_valid(self):
        assert validate_scales("7", SCALE) == []

    def test_missing_scale(self):
        (error,) = validate_scales("7", ())
        assert "no tiene escala" in error.message

    def test_gap_from_zero(self):
        errors = validate_scales("7", (PxqTier(D("0.3"), None, D("1")),))
        assert [e.details.get("gap") for e in errors] == [(D("0"), D("0.3"))]

    def test_gap_between_tiers(self):
        errors = validate_scales("7", (
            PxqTier(D("0"), D("0.5"), D("1")),
            PxqTier(D("0.6"), None, D("2")),
        ))
        assert [e.details.get("gap") for e in errors] == [(D("0.5"), D("0.6"))]

    def test_overlap(self):
        errors = validate_scales("7", (
            PxqTier(D("0"), D("0.8"), D("1")),
            PxqTier(D("0.5"), None, D("2")),
        ))
        assert [e.details.get("overlap") for e in errors] == [(D("0.5"), D("0.8"))]

    def test_closed_last_tier(self):
        errors = validate_scales("7", (PxqTier(D("0"), D("2"), D("1")),))
        assert [e.details.get("gap") for e in errors] == [(D("2"), None)]

    def test_open_tier_before_the_last(self):
        errors = validate_scales("7", (
            PxqTier(D("0"), None, D("1")),
            PxqTier(D("1"), None, D("2")),
        ))
        assert len(errors) == 1
        assert "no es el ultimo" in errors[0].message

    def test_empty_tier(self):
        errors = validate_scales("7", (
            PxqTier(D("0"), D("0.5"), D("1")),
            PxqTier(D("0.5"), D("0.5"), D("2")),
            PxqTier(D("0.5"), None, D("3")),
        ))
        assert any("tramo vacio" in e.message for e in errors)
