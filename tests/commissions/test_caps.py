from decimal import Decimal

from commissions.caps import apply_cap, cap_limit
from commissions.types import SchemeItem

D = Decimal


def _item(**kwargs):
    return SchemeItem(id="1", name="ACC", category="adicional", variable_amount=D("800"), **kwargs)


def test_no_cap_passes_through():
    outcome = apply_cap(_item(cap_amount=D("10")), D("500"))
    assert outcome.commission == D("500")
    assert outcome.cap_applied is False
    assert outcome.cap_limit is None


def test_percentage_limit_is_rounded_money():
    assert cap_limit(_item(has_cap=True, cap_percentage=D("0.3333"))) == D("266.64")


def test_amount_takes_precedence():
    item = _item(has_cap=True, cap_percentage=D("0.1"), cap_amount=D("300"))
    assert cap_limit(item) == D("300")
    outcome = apply_cap(item, D("450"))
    assert outcome.commission == D("300")
    assert outcome.cap_applied is True


def test_commission_equal_to_limit_is_not_capped():
    outcome = apply_cap(_item(has_cap=True, cap_amount=D("400")), D("400"))
    assert outcome.commission == D("400")
    assert outcome.cap_applied is False
    assert outcome.cap_limit == D("400")


def test_cap_flag_without_limit_warns():
    outcome = apply_cap(_item(has_cap=True), D("900"))
    assert outcome.commission == D("900")
    assert outcome.cap_applied is False
    assert "tope" in outcome.warning


def test_percentage_applies_to_payable_amount():
    weighted = SchemeItem(id="1", name="POSTPAGO", category="principal", weight=D("1"),
                          has_cap=True, cap_percentage=D("1.2"))
    assert cap_limit(weighted, D("2000")) == D("2400.00")
    outcome = apply_cap(weighted, D("2000.00"), D("2000"))
    assert outcome.commission == D("2000.00")
    assert outcome.cap_applied is False


def test_payable_does_not_override_cap_amount():
    item = _item(has_cap=True, cap_percentage=D("0.5"), cap_amount=D("100"))
    assert cap_limit(item, D("5000")) == D("100")
