from decimal import Decimal

import pytest

from commissions.engine import compute_commission
from commissions.scenarios import compare_scenarios, percentage_change
from commissions.types import SchemeDefinition, SchemeItem

D = Decimal


@pytest.mark.parametrize("a, b, expected", [
    ("0", "0", "0"),
    ("0", "150", "1"),
    ("0", "-20", "0"),
    ("200", "250", "0.25"),
    ("200", "100", "-0.5"),
    ("-100", "-50", "0.5"),
    ("300", "400", "0.3333"),
])
def test_percentage_change(a, b, expected):
    assert percentage_change(D(a), D(b)) == D(expected)


class TestCompareScenarios:
    scheme = SchemeDefinition(
        items=(
            SchemeItem(id="1", name="POSTPAGO", category="principal", quota=D("10"),
                       variable_amount=D("1000")),
            SchemeItem(id="2", name="ACC", category="adicional", calculation_type="fixed",
                       variable_amount=D("50")),
        ),
        fixed_salary=D("1000"),
    )

    def test_lines_and_items(self):
        before = compute_commission(self.scheme, {"POSTPAGO": 5}, None, 0)
        after = compute_commission(self.scheme, {"POSTPAGO": 8}, None, D("20"))

        diff = compare_scenarios(before, after)

        variable = diff.line("Comision variable")
        assert variable.amount_a == D("500.00")
        assert variable.amount_b == D("800.00")
        assert variable.difference == D("300.00")
        assert variable.percentage_change == D("0.6")
        assert diff.line("Penalidades").percentage_change == D("1")
        assert diff.line("Sueldo fijo").difference == D("0")
        assert [line.label for line in diff.items] == ["POSTPAGO", "ACC"]
        assert diff.total_difference == D("280.00")
        assert diff.percentage_difference == D("0.1806")

    def test_item_missing_on_one_side_compares_against_zero(self):
        other = SchemeDefinition(items=(
            SchemeItem(id="9", name="BONO", category="bono", variable_amount=D("75")),
        ))
        before = compute_commission(self.scheme, {"POSTPAGO": 5}, None, 0)
        after = compute_commission(other, {}, None, 0)

        diff = compare_scenarios(before, after)

        assert [line.label for line in diff.items] == ["POSTPAGO", "ACC", "BONO"]
        assert diff.items[-1].amount_a == D("0")
        assert diff.items[-1].percentage_change == D("1")
        assert diff.items[0].amount_b == D("0")
