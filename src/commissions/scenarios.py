"""Side-by-side comparison of two commission results."""
from __future__ import annotations

from decimal import Decimal

from commissions.types import CommissionResult, ScenarioDiff, ScenarioLine
from core.numbers import ONE, ZERO, round_half_up, to_decimal

TOTAL_LINES = (
    ("fixed_salary", "Sueldo fijo"),
    ("variable_commission", "Comision variable"),
    ("additional_commission", "Comision adicional"),
    ("pxq_commission", "Comision PxQ"),
    ("bonus_commission", "Bonos"),
    ("predicted_penalties", "Penalidades"),
    ("total_gross", "Total bruto"),
    ("total_net", "Total neto"),
)


def percentage_change(amount_a, amount_b) -> Decimal:
    """``(b - a) / |a|``; from a zero base it is 1 when b grew, else 0."""
    a = to_decimal(amount_a)
    b = to_decimal(amount_b)
    if a == 0:
        return ONE if b > 0 else ZERO
    return round_half_up((b - a) / abs(a), 4)


def compare_line(label: str, amount_a, amount_b) -> ScenarioLine:
    a = to_decimal(amount_a)
    b = to_decimal(amount_b)
    return ScenarioLine(
        label=label,
        amount_a=a,
        amount_b=b,
        difference=b - a,
        percentage_change=percentage_change(a, b),
    )


def compare_scenarios(result_a: CommissionResult, result_b: CommissionResult) -> ScenarioDiff:
    """Per-line and per-item deltas from ``result_a`` to ``result_b``.

    Items are matched by name; an item present on one side only compares
    against 0.
    """
    lines = tuple(
        compare_line(label, getattr(result_a, attr), getattr(result_b, attr))
        for attr, label in TOTAL_LINES
    )

    commissions_a = {item.name: item.commission for item in result_a.items}
    commissions_b = {item.name: item.commission for item in result_b.items}
    names = list(commissions_a) + [name for name in commissions_b if name not in commissions_a]
    items = tuple(
        compare_line(name, commissions_a.get(name, ZERO), commissions_b.get(name, ZERO))
        for name in names
    )

    net = compare_line("Total neto", result_a.total_net, result_b.total_net)
    return ScenarioDiff(
        lines=lines,
        items=items,
        total_difference=net.difference,
        percentage_difference=net.percentage_change,
    )
