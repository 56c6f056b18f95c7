"""Roll item results into the payslip totals.

The principal block obeys an all-or-nothing gate: when the principal
fulfillment is below the scheme's ``default_min_fulfillment`` every principal
item pays 0, whatever its own ratio.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Sequence

from commissions.categories import ADDITIONAL_CATEGORIES, ItemCategory, subtotal_by_category
from commissions.types import CommissionResult, ItemResult, SchemeDefinition
from core.numbers import ZERO, money, to_decimal
from quotas.distribution import QuotaSnapshot

logger = logging.getLogger(__name__)


def gate_blocks(global_fulfillment: Decimal | None, threshold: Decimal | None) -> bool:
    """True when the principal block must pay 0.

    Without a threshold, or without any principal quota to measure against,
    the gate stays open.
    """
    if threshold is None or global_fulfillment is None:
        return False
    return global_fulfillment < to_decimal(threshold)


def apply_gate(
    rows: Sequence[ItemResult],
    global_fulfillment: Decimal | None,
    threshold: Decimal | None,
) -> tuple[list[ItemResult], bool]:
    if not gate_blocks(global_fulfillment, threshold):
        return list(rows), False

    message = (
        f"Cumplimiento global {global_fulfillment:.2%} por debajo del minimo "
        f"{to_decimal(threshold):.2%}: la comision variable no se paga."
    )
    gated = []
    for row in rows:
        if row.category == ItemCategory.PRINCIPAL:
            row = replace(row, commission=ZERO, warnings=row.warnings + (message,))
        gated.append(row)
    return gated, True


def collect_warnings(rows: Iterable[ItemResult], general: Iterable[str] = ()) -> tuple[str, ...]:
    warnings = list(general)
    for row in rows:
        warnings.extend(f"{row.name}: {detail}" for detail in row.restriction_detail)
        warnings.extend(f"{row.name}: {warning}" for warning in row.warnings)
    # Keep first occurrence only; the gate message repeats on every principal row.
    return tuple(dict.fromkeys(warnings))


def aggregate(
    definition: SchemeDefinition,
    rows: Sequence[ItemResult],
    global_fulfillment: Decimal | None,
    penalty_amount=ZERO,
    *,
    quota_info: QuotaSnapshot | None = None,
    warnings: Iterable[str] = (),
) -> CommissionResult:
    rows, gate_applied = apply_gate(rows, global_fulfillment, definition.default_min_fulfillment)
    if gate_applied:
        logger.info(
            "Principal gate applied for scheme %s: global=%s threshold=%s",
            definition.id, global_fulfillment, definition.default_min_fulfillment,
        )

    subtotals = {
        category: money(amount)
        for category, amount in subtotal_by_category(rows, lambda row: row.commission).items()
    }
    fixed_salary = money(definition.fixed_salary)
    variable = subtotals[ItemCategory.PRINCIPAL]
    additional = sum((subtotals[category] for category in ADDITIONAL_CATEGORIES), ZERO)
    pxq = subtotals[ItemCategory.PXQ]
    bonus = subtotals[ItemCategory.BONO]
    total_gross = money(fixed_salary + variable + additional + pxq + bonus)
    penalties = money(to_decimal(penalty_amount))

    return CommissionResult(
        items=tuple(rows),
        fixed_salary=fixed_salary,
        variable_commission=variable,
        additional_commission=additional,
        pxq_commission=pxq,
        bonus_commission=bonus,
        total_gross=total_gross,
        predicted_penalties=penalties,
        total_net=money(total_gross - penalties),
        global_fulfillment=global_fulfillment,
        gate_applied=gate_applied,
        subtotals=subtotals,
        warnings=collect_warnings(rows, warnings),
        quota_info=quota_info,
    )
