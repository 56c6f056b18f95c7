"""Commission resolution engine.

Core design principles:
- Pure: reads a SchemeDefinition, a sales mapping and a QuotaSnapshot, never
  the ORM. Same inputs always give the same CommissionResult.
- One pass: items are measured (restrictions, quota, fulfillment), then
  resolved once in lock-topological order, then aggregated.
- Configuration defects degrade the affected item to 0 with a warning; they
  never abort the seller's result.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Mapping

from commissions import pxq
from commissions.aggregator import aggregate
from commissions.caps import apply_cap
from commissions.categories import CalculationType
from commissions.fulfillment import effective_item_quota, global_fulfillment, item_fulfillment
from commissions.locks import build_lock_graph, evaluate_locks, node_key, topological_order
from commissions.restrictions import apply_restrictions
from commissions.types import (
    CommissionResult,
    ItemResult,
    SalesFact,
    SchemeDefinition,
    SchemeItem,
)
from core.exceptions import ConfigError, CycleError
from core.numbers import ONE, ZERO, money, to_decimal
from quotas.distribution import QuotaSnapshot

logger = logging.getLogger(__name__)


def as_sales_fact(value) -> SalesFact:
    """Accept a bare count where no tags are needed."""
    if isinstance(value, SalesFact):
        return value
    return SalesFact(raw_count=to_decimal(value))


class CommissionCalculationEngine:
    """Compute one seller's commission against one scheme snapshot."""

    def __init__(self, definition: SchemeDefinition) -> None:
        self.definition = definition
        self.graph = build_lock_graph(definition)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compute(
        self,
        sales: Mapping[str, SalesFact] | None,
        quota: QuotaSnapshot | None = None,
        penalty_amount=ZERO,
    ) -> CommissionResult:
        sales = sales or {}
        items = sorted(
            self.definition.active_items,
            key=lambda item: (item.display_order, node_key(item.id)),
        )
        rows = {item.id: self._measure(item, sales.get(item.name), quota) for item in items}
        global_f = global_fulfillment(rows.values())

        warnings: list[str] = []
        blocked: set[str] = set()
        try:
            order = topological_order(self.graph)
        except CycleError as exc:
            logger.warning("Scheme %s: %s", self.definition.id, exc.message)
            warnings.append(exc.message)
            order = exc.order
            blocked = exc.blocked

        resolved: dict[str, ItemResult] = {}
        for item_id in order:
            resolved[item_id] = self._resolve(
                self.graph.items[item_id], rows[item_id], resolved, global_f,
            )
        for item_id in sorted(blocked, key=node_key):
            resolved[item_id] = self._degrade(
                rows[item_id],
                "Partida bloqueada por un ciclo de candados.",
                lock_unlocked=False,
            )

        return aggregate(
            self.definition,
            [resolved[item.id] for item in items],
            global_f,
            penalty_amount,
            quota_info=quota,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _measure(self, item: SchemeItem, fact, quota: QuotaSnapshot | None) -> ItemResult:
        """Sales, quota and fulfillment of ``item`` before any payout decision."""
        fact = as_sales_fact(fact) if fact is not None else None
        outcome = apply_restrictions(item, fact, self.definition.restrictions)
        effective_quota = effective_item_quota(item, quota)
        fulfillment = item_fulfillment(outcome.effective_sales, effective_quota)

        min_fulfillment = item.min_fulfillment
        meets_minimum = (
            min_fulfillment is None
            or fulfillment is None
            or fulfillment >= to_decimal(min_fulfillment)
        )
        return ItemResult(
            id=item.id,
            name=item.name,
            category=item.resolved_category,
            calculation_type=item.resolved_calculation_type,
            quota=item.quota,
            effective_quota=effective_quota,
            raw_sales=outcome.raw_sales,
            effective_sales=outcome.effective_sales,
            fulfillment=fulfillment,
            meets_minimum=meets_minimum,
            min_fulfillment=min_fulfillment,
            lock_unlocked=True,
            lock_pending=(),
            restriction_applied=outcome.applied,
            restriction_detail=outcome.details,
            computed_commission=ZERO,
            commission=ZERO,
            cap_applied=False,
        )

    def _payable(self, item: SchemeItem) -> Decimal:
        amount = to_decimal(item.variable_amount)
        if amount > 0:
            return amount
        return to_decimal(item.weight) * to_decimal(self.definition.variable_salary)

    def _base_commission(self, item: SchemeItem, row: ItemResult) -> Decimal:
        """Amount by calculation type, before locks, caps and the gate.

        Raises
        ------
        ConfigError
            PxQ item whose scale does not cover its fulfillment.
        """
        if not row.meets_minimum:
            return ZERO
        calc_type = row.calculation_type
        payable = self._payable(item)
        if calc_type == CalculationType.PXQ:
            amount, _ = pxq.evaluate(
                item.id,
                self.definition.pxq_scales.get(item.id, ()),
                row.effective_sales,
                row.fulfillment,
            )
            return amount
        if calc_type == CalculationType.FIXED:
            return money(payable)
        if calc_type == CalculationType.BINARY:
            reached = row.fulfillment is not None and row.fulfillment >= ONE
            return money(payable) if reached else ZERO
        return money(payable * (row.fulfillment or ZERO))

    def _resolve(
        self,
        item: SchemeItem,
        row: ItemResult,
        resolved: Mapping[str, ItemResult],
        global_f: Decimal | None,
    ) -> ItemResult:
        errors = self.graph.misconfigured.get(item.id)
        if errors:
            for error in errors:
                logger.warning("Scheme %s: %s", self.definition.id, error.message)
            return self._degrade(row, "; ".join(e.message for e in errors), lock_unlocked=False)

        statuses = evaluate_locks(item.id, self.graph, resolved, global_f)
        pending = tuple(status for status in statuses if not status.met)
        row = replace(row, lock_pending=pending, lock_unlocked=not pending)

        try:
            computed = self._base_commission(item, row)
        except ConfigError as exc:
            logger.warning("Scheme %s: %s", self.definition.id, exc.message)
            return self._degrade(row, exc.message, lock_unlocked=row.lock_unlocked)

        if pending:
            logger.debug("Item %s locked by %d pending locks", item.id, len(pending))
            return replace(row, computed_commission=computed, commission=ZERO)

        cap = apply_cap(item, computed, self._payable(item))
        warnings = row.warnings + ((cap.warning,) if cap.warning else ())
        logger.debug(
            "Item %s resolved: computed=%s commission=%s cap_applied=%s",
            item.id, computed, cap.commission, cap.cap_applied,
        )
        return replace(
            row,
            computed_commission=computed,
            commission=cap.commission,
            cap_applied=cap.cap_applied,
            warnings=warnings,
        )

    @staticmethod
    def _degrade(row: ItemResult, reason: str, *, lock_unlocked: bool) -> ItemResult:
        return replace(
            row,
            computed_commission=ZERO,
            commission=ZERO,
            cap_applied=False,
            lock_unlocked=lock_unlocked,
            warnings=row.warnings + (reason,),
        )


def compute_commission(
    scheme: SchemeDefinition,
    seller_sales: Mapping[str, SalesFact] | None,
    seller_quota: QuotaSnapshot | None = None,
    penalty_amount=ZERO,
) -> CommissionResult:
    """Compute one seller's commission for one period.

    Never raises for a well-formed snapshot: every zero or reduced payout is
    explained through ``lock_pending``, ``restriction_detail``, ``warnings``
    and ``gate_applied`` on the result.
    """
    return CommissionCalculationEngine(scheme).compute(seller_sales, seller_quota, penalty_amount)
