"""Immutable snapshots the commission engine reads and returns.

The engine never touches the ORM: ``commissions.services`` translates scheme
rows into a :class:`SchemeDefinition`, callers build a sales mapping of
``item name -> SalesFact`` and pass a ``QuotaSnapshot`` from the quotas app.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from django.db import models

from commissions.categories import default_calculation_type, normalize_category
from core.numbers import ZERO
from quotas.distribution import QuotaSnapshot


class LockType(models.TextChoices):
    MIN_QUANTITY = "min_quantity", "Cantidad minima"
    MIN_AMOUNT = "min_amount", "Monto minimo"
    MIN_PERCENTAGE = "min_percentage", "Cumplimiento minimo de partida"
    MIN_FULFILLMENT = "min_fulfillment", "Cumplimiento global minimo"


class RestrictionType(models.TextChoices):
    MAX_PERCENTAGE = "max_percentage", "Porcentaje maximo"
    MAX_QUANTITY = "max_quantity", "Cantidad maxima"
    MIN_PERCENTAGE = "min_percentage", "Porcentaje minimo"
    OPERATOR_ORIGIN = "operator_origin", "Operador de origen"


# ---------------------------------------------------------------------------
# Scheme definition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SchemeItem:
    id: str
    name: str
    category: str
    calculation_type: str = ""
    quota: Decimal | None = None
    weight: Decimal = ZERO
    mix_factor: Decimal | None = None
    variable_amount: Decimal = ZERO
    min_fulfillment: Decimal | None = None
    has_cap: bool = False
    cap_percentage: Decimal | None = None
    cap_amount: Decimal | None = None
    is_active: bool = True
    display_order: int = 0

    @property
    def resolved_category(self) -> str:
        return normalize_category(self.category)

    @property
    def resolved_calculation_type(self) -> str:
        return self.calculation_type or default_calculation_type(self.category)


@dataclass(frozen=True)
class Lock:
    id: str
    item_id: str
    lock_type: str
    required_value: Decimal
    required_item_id: str | None = None
    is_active: bool = True
    description: str = ""


@dataclass(frozen=True)
class Restriction:
    id: str
    restriction_type: str
    item_id: str | None = None  # None: applies to every item
    plan_code: str | None = None
    operator_code: str | None = None
    max_percentage: Decimal | None = None
    max_quantity: int | None = None
    min_percentage: Decimal | None = None
    is_active: bool = True
    description: str = ""

    def matches(self, tag: "SaleTag") -> bool:
        if self.restriction_type == RestrictionType.OPERATOR_ORIGIN:
            return self.operator_code is not None and tag.operator_code == self.operator_code
        if self.plan_code is None and self.operator_code is None:
            return True
        if self.plan_code is not None and tag.plan_code != self.plan_code:
            return False
        if self.operator_code is not None and tag.operator_code != self.operator_code:
            return False
        return True


@dataclass(frozen=True)
class PxqTier:
    min_fulfillment: Decimal
    max_fulfillment: Decimal | None
    amount_per_unit: Decimal
    display_order: int = 0


@dataclass(frozen=True)
class SchemeDefinition:
    items: tuple[SchemeItem, ...]
    locks: tuple[Lock, ...] = ()
    restrictions: tuple[Restriction, ...] = ()
    pxq_scales: Mapping[str, tuple[PxqTier, ...]] = field(default_factory=dict)
    default_min_fulfillment: Decimal | None = None
    fixed_salary: Decimal = ZERO
    variable_salary: Decimal = ZERO
    total_ss_quota: int = 0
    id: str | None = None
    name: str = ""

    @property
    def active_items(self) -> tuple[SchemeItem, ...]:
        return tuple(item for item in self.items if item.is_active)

    def item_by_id(self, item_id: str) -> SchemeItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SaleTag:
    quantity: int
    plan_code: str | None = None
    operator_code: str | None = None


@dataclass(frozen=True)
class SalesFact:
    raw_count: Decimal
    tags: tuple[SaleTag, ...] = ()


SalesSnapshot = Mapping[str, SalesFact]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LockStatus:
    lock_id: str
    lock_type: str
    required_item_id: str | None
    required_item_name: str | None
    current_value: Decimal | None
    required_value: Decimal
    met: bool
    description: str


@dataclass(frozen=True)
class ItemResult:
    id: str
    name: str
    category: str
    calculation_type: str
    quota: Decimal | None
    effective_quota: Decimal | None
    raw_sales: Decimal
    effective_sales: Decimal
    fulfillment: Decimal | None
    meets_minimum: bool
    min_fulfillment: Decimal | None
    lock_unlocked: bool
    lock_pending: tuple[LockStatus, ...]
    restriction_applied: bool
    restriction_detail: tuple[str, ...]
    computed_commission: Decimal
    commission: Decimal
    cap_applied: bool
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class CommissionResult:
    items: tuple[ItemResult, ...]
    fixed_salary: Decimal
    variable_commission: Decimal
    additional_commission: Decimal
    pxq_commission: Decimal
    bonus_commission: Decimal
    total_gross: Decimal
    predicted_penalties: Decimal
    total_net: Decimal
    global_fulfillment: Decimal | None
    gate_applied: bool
    subtotals: Mapping[str, Decimal]
    warnings: tuple[str, ...] = ()
    quota_info: QuotaSnapshot | None = None

    def item(self, name: str) -> ItemResult | None:
        for item in self.items:
            if item.name == name or item.id == name:
                return item
        return None


@dataclass(frozen=True)
class ScenarioLine:
    label: str
    amount_a: Decimal
    amount_b: Decimal
    difference: Decimal
    percentage_change: Decimal


@dataclass(frozen=True)
class ScenarioDiff:
    lines: tuple[ScenarioLine, ...]
    items: tuple[ScenarioLine, ...]
    total_difference: Decimal
    percentage_difference: Decimal

    def line(self, label: str) -> ScenarioLine | None:
        for line in self.lines:
            if line.label == label:
                return line
        return None


@dataclass(frozen=True)
class WhatIfResult:
    item_name: str
    additional_sales: Decimal
    current: CommissionResult
    projected: CommissionResult
    difference: Decimal
