"""Synthetic sales profiles and what-if projections for the simulator."""
from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from django.db import models

from commissions.engine import as_sales_fact, compute_commission
from commissions.types import SalesFact, SchemeDefinition, SchemeItem, WhatIfResult
from core.numbers import ONE, ZERO, round_half_up, to_decimal
from quotas.distribution import QuotaSnapshot


class SalesProfile(models.TextChoices):
    AVERAGE = "average", "Promedio"
    TOP20 = "top20", "Top 20%"
    NEW = "new", "Nuevo"
    QUOTA100 = "quota100", "Cumple 100%"
    CUSTOM = "custom", "Personalizado"


PROFILE_MULTIPLIERS = {
    SalesProfile.AVERAGE: Decimal("0.75"),
    SalesProfile.TOP20: Decimal("1.15"),
    SalesProfile.NEW: Decimal("0.5"),
    SalesProfile.QUOTA100: ONE,
    SalesProfile.CUSTOM: ONE,
}

# Quotas at or above this are projected in whole units.
WHOLE_UNIT_THRESHOLD = Decimal("10")


def profile_item_quota(item: SchemeItem, quota: QuotaSnapshot | None) -> Decimal | None:
    """Quota a profile is scaled from: prorated breakdown, nominal x factor, scheme."""
    if quota is not None:
        effective = quota.effective_breakdown.get(item.name)
        if effective:
            return effective
        nominal = quota.quota_breakdown.get(item.name)
        if nominal:
            return to_decimal(nominal) * to_decimal(quota.proration_factor or ONE)
    if item.quota is not None and to_decimal(item.quota) > 0:
        return to_decimal(item.quota)
    return None


def generate_sales_profile(
    definition: SchemeDefinition,
    profile: str,
    quota: QuotaSnapshot | None = None,
) -> dict[str, SalesFact]:
    """Sales that a seller of ``profile`` would post against each item quota.

    Items with no quota anywhere are left out.
    """
    multiplier = PROFILE_MULTIPLIERS[SalesProfile(profile)]
    sales: dict[str, SalesFact] = {}
    for item in definition.active_items:
        item_quota = profile_item_quota(item, quota)
        if item_quota is None:
            continue
        value = item_quota * multiplier
        places = 0 if item_quota >= WHOLE_UNIT_THRESHOLD else 1
        sales[item.name] = SalesFact(raw_count=round_half_up(value, places))
    return sales


def adjust_sales_for_what_if(
    sales: Mapping[str, SalesFact],
    item_name: str,
    additional_sales,
) -> dict[str, SalesFact]:
    """Copy of ``sales`` with ``additional_sales`` more units on ``item_name``."""
    adjusted = {name: as_sales_fact(fact) for name, fact in sales.items()}
    current = adjusted.get(item_name, SalesFact(raw_count=ZERO))
    adjusted[item_name] = SalesFact(
        raw_count=to_decimal(current.raw_count) + to_decimal(additional_sales),
        tags=current.tags,
    )
    return adjusted


def what_if(
    definition: SchemeDefinition,
    sales: Mapping[str, SalesFact],
    quota: QuotaSnapshot | None,
    item_name: str,
    additional_sales,
    penalty_amount=ZERO,
) -> WhatIfResult:
    current = compute_commission(definition, sales, quota, penalty_amount)
    projected = compute_commission(
        definition,
        adjust_sales_for_what_if(sales, item_name, additional_sales),
        quota,
        penalty_amount,
    )
    return WhatIfResult(
        item_name=item_name,
        additional_sales=to_decimal(additional_sales),
        current=current,
        projected=projected,
        difference=projected.total_net - current.total_net,
    )
