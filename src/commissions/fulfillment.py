"""Fulfillment (cumplimiento) ratios for items and for the principal block."""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from commissions.categories import ItemCategory, group_by_category
from commissions.types import SchemeItem
from core.numbers import ONE, ZERO, to_decimal
from quotas.distribution import QuotaSnapshot, prorate


def effective_item_quota(item: SchemeItem, quota: QuotaSnapshot | None) -> Decimal | None:
    """Quota the seller is measured against for ``item``.

    The seller's own breakdown wins over the scheme quota. Either is scaled by
    the seller's proration factor.
    """
    base = None
    if quota is not None and quota.quota_breakdown.get(item.name) is not None:
        base = to_decimal(quota.quota_breakdown[item.name])
    elif item.quota is not None:
        base = to_decimal(item.quota)
    if base is None:
        return None
    factor = quota.proration_factor if quota is not None else ONE
    return prorate(base, factor)


def item_fulfillment(effective_sales, effective_quota) -> Decimal | None:
    """``effective_sales / effective_quota``, or ``None`` without a positive quota."""
    if effective_quota is None:
        return None
    effective_quota = to_decimal(effective_quota)
    if effective_quota <= 0:
        return None
    return to_decimal(effective_sales) / effective_quota


def global_fulfillment(rows: Iterable) -> Decimal | None:
    """Ratio of sums over principal rows that carry a quota.

    ``rows`` are objects with ``category``, ``effective_sales`` and
    ``effective_quota`` (``ItemResult`` works). Returns ``None`` when no
    principal item has a quota.
    """
    principal = group_by_category(rows)[ItemCategory.PRINCIPAL]
    total_sales = ZERO
    total_quota = ZERO
    for row in principal:
        if row.effective_quota is None or row.effective_quota <= 0:
            continue
        total_sales += to_decimal(row.effective_sales)
        total_quota += to_decimal(row.effective_quota)
    if total_quota == 0:
        return None
    return total_sales / total_quota
