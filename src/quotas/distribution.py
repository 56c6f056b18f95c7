"""Quota distribution: split a store quota into per-seller (HC) quotas.

Pure functions over plain values. The ORM layer in ``quotas.services`` feeds
``StoreQuota`` rows in and persists the returned allocations.

Rules:
- the nominal shares must add up exactly to the store quota, checked before
  any proration is applied;
- a seller starting after day 1 gets ``(days_in_month - day + 1) / days_in_month``
  of the quota, rounded half-up to 4 decimals;
- the store sub-quota breakdown is split in proportion to each nominal share.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping

from core.exceptions import ConflictError, ValidationError
from core.numbers import ONE, ZERO, round_half_up, to_decimal

APPROVED = "approved"


@dataclass(frozen=True)
class SellerShare:
    """One line of a distribution request."""

    seller_id: Any
    ss_quota: int
    start_date: date | None = None


@dataclass(frozen=True)
class HcQuotaAllocation:
    """Computed quota for one seller, ready to persist as an ``HcQuota`` row."""

    seller_id: Any
    ss_quota: int
    quota_breakdown: dict[str, int]
    start_date: date | None
    proration_factor: Decimal
    prorated_ss_quota: Decimal


@dataclass(frozen=True)
class QuotaSnapshot:
    """A seller's quota for one period, as consumed by the commission engine."""

    ss_quota: Decimal
    proration_factor: Decimal = ONE
    prorated_ss_quota: Decimal | None = None
    quota_breakdown: Mapping[str, Decimal] = field(default_factory=dict)
    start_date: date | None = None
    source: str = "hc_quotas"

    @property
    def effective_quota(self) -> Decimal:
        if self.prorated_ss_quota is not None:
            return self.prorated_ss_quota
        return prorate(self.ss_quota, self.proration_factor)

    @property
    def effective_breakdown(self) -> dict[str, Decimal]:
        return {
            key: prorate(value, self.proration_factor)
            for key, value in self.quota_breakdown.items()
        }


# ---------------------------------------------------------------------------
# Period helpers
# ---------------------------------------------------------------------------

def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def period_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(year, month))


# ---------------------------------------------------------------------------
# Proration
# ---------------------------------------------------------------------------

def compute_proration_factor(start_date: date | None, year: int, month: int) -> Decimal:
    """Fraction of the period a seller starting on ``start_date`` works."""
    if start_date is None:
        return ONE
    first_day, last_day = period_bounds(year, month)
    if start_date <= first_day:
        return ONE
    if start_date > last_day:
        return ZERO
    total_days = days_in_month(year, month)
    days_worked = total_days - start_date.day + 1
    return round_half_up(Decimal(days_worked) / Decimal(total_days), 4)


def prorate(quota, factor) -> Decimal:
    return round_half_up(to_decimal(quota) * to_decimal(factor), 2)


def split_breakdown(
    store_breakdown: Mapping[str, Any] | None,
    seller_quota,
    store_quota,
) -> dict[str, int]:
    """Split each store sub-quota in proportion to ``seller_quota / store_quota``."""
    store_breakdown = store_breakdown or {}
    store_total = to_decimal(store_quota)
    if store_total == 0:
        return {key: 0 for key in store_breakdown}
    seller_total = to_decimal(seller_quota)
    result = {}
    for key, value in store_breakdown.items():
        if value is None or isinstance(value, bool):
            continue
        result[key] = int(round_half_up(to_decimal(value) * seller_total / store_total))
    return result


# ---------------------------------------------------------------------------
# Distribution
# ---------------------------------------------------------------------------

def validate_shares(store_ss_quota, seller_shares: Iterable[SellerShare]) -> list[SellerShare]:
    """Check a full distribution request and return it as a list.

    Raises
    ------
    ValidationError
        Empty request, negative or duplicated share, or a total that does not
        match the store quota.
    """
    shares = list(seller_shares)
    if not shares:
        raise ValidationError("Se requiere al menos una distribucion.")

    seen = set()
    for share in shares:
        if to_decimal(share.ss_quota) < 0:
            raise ValidationError(
                f"La cuota del vendedor {share.seller_id} no puede ser negativa.",
                details={"seller_id": share.seller_id},
            )
        if share.seller_id in seen:
            raise ValidationError(
                f"El vendedor {share.seller_id} aparece mas de una vez.",
                details={"seller_id": share.seller_id},
            )
        seen.add(share.seller_id)

    total = sum((to_decimal(s.ss_quota) for s in shares), ZERO)
    expected = to_decimal(store_ss_quota)
    if total != expected:
        raise ValidationError(
            f"La suma de cuotas ({total}) no coincide con la cuota de tienda ({expected}).",
            details={
                "total_distributed": total,
                "store_quota": expected,
                "difference": expected - total,
            },
        )
    return shares


def allocate_share(store_quota, share: SellerShare) -> HcQuotaAllocation:
    """Compute one seller's allocation against ``store_quota``."""
    factor = compute_proration_factor(share.start_date, store_quota.year, store_quota.month)
    return HcQuotaAllocation(
        seller_id=share.seller_id,
        ss_quota=share.ss_quota,
        quota_breakdown=split_breakdown(
            store_quota.quota_breakdown, share.ss_quota, store_quota.ss_quota,
        ),
        start_date=share.start_date if factor != ONE else None,
        proration_factor=factor,
        prorated_ss_quota=prorate(share.ss_quota, factor),
    )


def distribute_quota(store_quota, seller_shares: Iterable[SellerShare]) -> list[HcQuotaAllocation]:
    """Split ``store_quota`` among sellers.

    ``store_quota`` is anything exposing ``status``, ``ss_quota``, ``year``,
    ``month`` and ``quota_breakdown`` (a ``StoreQuota`` row works).

    Raises
    ------
    ConflictError
        The store quota is already approved.
    ValidationError
        See :func:`validate_shares`.
    """
    if str(store_quota.status) == APPROVED:
        raise ConflictError("No se puede redistribuir una cuota ya aprobada.")
    shares = validate_shares(store_quota.ss_quota, seller_shares)
    return [allocate_share(store_quota, share) for share in shares]
