"""Business-logic / service functions for the quotas app."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from django.db import transaction
from django.db.models import Case, IntegerField, Sum, Value, When
from django.utils import timezone

from core.exceptions import ConflictError, ValidationError
from quotas.distribution import (
    QuotaSnapshot,
    SellerShare,
    allocate_share,
    distribute_quota,
)
from quotas.models import EDITABLE_STATUSES, HcQuota, QuotaStatus, StoreQuota

logger = logging.getLogger("comisiones")


@dataclass(frozen=True)
class DistributionStatus:
    hc_count: int
    total_distributed: int
    remaining: int
    state: str  # no_hc | empty | partial | complete | over


# ---------------------------------------------------------------------------
# replace_distribution
# ---------------------------------------------------------------------------

@transaction.atomic
def replace_distribution(
    store_quota: StoreQuota,
    seller_shares: Iterable[SellerShare],
    distributed_by=None,
) -> list[HcQuota]:
    """Replace the draft HC distribution of ``store_quota`` wholesale.

    The StoreQuota row is locked for the whole operation, so readers never
    observe a half-replaced distribution. Re-running with the same shares
    yields the same rows.

    Raises
    ------
    ConflictError
        If the store quota is approved.
    ValidationError
        If the shares do not add up to the store quota.
    """
    store_quota = StoreQuota.objects.select_for_update().get(pk=store_quota.pk)
    allocations = distribute_quota(store_quota, seller_shares)

    deleted, _ = HcQuota.objects.filter(
        store_quota=store_quota,
        status__in=EDITABLE_STATUSES,
    ).delete()

    now = timezone.now()
    rows = HcQuota.objects.bulk_create([
        HcQuota(
            seller_id=allocation.seller_id,
            store_quota=store_quota,
            store_id=store_quota.store_id,
            year=store_quota.year,
            month=store_quota.month,
            ss_quota=allocation.ss_quota,
            quota_breakdown=allocation.quota_breakdown,
            start_date=allocation.start_date,
            proration_factor=allocation.proration_factor,
            prorated_ss_quota=allocation.prorated_ss_quota,
            status=QuotaStatus.DRAFT,
            distributed_by=distributed_by,
            distributed_at=now,
        )
        for allocation in allocations
    ])

    if store_quota.status != QuotaStatus.DRAFT:
        store_quota.status = QuotaStatus.DRAFT
        store_quota.save(update_fields=["status", "updated_at"])

    logger.info(
        "Store quota %s distributed among %d sellers (%d draft rows replaced)",
        store_quota.pk, len(rows), deleted,
    )
    return rows


# ---------------------------------------------------------------------------
# assign_hc_quota
# ---------------------------------------------------------------------------

@transaction.atomic
def assign_hc_quota(
    store_quota: StoreQuota,
    seller,
    ss_quota: int,
    start_date: date | None = None,
    distributed_by=None,
) -> HcQuota:
    """Create or update a single seller's draft quota.

    Unlike :func:`replace_distribution` this does not check the total, so a
    distribution may be built up one seller at a time. Approval enforces the
    total.
    """
    store_quota = StoreQuota.objects.select_for_update().get(pk=store_quota.pk)
    if not store_quota.is_editable:
        raise ConflictError(
            f"La cuota de tienda {store_quota.pk} esta {store_quota.get_status_display().lower()} "
            "y no se puede modificar."
        )
    if ss_quota < 0:
        raise ValidationError("La cuota no puede ser negativa.")

    allocation = allocate_share(
        store_quota,
        SellerShare(seller_id=seller.pk, ss_quota=ss_quota, start_date=start_date),
    )
    hc_quota, created = HcQuota.objects.update_or_create(
        store_quota=store_quota,
        seller=seller,
        defaults={
            "store_id": store_quota.store_id,
            "year": store_quota.year,
            "month": store_quota.month,
            "ss_quota": allocation.ss_quota,
            "quota_breakdown": allocation.quota_breakdown,
            "start_date": allocation.start_date,
            "proration_factor": allocation.proration_factor,
            "prorated_ss_quota": allocation.prorated_ss_quota,
            "status": QuotaStatus.DRAFT,
            "distributed_by": distributed_by,
            "distributed_at": timezone.now(),
        },
    )
    logger.info(
        "HC quota %s for seller %s on store quota %s (ss_quota=%d)",
        "created" if created else "updated", seller.pk, store_quota.pk, ss_quota,
    )
    return hc_quota


# ---------------------------------------------------------------------------
# approve_store_quotas
# ---------------------------------------------------------------------------

@transaction.atomic
def approve_store_quotas(
    store_quotas: Iterable[StoreQuota],
    approved_by,
    notes: str = "",
) -> int:
    """Approve store quotas and their HC rows together.

    Returns
    -------
    int
        Number of store quotas approved.

    Raises
    ------
    ValidationError
        A quota is missing, or its HC rows do not add up to its SS quota.
    ConflictError
        A quota is already approved.
    """
    ids = [sq.pk for sq in store_quotas]
    if not ids:
        raise ValidationError("Se requiere al menos una cuota de tienda.")

    locked = list(StoreQuota.objects.select_for_update().filter(pk__in=ids))
    if len(locked) != len(set(ids)):
        found = {sq.pk for sq in locked}
        raise ValidationError(
            "Algunas cuotas no fueron encontradas.",
            details={"missing": sorted(set(ids) - found)},
        )

    already_approved = [sq.pk for sq in locked if sq.status == QuotaStatus.APPROVED]
    if already_approved:
        raise ConflictError(
            "Algunas cuotas ya estan aprobadas.",
            details={"already_approved": already_approved},
        )

    mismatches = {}
    for sq in locked:
        distributed = _distributed_total(sq)
        if distributed != sq.ss_quota:
            mismatches[sq.pk] = {"store_quota": sq.ss_quota, "total_distributed": distributed}
    if mismatches:
        raise ValidationError(
            "La distribucion no coincide con la cuota de tienda.",
            details={"mismatches": mismatches},
        )

    now = timezone.now()
    StoreQuota.objects.filter(pk__in=ids).update(
        status=QuotaStatus.APPROVED,
        approved_by=approved_by,
        approved_at=now,
        approval_notes=notes,
        updated_at=now,
    )
    HcQuota.objects.filter(
        store_quota_id__in=ids,
        status__in=EDITABLE_STATUSES,
    ).update(
        status=QuotaStatus.APPROVED,
        approved_by=approved_by,
        approved_at=now,
        updated_at=now,
    )
    logger.info("Approved %d store quotas by %s", len(ids), approved_by)
    return len(ids)


# ---------------------------------------------------------------------------
# Read helpers
# ---------------------------------------------------------------------------

def get_distribution_status(store_quota: StoreQuota) -> DistributionStatus:
    """Summarise how much of ``store_quota`` has been handed out."""
    agg = store_quota.hc_quotas.exclude(status=QuotaStatus.ARCHIVED).aggregate(
        total=Sum("ss_quota"),
    )
    hc_count = store_quota.hc_quotas.exclude(status=QuotaStatus.ARCHIVED).count()
    total = agg["total"] or 0
    remaining = store_quota.ss_quota - total

    if hc_count == 0:
        state = "no_hc"
    elif total == 0:
        state = "empty"
    elif remaining == 0:
        state = "complete"
    elif remaining < 0:
        state = "over"
    else:
        state = "partial"
    return DistributionStatus(
        hc_count=hc_count,
        total_distributed=total,
        remaining=remaining,
        state=state,
    )


def get_effective_quota(seller, year: int, month: int) -> QuotaSnapshot | None:
    """Return the seller's quota for the period, preferring the approved row.

    ``None`` means no quota was distributed; callers fall back to the
    scheme's own item quotas.
    """
    hc_quota = (
        HcQuota.objects.filter(seller=seller, year=year, month=month)
        .exclude(status=QuotaStatus.ARCHIVED)
        .annotate(
            approved_first=Case(
                When(status=QuotaStatus.APPROVED, then=Value(0)),
                default=Value(1),
                output_field=IntegerField(),
            )
        )
        .order_by("approved_first", "-updated_at")
        .first()
    )
    if hc_quota is None:
        return None
    return hc_quota.to_snapshot()


def _distributed_total(store_quota: StoreQuota) -> int:
    agg = store_quota.hc_quotas.exclude(status=QuotaStatus.ARCHIVED).aggregate(
        total=Sum("ss_quota"),
    )
    return agg["total"] or 0
