"""Business-logic / service functions for commission schemes.

Translates scheme rows into the immutable ``SchemeDefinition`` the engine
consumes and owns the scheme lifecycle (draft -> aprobado -> archivado).
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from commissions.categories import CalculationType, ItemCategory
from commissions.locks import build_lock_graph, topological_order
from commissions.models import (
    CommissionScheme,
    ItemLock,
    PxqScale,
    SchemeItem as SchemeItemRow,
    SchemeRestriction,
    SchemeStatus,
)
from commissions.pxq import validate_scales
from commissions.types import (
    Lock,
    PxqTier,
    Restriction,
    SchemeDefinition,
    SchemeItem,
)
from core.cache import ExpiringCache
from core.exceptions import ConfigError, ConflictError, CycleError, ValidationError
from core.numbers import ONE, ZERO, to_decimal

logger = logging.getLogger("comisiones")

WEIGHT_TOLERANCE = Decimal("0.001")


# ---------------------------------------------------------------------------
# Snapshot translation
# ---------------------------------------------------------------------------

def _none_if_blank(value: str | None) -> str | None:
    return value or None


def build_scheme_definition(scheme: CommissionScheme) -> SchemeDefinition:
    """Freeze ``scheme`` and its related rows into a ``SchemeDefinition``."""
    rows = list(scheme.items.all().order_by("display_order", "id"))
    items = tuple(
        SchemeItem(
            id=str(row.pk),
            name=row.key,
            category=row.category,
            calculation_type=row.resolved_calculation_type,
            quota=row.quota,
            weight=row.weight,
            mix_factor=row.mix_factor,
            variable_amount=row.variable_amount,
            min_fulfillment=row.min_fulfillment,
            has_cap=row.has_cap,
            cap_percentage=row.cap_percentage,
            cap_amount=row.cap_amount,
            is_active=row.is_active,
            display_order=row.display_order,
        )
        for row in rows
    )
    locks = tuple(
        Lock(
            id=str(lock.pk),
            item_id=str(lock.item_id),
            lock_type=lock.lock_type,
            required_value=lock.required_value,
            required_item_id=str(lock.required_item_id) if lock.required_item_id else None,
            is_active=lock.is_active,
            description=lock.description,
        )
        for lock in ItemLock.objects.filter(item__scheme=scheme).order_by("id")
    )
    restrictions = tuple(
        Restriction(
            id=str(r.pk),
            restriction_type=r.restriction_type,
            item_id=str(r.item_id) if r.item_id else None,
            plan_code=_none_if_blank(r.plan_code),
            operator_code=_none_if_blank(r.operator_code),
            max_percentage=r.max_percentage,
            max_quantity=r.max_quantity,
            min_percentage=r.min_percentage,
            is_active=r.is_active,
            description=r.description,
        )
        for r in scheme.restrictions.all().order_by("id")
    )
    scales: dict[str, list[PxqTier]] = {}
    for scale in PxqScale.objects.filter(item__scheme=scheme).order_by("display_order", "min_fulfillment"):
        scales.setdefault(str(scale.item_id), []).append(PxqTier(
            min_fulfillment=scale.min_fulfillment,
            max_fulfillment=scale.max_fulfillment,
            amount_per_unit=scale.amount_per_unit,
            display_order=scale.display_order,
        ))

    return SchemeDefinition(
        items=items,
        locks=locks,
        restrictions=restrictions,
        pxq_scales={item_id: tuple(tiers) for item_id, tiers in scales.items()},
        default_min_fulfillment=scheme.default_min_fulfillment,
        fixed_salary=scheme.fixed_salary,
        variable_salary=scheme.variable_salary,
        total_ss_quota=scheme.total_ss_quota,
        id=str(scheme.pk),
        name=scheme.name,
    )


def new_scheme_cache() -> ExpiringCache:
    return ExpiringCache(getattr(settings, "COMMISSION_SCHEME_CACHE_TTL", 300))


def load_scheme_definition(scheme_id, cache: ExpiringCache | None = None) -> SchemeDefinition:
    """Load a scheme snapshot, memoized through the caller's cache if given."""

    def fetch() -> SchemeDefinition:
        scheme = CommissionScheme.objects.get(pk=scheme_id)
        return build_scheme_definition(scheme)

    if cache is None:
        return fetch()
    return cache.get_or_fetch(("scheme", str(scheme_id)), fetch)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def ensure_scheme_editable(scheme: CommissionScheme) -> None:
    """Raise ``ConflictError`` unless ``scheme`` is a draft."""
    if not scheme.is_editable:
        raise ConflictError(
            f"El esquema {scheme.code} esta {scheme.get_status_display().lower()} "
            "y no se puede modificar. Clonelo para crear un borrador.",
            details={"scheme_id": scheme.pk, "status": scheme.status},
        )


def validate_scheme(definition: SchemeDefinition) -> list[ConfigError]:
    """Every configuration defect that would degrade some item at runtime."""
    issues: list[ConfigError] = []

    graph = build_lock_graph(definition)
    issues.extend(graph.errors)
    try:
        topological_order(graph)
    except CycleError as exc:
        issues.append(exc)

    for item in definition.active_items:
        if item.resolved_calculation_type == CalculationType.PXQ:
            issues.extend(validate_scales(item.id, definition.pxq_scales.get(item.id, ())))

    principal = [i for i in definition.active_items if i.resolved_category == ItemCategory.PRINCIPAL]
    total_weight = sum((to_decimal(i.weight) for i in principal), ZERO)
    if total_weight > 0 and abs(total_weight - ONE) > WEIGHT_TOLERANCE:
        issues.append(ConfigError(
            f"Los pesos de las partidas principales suman {total_weight}, deben sumar 1.",
            details={"total_weight": total_weight},
        ))
    return issues


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@transaction.atomic
def approve_scheme(scheme: CommissionScheme, approved_by, notes: str = "") -> CommissionScheme:
    """Approve a draft scheme, archiving the approved one it replaces.

    Raises
    ------
    ConflictError
        If the scheme is not a draft.
    ValidationError
        If the scheme has no items or fails :func:`validate_scheme`.
    """
    scheme = CommissionScheme.objects.select_for_update().get(pk=scheme.pk)
    ensure_scheme_editable(scheme)

    if not scheme.items.exists():
        raise ValidationError("El esquema debe tener al menos una partida para ser aprobado.")

    issues = validate_scheme(build_scheme_definition(scheme))
    if issues:
        raise ValidationError(
            "El esquema tiene errores de configuracion.",
            details={"issues": [issue.message for issue in issues]},
        )

    archived = (
        CommissionScheme.objects.filter(
            scheme_type=scheme.scheme_type,
            year=scheme.year,
            month=scheme.month,
            status=SchemeStatus.APROBADO,
        )
        .exclude(pk=scheme.pk)
        .update(status=SchemeStatus.ARCHIVADO, updated_at=timezone.now())
    )

    scheme.status = SchemeStatus.APROBADO
    scheme.approved_by = approved_by
    scheme.approved_at = timezone.now()
    scheme.approval_notes = notes
    scheme.save(update_fields=["status", "approved_by", "approved_at", "approval_notes", "updated_at"])

    logger.info(
        "Scheme %s approved by %s (%d previous schemes archived)",
        scheme.code, approved_by, archived,
    )
    return scheme


@transaction.atomic
def clone_scheme(
    scheme: CommissionScheme,
    created_by=None,
    *,
    name: str | None = None,
    code: str | None = None,
) -> CommissionScheme:
    """Copy ``scheme`` with its items, locks, restrictions and scales into a new draft.

    Raises
    ------
    ValidationError
        If ``code`` is already taken.
    """
    code = code or f"{scheme.code}_COPIA"
    if CommissionScheme.objects.filter(code=code).exists():
        raise ValidationError(
            f"Ya existe un esquema con el codigo {code}.",
            details={"code": code},
        )

    clone = CommissionScheme.objects.create(
        name=name or f"{scheme.name} (Copia)",
        code=code,
        description=scheme.description,
        scheme_type=scheme.scheme_type,
        year=scheme.year,
        month=scheme.month,
        status=SchemeStatus.DRAFT,
        source=CommissionScheme.Source.SOCIO,
        parent_scheme=scheme,
        fixed_salary=scheme.fixed_salary,
        variable_salary=scheme.variable_salary,
        total_ss_quota=scheme.total_ss_quota,
        default_min_fulfillment=scheme.default_min_fulfillment,
        created_by=created_by,
    )

    item_map: dict[int, SchemeItemRow] = {}
    for item in scheme.items.all().order_by("id"):
        old_pk = item.pk
        item.pk = None
        item._state.adding = True
        item.scheme = clone
        item.save()
        item_map[old_pk] = item

    for lock in ItemLock.objects.filter(item__scheme=scheme).order_by("id"):
        ItemLock.objects.create(
            item=item_map[lock.item_id],
            required_item=item_map.get(lock.required_item_id),
            lock_type=lock.lock_type,
            required_value=lock.required_value,
            is_active=lock.is_active,
            description=lock.description,
        )

    SchemeRestriction.objects.bulk_create([
        SchemeRestriction(
            scheme=clone,
            item=item_map.get(r.item_id),
            restriction_type=r.restriction_type,
            plan_code=r.plan_code,
            operator_code=r.operator_code,
            max_percentage=r.max_percentage,
            max_quantity=r.max_quantity,
            min_percentage=r.min_percentage,
            is_active=r.is_active,
            description=r.description,
        )
        for r in scheme.restrictions.all().order_by("id")
    ])

    PxqScale.objects.bulk_create([
        PxqScale(
            item=item_map[scale.item_id],
            min_fulfillment=scale.min_fulfillment,
            max_fulfillment=scale.max_fulfillment,
            amount_per_unit=scale.amount_per_unit,
            display_order=scale.display_order,
        )
        for scale in PxqScale.objects.filter(item__scheme=scheme).order_by("id")
    ])

    logger.info("Scheme %s cloned into draft %s", scheme.code, clone.code)
    return clone
