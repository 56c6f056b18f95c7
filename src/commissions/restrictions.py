"""Restriction enforcement: how many tagged sales count toward an item.

Every truncating restriction limits the total of the sales it matches, across
every plan/operator bucket it covers. Restrictions are enforced tightest
first and each one only trims what is still over its limit, so the outcome
does not depend on restriction order and repeating a restriction changes
nothing. ``min_percentage`` restrictions never reduce the count; they only
flag the item.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from commissions.locks import node_key
from commissions.types import Restriction, RestrictionType, SaleTag, SalesFact, SchemeItem
from core.numbers import ZERO, floor_int, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestrictionOutcome:
    raw_sales: Decimal
    effective_sales: Decimal
    applied: bool
    details: tuple[str, ...] = ()


def restrictions_for(item: SchemeItem, restrictions: Iterable[Restriction]) -> list[Restriction]:
    """Active restrictions scoped to ``item`` plus the scheme-wide ones."""
    return [
        r for r in restrictions
        if r.is_active and (r.item_id is None or r.item_id == item.id)
    ]


def merge_tags(tags: Iterable[SaleTag]) -> list[SaleTag]:
    """Collapse tags sharing plan and operator into one bucket."""
    buckets: OrderedDict[tuple, int] = OrderedDict()
    for tag in tags:
        key = (tag.plan_code, tag.operator_code)
        buckets[key] = buckets.get(key, 0) + int(tag.quantity)
    return [
        SaleTag(quantity=quantity, plan_code=plan, operator_code=operator)
        for (plan, operator), quantity in buckets.items()
    ]


def restriction_limit(restriction: Restriction, item_raw_count) -> int | None:
    """How many matching sales ``restriction`` lets through, or ``None``.

    The limit field follows the restriction type. ``operator_origin`` takes
    whichever of the two is set and, with neither, lets nothing through.
    """
    kind = restriction.restriction_type
    percentage = quantity = None
    if kind == RestrictionType.MAX_PERCENTAGE:
        percentage = restriction.max_percentage
    elif kind == RestrictionType.MAX_QUANTITY:
        quantity = restriction.max_quantity
    elif kind == RestrictionType.OPERATOR_ORIGIN:
        percentage = restriction.max_percentage
        quantity = restriction.max_quantity
        if percentage is None and quantity is None:
            return 0
    else:
        return None

    if percentage is not None:
        return max(floor_int(to_decimal(item_raw_count) * to_decimal(percentage)), 0)
    if quantity is not None:
        return max(int(quantity), 0)
    return None


def _describe(restriction: Restriction) -> str:
    if restriction.description:
        return restriction.description
    scope = restriction.plan_code or restriction.operator_code or "todas"
    return f"{RestrictionType(restriction.restriction_type).label} ({scope})"


def _trim(counted: list[int], indexes: list[int], excess: int) -> None:
    """Remove ``excess`` sales from the buckets at ``indexes``, first bucket first."""
    for index in indexes:
        if excess <= 0:
            return
        taken = min(counted[index], excess)
        counted[index] -= taken
        excess -= taken


def apply_restrictions(
    item: SchemeItem,
    fact: SalesFact | None,
    restrictions: Iterable[Restriction],
) -> RestrictionOutcome:
    """Compute the item's effective sales after every applicable restriction."""
    raw = to_decimal(fact.raw_count) if fact is not None else ZERO
    applicable = restrictions_for(item, restrictions)
    if fact is None or not applicable:
        return RestrictionOutcome(raw_sales=raw, effective_sales=raw, applied=False)

    tags = merge_tags(fact.tags)
    counted = [int(tag.quantity) for tag in tags]
    details: list[str] = []

    limited = []
    for restriction in applicable:
        limit = restriction_limit(restriction, raw)
        if limit is not None:
            limited.append((limit, node_key(restriction.id), restriction))
    limited.sort(key=lambda entry: entry[:2])

    for limit, _, restriction in limited:
        indexes = [i for i, tag in enumerate(tags) if restriction.matches(tag)]
        matching = sum(counted[i] for i in indexes)
        if matching <= limit:
            continue
        _trim(counted, indexes, matching - limit)
        details.append(f"{_describe(restriction)}: {matching} ventas, cuentan {limit}")

    for restriction in applicable:
        if restriction.restriction_type != RestrictionType.MIN_PERCENTAGE:
            continue
        if restriction.min_percentage is None or raw <= 0:
            continue
        matching = sum(int(tag.quantity) for tag in tags if restriction.matches(tag))
        share = Decimal(matching) / raw
        if share < to_decimal(restriction.min_percentage):
            details.append(
                f"{_describe(restriction)}: {share:.2%} por debajo del minimo "
                f"{to_decimal(restriction.min_percentage):.2%}"
            )

    excess = sum(int(tag.quantity) for tag in tags) - sum(counted)
    effective = max(raw - excess, ZERO)
    if details:
        logger.debug(
            "Restrictions on item %s: raw=%s effective=%s", item.id, raw, effective,
        )
    return RestrictionOutcome(
        raw_sales=raw,
        effective_sales=effective,
        applied=bool(details),
        details=tuple(details),
    )
