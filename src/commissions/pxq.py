"""Tiered per-unit (PxQ) commission.

A tier covers ``[min_fulfillment, max_fulfillment)``; a tier without a max is
open-ended. The item pays ``effective_sales x amount_per_unit`` of the tier its
fulfillment falls in.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from commissions.types import PxqTier
from core.exceptions import ConfigError
from core.numbers import ZERO, money, to_decimal


def sorted_tiers(tiers: Iterable[PxqTier]) -> list[PxqTier]:
    return sorted(tiers, key=lambda t: (to_decimal(t.min_fulfillment), t.display_order))


def select_tier(tiers: Sequence[PxqTier], fulfillment) -> PxqTier | None:
    f = to_decimal(fulfillment)
    for tier in sorted_tiers(tiers):
        if f < to_decimal(tier.min_fulfillment):
            continue
        if tier.max_fulfillment is None or f < to_decimal(tier.max_fulfillment):
            return tier
    return None


def evaluate(
    item_id: str,
    tiers: Sequence[PxqTier],
    effective_sales,
    fulfillment: Decimal | None,
) -> tuple[Decimal, PxqTier]:
    """Commission for a PxQ item. Items without quota are evaluated at 0.

    Raises
    ------
    ConfigError
        No tier covers the fulfillment (missing scale or a gap).
    """
    f = fulfillment if fulfillment is not None else ZERO
    if not tiers:
        raise ConfigError(
            f"La partida {item_id} es PxQ pero no tiene escala configurada.",
            item_id=item_id,
        )
    tier = select_tier(tiers, f)
    if tier is None:
        raise ConfigError(
            f"Ningun tramo PxQ cubre el cumplimiento {f:.4f} de la partida {item_id}.",
            item_id=item_id,
            details={"fulfillment": f},
        )
    return money(to_decimal(effective_sales) * to_decimal(tier.amount_per_unit)), tier


def validate_scales(item_id: str, tiers: Iterable[PxqTier]) -> list[ConfigError]:
    """Report gaps, overlaps and empty or non-final open tiers.

    A valid scale starts at 0 and ends with an open tier, so every
    fulfillment value from 0 upward lands in exactly one tier.
    """
    ordered = sorted_tiers(tiers)
    errors: list[ConfigError] = []
    if not ordered:
        errors.append(ConfigError(
            f"La partida {item_id} es PxQ pero no tiene escala configurada.",
            item_id=item_id,
        ))
        return errors

    first_min = to_decimal(ordered[0].min_fulfillment)
    if first_min > 0:
        errors.append(ConfigError(
            f"Escala PxQ de {item_id}: hueco entre 0 y {first_min}.",
            item_id=item_id,
            details={"gap": (ZERO, first_min)},
        ))

    for index, tier in enumerate(ordered):
        low = to_decimal(tier.min_fulfillment)
        high = None if tier.max_fulfillment is None else to_decimal(tier.max_fulfillment)
        if high is not None and high <= low:
            errors.append(ConfigError(
                f"Escala PxQ de {item_id}: tramo vacio [{low}, {high}).",
                item_id=item_id,
            ))
        is_last = index == len(ordered) - 1
        if is_last:
            if high is not None:
                errors.append(ConfigError(
                    f"Escala PxQ de {item_id}: sin tramo abierto por encima de {high}.",
                    item_id=item_id,
                    details={"gap": (high, None)},
                ))
            continue
        next_low = to_decimal(ordered[index + 1].min_fulfillment)
        if high is None:
            errors.append(ConfigError(
                f"Escala PxQ de {item_id}: tramo abierto desde {low} no es el ultimo.",
                item_id=item_id,
            ))
        elif high < next_low:
            errors.append(ConfigError(
                f"Escala PxQ de {item_id}: hueco entre {high} y {next_low}.",
                item_id=item_id,
                details={"gap": (high, next_low)},
            ))
        elif high > next_low:
            errors.append(ConfigError(
                f"Escala PxQ de {item_id}: tramos superpuestos en [{next_low}, {high}).",
                item_id=item_id,
                details={"overlap": (next_low, high)},
            ))
    return errors
