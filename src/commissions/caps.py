"""Commission caps (topes)."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from commissions.types import SchemeItem
from core.numbers import money, to_decimal


@dataclass(frozen=True)
class CapOutcome:
    commission: Decimal
    cap_applied: bool
    cap_limit: Decimal | None = None
    warning: str | None = None


def cap_limit(item: SchemeItem, payable=None) -> Decimal | None:
    """``cap_amount`` if set, else ``cap_percentage x payable``.

    ``payable`` is the amount the item is paid from; it defaults to the
    item's ``variable_amount``.
    """
    if item.cap_amount is not None:
        return to_decimal(item.cap_amount)
    if item.cap_percentage is not None:
        base = item.variable_amount if payable is None else payable
        return money(to_decimal(item.cap_percentage) * to_decimal(base))
    return None


def apply_cap(item: SchemeItem, computed, payable=None) -> CapOutcome:
    computed = to_decimal(computed)
    if not item.has_cap:
        return CapOutcome(commission=computed, cap_applied=False)
    limit = cap_limit(item, payable)
    if limit is None:
        return CapOutcome(
            commission=computed,
            cap_applied=False,
            warning=f"La partida {item.name} tiene tope activo sin monto ni porcentaje.",
        )
    if computed > limit:
        return CapOutcome(commission=limit, cap_applied=True, cap_limit=limit)
    return CapOutcome(commission=computed, cap_applied=False, cap_limit=limit)
