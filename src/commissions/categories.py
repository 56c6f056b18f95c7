"""Item categories and calculation types, and the one grouping function.

Fulfillment, aggregation and the what-if tools all group items through
:func:`group_by_category` so they never disagree on which categories exist.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import TypeVar

from django.db import models

from core.numbers import ZERO

T = TypeVar("T")


class ItemCategory(models.TextChoices):
    PRINCIPAL = "principal", "Principal"
    ADICIONAL = "adicional", "Adicional"
    PXQ = "pxq", "PxQ"
    POSTVENTA = "postventa", "Postventa"
    BONO = "bono", "Bono"


class CalculationType(models.TextChoices):
    PERCENTAGE = "percentage", "Porcentaje"
    PXQ = "pxq", "PxQ"
    BINARY = "binary", "Binario"
    FIXED = "fixed", "Fijo"


CATEGORY_ORDER = tuple(ItemCategory.values)

# Categories paid out of the "additional" line of the payslip.
ADDITIONAL_CATEGORIES = (ItemCategory.ADICIONAL, ItemCategory.POSTVENTA)

DEFAULT_CALCULATION_TYPE = {
    ItemCategory.PXQ: CalculationType.PXQ,
    ItemCategory.BONO: CalculationType.FIXED,
}


def normalize_category(category: str | None) -> str:
    """Unknown or empty categories count as ``adicional``."""
    if category in CATEGORY_ORDER:
        return str(category)
    return ItemCategory.ADICIONAL.value


def default_calculation_type(category: str | None) -> str:
    category = normalize_category(category)
    return str(DEFAULT_CALCULATION_TYPE.get(category, CalculationType.PERCENTAGE))


def group_by_category(
    items: Iterable[T],
    *,
    category_of: Callable[[T], str | None] = lambda item: getattr(item, "category", None),
    order_of: Callable[[T], int] = lambda item: getattr(item, "display_order", 0),
) -> dict[str, list[T]]:
    """Bucket ``items`` by category, every category present, each bucket ordered."""
    grouped: dict[str, list[T]] = {category: [] for category in CATEGORY_ORDER}
    for item in items:
        grouped[normalize_category(category_of(item))].append(item)
    for bucket in grouped.values():
        bucket.sort(key=order_of)
    return grouped


def subtotal_by_category(
    items: Iterable[T],
    amount_of: Callable[[T], Decimal],
    **kwargs,
) -> dict[str, Decimal]:
    return {
        category: sum((amount_of(item) for item in bucket), ZERO)
        for category, bucket in group_by_category(items, **kwargs).items()
    }
