"""Typed errors raised by the quota and commission layers.

Every error subclasses ``ValueError`` so service callers that already guard
business-rule violations with ``except ValueError`` keep working.
"""
from __future__ import annotations


class CommissionError(ValueError):
    """Base class for all commission/quota business errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(CommissionError):
    """Malformed or inconsistent input, rejected before any computation."""


class ConfigError(CommissionError):
    """Scheme data is internally inconsistent (PxQ gap, missing lock target)."""

    def __init__(self, message: str, *, item_id: str | None = None, details: dict | None = None) -> None:
        super().__init__(message, details=details)
        self.item_id = item_id


class CycleError(ConfigError):
    """Lock dependencies form a cycle.

    ``cycle`` lists the item ids on one detected cycle; ``blocked`` holds every
    item that cannot be ordered (cycle members and everything downstream).
    ``order`` is the evaluable prefix that was resolved before the cycle.
    """

    def __init__(
        self,
        cycle: list[str],
        *,
        blocked: set[str] | None = None,
        order: list[str] | None = None,
    ) -> None:
        path = " -> ".join(cycle + cycle[:1])
        super().__init__(f"Ciclo de candados detectado: {path}")
        self.cycle = list(cycle)
        self.blocked = set(blocked or cycle)
        self.order = list(order or [])


class ConflictError(CommissionError):
    """Attempted mutation of an approved (immutable) quota or scheme."""
