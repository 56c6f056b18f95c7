"""Lock (candado) resolution over an explicit dependency graph.

Items are nodes, active locks are edges from the locked item to the item it
requires. The engine evaluates items once, in topological order, so every
required item is resolved before the items that depend on it. Ties are
broken by item id, which makes the order independent of declaration order.

``min_fulfillment`` locks compare the scheme-level principal fulfillment and
add no edge.
"""
from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from commissions.types import ItemResult, Lock, LockStatus, LockType, SchemeDefinition, SchemeItem
from core.exceptions import ConfigError, CycleError
from core.numbers import ZERO, to_decimal

logger = logging.getLogger(__name__)


def node_key(item_id: str) -> tuple:
    """Sort numeric ids numerically and everything else lexically."""
    text = str(item_id)
    if text.isdigit():
        return (0, int(text), text)
    return (1, 0, text)


@dataclass
class LockGraph:
    items: dict[str, SchemeItem]
    requires: dict[str, set[str]] = field(default_factory=dict)
    locks_by_item: dict[str, list[Lock]] = field(default_factory=dict)
    errors: list[ConfigError] = field(default_factory=list)

    @property
    def misconfigured(self) -> dict[str, list[ConfigError]]:
        result: dict[str, list[ConfigError]] = {}
        for error in self.errors:
            result.setdefault(error.item_id, []).append(error)
        return result


# ---------------------------------------------------------------------------
# Graph construction
# ---------------------------------------------------------------------------

def build_lock_graph(definition: SchemeDefinition) -> LockGraph:
    """Index active items and turn active locks into edges.

    A lock pointing at a missing or inactive item is recorded as a
    ``ConfigError`` against the locked item instead of becoming an edge.
    """
    items = {item.id: item for item in definition.active_items}
    graph = LockGraph(
        items=items,
        requires={item_id: set() for item_id in items},
        locks_by_item={item_id: [] for item_id in items},
    )

    for lock in definition.locks:
        if not lock.is_active or lock.item_id not in items:
            continue
        graph.locks_by_item[lock.item_id].append(lock)
        if lock.lock_type == LockType.MIN_FULFILLMENT:
            continue
        if lock.required_item_id is None:
            graph.errors.append(ConfigError(
                f"El candado {lock.id} no indica la partida requerida.",
                item_id=lock.item_id,
                details={"lock_id": lock.id},
            ))
            continue
        if lock.required_item_id not in items:
            graph.errors.append(ConfigError(
                f"El candado {lock.id} requiere la partida {lock.required_item_id}, "
                "que no existe o esta inactiva.",
                item_id=lock.item_id,
                details={"lock_id": lock.id, "required_item_id": lock.required_item_id},
            ))
            continue
        graph.requires[lock.item_id].add(lock.required_item_id)

    for locks in graph.locks_by_item.values():
        locks.sort(key=lambda lock: node_key(lock.id))
    return graph


def topological_order(graph: LockGraph) -> list[str]:
    """Kahn's algorithm with a min-heap so ties resolve by item id.

    Raises
    ------
    CycleError
        Some items cannot be ordered. ``order`` holds every item that could.
    """
    pending = {node: len(deps) for node, deps in graph.requires.items()}
    dependents: dict[str, list[str]] = {node: [] for node in graph.requires}
    for node, deps in graph.requires.items():
        for dep in deps:
            dependents[dep].append(node)

    ready = [(node_key(node), node) for node, count in pending.items() if count == 0]
    heapq.heapify(ready)
    order: list[str] = []
    while ready:
        _, node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            pending[dependent] -= 1
            if pending[dependent] == 0:
                heapq.heappush(ready, (node_key(dependent), dependent))

    if len(order) < len(pending):
        blocked = {node for node, count in pending.items() if count > 0}
        raise CycleError(find_cycle(graph, blocked), blocked=blocked, order=order)
    return order


def find_cycle(graph: LockGraph, blocked: set[str]) -> list[str]:
    """Walk unresolved dependencies from the smallest blocked node until one repeats.

    Every blocked node still waits on another blocked node, so the walk always
    closes a loop.
    """
    start = min(blocked, key=node_key)
    path: list[str] = []
    position: dict[str, int] = {}
    node = start
    while node not in position:
        position[node] = len(path)
        path.append(node)
        node = min((dep for dep in graph.requires[node] if dep in blocked), key=node_key)
    return path[position[node]:]


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

def lock_current_value(
    lock: Lock,
    required: ItemResult | None,
    global_fulfillment: Decimal | None,
) -> Decimal | None:
    if lock.lock_type == LockType.MIN_FULFILLMENT:
        return global_fulfillment
    if required is None:
        return None
    if lock.lock_type == LockType.MIN_QUANTITY:
        return required.effective_sales
    if lock.lock_type == LockType.MIN_PERCENTAGE:
        return required.fulfillment if required.fulfillment is not None else ZERO
    if lock.lock_type == LockType.MIN_AMOUNT:
        return required.commission
    raise ConfigError(
        f"Tipo de candado desconocido: {lock.lock_type}",
        item_id=lock.item_id,
        details={"lock_id": lock.id},
    )


def describe_lock(lock: Lock, required: ItemResult | None) -> str:
    if lock.description:
        return lock.description
    label = LockType(lock.lock_type).label if lock.lock_type in LockType.values else lock.lock_type
    if lock.lock_type == LockType.MIN_FULFILLMENT:
        return f"{label} >= {lock.required_value}"
    target = required.name if required is not None else lock.required_item_id
    return f"{label} en {target} >= {lock.required_value}"


def evaluate_locks(
    item_id: str,
    graph: LockGraph,
    resolved: Mapping[str, ItemResult],
    global_fulfillment: Decimal | None,
) -> list[LockStatus]:
    """Evaluate every lock on ``item_id``; all must be met for the item to pay."""
    statuses = []
    for lock in graph.locks_by_item.get(item_id, []):
        required = resolved.get(lock.required_item_id) if lock.required_item_id else None
        current = lock_current_value(lock, required, global_fulfillment)
        required_value = to_decimal(lock.required_value)
        met = current is not None and current >= required_value
        statuses.append(LockStatus(
            lock_id=lock.id,
            lock_type=str(lock.lock_type),
            required_item_id=lock.required_item_id,
            required_item_name=required.name if required is not None else None,
            current_value=current,
            required_value=required_value,
            met=met,
            description=describe_lock(lock, required),
        ))
        logger.debug(
            "Lock %s on item %s: current=%s required=%s met=%s",
            lock.id, item_id, current, required_value, met,
        )
    return statuses
