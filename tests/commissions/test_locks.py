from decimal import Decimal

import pytest

from commissions.engine import compute_commission
from commissions.locks import build_lock_graph, describe_lock, node_key, topological_order
from commissions.types import Lock, SalesFact, SchemeDefinition, SchemeItem
from core.exceptions import CycleError

D = Decimal


def _fixed(item_id, name, amount="10", **kwargs):
    return SchemeItem(id=item_id, name=name, category="adicional", calculation_type="fixed",
                      variable_amount=D(amount), **kwargs)


def _lock(lock_id, item_id, required_item_id, lock_type="min_quantity", value="1", **kwargs):
    return Lock(id=lock_id, item_id=item_id, required_item_id=required_item_id,
                lock_type=lock_type, required_value=D(value), **kwargs)


class TestNodeKey:
    def test_numeric_ids_sort_numerically(self):
        assert sorted(["10", "2", "1"], key=node_key) == ["1", "2", "10"]

    def test_numeric_ids_sort_before_text(self):
        assert sorted(["b", "3", "a"], key=node_key) == ["3", "a", "b"]


class TestTopologicalOrder:
    def test_required_items_come_first(self):
        definition = SchemeDefinition(
            items=(_fixed("1", "A"), _fixed("2", "B"), _fixed("3", "C")),
            locks=(_lock("L1", "1", "3"), _lock("L2", "3", "2")),
        )
        assert topological_order(build_lock_graph(definition)) == ["2", "3", "1"]

    def test_order_ignores_declaration_order(self):
        items = (_fixed("1", "A"), _fixed("2", "B"), _fixed("3", "C"), _fixed("4", "D"))
        locks = (_lock("L1", "4", "1"), _lock("L2", "2", "1"))

        forward = topological_order(build_lock_graph(SchemeDefinition(items=items, locks=locks)))
        backward = topological_order(build_lock_graph(
            SchemeDefinition(items=items[::-1], locks=locks[::-1])
        ))

        assert forward == backward == ["1", "2", "3", "4"]

    def test_min_fulfillment_lock_adds_no_edge(self):
        definition = SchemeDefinition(
            items=(_fixed("1", "A"), _fixed("2", "B")),
            locks=(Lock(id="L1", item_id="1", lock_type="min_fulfillment", required_value=D("0.8")),),
        )
        graph = build_lock_graph(definition)

        assert graph.requires["1"] == set()
        assert len(graph.locks_by_item["1"]) == 1

    def test_cycle_reports_path_and_evaluable_prefix(self):
        definition = SchemeDefinition(
            items=(_fixed("1", "A"), _fixed("2", "B"), _fixed("3", "C"), _fixed("4", "D")),
            locks=(_lock("L1", "1", "2"), _lock("L2", "2", "1"), _lock("L3", "4", "2")),
        )

        with pytest.raises(CycleError) as exc_info:
            topological_order(build_lock_graph(definition))

        error = exc_info.value
        assert error.cycle == ["1", "2"]
        assert error.blocked == {"1", "2", "4"}
        assert error.order == ["3"]
        assert "1 -> 2 -> 1" in error.message

    def test_self_lock_is_a_cycle(self):
        definition = SchemeDefinition(items=(_fixed("1", "A"),), locks=(_lock("L1", "1", "1"),))
        with pytest.raises(CycleError) as exc_info:
            topological_order(build_lock_graph(definition))
        assert exc_info.value.cycle == ["1"]


class TestGraphErrors:
    def test_lock_to_missing_item_is_a_config_error(self):
        definition = SchemeDefinition(items=(_fixed("1", "A"),), locks=(_lock("L1", "1", "7"),))
        graph = build_lock_graph(definition)

        assert graph.requires["1"] == set()
        assert list(graph.misconfigured) == ["1"]
        assert graph.errors[0].details["required_item_id"] == "7"

    def test_lock_to_inactive_item_is_a_config_error(self):
        definition = SchemeDefinition(
            items=(_fixed("1", "A"), _fixed("2", "B", is_active=False)),
            locks=(_lock("L1", "1", "2"),),
        )
        assert "1" in build_lock_graph(definition).misconfigured

    def test_lock_without_target_is_a_config_error(self):
        definition = SchemeDefinition(items=(_fixed("1", "A"),), locks=(_lock("L1", "1", None),))
        assert "1" in build_lock_graph(definition).misconfigured

    def test_inactive_locks_are_dropped(self):
        definition = SchemeDefinition(
            items=(_fixed("1", "A"), _fixed("2", "B")),
            locks=(_lock("L1", "1", "2", is_active=False),),
        )
        graph = build_lock_graph(definition)
        assert graph.requires["1"] == set()
        assert graph.locks_by_item["1"] == []


class TestLockEvaluation:
    def _scheme(self, *locks):
        return SchemeDefinition(
            items=(
                SchemeItem(id="1", name="ACC", category="adicional", quota=D("10"),
                           variable_amount=D("100")),
                SchemeItem(id="2", name="RENO", category="adicional", quota=D("10"),
                           variable_amount=D("50")),
            ),
            locks=locks,
        )

    def test_dependent_evaluated_before_its_requirement_in_declaration(self):
        # Item 1 is declared first but waits on item 2.
        scheme = self._scheme(_lock("L1", "1", "2", lock_type="min_amount", value="25"))
        result = compute_commission(scheme, {"ACC": SalesFact(D(10)), "RENO": SalesFact(D(5))}, None, 0)

        assert result.item("RENO").commission == D("25.00")
        assert result.item("ACC").commission == D("100.00")

    def test_min_percentage_treats_missing_fulfillment_as_zero(self):
        scheme = SchemeDefinition(
            items=(
                SchemeItem(id="1", name="ACC", category="adicional", quota=D("10"),
                           variable_amount=D("100")),
                _fixed("2", "SINCUOTA"),
            ),
            locks=(_lock("L1", "1", "2", lock_type="min_percentage", value="0"),),
        )
        result = compute_commission(scheme, {"ACC": 10}, None, 0)

        assert result.item("ACC").lock_pending == ()
        assert result.item("ACC").commission == D("100.00")

    def test_lock_on_gated_item_uses_pre_gate_commission(self):
        scheme = SchemeDefinition(
            items=(
                SchemeItem(id="1", name="POSTPAGO", category="principal", quota=D("10"),
                           variable_amount=D("500")),
                SchemeItem(id="2", name="ACC", category="adicional", quota=D("10"),
                           variable_amount=D("100")),
            ),
            locks=(_lock("L1", "2", "1", lock_type="min_amount", value="100"),),
            default_min_fulfillment=D("0.5"),
        )
        result = compute_commission(scheme, {"POSTPAGO": 3, "ACC": 10}, None, 0)

        assert result.gate_applied is True
        assert result.item("POSTPAGO").commission == D("0")
        assert result.item("ACC").commission == D("100.00")

    def test_describe_lock_prefers_explicit_description(self):
        lock = _lock("L1", "1", "2", description="Vender 5 portas")
        assert describe_lock(lock, None) == "Vender 5 portas"

    def test_describe_lock_names_the_required_item(self):
        lock = _lock("L1", "1", "2", value="5")
        assert describe_lock(lock, None) == "Cantidad minima en 2 >= 5"
