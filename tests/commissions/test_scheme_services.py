from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from commissions.engine import compute_commission
from commissions.models import (
    CommissionScheme,
    ItemLock,
    PxqScale,
    SchemeItem,
    SchemeRestriction,
    SchemeStatus,
)
from commissions.services import (
    approve_scheme,
    build_scheme_definition,
    clone_scheme,
    ensure_scheme_editable,
    load_scheme_definition,
    validate_scheme,
)
from core.cache import ExpiringCache
from core.exceptions import ConflictError, ValidationError

D = Decimal


def _add_accessories(scheme):
    """Adicional item locked on POSTPAGO volume, with a plan restriction and a PxQ item."""
    postpago = scheme.items.get(item_code="POSTPAGO")
    accesorios = SchemeItem.objects.create(
        scheme=scheme, item_code="ACC", category="adicional",
        quota=D("10"), variable_amount=D("200"), display_order=3,
    )
    equipos = SchemeItem.objects.create(
        scheme=scheme, item_code="EQ", custom_name="EQUIPOS", category="pxq",
        quota=D("10"), display_order=4,
    )
    ItemLock.objects.create(
        item=accesorios, required_item=postpago, lock_type="min_quantity", required_value=D("20"),
    )
    SchemeRestriction.objects.create(
        scheme=scheme, item=postpago, restriction_type="max_percentage",
        plan_code="PLAN_29", max_percentage=D("0.2"),
    )
    PxqScale.objects.create(item=equipos, min_fulfillment=D("0"), max_fulfillment=D("1"),
                            amount_per_unit=D("5"), display_order=1)
    PxqScale.objects.create(item=equipos, min_fulfillment=D("1"), amount_per_unit=D("8"),
                            display_order=2)
    return accesorios, equipos


@pytest.mark.django_db
class TestBuildSchemeDefinition:
    def test_items_are_frozen_with_string_ids(self, scheme):
        definition = build_scheme_definition(scheme)

        assert definition.id == str(scheme.pk)
        assert [item.name for item in definition.items] == ["POSTPAGO", "PREPAGO"]
        assert all(isinstance(item.id, str) for item in definition.items)
        assert definition.items[0].calculation_type == "percentage"
        assert definition.default_min_fulfillment == D("0.5000")
        assert definition.variable_salary == D("1000.00")

    def test_related_rows_are_included(self, scheme):
        accesorios, equipos = _add_accessories(scheme)

        definition = build_scheme_definition(scheme)

        (lock,) = definition.locks
        assert lock.item_id == str(accesorios.pk)
        assert lock.required_item_id == str(scheme.items.get(item_code="POSTPAGO").pk)
        (restriction,) = definition.restrictions
        assert restriction.plan_code == "PLAN_29"
        assert restriction.operator_code is None
        tiers = definition.pxq_scales[str(equipos.pk)]
        assert [tier.amount_per_unit for tier in tiers] == [D("5.00"), D("8.00")]
        assert definition.item_by_id(str(equipos.pk)).name == "EQUIPOS"

    def test_definition_computes_like_hand_built_snapshot(self, scheme):
        definition = build_scheme_definition(scheme)

        result = compute_commission(definition, {"POSTPAGO": 30, "PREPAGO": 15}, None, 0)

        # Weights 0.6 / 0.4 of a 1000 variable salary.
        assert result.item("POSTPAGO").commission == D("450.00")
        assert result.item("PREPAGO").commission == D("200.00")
        assert result.total_gross == D("1675.00")

    def test_scheme_rows_flow_through_engine(self, scheme):
        _add_accessories(scheme)
        definition = build_scheme_definition(scheme)
        sales = {"POSTPAGO": 19, "PREPAGO": 20, "ACC": 10, "EQUIPOS": 12}

        result = compute_commission(definition, sales, None, 0)

        assert result.item("ACC").lock_unlocked is False
        assert result.item("EQUIPOS").commission == D("96.00")


@pytest.mark.django_db
class TestValidateScheme:
    def test_valid_scheme_has_no_issues(self, scheme):
        _add_accessories(scheme)
        assert validate_scheme(build_scheme_definition(scheme)) == []

    def test_weights_must_add_to_one(self, scheme):
        scheme.items.filter(item_code="PREPAGO").update(weight=D("0.3"))
        (issue,) = validate_scheme(build_scheme_definition(scheme))
        assert "pesos" in issue.message

    def test_reports_cycle_and_scale_gap(self, scheme):
        accesorios, equipos = _add_accessories(scheme)
        ItemLock.objects.create(
            item=scheme.items.get(item_code="POSTPAGO"), required_item=accesorios,
            lock_type="min_quantity", required_value=D("1"),
        )
        equipos.pxq_scales.filter(display_order=1).delete()

        messages = [issue.message for issue in validate_scheme(build_scheme_definition(scheme))]

        assert any("Ciclo" in message for message in messages)
        assert any("hueco" in message for message in messages)


@pytest.mark.django_db
class TestApproveScheme:
    def test_approve_draft(self, scheme, admin_user):
        approved = approve_scheme(scheme, admin_user, notes="OK gerencia")

        assert approved.status == SchemeStatus.APROBADO
        assert approved.approved_by == admin_user
        assert approved.approved_at is not None
        assert approved.approval_notes == "OK gerencia"

    def test_approving_twice_conflicts(self, scheme, admin_user):
        approve_scheme(scheme, admin_user)
        with pytest.raises(ConflictError):
            approve_scheme(scheme, admin_user)

    def test_invalid_scheme_is_rejected(self, scheme, admin_user):
        scheme.items.filter(item_code="PREPAGO").update(weight=D("0.1"))

        with pytest.raises(ValidationError) as exc_info:
            approve_scheme(scheme, admin_user)

        assert exc_info.value.details["issues"]
        scheme.refresh_from_db()
        assert scheme.status == SchemeStatus.DRAFT

    def test_scheme_without_items_is_rejected(self, admin_user):
        empty = CommissionScheme.objects.create(name="Vacio", code="VACIO", year=2025, month=11)
        with pytest.raises(ValidationError):
            approve_scheme(empty, admin_user)

    def test_approval_archives_previous_scheme_of_same_period(self, scheme, admin_user):
        approve_scheme(scheme, admin_user)
        draft = clone_scheme(scheme, admin_user)

        approve_scheme(draft, admin_user)

        scheme.refresh_from_db()
        assert scheme.status == SchemeStatus.ARCHIVADO
        assert CommissionScheme.objects.get(pk=draft.pk).status == SchemeStatus.APROBADO

    def test_other_periods_are_left_alone(self, scheme, admin_user):
        approve_scheme(scheme, admin_user)
        december = clone_scheme(scheme, admin_user, code="ASESOR-2025-12")
        CommissionScheme.objects.filter(pk=december.pk).update(month=12)

        approve_scheme(december, admin_user)

        scheme.refresh_from_db()
        assert scheme.status == SchemeStatus.APROBADO


@pytest.mark.django_db
class TestEditable:
    def test_draft_is_editable(self, scheme):
        ensure_scheme_editable(scheme)

    @pytest.mark.parametrize("status", [SchemeStatus.APROBADO, SchemeStatus.ARCHIVADO, SchemeStatus.OFICIAL])
    def test_other_statuses_are_frozen(self, scheme, status):
        scheme.status = status
        with pytest.raises(ConflictError) as exc_info:
            ensure_scheme_editable(scheme)
        assert exc_info.value.details["status"] == status


@pytest.mark.django_db
class TestCloneScheme:
    def test_clone_is_a_linked_draft(self, scheme, admin_user):
        approve_scheme(scheme, admin_user)

        clone = clone_scheme(scheme, admin_user)

        assert clone.code == "ASESOR-2025-11_COPIA"
        assert clone.status == SchemeStatus.DRAFT
        assert clone.source == CommissionScheme.Source.SOCIO
        assert clone.parent_scheme == scheme
        assert clone.created_by == admin_user
        assert list(scheme.branches.all()) == [clone]

    def test_clone_copies_related_rows(self, scheme):
        accesorios, equipos = _add_accessories(scheme)

        clone = clone_scheme(scheme, name="Esquema B", code="ASESOR-B")

        assert clone.name == "Esquema B"
        assert clone.items.count() == 4
        new_acc = clone.items.get(item_code="ACC")
        (lock,) = new_acc.locks.all()
        assert lock.required_item.scheme == clone
        assert clone.restrictions.get().item.scheme == clone
        assert clone.items.get(item_code="EQ").pxq_scales.count() == 2
        # Source rows untouched.
        assert scheme.items.count() == 4
        assert accesorios.locks.count() == 1

    def test_clone_computes_the_same_result(self, scheme):
        _add_accessories(scheme)
        clone = clone_scheme(scheme)
        sales = {"POSTPAGO": 25, "PREPAGO": 20, "ACC": 8, "EQUIPOS": 11}

        original = compute_commission(build_scheme_definition(scheme), sales, None, 0)
        copy = compute_commission(build_scheme_definition(clone), sales, None, 0)

        assert copy.total_net == original.total_net
        assert [i.commission for i in copy.items] == [i.commission for i in original.items]

    def test_duplicate_code_is_rejected(self, scheme):
        clone_scheme(scheme)
        with pytest.raises(ValidationError) as exc_info:
            clone_scheme(scheme)
        assert exc_info.value.details["code"] == "ASESOR-2025-11_COPIA"


@pytest.mark.django_db
class TestLoadSchemeDefinition:
    def test_without_cache_reads_every_time(self, scheme):
        first = load_scheme_definition(scheme.pk)
        CommissionScheme.objects.filter(pk=scheme.pk).update(name="Renombrado")
        assert first.name == "Esquema Asesor"
        assert load_scheme_definition(scheme.pk).name == "Renombrado"

    def test_cached_definition_skips_queries(self, scheme, django_assert_num_queries):
        cache = ExpiringCache(300)
        first = load_scheme_definition(scheme.pk, cache)

        with django_assert_num_queries(0):
            again = load_scheme_definition(scheme.pk, cache)

        assert again is first

    def test_stale_entry_is_refetched(self, scheme):
        now = [datetime(2025, 11, 1, 9, 0, tzinfo=timezone.utc)]
        cache = ExpiringCache(timedelta(seconds=60), clock=lambda: now[0])
        load_scheme_definition(scheme.pk, cache)
        CommissionScheme.objects.filter(pk=scheme.pk).update(name="Renombrado")

        now[0] += timedelta(seconds=59)
        assert load_scheme_definition(scheme.pk, cache).name == "Esquema Asesor"

        now[0] += timedelta(seconds=1)
        assert load_scheme_definition(scheme.pk, cache).name == "Renombrado"
