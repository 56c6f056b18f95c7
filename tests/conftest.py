from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from commissions.models import CommissionScheme, SchemeItem, SchemeStatus
from quotas.models import StoreQuota
from stores.models import Store

User = get_user_model()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username="admin",
        email="admin@test.com",
        password="testpass123",
        first_name="Admin",
        last_name="User",
        is_staff=True,
    )


@pytest.fixture
def seller_a(db):
    return User.objects.create_user(
        username="vendedor.a",
        email="vendedor.a@test.com",
        password="testpass123",
        first_name="Ana",
        last_name="Quispe",
    )


@pytest.fixture
def seller_b(db):
    return User.objects.create_user(
        username="vendedor.b",
        email="vendedor.b@test.com",
        password="testpass123",
        first_name="Bruno",
        last_name="Huaman",
    )


@pytest.fixture
def store(db):
    return Store.objects.create(
        name="Tienda Test",
        code="TT-001",
        zone=Store.Zone.LIMA,
        address="Av. Prueba 123",
    )


@pytest.fixture
def store_quota(store, admin_user):
    # November has 30 days.
    return StoreQuota.objects.create(
        store=store,
        year=2025,
        month=11,
        ss_quota=70,
        quota_breakdown={"POSTPAGO": 50, "PREPAGO": 20},
        created_by=admin_user,
    )


@pytest.fixture
def scheme(db, admin_user):
    scheme = CommissionScheme.objects.create(
        name="Esquema Asesor",
        code="ASESOR-2025-11",
        year=2025,
        month=11,
        status=SchemeStatus.DRAFT,
        fixed_salary=Decimal("1025.00"),
        variable_salary=Decimal("1000.00"),
        total_ss_quota=70,
        default_min_fulfillment=Decimal("0.5000"),
        created_by=admin_user,
    )
    SchemeItem.objects.create(
        scheme=scheme,
        item_code="POSTPAGO",
        category="principal",
        quota=Decimal("40"),
        weight=Decimal("0.6"),
        display_order=1,
    )
    SchemeItem.objects.create(
        scheme=scheme,
        item_code="PREPAGO",
        category="principal",
        quota=Decimal("30"),
        weight=Decimal("0.4"),
        display_order=2,
    )
    return scheme
