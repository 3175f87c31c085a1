"""Shared fixtures: offline adapters, a branch with one vehicle, and API clients."""

from datetime import date

import pytest
from rest_framework.test import APIClient

from booking.services import create_reservation
from branches.authentication import issue_branch_token
from branches.models import Branch
from inventory.models import Vehicle
from payments import services as payment_services
from payments.models import Payment


@pytest.fixture
def webhook_secret() -> str:
    return "whsec_test_secret"


@pytest.fixture(autouse=True)
def offline_adapters(settings, webhook_secret):
    """Route every gateway and map call through the fake adapters."""
    settings.PAYMENT_GATEWAY = "fake"
    settings.MAPS_PROVIDER = "fake"
    settings.STATIC_MAP_PROVIDER = "fake"
    settings.ADAPTERS_CONFIG = {
        "payments.fake": {"webhook_secret": webhook_secret},
        "maps.fake": {},
    }
    settings.SETTLEMENT = {
        "HQ_RATIO": 10,
        "DEFAULT_BRANCH_SUBMALL_ID": "sub_default",
        "HQ_SUBMALL_ID": "sub_hq",
    }
    settings.PUBLIC_BASE_URL = "https://chanolja.test"
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]


@pytest.fixture
def failing_gateway(settings, webhook_secret):
    """Make the fake payment gateway reject every call."""

    def _fail(message="카드 한도가 초과되었습니다."):
        settings.ADAPTERS_CONFIG = {
            "payments.fake": {"webhook_secret": webhook_secret, "fail_with": message},
            "maps.fake": {},
        }
        return message

    return _fail


# ======================================================================
# Clients
# ======================================================================


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def staff_user(db, django_user_model):
    return django_user_model.objects.create_user(
        username="hq@chanolja.test",
        email="hq@chanolja.test",
        password="secret123",
        is_staff=True,
        role="HQ_ADMIN",
    )


@pytest.fixture
def staff_client(staff_user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


@pytest.fixture
def branch_client(branch) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_branch_token(branch)['token']}")
    return client


# ======================================================================
# Domain objects
# ======================================================================


@pytest.fixture
def branch(db) -> Branch:
    return Branch.objects.create(
        name="강남점",
        region="서울",
        address="서울특별시 강남구 테헤란로 123",
        phone="02-123-4567",
        subdomain="gangnam",
        submall_id="sub_gangnam",
        hq_submall_id="sub_hq",
        lat=37.5006,
        lng=127.0364,
    )


@pytest.fixture
def other_branch(db) -> Branch:
    return Branch.objects.create(
        name="해운대점",
        region="부산",
        address="부산광역시 해운대구 우동 1411",
        subdomain="haeundae",
        submall_id="sub_haeundae",
        hq_submall_id="sub_hq",
    )


@pytest.fixture
def vehicle(branch) -> Vehicle:
    return Vehicle.objects.create(
        branch=branch,
        name="아반떼",
        brand="현대",
        model="아반떼 CN7",
        license_plate="12가3456",
        price_per_day=50000,
    )


@pytest.fixture
def reservation(branch, vehicle):
    """A pending three-day booking worth 150,000원."""
    return create_reservation(
        branch=branch,
        vehicle=vehicle,
        start_date=date(2030, 1, 10),
        end_date=date(2030, 1, 13),
        customer_name="홍길동",
        customer_phone="010-1234-5678",
        customer_email="hong@example.com",
    )


@pytest.fixture
def card_payment(reservation):
    data = payment_services.request_payment(reservation.pk, payment_method="card")
    return Payment.objects.get(pk=data["payment_id"])


@pytest.fixture
def completed_payment(card_payment):
    result = payment_services.confirm_card_payment("pk_test_123", card_payment.pg_order_id, card_payment.amount)
    return result["payment"]


@pytest.fixture
def virtual_account_payment(reservation):
    data = payment_services.request_payment(reservation.pk, payment_method="virtual_account", bank="신한")
    result = payment_services.issue_virtual_account(data["payment_id"], "신한")
    return result["payment"]
