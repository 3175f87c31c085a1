"""Tests for branch portal tokens and the /api/branch/* endpoints."""

from datetime import timedelta

import pytest
from django.core import signing
from django.utils import timezone
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.test import APIClient

from booking.models import Reservation
from booking.services import create_reservation
from branches.authentication import TOKEN_SALT, issue_branch_token, read_branch_token
from inventory.models import Vehicle, VehicleInsurance
from payments.models import Payment
from reviews.models import Review

pytestmark = pytest.mark.django_db


class TestBranchToken:
    """Test signed branch tokens."""

    def test_round_trip(self, branch):
        token = issue_branch_token(branch)
        assert read_branch_token(token["token"])["branch_id"] == branch.pk
        assert token["expires_at"] > timezone.now()

    def test_tampered_token(self, branch):
        token = issue_branch_token(branch)["token"]
        with pytest.raises(AuthenticationFailed):
            read_branch_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))

    def test_forged_payload_with_wrong_key(self, branch):
        forged = signing.dumps({"branch_id": branch.pk, "exp": 9999999999}, key="not-the-secret", salt=TOKEN_SALT)
        with pytest.raises(AuthenticationFailed):
            read_branch_token(forged)

    def test_expired_token(self, settings, branch):
        settings.BRANCH_TOKEN_TTL_HOURS = -1
        token = issue_branch_token(branch)["token"]
        with pytest.raises(AuthenticationFailed):
            read_branch_token(token)


class TestBranchAuth:
    """Test POST /api/branch/auth."""

    def test_missing_key(self, api_client):
        response = api_client.post("/api/branch/auth", {}, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "API 키가 필요합니다."

    def test_invalid_key(self, api_client, branch):
        response = api_client.post("/api/branch/auth", {"api_key": "br_wrong"}, format="json")
        assert response.status_code == 401
        assert response.json()["error"] == "유효하지 않은 API 키입니다."

    def test_inactive_branch(self, api_client, branch):
        branch.is_active = False
        branch.save()
        response = api_client.post("/api/branch/auth", {"api_key": branch.api_key}, format="json")
        assert response.status_code == 401

    def test_success(self, api_client, branch):
        response = api_client.post("/api/branch/auth", {"api_key": branch.api_key}, format="json")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "인증 성공"
        assert body["data"]["branch"]["id"] == branch.pk
        assert "api_key" not in body["data"]["branch"]
        assert read_branch_token(body["data"]["token"])["branch_id"] == branch.pk


class TestPortalAuthentication:
    def test_no_token(self, api_client):
        response = api_client.get("/api/branch/vehicles")
        assert response.status_code == 401
        assert response.json()["error"] == "인증이 필요합니다."

    def test_garbage_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        response = api_client.get("/api/branch/stats")
        assert response.status_code == 401
        assert response.json()["error"] == "인증이 필요합니다."

    def test_token_of_deactivated_branch(self, branch, branch_client):
        branch.is_active = False
        branch.save()
        assert branch_client.get("/api/branch/stats").status_code == 401


class TestPortalVehicles:
    """Test /api/branch/vehicles."""

    def test_lists_own_vehicles(self, branch_client, vehicle, other_branch):
        Vehicle.objects.create(branch=other_branch, name="카니발", price_per_day=120000)

        body = branch_client.get("/api/branch/vehicles").json()
        assert body["total"] == 1
        assert body["data"][0]["id"] == vehicle.pk

    def test_status_filter(self, branch_client, vehicle):
        assert branch_client.get("/api/branch/vehicles", {"status": "maintenance"}).json()["total"] == 0
        assert branch_client.get("/api/branch/vehicles", {"status": "available"}).json()["total"] == 1

    def test_create_forces_own_branch(self, branch_client, branch, other_branch):
        response = branch_client.post(
            "/api/branch/vehicles",
            {"name": "그랜저", "price_per_day": 80000, "branch_id": other_branch.pk},
            format="json",
        )
        assert response.status_code == 201
        assert Vehicle.objects.get(name="그랜저").branch == branch

    def test_create_requires_name_and_price(self, branch_client):
        response = branch_client.post("/api/branch/vehicles", {"name": "그랜저"}, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "차량명과 일 요금은 필수입니다."

    def test_create_cannot_start_rented(self, branch_client):
        response = branch_client.post(
            "/api/branch/vehicles", {"name": "그랜저", "price_per_day": 80000, "status": "rented"}, format="json"
        )
        assert response.status_code == 400
        assert not Vehicle.objects.filter(name="그랜저").exists()


class TestPortalReservations:
    """Test /api/branch/reservations."""

    def test_lists_own_reservations(self, branch_client, reservation):
        body = branch_client.get("/api/branch/reservations", {"status": "pending"}).json()
        assert body["total"] == 1
        assert body["data"][0]["id"] == str(reservation.pk)

    def test_apply_action(self, branch_client, reservation):
        response = branch_client.put(
            "/api/branch/reservations",
            {"reservation_id": str(reservation.pk), "action": "approve"},
            format="json",
        )
        assert response.status_code == 200
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.APPROVED

    def test_missing_fields(self, branch_client):
        response = branch_client.put("/api/branch/reservations", {"action": "approve"}, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "예약 ID와 액션이 필요합니다."

    def test_other_branch_reservation(self, reservation, other_branch):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_branch_token(other_branch)['token']}")
        response = client.put(
            "/api/branch/reservations",
            {"reservation_id": str(reservation.pk), "action": "cancel"},
            format="json",
        )
        assert response.status_code == 404
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.PENDING

    def test_malformed_id(self, branch_client):
        response = branch_client.put(
            "/api/branch/reservations", {"reservation_id": "not-a-uuid", "action": "approve"}, format="json"
        )
        assert response.status_code == 404

    def test_disallowed_action(self, branch_client, reservation):
        response = branch_client.put(
            "/api/branch/reservations",
            {"reservation_id": str(reservation.pk), "action": "complete"},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["error"] == "현재 상태에서는 처리할 수 없는 요청입니다."


class TestPortalReviews:
    """Test /api/branch/reviews."""

    @pytest.fixture
    def review(self, branch):
        return Review.objects.create(branch=branch, customer_name="박민수", rating=4, content="친절해요")

    def test_lists_unapproved_too(self, branch_client, review):
        body = branch_client.get("/api/branch/reviews").json()
        assert [r["id"] for r in body["data"]] == [review.pk]

    @pytest.mark.parametrize(
        "action, field, expected",
        [("approve", "is_approved", True), ("hide", "is_visible", False), ("show", "is_visible", True)],
    )
    def test_moderation(self, branch_client, review, action, field, expected):
        response = branch_client.put(
            "/api/branch/reviews", {"review_id": review.pk, "action": action}, format="json"
        )
        assert response.status_code == 200
        review.refresh_from_db()
        assert getattr(review, field) is expected

    def test_unknown_action(self, branch_client, review):
        response = branch_client.put(
            "/api/branch/reviews", {"review_id": review.pk, "action": "delete"}, format="json"
        )
        assert response.status_code == 400
        assert response.json()["error"] == "잘못된 액션입니다."

    def test_other_branch_review(self, branch_client, other_branch):
        foreign = Review.objects.create(branch=other_branch, customer_name="X", rating=1, content="...")
        response = branch_client.put(
            "/api/branch/reviews", {"review_id": foreign.pk, "action": "hide"}, format="json"
        )
        assert response.status_code == 404


class TestPortalStats:
    def test_stats(self, branch_client, branch, vehicle, reservation):
        today = timezone.localdate()
        Vehicle.objects.create(branch=branch, name="레이", price_per_day=30000, status=Vehicle.Status.MAINTENANCE)
        create_reservation(
            branch=branch,
            vehicle=vehicle,
            start_date=today,
            end_date=today + timedelta(days=1),
            customer_name="오늘",
            customer_phone="010-1111-2222",
        )
        Payment.objects.create(
            reservation=reservation,
            branch=branch,
            amount=150000,
            pg_order_id="ORDER_stats",
            status=Payment.Status.COMPLETED,
            paid_at=timezone.now(),
        )
        Payment.objects.create(
            reservation=reservation,
            branch=branch,
            amount=70000,
            pg_order_id="ORDER_stats_pending",
            status=Payment.Status.PENDING,
        )
        VehicleInsurance.objects.create(
            vehicle=vehicle, branch=branch, insurance_company="삼성화재",
            start_date=today - timedelta(days=355), end_date=today + timedelta(days=10),
        )
        VehicleInsurance.objects.create(
            vehicle=vehicle, branch=branch, insurance_company="DB손해보험",
            start_date=today, end_date=today + timedelta(days=365),
        )

        response = branch_client.get("/api/branch/stats")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "totalVehicles": 2,
            "availableVehicles": 1,
            "pendingReservations": 2,
            "todayReservations": 1,
            "monthlyRevenue": 150000,
            "expiringInsurances": 1,
        }

    def test_stats_empty_branch(self, branch_client):
        data = branch_client.get("/api/branch/stats").json()["data"]
        assert data["totalVehicles"] == 0
        assert data["monthlyRevenue"] == 0
