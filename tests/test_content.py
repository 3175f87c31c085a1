"""Tests for reviews, news, inquiries and admin accounts."""

import pytest
from django.contrib.auth import get_user_model

from inquiries.models import Inquiry
from news.models import News
from reviews.models import Review

pytestmark = pytest.mark.django_db

User = get_user_model()


# ======================================================================
# Reviews
# ======================================================================


class TestReviewAPI:
    """Test /api/reviews/."""

    def test_public_list_shows_only_approved_and_visible(self, api_client, branch):
        shown = Review.objects.create(branch=branch, customer_name="A", rating=5, content="최고", is_approved=True)
        Review.objects.create(branch=branch, customer_name="B", rating=2, content="대기")
        Review.objects.create(branch=branch, customer_name="C", rating=4, content="숨김",
                              is_approved=True, is_visible=False)

        body = api_client.get("/api/reviews/").json()
        assert [r["id"] for r in body["data"]] == [shown.pk]
        assert "customer_phone" not in body["data"][0]

    def test_staff_sees_everything(self, staff_client, branch):
        Review.objects.create(branch=branch, customer_name="A", rating=5, content="최고", is_approved=True)
        Review.objects.create(branch=branch, customer_name="B", rating=2, content="대기")
        assert staff_client.get("/api/reviews/").json()["total"] == 2
        assert staff_client.get("/api/reviews/", {"is_approved": "false"}).json()["total"] == 1

    def test_public_create_waits_for_approval(self, api_client, branch, vehicle):
        response = api_client.post(
            "/api/reviews/",
            {"branch_id": branch.pk, "vehicle_id": vehicle.pk, "customer_name": "최지우",
             "customer_phone": "010-2222-3333", "rating": 5, "content": "차가 깨끗했어요", "is_approved": True},
            format="json",
        )
        assert response.status_code == 201
        review = Review.objects.get(customer_name="최지우")
        assert review.is_approved is False
        assert review.vehicle_name == "현대 아반떼 CN7"

    def test_create_missing_fields(self, api_client, branch):
        response = api_client.post("/api/reviews/", {"branch_id": branch.pk, "rating": 5}, format="json")
        assert response.status_code == 400
        assert response.json()["missing_fields"] == ["customer_name", "content"]

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, api_client, branch, rating):
        response = api_client.post(
            "/api/reviews/",
            {"branch_id": branch.pk, "customer_name": "X", "rating": rating, "content": "..."},
            format="json",
        )
        assert response.status_code == 400

    def test_vehicle_from_other_branch(self, api_client, other_branch, vehicle):
        response = api_client.post(
            "/api/reviews/",
            {"branch_id": other_branch.pk, "vehicle_id": vehicle.pk, "customer_name": "X",
             "rating": 3, "content": "..."},
            format="json",
        )
        assert response.status_code == 400
        assert response.json()["error"] == "차량과 지점 정보가 일치하지 않습니다."

    def test_staff_approve(self, staff_client, api_client, branch):
        review = Review.objects.create(branch=branch, customer_name="B", rating=4, content="좋음")
        response = staff_client.post(f"/api/reviews/{review.pk}/approve/")
        assert response.status_code == 200
        assert response.json()["message"] == "리뷰가 승인되었습니다."
        assert api_client.get(f"/api/reviews/{review.pk}/").status_code == 200

    def test_anonymous_cannot_approve_or_delete(self, api_client, branch):
        review = Review.objects.create(branch=branch, customer_name="B", rating=4, content="좋음")
        assert api_client.post(f"/api/reviews/{review.pk}/approve/").status_code in (401, 403)
        assert api_client.delete(f"/api/reviews/{review.pk}/").status_code in (401, 403)


# ======================================================================
# News
# ======================================================================


class TestNewsAPI:
    """Test /api/news/."""

    @pytest.fixture
    def published(self, db):
        news = News.objects.create(title="지점 100호 돌파", content="...", category=News.Category.MILESTONE)
        news.set_published(True)
        return news

    @pytest.fixture
    def draft(self, db):
        return News.objects.create(title="준비 중", content="...")

    def test_public_list_only_published(self, api_client, published, draft):
        body = api_client.get("/api/news/").json()
        assert [n["id"] for n in body["data"]] == [published.pk]

    def test_category_filter(self, api_client, published):
        assert api_client.get("/api/news/", {"category": "Milestone"}).json()["total"] == 1
        assert api_client.get("/api/news/", {"category": "Event"}).json()["total"] == 0

    def test_draft_hidden_from_public(self, api_client, staff_client, draft):
        response = api_client.get(f"/api/news/{draft.pk}/")
        assert response.status_code == 404
        assert response.json()["error"] == "뉴스를 찾을 수 없습니다."
        assert staff_client.get(f"/api/news/{draft.pk}/").status_code == 200

    def test_retrieve_counts_views(self, api_client, published):
        api_client.get(f"/api/news/{published.pk}/")
        data = api_client.get(f"/api/news/{published.pk}/").json()["data"]
        assert data["view_count"] == 2

    def test_publish_toggle(self, staff_client, draft):
        response = staff_client.post(f"/api/news/{draft.pk}/publish/")
        assert response.json()["message"] == "뉴스가 게시되었습니다."
        draft.refresh_from_db()
        assert draft.is_published is True
        assert draft.published_at is not None

        response = staff_client.post(f"/api/news/{draft.pk}/publish/", {"is_published": False}, format="json")
        assert response.json()["message"] == "뉴스 게시가 해제되었습니다."
        draft.refresh_from_db()
        assert draft.is_published is False

    def test_create_published_sets_timestamp(self, staff_client):
        response = staff_client.post(
            "/api/news/", {"title": "제휴 소식", "content": "본문", "is_published": True}, format="json"
        )
        assert response.status_code == 201
        assert response.json()["data"]["published_at"] is not None

    def test_anonymous_cannot_write(self, api_client):
        assert api_client.post("/api/news/", {"title": "t", "content": "c"}, format="json").status_code in (401, 403)


# ======================================================================
# Inquiries
# ======================================================================


class TestInquiryAPI:
    """Test /api/inquiries/."""

    def test_public_create(self, api_client):
        response = api_client.post(
            "/api/inquiries/",
            {"name": "정하늘", "phone": "010-5555-6666", "inquiry_type": "branch", "region": "대구",
             "message": "가맹 조건이 궁금합니다.", "is_read": True},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["message"] == "문의가 접수되었습니다."
        assert Inquiry.objects.get().is_read is False

    def test_create_missing_fields(self, api_client):
        response = api_client.post("/api/inquiries/", {"name": "정하늘"}, format="json")
        assert response.status_code == 400
        assert response.json()["missing_fields"] == ["phone", "message"]

    def test_anonymous_cannot_list(self, api_client):
        assert api_client.get("/api/inquiries/").status_code in (401, 403)

    def test_staff_list_and_mark_read(self, staff_client):
        inquiry = Inquiry.objects.create(name="A", phone="1", message="법인 렌트", inquiry_type="corporation")
        Inquiry.objects.create(name="B", phone="2", message="캠핑카", inquiry_type="camping", is_read=True)

        assert staff_client.get("/api/inquiries/", {"is_read": "false"}).json()["total"] == 1
        assert staff_client.get("/api/inquiries/", {"inquiry_type": "camping"}).json()["total"] == 1

        response = staff_client.patch(f"/api/inquiries/{inquiry.pk}/", {"is_read": True}, format="json")
        assert response.status_code == 200
        inquiry.refresh_from_db()
        assert inquiry.is_read is True

    def test_put_not_allowed(self, staff_client):
        inquiry = Inquiry.objects.create(name="A", phone="1", message="...")
        response = staff_client.put(f"/api/inquiries/{inquiry.pk}/", {"name": "B"}, format="json")
        assert response.status_code == 405


# ======================================================================
# Admin accounts
# ======================================================================


class TestCreateAdminUser:
    """Test POST /api/admin/create-user."""

    URL = "/api/admin/create-user"

    def test_creates_staff_account(self, staff_client, branch):
        response = staff_client.post(
            self.URL,
            {"email": "Gangnam@Chanolja.test", "password": "secret12", "role": "BRANCH_ADMIN", "branch_id": branch.pk},
            format="json",
        )
        assert response.status_code == 201
        assert response.json()["message"] == "관리자 계정이 생성되었습니다."
        user = User.objects.get(username="gangnam@chanolja.test")
        assert user.is_staff is True
        assert user.branch == branch
        assert user.check_password("secret12")

    def test_missing_credentials(self, staff_client):
        response = staff_client.post(self.URL, {"email": "a@b.test"}, format="json")
        assert response.status_code == 400
        assert response.json()["error"] == "이메일과 비밀번호를 입력해주세요."

    def test_short_password(self, staff_client):
        response = staff_client.post(self.URL, {"email": "a@b.test", "password": "123"}, format="json")
        assert response.json()["error"] == "비밀번호는 최소 6자 이상이어야 합니다."

    def test_duplicate_email(self, staff_client, staff_user):
        response = staff_client.post(self.URL, {"email": "HQ@chanolja.test", "password": "secret12"}, format="json")
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "이미 등록된 이메일입니다.", "exists": True}

    def test_requires_staff(self, api_client):
        response = api_client.post(self.URL, {"email": "a@b.test", "password": "secret12"}, format="json")
        assert response.status_code in (401, 403)


class TestAuth:
    def test_token_and_me(self, api_client, staff_user):
        response = api_client.post(
            "/api/auth/token/", {"username": "hq@chanolja.test", "password": "secret123"}, format="json"
        )
        assert response.status_code == 200
        access = response.json()["access"]

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        data = api_client.get("/api/auth/me/").json()["data"]
        assert data["email"] == "hq@chanolja.test"
        assert data["role"] == "HQ_ADMIN"

    def test_me_requires_login(self, api_client):
        response = api_client.get("/api/auth/me/")
        assert response.status_code == 401
        assert response.json()["error"] == "인증이 필요합니다."
