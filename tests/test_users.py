"""Tests for app.api.routes.users: profile, settings and watermark preferences."""

from app.models.user import Plan
from conftest import reload_user


class TestProfile:
    """Test GET /api/user/profile."""

    def test_profile_fields(self, test_client, create_user, auth_headers):
        user = create_user(generations_used=2)
        resp = test_client.get("/api/user/profile", headers=auth_headers(user))
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        profile = data["user"]
        assert profile["id"] == user.id
        assert profile["email"] == "alice@example.com"
        assert profile["plan"] == "FREE"
        assert profile["generationsUsed"] == 2
        assert profile["generationsLimit"] == 3
        assert profile["language"] == "fr"
        assert profile["theme"] == "dark"
        assert profile["watermarkSettings"] == {
            "enabled": False,
            "type": "text",
            "logoUrl": None,
            "text": None,
            "language": None,
            "position": "bottom-right",
            "opacity": 70,
        }

    def test_profile_never_exposes_password(self, test_client, create_user, auth_headers):
        user = create_user()
        resp = test_client.get("/api/user/profile", headers=auth_headers(user))
        assert "password" not in resp.text
        assert "hashed_password" not in resp.text

    def test_premium_limit_is_unlimited(self, test_client, create_user, auth_headers):
        user = create_user(plan=Plan.PREMIUM_YEARLY)
        resp = test_client.get("/api/user/profile", headers=auth_headers(user))
        assert resp.json()["user"]["generationsLimit"] == -1

    def test_deleted_user_is_404(self, test_client, create_user, auth_headers, db_session):
        user = create_user()
        headers = auth_headers(user)
        db_session.delete(user)
        db_session.commit()

        resp = test_client.get("/api/user/profile", headers=headers)
        assert resp.status_code == 404
        assert resp.json()["error"] == "User not found"


class TestSettings:
    """Test PATCH /api/user/settings."""

    def test_partial_update(self, test_client, create_user, auth_headers, db_session):
        user = create_user()
        resp = test_client.patch("/api/user/settings", json={"theme": "light"}, headers=auth_headers(user))
        assert resp.status_code == 200
        assert resp.json()["success"] is True

        stored = reload_user(db_session, user.id)
        assert stored.theme == "light"
        assert stored.language == "fr"

    def test_update_both(self, test_client, create_user, auth_headers, db_session):
        user = create_user()
        test_client.patch(
            "/api/user/settings",
            json={"language": "en", "theme": "light"},
            headers=auth_headers(user),
        )
        stored = reload_user(db_session, user.id)
        assert (stored.language, stored.theme) == ("en", "light")

    def test_empty_body_changes_nothing(self, test_client, create_user, auth_headers, db_session):
        user = create_user()
        resp = test_client.patch("/api/user/settings", json={}, headers=auth_headers(user))
        assert resp.status_code == 200
        stored = reload_user(db_session, user.id)
        assert (stored.language, stored.theme) == ("fr", "dark")

    def test_requires_auth(self, test_client):
        resp = test_client.patch("/api/user/settings", json={"theme": "light"})
        assert resp.status_code == 401


class TestWatermark:
    """Test PATCH /api/user/watermark."""

    def test_free_plan_cannot_customize(self, test_client, create_user, auth_headers):
        user = create_user()
        resp = test_client.patch("/api/user/watermark", json={"enabled": True}, headers=auth_headers(user))
        assert resp.status_code == 403
        assert resp.json()["upgrade"] is True

    def test_monthly_plan_cannot_customize(self, test_client, create_user, auth_headers):
        user = create_user(plan=Plan.PREMIUM_MONTHLY)
        resp = test_client.patch("/api/user/watermark", json={"enabled": True}, headers=auth_headers(user))
        assert resp.status_code == 403

    def test_yearly_plan_customizes(self, test_client, create_user, auth_headers, db_session):
        user = create_user(plan=Plan.PREMIUM_YEARLY)
        resp = test_client.patch(
            "/api/user/watermark",
            json={"enabled": True, "type": "logo", "logoUrl": "https://cdn.test/logo.png", "opacity": 40},
            headers=auth_headers(user),
        )
        assert resp.status_code == 200
        settings = resp.json()["watermarkSettings"]
        assert settings["enabled"] is True
        assert settings["type"] == "logo"
        assert settings["logoUrl"] == "https://cdn.test/logo.png"
        assert settings["opacity"] == 40
        assert settings["position"] == "bottom-right"

        stored = reload_user(db_session, user.id)
        assert stored.watermark_logo_url == "https://cdn.test/logo.png"

    def test_opacity_out_of_range(self, test_client, create_user, auth_headers):
        user = create_user(plan=Plan.PREMIUM_YEARLY)
        resp = test_client.patch("/api/user/watermark", json={"opacity": 101}, headers=auth_headers(user))
        assert resp.status_code == 400

    def test_unknown_type(self, test_client, create_user, auth_headers):
        user = create_user(plan=Plan.PREMIUM_YEARLY)
        resp = test_client.patch("/api/user/watermark", json={"type": "video"}, headers=auth_headers(user))
        assert resp.status_code == 400
