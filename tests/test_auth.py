"""Tests de login, refresh de tokens y endpoints del usuario autenticado."""

from datetime import timedelta

from jose import jwt

from cashdesk.core import config
from cashdesk.core.security import create_access_token

from conftest import TEST_PASSWORD, bearer


def _login(client, email, password=TEST_PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def _claims(token):
    return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])


class TestLogin:
    def test_login_returns_token_pair_with_tenant_claims(self, client, tenant):
        response = _login(client, tenant.operator.email)

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["roles"] == ["OPERATOR"]

        access = _claims(body["access_token"])
        refresh = _claims(body["refresh_token"])
        assert access["sub"] == str(tenant.operator.id)
        assert access["organization_id"] == str(tenant.org.id)
        assert access["branch_id"] == str(tenant.main.id)
        assert access["type"] == "access"
        assert refresh["type"] == "refresh"
        assert access["sid"] == refresh["sid"]

    def test_email_is_case_insensitive(self, client, tenant):
        response = _login(client, f"  {tenant.admin.email.upper()} ")
        assert response.status_code == 200

    def test_wrong_password_is_unauthorized(self, client, tenant):
        response = _login(client, tenant.admin.email, "wrong-password")
        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_INVALID_CREDENTIALS"

    def test_unknown_email_is_unauthorized(self, client):
        response = _login(client, "nobody@example.com")
        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_INVALID_CREDENTIALS"

    def test_inactive_user_cannot_login(self, client, make_org, make_user):
        user = make_user(make_org(), roles=["OPERATOR"], is_active=False)

        response = _login(client, user.email)

        assert response.status_code == 403
        assert response.json()["code"] == "AUTH_USER_INACTIVE"

    def test_issued_access_token_opens_protected_routes(self, client, tenant):
        token = _login(client, tenant.manager.email).json()["access_token"]
        response = client.get("/api/v1/branches", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200


class TestRefresh:
    def test_refresh_rotates_tokens_within_the_same_session(self, client, tenant):
        issued = _login(client, tenant.admin.email).json()

        response = client.post(
            "/api/v1/auth/refresh", headers={"Authorization": f"Bearer {issued['refresh_token']}"}
        )

        assert response.status_code == 200
        body = response.json()
        assert _claims(body["access_token"])["sid"] == _claims(issued["access_token"])["sid"]
        assert _claims(body["refresh_token"])["type"] == "refresh"
        assert body["roles"] == ["ADMIN"]

    def test_access_token_cannot_refresh(self, client, tenant):
        response = client.post("/api/v1/auth/refresh", headers=bearer(tenant.admin))
        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_INVALID_TOKEN"

    def test_refresh_for_deactivated_user_is_rejected(self, client, db_session, tenant):
        issued = _login(client, tenant.operator.email).json()
        tenant.operator.is_active = False
        db_session.commit()

        response = client.post(
            "/api/v1/auth/refresh", headers={"Authorization": f"Bearer {issued['refresh_token']}"}
        )

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_USER_INACTIVE"


class TestMe:
    def test_me_lists_roles_and_permissions(self, client, tenant):
        response = client.get("/api/v1/auth/me", headers=bearer(tenant.operator))

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(tenant.operator.id)
        assert body["roles"] == ["OPERATOR"]
        assert body["permissions"] == ["cashMovements.create", "cashMovements.read", "cashflow.stats.read"]

    def test_me_requires_a_token(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401

    def test_roles_catalog(self, client, tenant):
        response = client.get("/api/v1/roles/", headers=bearer(tenant.plain))

        assert response.status_code == 200
        assert [role["name"] for role in response.json()["roles"]] == ["ADMIN", "MANAGER", "OPERATOR", "USER"]

    def test_expired_token_is_rejected(self, client, tenant):
        token = create_access_token(
            subject=str(tenant.admin.id),
            expires_delta=timedelta(minutes=-1),
            organization_id=tenant.org.id,
        )
        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
