"""Authentication API tests."""
import pytest
from httpx import AsyncClient
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.api.v1 import auth as auth_api
from taskhub.core.enums import TenantStatus, UserRole
from taskhub.models.audit_log import AuditLog
from taskhub.models.tenant import Tenant
from taskhub.models.user import User


REGISTER_URL = "/api/v1/auth/register-tenant"
LOGIN_URL = "/api/v1/auth/login"


def registration(subdomain="acme", email="admin@acme.com"):
    return {
        "tenant_name": "Acme",
        "subdomain": subdomain,
        "admin_email": email,
        "admin_password": "password12345",
        "admin_full_name": "Acme Admin",
    }


@pytest.mark.asyncio
async def test_register_tenant_creates_free_tenant_and_admin(client: AsyncClient, db_session: AsyncSession):
    response = await client.post(REGISTER_URL, json=registration())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["subdomain"] == "acme"
    assert data["admin_user"]["role"] == "tenant_admin"
    assert data["admin_user"]["tenant_id"] == data["tenant_id"]

    tenant = await db_session.get(Tenant, data["tenant_id"])
    assert tenant.subscription_plan.value == "free"
    assert (tenant.max_users, tenant.max_projects) == (5, 3)

    audit = (await db_session.execute(
        select(AuditLog).where(AuditLog.action == "REGISTER_TENANT")
    )).scalar_one()
    assert audit.entity_id == data["tenant_id"]


@pytest.mark.asyncio
async def test_register_duplicate_subdomain_conflicts(client: AsyncClient):
    first = await client.post(REGISTER_URL, json=registration())
    second = await client.post(REGISTER_URL, json=registration(email="other@acme.com"))

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json() == {"success": False, "message": "Subdomain already exists"}


@pytest.mark.asyncio
async def test_register_subdomain_is_case_sensitive(client: AsyncClient):
    await client.post(REGISTER_URL, json=registration())
    response = await client.post(REGISTER_URL, json=registration(subdomain="ACME"))

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_register_validation_error_is_400(client: AsyncClient):
    payload = registration()
    payload["admin_password"] = "short"
    payload["subdomain"] = "ab"

    response = await client.post(REGISTER_URL, json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "admin_password" in body["message"]
    assert "subdomain" in body["message"]


@pytest.mark.asyncio
async def test_end_to_end_register_login_me(client: AsyncClient):
    await client.post(REGISTER_URL, json=registration())

    login = await client.post(LOGIN_URL, json={
        "email": "admin@acme.com",
        "password": "password12345",
        "tenant_subdomain": "acme",
    })
    assert login.status_code == 200
    data = login.json()["data"]
    assert data["token"]
    assert data["user"]["role"] == "tenant_admin"
    assert data["expires_in"] == 24 * 3600

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["tenant"]["subdomain"] == "acme"


@pytest.mark.asyncio
async def test_login_with_explicit_tenant_id(client: AsyncClient, tenant_admin: User, test_tenant: Tenant):
    response = await client.post(LOGIN_URL, json={
        "email": "admin@acme.com", "password": "password12345", "tenant_id": test_tenant.id,
    })

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == tenant_admin.id


@pytest.mark.asyncio
async def test_login_unknown_subdomain_is_404(client: AsyncClient, tenant_admin: User):
    response = await client.post(LOGIN_URL, json={
        "email": "admin@acme.com", "password": "password12345", "tenant_subdomain": "nope",
    })

    assert response.status_code == 404
    assert response.json()["message"] == "Tenant not found"


@pytest.mark.asyncio
async def test_login_suspended_tenant_is_403(
    client: AsyncClient, db_session: AsyncSession, tenant_admin: User, test_tenant: Tenant
):
    test_tenant.status = TenantStatus.SUSPENDED
    await db_session.commit()

    response = await client.post(LOGIN_URL, json={
        "email": "admin@acme.com", "password": "password12345", "tenant_subdomain": "acme",
    })

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_login_wrong_password_and_unknown_user_look_identical(client: AsyncClient, tenant_admin: User):
    wrong_password = await client.post(LOGIN_URL, json={
        "email": "admin@acme.com", "password": "wrong-password", "tenant_subdomain": "acme",
    })
    unknown_user = await client.post(LOGIN_URL, json={
        "email": "ghost@acme.com", "password": "password12345", "tenant_subdomain": "acme",
    })

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"success": False, "message": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_tenant_user_without_tenant_fails(client: AsyncClient, tenant_admin: User):
    response = await client.post(LOGIN_URL, json={"email": "admin@acme.com", "password": "password12345"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_super_admin_logs_in_without_tenant(client: AsyncClient, super_admin: User):
    response = await client.post(LOGIN_URL, json={"email": "root@system.com", "password": "password12345"})

    assert response.status_code == 200
    assert response.json()["data"]["user"]["role"] == UserRole.SUPER_ADMIN.value

    me = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {response.json()['data']['token']}"},
    )
    assert me.json()["data"]["tenant"] is None


@pytest.mark.asyncio
async def test_deactivated_user(client: AsyncClient, db_session: AsyncSession, member: User, member_headers: dict):
    member.is_active = False
    await db_session.commit()

    login = await client.post(LOGIN_URL, json={
        "email": "member@acme.com", "password": "password12345", "tenant_subdomain": "acme",
    })
    assert login.status_code == 403
    assert login.json()["message"] == "Account inactive"

    # A token issued before deactivation stops working immediately
    me = await client.get("/api/v1/auth/me", headers=member_headers)
    assert me.status_code == 401
    assert me.json()["message"] == "Account inactive"


@pytest.mark.asyncio
async def test_login_records_audit_entry(client: AsyncClient, db_session: AsyncSession, tenant_admin: User):
    await client.post(LOGIN_URL, json={
        "email": "admin@acme.com", "password": "password12345", "tenant_subdomain": "acme",
    })

    entry = (await db_session.execute(
        select(AuditLog).where(AuditLog.action == "LOGIN")
    )).scalar_one()
    assert entry.user_id == tenant_admin.id
    assert entry.tenant_id == tenant_admin.tenant_id


@pytest.mark.asyncio
async def test_missing_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Token missing"}


@pytest.mark.asyncio
async def test_invalid_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


@pytest.mark.asyncio
async def test_token_for_deleted_user(client: AsyncClient, headers_for):
    ghost = User(id="missing-user", tenant_id=None, email="x@acme.com", full_name="X",
                 password_hash="x", role=UserRole.USER, is_active=True)

    response = await client.get("/api/v1/auth/me", headers=headers_for(ghost))

    assert response.status_code == 401
    assert response.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_logout_is_audited(client: AsyncClient, db_session: AsyncSession, member: User, member_headers: dict):
    response = await client.post("/api/v1/auth/logout", headers=member_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Logged out successfully"
    entry = (await db_session.execute(
        select(AuditLog).where(AuditLog.action == "LOGOUT")
    )).scalar_one()
    assert entry.user_id == member.id


@pytest.mark.asyncio
async def test_registration_is_all_or_nothing(
    lenient_client: AsyncClient, db_session: AsyncSession, monkeypatch
):
    def failing_admin(**kwargs):
        raise RuntimeError("users table unavailable")

    monkeypatch.setattr(auth_api, "User", failing_admin)

    response = await lenient_client.post(REGISTER_URL, json=registration())

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Internal server error"}
    assert (await db_session.execute(select(func.count(Tenant.id)))).scalar() == 0
