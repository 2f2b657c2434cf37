"""Tenant API tests."""
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.enums import TenantPlan
from taskhub.models.audit_log import AuditLog
from taskhub.models.tenant import Tenant
from taskhub.models.user import User


@pytest.mark.asyncio
async def test_get_own_tenant_with_stats(client: AsyncClient, test_tenant: Tenant, member: User, admin_headers: dict):
    await client.post("/api/v1/projects", json={"name": "Roadmap"}, headers=admin_headers)

    response = await client.get(f"/api/v1/tenants/{test_tenant.id}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["subdomain"] == "acme"
    assert data["stats"] == {"total_users": 2, "total_projects": 1, "total_tasks": 0}


@pytest.mark.asyncio
async def test_missing_tenant_is_404_before_membership(client: AsyncClient, admin_headers: dict):
    response = await client.get("/api/v1/tenants/does-not-exist", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Tenant not found"


@pytest.mark.asyncio
async def test_other_tenant_is_403(client: AsyncClient, other_tenant: Tenant, admin_headers: dict):
    response = await client.get(f"/api/v1/tenants/{other_tenant.id}", headers=admin_headers)

    assert response.status_code == 403
    assert response.json()["message"] == "Unauthorized tenant access"


@pytest.mark.asyncio
async def test_super_admin_reads_any_tenant(client: AsyncClient, other_tenant: Tenant, super_headers: dict):
    response = await client.get(f"/api/v1/tenants/{other_tenant.id}", headers=super_headers)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_tenant_admin_renames_tenant(
    client: AsyncClient, db_session: AsyncSession, test_tenant: Tenant, admin_headers: dict
):
    response = await client.put(
        f"/api/v1/tenants/{test_tenant.id}", json={"name": "Acme Corp"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Acme Corp"
    assert response.json()["data"]["subscription_plan"] == "free"
    entry = (await db_session.execute(
        select(AuditLog).where(AuditLog.action == "UPDATE_TENANT")
    )).scalar_one()
    assert entry.entity_id == test_tenant.id


@pytest.mark.asyncio
async def test_tenant_admin_cannot_change_plan(client: AsyncClient, test_tenant: Tenant, admin_headers: dict):
    response = await client.put(
        f"/api/v1/tenants/{test_tenant.id}",
        json={"subscription_plan": "enterprise"},
        headers=admin_headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_plain_user_cannot_update_tenant(client: AsyncClient, test_tenant: Tenant, member_headers: dict):
    response = await client.put(
        f"/api/v1/tenants/{test_tenant.id}", json={"name": "Hijacked"}, headers=member_headers
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_tenant_admin_cannot_update_other_tenant(
    client: AsyncClient, other_tenant: Tenant, admin_headers: dict
):
    response = await client.put(
        f"/api/v1/tenants/{other_tenant.id}", json={"name": "Mine now"}, headers=admin_headers
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_empty_update_is_400(client: AsyncClient, test_tenant: Tenant, admin_headers: dict):
    response = await client.put(f"/api/v1/tenants/{test_tenant.id}", json={}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Nothing to update"


@pytest.mark.asyncio
async def test_super_admin_changes_plan_without_touching_limits(
    client: AsyncClient, test_tenant: Tenant, super_headers: dict
):
    response = await client.put(
        f"/api/v1/tenants/{test_tenant.id}",
        json={"subscription_plan": "pro", "status": "trial"},
        headers=super_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["subscription_plan"] == TenantPlan.PRO.value
    assert data["status"] == "trial"
    assert (data["max_users"], data["max_projects"]) == (5, 3)


@pytest.mark.asyncio
async def test_list_tenants_requires_super_admin(client: AsyncClient, admin_headers: dict):
    response = await client.get("/api/v1/tenants", headers=admin_headers)

    assert response.status_code == 403
    assert response.json()["message"] == "Insufficient role"


@pytest.mark.asyncio
async def test_list_tenants_with_counts_and_filters(
    client: AsyncClient, test_tenant: Tenant, other_tenant: Tenant, tenant_admin: User,
    member: User, make_tenant, super_headers: dict
):
    await make_tenant(name="Initech", subdomain="initech", plan=TenantPlan.ENTERPRISE)

    response = await client.get("/api/v1/tenants", headers=super_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["pagination"] == {"current_page": 1, "total_pages": 1, "total_tenants": 3, "limit": 10}
    # newest first
    assert [t["subdomain"] for t in data["tenants"]] == ["initech", "globex", "acme"]
    acme = next(t for t in data["tenants"] if t["subdomain"] == "acme")
    assert acme["total_users"] == 2
    assert acme["total_projects"] == 0

    filtered = await client.get(
        "/api/v1/tenants", params={"subscription_plan": "enterprise"}, headers=super_headers
    )
    assert [t["subdomain"] for t in filtered.json()["data"]["tenants"]] == ["initech"]

    paged = await client.get("/api/v1/tenants", params={"limit": 2, "page": 2}, headers=super_headers)
    assert paged.json()["data"]["pagination"]["total_pages"] == 2
    assert [t["subdomain"] for t in paged.json()["data"]["tenants"]] == ["acme"]


@pytest.mark.asyncio
async def test_list_tenants_limit_capped(client: AsyncClient, super_headers: dict):
    response = await client.get("/api/v1/tenants", params={"limit": 101}, headers=super_headers)

    assert response.status_code == 400
