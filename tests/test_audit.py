"""Audit recorder tests."""
import pytest
from httpx import AsyncClient
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core import audit
from taskhub.core.audit import AuditService
from taskhub.core.enums import AuditAction
from taskhub.models.audit_log import AuditLog
from taskhub.models.project import Project


async def audit_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(AuditLog.id)))).scalar()


@pytest.mark.asyncio
async def test_record_stores_entry(db_session: AsyncSession):
    stored = await AuditService.record(
        db_session,
        action=AuditAction.CREATE_PROJECT,
        tenant_id="t-1",
        user_id="u-1",
        entity_type="project",
        entity_id="p-1",
        ip_address="10.0.0.1",
    )

    assert stored is True
    entry = (await db_session.execute(select(AuditLog))).scalar_one()
    assert entry.action == "CREATE_PROJECT"
    assert (entry.tenant_id, entry.user_id, entry.entity_id) == ("t-1", "u-1", "p-1")
    assert entry.ip_address == "10.0.0.1"
    assert entry.created_at is not None


@pytest.mark.asyncio
async def test_record_without_tenant_or_user(db_session: AsyncSession):
    assert await AuditService.record(db_session, action=AuditAction.LOGIN) is True


@pytest.mark.asyncio
async def test_failed_commit_is_swallowed(db_session: AsyncSession, monkeypatch):
    async def broken_commit():
        raise RuntimeError("disk full")

    monkeypatch.setattr(db_session, "commit", broken_commit)

    stored = await AuditService.record(db_session, action=AuditAction.LOGOUT, user_id="u-1")

    assert stored is False
    monkeypatch.undo()
    assert await audit_count(db_session) == 0


@pytest.mark.asyncio
async def test_request_succeeds_when_audit_fails(
    client: AsyncClient, db_session: AsyncSession, admin_headers: dict, monkeypatch
):
    def broken_entry(**kwargs):
        raise RuntimeError("audit table unavailable")

    monkeypatch.setattr(audit, "AuditLog", broken_entry)

    response = await client.post("/api/v1/projects", json={"name": "Roadmap"}, headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["message"] == "Project created successfully"
    project_id = response.json()["data"]["id"]
    assert await db_session.get(Project, project_id) is not None
    assert await audit_count(db_session) == 0
