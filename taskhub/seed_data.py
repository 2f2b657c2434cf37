"""Seed data script to populate initial demo data.

Run with `python -m taskhub.seed_data`. Safe to re-run: nothing is written
once a super admin exists.
"""
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.config import settings
from taskhub.core.database import async_session_maker, engine, transaction
from taskhub.core.enums import (
    ProjectStatus, TaskPriority, TaskStatus, TenantPlan, TenantStatus, UserRole, plan_limits
)
from taskhub.core.logging import get_logger, setup_logging
from taskhub.core.security import get_password_hash
from taskhub.models.project import Project
from taskhub.models.task import Task
from taskhub.models.tenant import Tenant
from taskhub.models.user import User


logger = get_logger(__name__)

SAMPLE_TENANTS = [
    {
        "name": "Demo Company",
        "subdomain": "demo",
        "plan": TenantPlan.PRO,
        "admin": ("admin@demo.com", "password123"),
        "users": [("user1@demo.com", "password123"), ("user2@demo.com", "password123")],
        "projects": [
            ("Website Redesign", "Refresh the marketing site"),
            ("Mobile App", "First release of the companion app"),
        ],
    },
    {
        "name": "Test Corp",
        "subdomain": "testcorp",
        "plan": TenantPlan.FREE,
        "admin": ("admin@testcorp.com", "password123"),
        "users": [("user1@testcorp.com", "password123")],
        "projects": [("Internal Tools", "Back-office tooling")],
    },
]


async def seed_data(session: AsyncSession) -> bool:
    """Seed the super admin and sample tenants. Returns False if already seeded."""
    result = await session.execute(
        select(User.id).where(User.role == UserRole.SUPER_ADMIN).limit(1)
    )
    if result.scalar_one_or_none() is not None:
        logger.info("Data already seeded. Skipping...")
        return False

    async with transaction(session):
        session.add(User(
            tenant_id=None,
            email=settings.SEED_SUPER_ADMIN_EMAIL,
            password_hash=get_password_hash(settings.SEED_SUPER_ADMIN_PASSWORD),
            full_name="Super Admin",
            role=UserRole.SUPER_ADMIN,
        ))

        for sample in SAMPLE_TENANTS:
            max_users, max_projects = plan_limits(sample["plan"])
            tenant = Tenant(
                name=sample["name"],
                subdomain=sample["subdomain"],
                status=TenantStatus.ACTIVE,
                subscription_plan=sample["plan"],
                max_users=max_users,
                max_projects=max_projects,
            )
            session.add(tenant)
            await session.flush()

            admin_email, admin_password = sample["admin"]
            admin = User(
                tenant_id=tenant.id,
                email=admin_email,
                password_hash=get_password_hash(admin_password),
                full_name="Tenant Admin",
                role=UserRole.TENANT_ADMIN,
            )
            session.add(admin)
            await session.flush()

            for email, password in sample["users"]:
                session.add(User(
                    tenant_id=tenant.id,
                    email=email,
                    password_hash=get_password_hash(password),
                    full_name="User",
                    role=UserRole.USER,
                ))

            for name, description in sample["projects"]:
                project = Project(
                    tenant_id=tenant.id,
                    name=name,
                    description=description,
                    status=ProjectStatus.ACTIVE,
                    created_by=admin.id,
                )
                session.add(project)
                await session.flush()

                session.add(Task(
                    project_id=project.id,
                    tenant_id=tenant.id,
                    title="Initial task",
                    description="Seed task",
                    status=TaskStatus.TODO,
                    priority=TaskPriority.MEDIUM,
                ))

            logger.info(f"Seeded tenant: {tenant.name} ({tenant.subdomain})", extra={"tenant_id": tenant.id})

    logger.info(f"Seed data created. Super admin: {settings.SEED_SUPER_ADMIN_EMAIL}")
    return True


async def main():
    """Main entry point."""
    setup_logging(settings.DEBUG)
    async with async_session_maker() as session:
        await seed_data(session)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
