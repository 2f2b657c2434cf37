"""Tenant model for multi-tenancy."""
from datetime import datetime, timezone
from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from taskhub.core.database import Base, value_enum
from taskhub.core.enums import TenantPlan, TenantStatus


class Tenant(Base):
    """Tenant model representing a customer organization."""

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Compared byte-for-byte: "acme" and "ACME" are different subdomains
    subdomain: Mapped[str] = mapped_column(String(63), nullable=False, unique=True)
    status: Mapped[TenantStatus] = mapped_column(
        value_enum(TenantStatus),
        default=TenantStatus.ACTIVE,
        nullable=False
    )
    subscription_plan: Mapped[TenantPlan] = mapped_column(
        value_enum(TenantPlan),
        default=TenantPlan.FREE,
        nullable=False
    )
    max_users: Mapped[int] = mapped_column(Integer, default=5, nullable=False)
    max_projects: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False
    )

    # Relationships
    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="tenant", cascade="all, delete-orphan")
