"""SQLAlchemy ORM models for users, organizations and memberships."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventphoto.db.base import Base
from eventphoto.db.enums import Role, enum_check

if TYPE_CHECKING:
    from eventphoto.db.models import Event, EventCategory


class Organization(Base):
    """
    A tenant in the multi-tenant system.

    Events, categories and billing records belong to an organization
    and must be scoped by org_id in all queries.
    """

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Payment provider mirror
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    subscription_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    memberships: Mapped[list["OrganizationUser"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan", passive_deletes=True
    )
    events: Mapped[list["Event"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan", passive_deletes=True
    )
    categories: Mapped[list["EventCategory"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan", passive_deletes=True
    )


class User(Base):
    """
    Application user.

    Credentials are a one-way bcrypt hash; see services.auth_service.
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint(enum_check("role", Role), name="ck_users_role_valid"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(30), default=Role.INDIVIDUAL_USER.value, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # Bumped to invalidate every outstanding session cookie
    token_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    memberships: Mapped[list["OrganizationUser"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )


class OrganizationUser(Base):
    """
    Links a user to an organization.

    Constraint: UNIQUE(user_id, org_id). The schema allows several
    organizations per user; request scoping uses the oldest membership.
    """

    __tablename__ = "organization_users"
    __table_args__ = (
        UniqueConstraint("user_id", "org_id", name="uq_organization_users_user_org"),
        Index("idx_organization_users_org_id", "org_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="memberships")
    organization: Mapped["Organization"] = relationship(back_populates="memberships")
