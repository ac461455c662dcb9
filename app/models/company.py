"""Company model for multi-tenancy."""
from typing import Any, Optional
from sqlalchemy import String, JSON, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, UUIDPrimaryKeyMixin, TimestampMixin
from app.core.enums import CompanyStatus


class Company(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Company model representing a tenant.

    Every user, role, permission and invitation belongs to exactly one company.
    """

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    status: Mapped[CompanyStatus] = mapped_column(
        SQLEnum(CompanyStatus),
        default=CompanyStatus.ACTIVE,
        nullable=False
    )
    settings: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Relationships
    users = relationship("User", back_populates="company", cascade="all, delete-orphan")
    roles = relationship("Role", back_populates="company", cascade="all, delete-orphan")
    permissions = relationship("Permission", back_populates="company", cascade="all, delete-orphan")
    invitations = relationship("CompanyInvitation", back_populates="company", cascade="all, delete-orphan")

    @property
    def is_active(self) -> bool:
        return self.status == CompanyStatus.ACTIVE

    @property
    def requires_invitation(self) -> bool:
        return bool((self.settings or {}).get("requireInvitation"))
