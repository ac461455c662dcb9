"""User model."""
from datetime import datetime
from typing import Optional
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, UUIDPrimaryKeyMixin, TimestampMixin
from app.core.enums import SystemUserRole, UserStatus


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """User model representing an authenticated user."""

    __tablename__ = "users"

    company_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    system_role: Mapped[SystemUserRole] = mapped_column(
        SQLEnum(SystemUserRole),
        default=SystemUserRole.USER,
        nullable=False
    )
    status: Mapped[UserStatus] = mapped_column(
        SQLEnum(UserStatus),
        default=UserStatus.ACTIVE,
        nullable=False
    )
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    email_verified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    # Relationships
    company = relationship("Company", back_populates="users")
    roles = relationship("Role", secondary="user_roles", back_populates="users", viewonly=True)

    __table_args__ = (
        Index("ix_user_status", "status"),
        Index("ix_user_last_login_at", "last_login_at"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE
