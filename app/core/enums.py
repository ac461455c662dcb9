"""Enum definitions for the application."""
from enum import Enum


class SystemUserRole(str, Enum):
    """Tenant-independent privilege tier of a user."""
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    USER = "USER"


class UserStatus(str, Enum):
    """User account status."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class CompanyStatus(str, Enum):
    """Company (tenant) status."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class InvitationStatus(str, Enum):
    """Company invitation lifecycle."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


ADMIN_ROLES = (SystemUserRole.SUPERADMIN, SystemUserRole.ADMIN)
