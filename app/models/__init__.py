"""SQLAlchemy models."""
from app.models.company import Company
from app.models.user import User
from app.models.role import Role, Permission, RolePermission, UserRole
from app.models.invitation import CompanyInvitation

__all__ = [
    "Company", "User", "Role", "Permission", "RolePermission", "UserRole",
    "CompanyInvitation",
]
