"""Role and permission schemas."""
from datetime import datetime
from typing import Annotated, List, Optional

from app.schemas.base import CamelModel
from app.schemas.fields import RequiredText, max_length, transforms, sanitize_markup, trim


RoleName = Annotated[RequiredText, max_length(100)]
PermissionName = Annotated[RequiredText, max_length(100)]
ResourceName = Annotated[RequiredText, max_length(50)]
Description = Annotated[str, transforms(sanitize_markup, trim), max_length(500)]


class CreateRoleRequest(CamelModel):
    name: RoleName
    description: Optional[Description] = None


class CreatePermissionRequest(CamelModel):
    name: PermissionName
    resource: ResourceName
    action: ResourceName
    description: Optional[Description] = None


class PermissionResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    resource: str
    action: str
    company_id: str
    created_at: datetime


class RoleResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    company_id: str
    permissions: List[PermissionResponse] = []
    created_at: datetime
