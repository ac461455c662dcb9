"""Role and permission API endpoints."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.core.dependencies import DbSession, TenantContext, TenantCtx, require_role
from app.core.enums import ADMIN_ROLES
from app.core.logging import get_logger
from app.core.validation import ValidationPipe
from app.models.role import Permission, Role, RolePermission, UserRole
from app.models.user import User
from app.schemas.role import (
    CreatePermissionRequest, CreateRoleRequest, PermissionResponse, RoleResponse,
)


roles_router = APIRouter()
permissions_router = APIRouter()
logger = get_logger(__name__)

AdminCtx = Depends(require_role(*ADMIN_ROLES))


async def _load_role(db, role_id: str, company_id: str) -> Role:
    result = await db.execute(
        select(Role)
        .options(selectinload(Role.permissions))
        .where(Role.id == role_id, Role.company_id == company_id)
        .execution_options(populate_existing=True)
    )
    role = result.scalar_one_or_none()
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Role not found",
        )
    return role


@roles_router.get("", response_model=List[RoleResponse])
async def list_roles(ctx: TenantCtx, db: DbSession):
    """List the current company's roles with their permissions."""
    result = await db.execute(
        select(Role)
        .options(selectinload(Role.permissions))
        .where(Role.company_id == ctx.company_id)
        .order_by(Role.name)
        .execution_options(populate_existing=True)
    )
    return [RoleResponse.model_validate(r) for r in result.scalars().all()]


@roles_router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    db: DbSession,
    ctx: TenantContext = AdminCtx,
    request: CreateRoleRequest = Depends(ValidationPipe(CreateRoleRequest)),
):
    """Create a role in the current company."""
    existing = await db.execute(
        select(Role.id).where(Role.name == request.name, Role.company_id == ctx.company_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Role with name '{request.name}' already exists",
        )

    role = Role(name=request.name, description=request.description, company_id=ctx.company_id)
    db.add(role)
    await db.commit()

    logger.info(f"Role created: {role.id}", extra={"company_id": ctx.company_id})
    return RoleResponse.model_validate(await _load_role(db, role.id, ctx.company_id))


@roles_router.get("/{role_id}", response_model=RoleResponse)
async def get_role(role_id: str, ctx: TenantCtx, db: DbSession):
    """Get a role of the current company."""
    return RoleResponse.model_validate(await _load_role(db, role_id, ctx.company_id))


@roles_router.post("/{role_id}/permissions/{permission_id}", response_model=RoleResponse)
async def attach_permission(
    role_id: str,
    permission_id: str,
    db: DbSession,
    ctx: TenantContext = AdminCtx,
):
    """Grant a permission to a role. Granting twice is a no-op."""
    role = await _load_role(db, role_id, ctx.company_id)

    permission = await db.execute(
        select(Permission.id).where(
            Permission.id == permission_id, Permission.company_id == ctx.company_id
        )
    )
    if permission.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Permission not found",
        )

    if all(p.id != permission_id for p in role.permissions):
        db.add(RolePermission(role_id=role.id, permission_id=permission_id))
        await db.commit()
        logger.info(
            f"Permission {permission_id} granted to role {role_id}",
            extra={"company_id": ctx.company_id},
        )

    return RoleResponse.model_validate(await _load_role(db, role_id, ctx.company_id))


@roles_router.post("/{role_id}/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def assign_role(
    role_id: str,
    user_id: str,
    db: DbSession,
    ctx: TenantContext = AdminCtx,
):
    """Assign a role to a user of the same company. Assigning twice is a no-op."""
    await _load_role(db, role_id, ctx.company_id)

    user = await db.execute(
        select(User.id).where(User.id == user_id, User.company_id == ctx.company_id)
    )
    if user.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    existing = await db.execute(
        select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
    )
    if existing.scalar_one_or_none() is None:
        db.add(UserRole(user_id=user_id, role_id=role_id))
        await db.commit()
        logger.info(
            f"Role {role_id} assigned to user {user_id}",
            extra={"company_id": ctx.company_id, "user_id": user_id},
        )


@permissions_router.get("", response_model=List[PermissionResponse])
async def list_permissions(ctx: TenantCtx, db: DbSession):
    """List the current company's permissions."""
    result = await db.execute(
        select(Permission)
        .where(Permission.company_id == ctx.company_id)
        .order_by(Permission.resource, Permission.action)
    )
    return [PermissionResponse.model_validate(p) for p in result.scalars().all()]


@permissions_router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    db: DbSession,
    ctx: TenantContext = AdminCtx,
    request: CreatePermissionRequest = Depends(ValidationPipe(CreatePermissionRequest)),
):
    """Create a permission in the current company."""
    existing = await db.execute(
        select(Permission.id).where(
            Permission.name == request.name, Permission.company_id == ctx.company_id
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Permission with name '{request.name}' already exists",
        )

    permission = Permission(
        name=request.name,
        resource=request.resource,
        action=request.action,
        description=request.description,
        company_id=ctx.company_id,
    )
    db.add(permission)
    await db.commit()
    await db.refresh(permission)

    logger.info(f"Permission created: {permission.name}", extra={"company_id": ctx.company_id})
    return PermissionResponse.model_validate(permission)
