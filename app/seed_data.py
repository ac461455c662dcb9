"""Seed a known-good baseline: the default company, its users, roles and permissions.

Every record is matched on its natural unique key and created only when
absent; existing rows are never updated, so the script can be re-run safely.

    python -m app.seed_data
"""
import asyncio
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Tuple, Type, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import Base, async_session_maker, engine
from app.core.enums import CompanyStatus, SystemUserRole, UserStatus
from app.core.logging import get_logger, setup_logging
from app.core.security import get_password_hash
from app.models.company import Company
from app.models.role import Permission, Role
from app.models.user import User


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

DEFAULT_COMPANY = {
    "name": "Default Company",
    "slug": "default",
    "domain": "example.com",
    "status": CompanyStatus.ACTIVE,
    "settings": {
        "theme": "default",
        "features": ["logging", "monitoring", "rbac"],
    },
}

SEED_USERS = [
    {
        "email": "superadmin@example.com",
        "password": "superadmin123",
        "first_name": "Super",
        "last_name": "Admin",
        "system_role": SystemUserRole.SUPERADMIN,
    },
    {
        "email": "admin@example.com",
        "password": "admin123",
        "first_name": "Admin",
        "last_name": "User",
        "system_role": SystemUserRole.ADMIN,
    },
    {
        "email": "user@example.com",
        "password": "user123",
        "first_name": "Regular",
        "last_name": "User",
        "system_role": SystemUserRole.USER,
    },
    {
        "email": "moderator@example.com",
        "password": "mod123",
        "first_name": "Moderator",
        "last_name": "User",
        "system_role": SystemUserRole.MODERATOR,
    },
]

SEED_ROLES = [
    {"name": "Company Admin", "description": "Full company access"},
    {"name": "Company User", "description": "Basic user access"},
]

SEED_PERMISSIONS = ["users.read", "users.write", "users.delete", "roles.read", "roles.write"]


async def get_or_create(
    session: AsyncSession,
    model: Type[ModelT],
    lookup: Dict[str, Any],
    defaults: Union[Dict[str, Any], Callable[[], Dict[str, Any]]],
) -> Tuple[ModelT, bool]:
    """Match ``model`` on ``lookup`` or create it from ``lookup`` plus ``defaults``.

    A matched row is returned untouched. ``defaults`` may be a callable so that
    costly values (password hashes) are only computed for new rows. The second
    element tells whether a row was created.
    """
    result = await session.execute(select(model).filter_by(**lookup))
    instance = result.scalar_one_or_none()
    if instance is not None:
        return instance, False

    if callable(defaults):
        defaults = defaults()
    instance = model(**lookup, **defaults)
    session.add(instance)
    await session.flush()
    return instance, True


def _report(kind: str, label: str, created: bool) -> None:
    logger.info(f"{kind} {'created' if created else 'already present'}: {label}")


async def seed_data(session: AsyncSession) -> Company:
    """Create whatever part of the baseline is missing, then commit once."""
    defaults = {k: v for k, v in DEFAULT_COMPANY.items() if k != "slug"}
    company, created = await get_or_create(
        session, Company, {"slug": DEFAULT_COMPANY["slug"]}, defaults
    )
    _report("Company", company.slug, created)

    for user_data in SEED_USERS:
        user_data = dict(user_data)
        email = user_data.pop("email")
        password = user_data.pop("password")

        def new_user_fields(user_data=user_data, password=password) -> Dict[str, Any]:
            return {
                **user_data,
                "hashed_password": get_password_hash(password, rounds=settings.SEED_BCRYPT_ROUNDS),
                "status": UserStatus.ACTIVE,
                "email_verified": True,
                "email_verified_at": datetime.now(timezone.utc),
                "company_id": company.id,
            }

        user, created = await get_or_create(session, User, {"email": email}, new_user_fields)
        _report("User", f"{user.email} ({user.system_role.value})", created)

    for role_data in SEED_ROLES:
        role, created = await get_or_create(
            session,
            Role,
            {"name": role_data["name"], "company_id": company.id},
            {"description": role_data["description"]},
        )
        _report("Role", role.name, created)

    for name in SEED_PERMISSIONS:
        resource, action = name.split(".", 1)
        permission, created = await get_or_create(
            session,
            Permission,
            {"name": name, "company_id": company.id},
            {"resource": resource, "action": action},
        )
        _report("Permission", permission.name, created)

    await session.commit()
    return company


async def main() -> int:
    """Run the seed once; returns the process exit status."""
    setup_logging(settings.DEBUG)
    try:
        # Closing the session rolls back anything left uncommitted
        async with async_session_maker() as session:
            await seed_data(session)
        logger.info("Seed completed")
        for user_data in SEED_USERS:
            logger.info(f"Seed login: {user_data['email']} / {user_data['password']}")
        return 0
    except Exception:
        logger.exception("Seed failed")
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
