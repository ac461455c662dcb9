"""API v1 router."""
from fastapi import APIRouter

from app.api.v1.auth import router as auth_router
from app.api.v1.companies import router as companies_router
from app.api.v1.roles import roles_router, permissions_router


router = APIRouter(prefix="/v1")

router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
router.include_router(companies_router, prefix="/companies", tags=["Companies"])
router.include_router(roles_router, prefix="/roles", tags=["Roles"])
router.include_router(permissions_router, prefix="/permissions", tags=["Permissions"])
