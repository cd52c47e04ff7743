"""
Admin API routes - INTERNAL ONLY
"""

from fastapi import APIRouter
from vaultdao.infrastructure.settings import get_settings
from vaultdao.schemas.common import ERROR_RESPONSES
from vaultdao.api.admin.vaults import router as vaults_router
from vaultdao.api.admin.assets import router as assets_router
from vaultdao.api.admin.proposals import router as proposals_router
from vaultdao.api.admin.system_settings import router as system_settings_router
from vaultdao.api.admin.claims import router as claims_router

settings = get_settings()

router = APIRouter(prefix=settings.ADMIN_V1_PREFIX, tags=["admin-v1"], responses=ERROR_RESPONSES)

# Register admin routers
router.include_router(vaults_router, tags=["admin-vaults"])
router.include_router(assets_router, tags=["admin-assets"])
router.include_router(proposals_router, tags=["admin-proposals"])
router.include_router(system_settings_router, tags=["admin-system-settings"])
router.include_router(claims_router, tags=["admin-claims"])
