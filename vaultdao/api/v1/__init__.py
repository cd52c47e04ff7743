"""
API v1 routes - Participant-facing API
"""

from fastapi import APIRouter
from vaultdao.infrastructure.settings import get_settings
from vaultdao.schemas.common import ERROR_RESPONSES
from vaultdao.api.v1.vaults import router as vaults_router
from vaultdao.api.v1.proposals import router as proposals_router
from vaultdao.api.v1.claims import router as claims_router

settings = get_settings()

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["api-v1"], responses=ERROR_RESPONSES)

# Register sub-routers
router.include_router(vaults_router, tags=["vaults"])
router.include_router(proposals_router, tags=["proposals"])
router.include_router(claims_router, tags=["claims"])
