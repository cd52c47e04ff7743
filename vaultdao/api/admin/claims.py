"""
Admin API - Claims backfill
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.schemas.claims import NormalizeClaimsIn, NormalizeClaimsResponse
from vaultdao.services.claim_service import normalize_claims

router = APIRouter()


@router.post(
    "/claims/normalize",
    response_model=NormalizeClaimsResponse,
    summary="Normalize legacy claims",
    description="Move metadata.adaAmount / metadata.multiplier into their columns. Safe to re-run.",
)
async def normalize_claims_endpoint(
    request: Optional[NormalizeClaimsIn] = None,
    db: Session = Depends(get_db),
) -> NormalizeClaimsResponse:
    request = request or NormalizeClaimsIn()
    with transaction(db):
        stats = normalize_claims(db, limit=request.limit, dry_run=request.dry_run)
    return NormalizeClaimsResponse(dry_run=request.dry_run, **stats)
