"""
Client API - Claims
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.schemas.claims import ClaimResponse
from vaultdao.services.claim_service import get_claim

router = APIRouter()


@router.get(
    "/claims/{claim_id}",
    response_model=ClaimResponse,
    summary="Get claim",
    description="Legacy claims are normalized (metadata amounts moved to columns) on read.",
)
async def get_claim_endpoint(claim_id: UUID, db: Session = Depends(get_db)) -> ClaimResponse:
    with transaction(db):
        claim = get_claim(db, claim_id)
    db.refresh(claim)
    return ClaimResponse.model_validate(claim)
