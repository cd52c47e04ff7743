"""
Admin API - Proposal lifecycle (fee payment, voting window, execution)
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.schemas.governance import (
    FinalizeResponse,
    ProposalResponse,
    VoteResultResponse,
)
from vaultdao.services.proposal_service import (
    execute_proposal,
    finalize_proposal,
    mark_fee_paid,
    open_voting,
)

router = APIRouter()


@router.post("/proposals/{proposal_id}/mark-paid", response_model=ProposalResponse, summary="Mark governance fee paid")
async def mark_fee_paid_endpoint(proposal_id: UUID, db: Session = Depends(get_db)) -> ProposalResponse:
    with transaction(db):
        proposal = mark_fee_paid(db, proposal_id)
    db.refresh(proposal)
    return ProposalResponse.model_validate(proposal)


@router.post("/proposals/{proposal_id}/open", response_model=ProposalResponse, summary="Open voting")
async def open_voting_endpoint(proposal_id: UUID, db: Session = Depends(get_db)) -> ProposalResponse:
    with transaction(db):
        proposal = open_voting(db, proposal_id)
    db.refresh(proposal)
    return ProposalResponse.model_validate(proposal)


@router.post(
    "/proposals/{proposal_id}/finalize",
    response_model=FinalizeResponse,
    summary="Close voting",
    description="active -> passed | rejected, against the vault thresholds and the proposal snapshot.",
)
async def finalize_proposal_endpoint(proposal_id: UUID, db: Session = Depends(get_db)) -> FinalizeResponse:
    with transaction(db):
        proposal, result = finalize_proposal(db, proposal_id)
    db.refresh(proposal)
    return FinalizeResponse(
        proposal=ProposalResponse.model_validate(proposal),
        result=VoteResultResponse.model_validate(result) if result else None,
    )


@router.post(
    "/proposals/{proposal_id}/execute",
    response_model=ProposalResponse,
    summary="Execute proposal",
    description="passed -> executed, applying distribution or termination effects.",
)
async def execute_proposal_endpoint(proposal_id: UUID, db: Session = Depends(get_db)) -> ProposalResponse:
    with transaction(db):
        proposal = execute_proposal(db, proposal_id)
    db.refresh(proposal)
    return ProposalResponse.model_validate(proposal)
