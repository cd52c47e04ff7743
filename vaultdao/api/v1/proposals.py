"""
Client API - Proposals, voting and tallies
"""

from uuid import UUID
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.schemas.governance import (
    ProposalResponse,
    TallyResponse,
    TallyRowResponse,
    VoteIn,
    VoteResponse,
)
from vaultdao.services.proposal_service import get_proposal
from vaultdao.services.vote_service import cast_vote, tally

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/proposals/{proposal_id}",
    response_model=ProposalResponse,
    summary="Get proposal",
)
async def get_proposal_endpoint(proposal_id: UUID, db: Session = Depends(get_db)) -> ProposalResponse:
    proposal = get_proposal(db, proposal_id)
    return ProposalResponse.model_validate(proposal)


@router.post(
    "/proposals/{proposal_id}/votes",
    response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Cast vote",
    description="One vote per voter and per address, weighted by the address balance in the proposal snapshot. "
                "Fixed ballots accept yes/no (and abstain when enabled); custom ballots accept an option id.",
)
async def cast_vote_endpoint(
    proposal_id: UUID,
    request: VoteIn,
    db: Session = Depends(get_db),
) -> VoteResponse:
    with transaction(db):
        vote = cast_vote(
            db,
            proposal_id=proposal_id,
            voter_id=request.voter_id,
            option_ref=request.vote_option_id,
            voter_address=request.voter_address,
        )

    db.refresh(vote)
    return VoteResponse.model_validate(vote)


@router.get(
    "/proposals/{proposal_id}/tally",
    response_model=TallyResponse,
    summary="Get tally",
    description="Vote count and weight per option, in ballot order. Options without votes are included.",
)
async def get_tally_endpoint(proposal_id: UUID, db: Session = Depends(get_db)) -> TallyResponse:
    rows = tally(db, proposal_id)
    return TallyResponse(
        proposal_id=proposal_id,
        rows=[TallyRowResponse.model_validate(row) for row in rows],
    )
