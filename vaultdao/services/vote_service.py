"""
Vote service - Ballot validation, tallying and result calculation
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Union
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from vaultdao.core.governance.models import (
    Proposal, ProposalStatus, Vote, VoteChoice, VoteOption, FIXED_VOTE_ORDER,
)
from vaultdao.core.common.errors import (
    DuplicateVote, EntityNotFound, InvalidVoteValue, NoVotingPower, ProposalNotActive, UnknownVoteOption,
)
from vaultdao.services.snapshot_service import voting_power
from vaultdao.utils.metrics import record_vote_cast

logger = logging.getLogger(__name__)

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class TallyRow:
    """One ballot entry with its vote count and summed weight"""
    vote_option_id: str
    label: str
    count: int
    weight: int


@dataclass(frozen=True)
class VoteResult:
    """Weighted outcome of a fixed-ballot (yes/no/abstain) proposal"""
    yes_votes: int
    no_votes: int
    abstain_votes: int
    total_votes: int  # yes + no
    total_votes_including_abstain: int
    yes_vote_percent: int
    no_vote_percent: int
    abstain_vote_percent: int
    participation_percent: float
    meets_participation_threshold: bool
    meets_execution_threshold: bool
    is_successful: bool


def _get_proposal(db: Session, proposal_id: UUID) -> Proposal:
    proposal = db.execute(select(Proposal).where(Proposal.id == proposal_id)).scalar_one_or_none()
    if not proposal:
        raise EntityNotFound("proposal", proposal_id)
    return proposal


def fixed_ballot(proposal: Proposal) -> List[str]:
    """Allowed literals for a proposal without custom options, in canonical order"""
    return [
        choice.value
        for choice in FIXED_VOTE_ORDER
        if choice != VoteChoice.ABSTAIN or proposal.abstain
    ]


def _resolve_option(proposal: Proposal, option_ref: str) -> str:
    if proposal.has_custom_vote_options:
        for option in proposal.vote_options:
            if str(option.id) == str(option_ref):
                return str(option.id)
        raise UnknownVoteOption(proposal.id, option_ref)

    # Fixed ballot literals are matched exactly (lower case)
    allowed = fixed_ballot(proposal)
    if option_ref not in allowed:
        raise InvalidVoteValue(proposal.id, option_ref, allowed)
    return option_ref


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def voting_closed(proposal: Proposal, now: Optional[datetime] = None) -> bool:
    """True once the proposal end_date has passed"""
    if proposal.end_date is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now > _as_utc(proposal.end_date)


def cast_vote(
    db: Session,
    proposal_id: UUID,
    voter_id: str,
    option_ref: str,
    voter_address: str,
) -> Vote:
    """
    Record one vote for a voter on a proposal.

    The vote weight is the voter address balance in the snapshot the
    proposal was created with. One vote per voter id and per address;
    the unique constraints decide concurrent duplicates, the losing insert
    is rolled back and surfaces as DuplicateVote.

    NO COMMIT - caller must commit.

    Raises:
        EntityNotFound: proposal does not exist
        ProposalNotActive: voting not open, or end_date passed
        UnknownVoteOption: custom-option proposal, option id not defined
        InvalidVoteValue: fixed ballot, value not allowed
        NoVotingPower: address holds nothing in the proposal snapshot
        DuplicateVote: voter or address already voted
    """
    proposal = _get_proposal(db, proposal_id)
    if proposal.status != ProposalStatus.ACTIVE:
        raise ProposalNotActive(proposal.id, proposal.status)
    if voting_closed(proposal):
        raise ProposalNotActive(proposal.id, proposal.status, end_date=_as_utc(proposal.end_date))

    vote_option_id = _resolve_option(proposal, option_ref)

    vote_weight = voting_power(proposal.snapshot, voter_address) if proposal.snapshot else 0
    if vote_weight <= 0:
        raise NoVotingPower(proposal.id, voter_address)

    existing = db.execute(
        select(Vote.voter_id, Vote.voter_address).where(
            Vote.proposal_id == proposal.id,
            or_(Vote.voter_id == voter_id, Vote.voter_address == voter_address),
        )
    ).first()
    if existing:
        raise DuplicateVote(proposal.id, voter_id, voter_address)

    vote = Vote(
        proposal_id=proposal.id,
        voter_id=voter_id,
        voter_address=voter_address,
        vote_weight=vote_weight,
        vote_option_id=vote_option_id,
    )
    db.add(vote)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateVote(proposal_id, voter_id, voter_address) from e

    option_kind = "custom" if proposal.has_custom_vote_options else "fixed"
    record_vote_cast(option_kind)
    logger.info(
        "Vote cast",
        extra={
            "proposal_id": str(proposal.id),
            "voter_id": voter_id,
            "voter_address": voter_address,
            "vote_option_id": vote_option_id,
            "vote_weight": vote_weight,
        },
    )
    return vote


def tally(db: Session, proposal_id: UUID) -> List[TallyRow]:
    """
    Count votes per option.

    Custom options are listed by (order, id); fixed ballots in the order
    yes, no, abstain. Options without votes are listed with zero counts.
    Equal counts are kept as-is (no tie-breaking).
    """
    proposal = _get_proposal(db, proposal_id)

    counts = {
        option_id: (count, int(weight or 0))
        for option_id, count, weight in db.execute(
            select(
                Vote.vote_option_id,
                func.count(Vote.id),
                func.sum(Vote.vote_weight),
            )
            .where(Vote.proposal_id == proposal.id)
            .group_by(Vote.vote_option_id)
        )
    }

    if proposal.has_custom_vote_options:
        options = db.execute(
            select(VoteOption)
            .where(VoteOption.proposal_id == proposal.id)
            .order_by(VoteOption.order, VoteOption.id)
        ).scalars().all()
        entries = [(str(option.id), option.label) for option in options]
    else:
        entries = [(value, value) for value in fixed_ballot(proposal)]

    return [
        TallyRow(
            vote_option_id=option_id,
            label=label,
            count=counts.get(option_id, (0, 0))[0],
            weight=counts.get(option_id, (0, 0))[1],
        )
        for option_id, label in entries
    ]


def calculate_result(
    rows: Iterable[TallyRow],
    execution_threshold: Number,
    participation_threshold: Number = 0,
    total_voting_power: Optional[int] = None,
) -> VoteResult:
    """
    Weighted result for a fixed ballot.

    Args:
        rows: Tally rows (yes/no/abstain)
        execution_threshold: Required yes share of yes+no, in percent (0-100)
        participation_threshold: Required share of total voting power that
            voted (abstain included), in percent (0-100)
        total_voting_power: Snapshot voting power; when absent participation
            is taken as 100%

    Abstain votes count toward participation only.
    """
    weights = {row.vote_option_id: row.weight for row in rows}
    yes_votes = int(weights.get(VoteChoice.YES.value, 0))
    no_votes = int(weights.get(VoteChoice.NO.value, 0))
    abstain_votes = int(weights.get(VoteChoice.ABSTAIN.value, 0))

    total_votes = yes_votes + no_votes
    total_including_abstain = total_votes + abstain_votes

    base = total_voting_power or (total_votes if total_votes > 0 else 1)

    if total_voting_power and total_voting_power > 0:
        participation_percent = total_including_abstain / total_voting_power * 100
    else:
        participation_percent = 100.0

    meets_participation = participation_percent >= float(participation_threshold)
    yes_vs_no_percent = yes_votes / total_votes * 100 if total_votes > 0 else 0.0
    meets_execution = yes_vs_no_percent >= float(execution_threshold)

    return VoteResult(
        yes_votes=yes_votes,
        no_votes=no_votes,
        abstain_votes=abstain_votes,
        total_votes=total_votes,
        total_votes_including_abstain=total_including_abstain,
        yes_vote_percent=yes_votes * 100 // base,
        no_vote_percent=no_votes * 100 // base,
        abstain_vote_percent=abstain_votes * 100 // base,
        participation_percent=participation_percent,
        meets_participation_threshold=meets_participation,
        meets_execution_threshold=meets_execution,
        is_successful=meets_participation and meets_execution,
    )


def leading_option(rows: Iterable[TallyRow]) -> Optional[TallyRow]:
    """Option with the highest weight, or None when nobody voted or the lead is tied"""
    rows = [row for row in rows if row.weight > 0]
    if not rows:
        return None
    top = max(row.weight for row in rows)
    leaders = [row for row in rows if row.weight == top]
    return leaders[0] if len(leaders) == 1 else None
