"""
Governance API request/response schemas
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from uuid import UUID

from vaultdao.core.governance.models import ProposalStatus, ProposalType
from vaultdao.services.snapshot_service import total_voting_power


class SnapshotCreateIn(BaseModel):
    """Request schema for recording a balance snapshot"""
    asset_id: str = Field(..., min_length=1, max_length=255, description="Vault token unit")
    address_balances: Dict[str, Union[int, str]] = Field(..., description="Address -> token balance")


class SnapshotResponse(BaseModel):
    """Snapshot summary (balances are not echoed)"""
    id: UUID
    vault_id: UUID
    asset_id: str
    address_count: int
    total_voting_power: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_snapshot(cls, snapshot) -> "SnapshotResponse":
        return cls(
            id=snapshot.id,
            vault_id=snapshot.vault_id,
            asset_id=snapshot.asset_id,
            address_count=len(snapshot.address_balances or {}),
            total_voting_power=total_voting_power(snapshot),
            created_at=snapshot.created_at,
        )


class VoteOptionIn(BaseModel):
    """Custom ballot entry"""
    label: str = Field(..., min_length=1, max_length=255)
    order: Optional[int] = Field(None, ge=0, description="Position on the ballot (defaults to list position)")


class ProposalCreateIn(BaseModel):
    """Request schema for creating a proposal"""
    creator_id: str = Field(..., min_length=1, max_length=255)
    proposal_type: ProposalType
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="")
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    abstain: bool = Field(default=False, description="Allow 'abstain' on the fixed ballot")
    vote_options: Optional[List[Union[VoteOptionIn, str]]] = Field(None, description="Custom ballot; omit for yes/no")

    # Type-specific payload
    fungible_tokens: Optional[List[Any]] = None
    non_fungible_tokens: Optional[List[Any]] = None
    distribution_assets: Optional[List[Any]] = None
    burn_assets: Optional[List[Any]] = None
    marketplace_actions: Optional[List[Any]] = None
    termination_reason: Optional[str] = None
    termination_date: Optional[datetime] = None

    def payload(self) -> Dict[str, Any]:
        return self.model_dump(
            include={
                "fungible_tokens",
                "non_fungible_tokens",
                "distribution_assets",
                "burn_assets",
                "marketplace_actions",
                "termination_reason",
                "termination_date",
            },
            exclude_none=True,
        )

    def ballot(self) -> Optional[List[Union[Dict[str, Any], str]]]:
        if self.vote_options is None:
            return None
        return [
            option.model_dump() if isinstance(option, VoteOptionIn) else option
            for option in self.vote_options
        ]


class VoteOptionResponse(BaseModel):
    """Custom ballot entry response"""
    id: UUID
    label: str
    order: int

    class Config:
        from_attributes = True


class ProposalResponse(BaseModel):
    """Proposal response"""
    id: UUID
    vault_id: UUID
    snapshot_id: Optional[UUID] = None
    creator_id: str
    title: str
    description: str
    status: ProposalStatus
    proposal_type: ProposalType
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    execution_date: Optional[datetime] = None
    fungible_tokens: Optional[List[Any]] = None
    non_fungible_tokens: Optional[List[Any]] = None
    distribution_assets: Optional[List[Any]] = None
    burn_assets: Optional[List[Any]] = None
    marketplace_actions: Optional[List[Any]] = None
    termination_reason: Optional[str] = None
    termination_date: Optional[datetime] = None
    has_custom_vote_options: bool
    abstain: Optional[bool] = None
    vote_options: List[VoteOptionResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VoteIn(BaseModel):
    """Request schema for casting a vote"""
    voter_id: str = Field(..., min_length=1, max_length=255)
    vote_option_id: str = Field(..., min_length=1, description="yes/no/abstain, or a custom option id")
    voter_address: str = Field(..., min_length=1, max_length=255, description="Address whose snapshot balance is the vote weight")


class VoteResponse(BaseModel):
    """Vote response"""
    id: UUID
    proposal_id: UUID
    voter_id: str
    voter_address: str
    vote_weight: int
    vote_option_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TallyRowResponse(BaseModel):
    """Per-option vote count"""
    vote_option_id: str
    label: str
    count: int
    weight: int

    class Config:
        from_attributes = True


class TallyResponse(BaseModel):
    """Tally for a proposal"""
    proposal_id: UUID
    rows: List[TallyRowResponse]


class VoteResultResponse(BaseModel):
    """Weighted fixed-ballot result"""
    yes_votes: int
    no_votes: int
    abstain_votes: int
    total_votes: int
    total_votes_including_abstain: int
    yes_vote_percent: int
    no_vote_percent: int
    abstain_vote_percent: int
    participation_percent: float
    meets_participation_threshold: bool
    meets_execution_threshold: bool
    is_successful: bool

    class Config:
        from_attributes = True


class FinalizeResponse(BaseModel):
    """Finalized proposal with its result (null for custom ballots)"""
    proposal: ProposalResponse
    result: Optional[VoteResultResponse] = None
