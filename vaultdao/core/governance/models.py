"""
Governance models - Balance snapshots, proposals, custom vote options and votes
"""

from sqlalchemy import (
    Column, String, ForeignKey, Enum as SQLEnum, Text, DateTime, Boolean, Integer, BigInteger,
    Index, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timezone
import enum
import uuid
from vaultdao.core.common.base_model import BaseModel, enum_values
from vaultdao.infrastructure.database import Base, JSONType


class ProposalType(str, enum.Enum):
    """Governance action a proposal asks the vault to take"""
    STAKING = "staking"
    DISTRIBUTION = "distribution"
    TERMINATION = "termination"
    BURNING = "burning"
    MARKETPLACE_ACTION = "marketplace_action"
    EXPANSION = "expansion"


class ProposalStatus(str, enum.Enum):
    """Proposal status enum"""
    UNPAID = "unpaid"  # Waiting for the governance fee payment
    UPCOMING = "upcoming"
    ACTIVE = "active"  # Voting open
    PASSED = "passed"
    REJECTED = "rejected"
    EXECUTED = "executed"


class VoteChoice(str, enum.Enum):
    """Fixed ballot used when a proposal has no custom vote options"""
    YES = "yes"
    NO = "no"
    ABSTAIN = "abstain"


# Canonical order of the fixed ballot (tally output order)
FIXED_VOTE_ORDER = (VoteChoice.YES, VoteChoice.NO, VoteChoice.ABSTAIN)


class Snapshot(Base):
    """
    Snapshot model - Vault token balances per address at a point in time

    address_balances maps address -> balance (integer string). A proposal
    binds the vault's latest snapshot at creation; vote weights and total
    voting power come from it.
    """

    __tablename__ = "snapshot"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vault_id = Column(Uuid(as_uuid=True), ForeignKey("vaults.id", name="fk_snapshot_vault_id", ondelete="CASCADE"), nullable=False, index=True)
    asset_id = Column(String(255), nullable=False)  # Vault token unit (policy id + asset name)
    address_balances = Column(JSONType, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_snapshot_vault_created", "vault_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Snapshot(id={self.id}, vault_id={self.vault_id}, addresses={len(self.address_balances or {})})>"


class Proposal(BaseModel):
    """
    Proposal model - A governance action subject to voting

    Type-specific payload columns (one group per proposal type):
    - staking: fungible_tokens and/or non_fungible_tokens
    - distribution: distribution_assets
    - burning: burn_assets
    - marketplace_action: marketplace_actions
    - termination: termination_reason + termination_date

    Payload, vote options and snapshot are fixed at creation.
    """

    __tablename__ = "proposal"

    vault_id = Column(Uuid(as_uuid=True), ForeignKey("vaults.id", name="fk_proposal_vault_id", ondelete="CASCADE"), nullable=False, index=True)
    snapshot_id = Column(Uuid(as_uuid=True), ForeignKey("snapshot.id", name="fk_proposal_snapshot_id"), nullable=True)  # Bound at creation
    creator_id = Column(String(255), nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")

    status = Column(
        SQLEnum(ProposalStatus, name="proposal_status_enum", create_constraint=True, values_callable=enum_values),
        nullable=False,
        index=True,
    )
    proposal_type = Column(
        SQLEnum(ProposalType, name="proposal_proposal_type_enum", create_constraint=True, values_callable=enum_values),
        nullable=False,
    )

    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    execution_date = Column(DateTime(timezone=True), nullable=True)

    fungible_tokens = Column(JSONType, nullable=True)
    non_fungible_tokens = Column(JSONType, nullable=True)
    distribution_assets = Column(JSONType, nullable=True)
    burn_assets = Column(JSONType, nullable=True)
    marketplace_actions = Column(JSONType, nullable=True)
    termination_reason = Column(Text, nullable=True)
    termination_date = Column(DateTime(timezone=True), nullable=True)

    has_custom_vote_options = Column(Boolean, nullable=False, default=False, server_default="false")
    abstain = Column(Boolean, nullable=True, default=False)  # Fixed ballot also accepts 'abstain'

    # Relationships
    vault = relationship("Vault", back_populates="proposals")
    snapshot = relationship("Snapshot")
    vote_options = relationship(
        "VoteOption",
        back_populates="proposal",
        order_by="VoteOption.order",
    )
    votes = relationship("Vote", back_populates="proposal")

    __table_args__ = (
        Index("ix_proposal_vault_status", "vault_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Proposal(id={self.id}, type={self.proposal_type}, status={self.status})>"


class VoteOption(Base):
    """VoteOption model - One entry of a proposal's custom ballot"""

    __tablename__ = "vote_options"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    proposal_id = Column(Uuid(as_uuid=True), ForeignKey("proposal.id", name="fk_vote_options_proposal_id"), nullable=False, index=True)
    label = Column(String(255), nullable=False)
    order = Column(Integer, nullable=False, default=0, server_default="0")

    proposal = relationship("Proposal", back_populates="vote_options")

    def __repr__(self) -> str:
        return f"<VoteOption(id={self.id}, label={self.label}, order={self.order})>"


class Vote(Base):
    """
    Vote model - One ballot per (voter, proposal) and per (address, proposal)

    vote_weight is the address balance in the proposal snapshot.
    vote_option_id is free-form: a fixed literal (yes/no/abstain) or a
    vote_options.id when the proposal has custom options.
    """

    __tablename__ = "vote"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    proposal_id = Column(Uuid(as_uuid=True), ForeignKey("proposal.id", name="fk_vote_proposal_id"), nullable=False, index=True)
    voter_id = Column(String(255), nullable=False, index=True)
    voter_address = Column(String(255), nullable=False)
    vote_weight = Column(BigInteger, nullable=False, default=1)
    vote_option_id = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    proposal = relationship("Proposal", back_populates="votes")

    __table_args__ = (
        UniqueConstraint("proposal_id", "voter_id", name="uq_vote_proposal_voter"),
        UniqueConstraint("proposal_id", "voter_address", name="uq_vote_proposal_address"),
    )

    def __repr__(self) -> str:
        return f"<Vote(id={self.id}, proposal_id={self.proposal_id}, voter_id={self.voter_id}, option={self.vote_option_id})>"
