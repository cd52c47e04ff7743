"""
Governance models
"""

from vaultdao.core.governance.models import (
    Proposal,
    ProposalType,
    ProposalStatus,
    VoteOption,
    Vote,
    VoteChoice,
    FIXED_VOTE_ORDER,
)

__all__ = [
    "Proposal",
    "ProposalType",
    "ProposalStatus",
    "VoteOption",
    "Vote",
    "VoteChoice",
    "FIXED_VOTE_ORDER",
]
