"""
Domain errors for vault, asset, proposal, vote and claim operations

Every error carries a stable ``code``, a human readable ``message`` and a
``details`` dict (entity id, offending field/value) that the HTTP layer
renders unchanged. None of them are retried.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, Optional


class DomainError(Exception):
    """Base exception for all core operations"""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class EntityNotFound(DomainError):
    """Raised when a vault, asset, proposal or claim does not exist"""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} '{entity_id}' not found",
            {"entity": entity, "entity_id": str(entity_id)},
        )


class InvalidTransition(DomainError):
    """Raised when a status/stage change is not an edge of the transition table"""

    code = "INVALID_TRANSITION"

    def __init__(
        self,
        entity: str,
        entity_id: Any,
        current: Any,
        target: Any,
        reason: Optional[str] = None,
        **extra: Any,
    ):
        current_value = getattr(current, "value", current)
        target_value = getattr(target, "value", target)
        message = f"{entity} '{entity_id}' cannot move from '{current_value}' to '{target_value}'"
        if reason:
            message = f"{message}: {reason}"
        details = {
            "entity": entity,
            "entity_id": str(entity_id),
            "from": current_value,
            "to": target_value,
        }
        details.update(extra)
        super().__init__(message, details)


class ImmutableField(DomainError):
    """Raised on a write to a field that is fixed once set"""

    code = "IMMUTABLE_FIELD"

    def __init__(self, entity: str, entity_id: Any, field: str):
        super().__init__(
            f"{entity} '{entity_id}' field '{field}' cannot be modified",
            {"entity": entity, "entity_id": str(entity_id), "field": field},
        )


class InvalidPayloadForType(DomainError):
    """Raised when proposal payload fields do not match the proposal type"""

    code = "INVALID_PAYLOAD_FOR_TYPE"

    def __init__(
        self,
        proposal_type: Any,
        missing: Iterable[str] = (),
        forbidden: Iterable[str] = (),
        invalid: Optional[Dict[str, list]] = None,
    ):
        type_value = getattr(proposal_type, "value", proposal_type)
        missing = sorted(missing)
        forbidden = sorted(forbidden)
        invalid = invalid or {}
        parts = []
        if missing:
            parts.append(f"missing {', '.join(missing)}")
        if forbidden:
            parts.append(f"forbidden {', '.join(forbidden)}")
        if invalid:
            parts.append(f"invalid {', '.join(sorted(invalid))}")
        details = {"proposal_type": type_value, "missing": missing, "forbidden": forbidden}
        if invalid:
            # field -> offending entries
            details["invalid"] = invalid
        super().__init__(f"Invalid payload for '{type_value}' proposal: {'; '.join(parts)}", details)
        self.missing = missing
        self.forbidden = forbidden
        self.invalid = invalid


class UnknownVoteOption(DomainError):
    """Raised when a vote references an option that the proposal does not define"""

    code = "UNKNOWN_VOTE_OPTION"

    def __init__(self, proposal_id: Any, option_ref: Any):
        super().__init__(
            f"Proposal '{proposal_id}' has no vote option '{option_ref}'",
            {"proposal_id": str(proposal_id), "vote_option_id": str(option_ref)},
        )


class InvalidVoteValue(DomainError):
    """Raised when a fixed-ballot vote is not one of the allowed literals"""

    code = "INVALID_VOTE_VALUE"

    def __init__(self, proposal_id: Any, value: Any, allowed: Iterable[str]):
        allowed = list(allowed)
        super().__init__(
            f"'{value}' is not a valid vote for proposal '{proposal_id}' (allowed: {', '.join(allowed)})",
            {"proposal_id": str(proposal_id), "vote_option_id": str(value), "allowed": allowed},
        )


class DuplicateVote(DomainError):
    """Raised when a voter already voted on a proposal"""

    code = "DUPLICATE_VOTE"

    def __init__(self, proposal_id: Any, voter_id: Any, voter_address: Optional[str] = None):
        details = {"proposal_id": str(proposal_id), "voter_id": str(voter_id)}
        if voter_address is not None:
            details["voter_address"] = voter_address
        super().__init__(f"Voter '{voter_id}' already voted on proposal '{proposal_id}'", details)


class ProposalNotActive(DomainError):
    """Raised when voting on a proposal whose voting window is not open"""

    code = "PROPOSAL_NOT_ACTIVE"

    def __init__(self, proposal_id: Any, status: Any, end_date: Optional[datetime] = None):
        status_value = getattr(status, "value", status)
        details = {"proposal_id": str(proposal_id), "status": status_value}
        if end_date is not None:
            details["end_date"] = end_date.isoformat()
            message = f"Proposal '{proposal_id}' voting period ended at {end_date.isoformat()}"
        else:
            message = f"Proposal '{proposal_id}' is not open for voting (status: {status_value})"
        super().__init__(message, details)


class SnapshotRequired(DomainError):
    """Raised when creating a proposal on a vault that has no balance snapshot"""

    code = "SNAPSHOT_REQUIRED"

    def __init__(self, vault_id: Any):
        super().__init__(
            f"Vault '{vault_id}' has no snapshot for voting power",
            {"vault_id": str(vault_id)},
        )


class NoVotingPower(DomainError):
    """Raised when the voter address holds no balance in the proposal snapshot"""

    code = "NO_VOTING_POWER"

    def __init__(self, proposal_id: Any, voter_address: Any):
        super().__init__(
            f"Address '{voter_address}' has no voting power for proposal '{proposal_id}'",
            {"proposal_id": str(proposal_id), "voter_address": str(voter_address)},
        )


class InvalidClaimAmount(DomainError):
    """Raised when a legacy claim amount cannot be read as a number"""

    code = "INVALID_CLAIM_AMOUNT"

    def __init__(self, claim_id: Any, field: str, value: Any):
        super().__init__(
            f"Claim '{claim_id}' has a non-numeric {field}: {value!r}",
            {"claim_id": str(claim_id), "field": field, "value": str(value)},
        )


class ConstraintViolation(DomainError):
    """Raised when the store rejects a write (foreign key, uniqueness, check)"""

    code = "CONSTRAINT_VIOLATION"

    def __init__(self, constraint: str, message: Optional[str] = None, **extra: Any):
        details = {"constraint": constraint}
        details.update(extra)
        super().__init__(message or f"Constraint violation: {constraint}", details)
