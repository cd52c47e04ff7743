"""
Proposal service - Payload validation, proposal lifecycle and execution
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import select
from vaultdao.core.assets.models import Asset, AssetStatus
from vaultdao.core.governance.models import Proposal, ProposalStatus, ProposalType, VoteOption
from vaultdao.core.vaults.models import VaultStage
from vaultdao.core.common.errors import EntityNotFound, InvalidPayloadForType, InvalidTransition, SnapshotRequired
from vaultdao.infrastructure.settings import get_settings
from vaultdao.services.asset_service import distribute_assets
from vaultdao.services.snapshot_service import get_latest_snapshot, total_voting_power
from vaultdao.services.system_settings_service import get_governance_fee
from vaultdao.services.vault_service import advance_vault_stage, get_vault
from vaultdao.services.vote_service import VoteResult, calculate_result, leading_option, tally

logger = logging.getLogger(__name__)

PAYLOAD_FIELDS = (
    "fungible_tokens",
    "non_fungible_tokens",
    "distribution_assets",
    "burn_assets",
    "marketplace_actions",
    "termination_reason",
    "termination_date",
)


@dataclass(frozen=True)
class PayloadRule:
    """Payload fields a proposal type requires and allows"""
    required_all: Tuple[str, ...] = ()
    required_any: Tuple[str, ...] = ()  # at least one of these

    @property
    def allowed(self) -> frozenset:
        return frozenset(self.required_all) | frozenset(self.required_any)


PAYLOAD_RULES: Dict[ProposalType, PayloadRule] = {
    ProposalType.STAKING: PayloadRule(required_any=("fungible_tokens", "non_fungible_tokens")),
    ProposalType.DISTRIBUTION: PayloadRule(required_all=("distribution_assets",)),
    ProposalType.BURNING: PayloadRule(required_all=("burn_assets",)),
    ProposalType.MARKETPLACE_ACTION: PayloadRule(required_all=("marketplace_actions",)),
    ProposalType.TERMINATION: PayloadRule(required_all=("termination_reason", "termination_date")),
    ProposalType.EXPANSION: PayloadRule(),
}

PROPOSAL_TRANSITIONS = {
    ProposalStatus.UNPAID: frozenset({ProposalStatus.UPCOMING}),
    ProposalStatus.UPCOMING: frozenset({ProposalStatus.ACTIVE}),
    ProposalStatus.ACTIVE: frozenset({ProposalStatus.PASSED, ProposalStatus.REJECTED}),
    ProposalStatus.PASSED: frozenset({ProposalStatus.EXECUTED}),
    ProposalStatus.REJECTED: frozenset(),
    ProposalStatus.EXECUTED: frozenset(),
}

VoteOptionInput = Union[str, Dict[str, Any]]


def _is_populated(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return True


def validate_proposal_payload(proposal_type: ProposalType, payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Check payload fields against the proposal type.

    Returns:
        The populated payload fields

    Raises:
        InvalidPayloadForType: required fields missing and/or fields of
            another type (or unknown fields) populated; both lists are reported
    """
    proposal_type = ProposalType(proposal_type)
    rule = PAYLOAD_RULES[proposal_type]
    populated = {key: value for key, value in (payload or {}).items() if _is_populated(value)}

    missing = [field for field in rule.required_all if field not in populated]
    if rule.required_any and not any(field in populated for field in rule.required_any):
        missing.extend(rule.required_any)
    forbidden = [field for field in populated if field not in rule.allowed]

    if missing or forbidden:
        raise InvalidPayloadForType(proposal_type, missing=missing, forbidden=forbidden)
    return populated


def get_proposal(db: Session, proposal_id: UUID, for_update: bool = False) -> Proposal:
    """
    Get proposal by id.

    Raises EntityNotFound if not found.
    """
    stmt = select(Proposal).where(Proposal.id == proposal_id)
    if for_update:
        stmt = stmt.with_for_update()
    proposal = db.execute(stmt).scalar_one_or_none()
    if not proposal:
        raise EntityNotFound("proposal", proposal_id)
    return proposal


def get_proposal_fee(db: Session, proposal_type: ProposalType) -> int:
    """Governance fee (lovelace) due before a proposal of this type goes upcoming"""
    return get_governance_fee(db, proposal_type)


def _build_vote_options(options: Sequence[VoteOptionInput]) -> List[VoteOption]:
    built = []
    for position, option in enumerate(options):
        if isinstance(option, str):
            label, order = option, position
        else:
            label = option["label"]
            order = option.get("order")
            if order is None:
                order = position
        built.append(VoteOption(label=label, order=order))
    return built


def _check_distribution_assets(db: Session, proposal_type: ProposalType, vault_id: UUID, entries: Sequence[Any]) -> None:
    """Every entry must name, once, a locked asset of the vault"""
    invalid = []
    resolved = []
    seen = set()
    for entry in entries:
        raw = entry.get("id") if isinstance(entry, dict) else entry
        if raw is None:
            invalid.append({"entry": entry, "reason": "missing asset id"})
            continue
        try:
            asset_id = UUID(str(raw))
        except ValueError:
            invalid.append({"entry": entry, "reason": "malformed asset id"})
            continue
        if asset_id in seen:
            invalid.append({"entry": entry, "reason": "duplicate asset id"})
            continue
        seen.add(asset_id)
        resolved.append((entry, asset_id))

    locked_ids = set(
        db.execute(
            select(Asset.id).where(
                Asset.vault_id == vault_id,
                Asset.status == AssetStatus.LOCKED,
                Asset.id.in_([asset_id for _, asset_id in resolved]),
            )
        ).scalars().all()
    ) if resolved else set()
    for entry, asset_id in resolved:
        if asset_id not in locked_ids:
            invalid.append({"entry": entry, "reason": "not a locked asset of this vault"})

    if invalid:
        raise InvalidPayloadForType(proposal_type, invalid={"distribution_assets": invalid})


def create_proposal(
    db: Session,
    vault_id: UUID,
    creator_id: str,
    proposal_type: ProposalType,
    title: str,
    description: str = "",
    payload: Optional[Dict[str, Any]] = None,
    vote_options: Optional[Sequence[VoteOptionInput]] = None,
    abstain: bool = False,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Proposal:
    """
    Create a proposal on a locked vault.

    Status starts at unpaid when the type's governance fee is positive,
    upcoming otherwise. The vault's latest snapshot is bound as the source
    of voting power. Payload, vote options and snapshot cannot change
    afterwards.

    NO COMMIT - caller must commit.

    Raises:
        EntityNotFound: vault does not exist
        InvalidTransition: vault is not in the locked (governance) stage
        InvalidPayloadForType: payload does not match the type, or a
            distribution entry is not a locked asset of the vault
        SnapshotRequired: vault has no snapshot
    """
    proposal_type = ProposalType(proposal_type)
    vault = get_vault(db, vault_id)
    if vault.stage != VaultStage.LOCKED:
        raise InvalidTransition(
            "vault",
            vault.id,
            vault.stage,
            VaultStage.LOCKED,
            reason="proposals require a vault in governance",
        )

    fields = validate_proposal_payload(proposal_type, payload)
    if proposal_type == ProposalType.DISTRIBUTION:
        _check_distribution_assets(db, proposal_type, vault.id, fields["distribution_assets"])

    snapshot = get_latest_snapshot(db, vault.id)
    if snapshot is None:
        raise SnapshotRequired(vault.id)

    fee = get_proposal_fee(db, proposal_type)
    options = _build_vote_options(vote_options or [])

    proposal = Proposal(
        vault_id=vault.id,
        snapshot_id=snapshot.id,
        creator_id=creator_id,
        title=title,
        description=description or "",
        proposal_type=proposal_type,
        status=ProposalStatus.UNPAID if fee > 0 else ProposalStatus.UPCOMING,
        start_date=start_date,
        end_date=end_date,
        has_custom_vote_options=bool(options),
        abstain=abstain,
        **fields,
    )
    proposal.vote_options = options
    db.add(proposal)
    db.flush()

    logger.info(
        "Proposal created",
        extra={
            "proposal_id": str(proposal.id),
            "vault_id": str(vault.id),
            "proposal_type": proposal_type.value,
            "status": proposal.status.value,
            "governance_fee": fee,
            "vote_options": len(options),
            "snapshot_id": str(snapshot.id),
        },
    )
    return proposal


def _transition_proposal(db: Session, proposal_id: UUID, target: ProposalStatus) -> Proposal:
    proposal = get_proposal(db, proposal_id, for_update=True)
    current = ProposalStatus(proposal.status)
    if target not in PROPOSAL_TRANSITIONS[current]:
        raise InvalidTransition("proposal", proposal.id, current, target)

    proposal.status = target
    proposal.updated_at = datetime.now(timezone.utc)
    logger.info(
        "Proposal status changed",
        extra={
            "proposal_id": str(proposal.id),
            "from_status": current.value,
            "to_status": target.value,
        },
    )
    return proposal


def mark_fee_paid(db: Session, proposal_id: UUID) -> Proposal:
    """unpaid -> upcoming. NO COMMIT - caller must commit."""
    proposal = _transition_proposal(db, proposal_id, ProposalStatus.UPCOMING)
    db.flush()
    return proposal


def open_voting(db: Session, proposal_id: UUID) -> Proposal:
    """upcoming -> active. NO COMMIT - caller must commit."""
    proposal = _transition_proposal(db, proposal_id, ProposalStatus.ACTIVE)
    if proposal.start_date is None:
        proposal.start_date = datetime.now(timezone.utc)
    db.flush()
    return proposal


def _thresholds(vault) -> Tuple[Decimal, Decimal]:
    settings = get_settings()
    execution = vault.execution_threshold
    participation = vault.participation_threshold
    if execution is None:
        execution = Decimal(str(settings.DEFAULT_EXECUTION_THRESHOLD))
    if participation is None:
        participation = Decimal(str(settings.DEFAULT_PARTICIPATION_THRESHOLD))
    return execution, participation


def finalize_proposal(db: Session, proposal_id: UUID) -> Tuple[Proposal, Optional[VoteResult]]:
    """
    Close voting: active -> passed | rejected.

    Fixed ballots pass when calculate_result is successful against the
    vault thresholds (settings defaults when unset). Custom-option ballots
    pass when exactly one option leads and participation is met.
    Participation is measured against the total balance of the proposal
    snapshot (100% for proposals created without one).

    NO COMMIT - caller must commit.

    Returns:
        (proposal, vote result); the result is None for custom-option ballots
    """
    proposal = get_proposal(db, proposal_id, for_update=True)
    if proposal.status != ProposalStatus.ACTIVE:
        # Reports the offending edge
        raise InvalidTransition("proposal", proposal.id, proposal.status, ProposalStatus.PASSED)

    rows = tally(db, proposal.id)
    execution_threshold, participation_threshold = _thresholds(proposal.vault)
    voting_power = total_voting_power(proposal.snapshot) if proposal.snapshot else None

    result = None
    if proposal.has_custom_vote_options:
        leader = leading_option(rows)
        cast_weight = sum(row.weight for row in rows)
        if voting_power:
            participation = cast_weight / voting_power * 100
        else:
            participation = 100.0
        passed = leader is not None and participation >= float(participation_threshold)
    else:
        result = calculate_result(rows, execution_threshold, participation_threshold, voting_power)
        passed = result.is_successful

    target = ProposalStatus.PASSED if passed else ProposalStatus.REJECTED
    _transition_proposal(db, proposal.id, target)
    if proposal.end_date is None:
        proposal.end_date = datetime.now(timezone.utc)
    db.flush()
    return proposal, result


def _distribution_asset_ids(proposal: Proposal) -> List[UUID]:
    ids = []
    for entry in proposal.distribution_assets or []:
        raw = entry.get("id") if isinstance(entry, dict) else entry
        ids.append(UUID(str(raw)))
    return ids


def execute_proposal(db: Session, proposal_id: UUID) -> Proposal:
    """
    Execute a passed proposal: passed -> executed.

    - distribution: every listed asset goes locked -> distributed; the vault
      must hold a dispatch script
    - termination: the vault moves to terminating
    - other types: status change only

    NO COMMIT - caller must commit.
    """
    proposal = get_proposal(db, proposal_id, for_update=True)
    if proposal.status != ProposalStatus.PASSED:
        raise InvalidTransition("proposal", proposal.id, proposal.status, ProposalStatus.EXECUTED)

    vault = get_vault(db, proposal.vault_id, for_update=True)
    if proposal.proposal_type == ProposalType.DISTRIBUTION:
        if vault.dispatch_preloaded_script is None:
            raise InvalidTransition(
                "proposal",
                proposal.id,
                proposal.status,
                ProposalStatus.EXECUTED,
                reason="vault has no dispatch script",
                missing_fields=["dispatch_preloaded_script"],
            )
        distribute_assets(db, vault.id, _distribution_asset_ids(proposal))
    elif proposal.proposal_type == ProposalType.TERMINATION:
        advance_vault_stage(db, vault.id, VaultStage.TERMINATING)

    _transition_proposal(db, proposal.id, ProposalStatus.EXECUTED)
    proposal.execution_date = datetime.now(timezone.utc)
    db.flush()
    return proposal
