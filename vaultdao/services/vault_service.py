"""
Vault service - Vault lifecycle stages and configuration recorders
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import select
from vaultdao.core.vaults.models import Vault, VaultStage
from vaultdao.core.common.errors import EntityNotFound, ImmutableField, InvalidTransition
from vaultdao.services.asset_service import lock_pending_assets, release_locked_assets
from vaultdao.utils.metrics import record_vault_stage_change

logger = logging.getLogger(__name__)

# Forward-only stage edges
VAULT_STAGE_TRANSITIONS = {
    VaultStage.DRAFT: frozenset({VaultStage.PUBLISHED}),
    VaultStage.PUBLISHED: frozenset({VaultStage.CONTRIBUTION, VaultStage.FAILED}),
    VaultStage.CONTRIBUTION: frozenset({VaultStage.ACQUIRE, VaultStage.FAILED}),
    VaultStage.ACQUIRE: frozenset({VaultStage.LOCKED, VaultStage.FAILED}),
    VaultStage.LOCKED: frozenset({VaultStage.TERMINATING}),
    VaultStage.TERMINATING: frozenset({VaultStage.TERMINATED}),
    VaultStage.TERMINATED: frozenset(),
    VaultStage.FAILED: frozenset(),
}

# Configuration that must be recorded before entering a stage
STAGE_REQUIRED_FIELDS = {
    VaultStage.PUBLISHED: ("apply_params_result",),
    VaultStage.LOCKED: ("acquire_multiplier", "ada_distribution"),
}

# Once reached, acquire results are frozen
ACQUIRE_FROZEN_STAGES = frozenset({VaultStage.LOCKED, VaultStage.TERMINATING, VaultStage.TERMINATED})


def get_vault(db: Session, vault_id: UUID, for_update: bool = False) -> Vault:
    """
    Get vault by id.

    Raises EntityNotFound if not found.
    """
    stmt = select(Vault).where(Vault.id == vault_id)
    if for_update:
        stmt = stmt.with_for_update()
    vault = db.execute(stmt).scalar_one_or_none()
    if not vault:
        raise EntityNotFound("vault", vault_id)
    return vault


def create_vault(
    db: Session,
    name: str,
    execution_threshold: Optional[Decimal] = None,
    participation_threshold: Optional[Decimal] = None,
) -> Vault:
    """
    Create a vault in draft stage with no configuration recorded.

    NO COMMIT - caller must commit.
    """
    vault = Vault(
        name=name,
        stage=VaultStage.DRAFT,
        execution_threshold=execution_threshold,
        participation_threshold=participation_threshold,
    )
    db.add(vault)
    db.flush()

    logger.info("Vault created", extra={"vault_id": str(vault.id), "vault_name": name})
    return vault


def advance_vault_stage(
    db: Session,
    vault_id: UUID,
    target_stage: VaultStage,
    reason: Optional[str] = None,
) -> Vault:
    """
    Move a vault to its next lifecycle stage.

    Side effects:
    - entering locked: every pending asset is locked
    - entering failed or terminated: every locked asset is released

    NO COMMIT - caller must commit.

    Raises:
        EntityNotFound: vault does not exist
        InvalidTransition: stage edge not allowed, or required configuration
            missing (details.missing_fields)
    """
    target = VaultStage(target_stage)
    vault = get_vault(db, vault_id, for_update=True)
    current = VaultStage(vault.stage)

    if target not in VAULT_STAGE_TRANSITIONS[current]:
        raise InvalidTransition("vault", vault.id, current, target)

    missing = [field for field in STAGE_REQUIRED_FIELDS.get(target, ()) if getattr(vault, field) is None]
    if missing:
        raise InvalidTransition(
            "vault",
            vault.id,
            current,
            target,
            reason=f"missing {', '.join(missing)}",
            missing_fields=missing,
        )

    vault.stage = target
    vault.updated_at = datetime.now(timezone.utc)
    if target == VaultStage.FAILED and reason:
        vault.failure_reason = reason

    affected_assets = 0
    if target == VaultStage.LOCKED:
        affected_assets = lock_pending_assets(db, vault.id)
    elif target in (VaultStage.FAILED, VaultStage.TERMINATED):
        affected_assets = release_locked_assets(db, vault.id)

    db.flush()

    record_vault_stage_change(target.value)
    logger.info(
        "Vault stage changed",
        extra={
            "vault_id": str(vault.id),
            "from_stage": current.value,
            "to_stage": target.value,
            "affected_assets": affected_assets,
        },
    )
    return vault


def fail_vault(db: Session, vault_id: UUID, reason: str) -> Vault:
    """Move a vault to failed, recording why. NO COMMIT - caller must commit."""
    return advance_vault_stage(db, vault_id, VaultStage.FAILED, reason=reason)


def _record_config(db: Session, vault_id: UUID, values: Dict[str, Any]) -> Vault:
    vault = get_vault(db, vault_id, for_update=True)
    for field, value in values.items():
        setattr(vault, field, value)
    vault.updated_at = datetime.now(timezone.utc)
    db.flush()

    logger.info(
        "Vault configuration recorded",
        extra={"vault_id": str(vault.id), "fields": sorted(values.keys())},
    )
    return vault


def record_apply_params_result(db: Session, vault_id: UUID, result: Dict[str, Any]) -> Vault:
    """Record the contract parameter application result. NO COMMIT - caller must commit."""
    return _record_config(db, vault_id, {"apply_params_result": result})


def record_dispatch_script(db: Session, vault_id: UUID, script: Dict[str, Any]) -> Vault:
    """Record the preloaded dispatch script. NO COMMIT - caller must commit."""
    return _record_config(db, vault_id, {"dispatch_preloaded_script": script})


def record_acquire_results(db: Session, vault_id: UUID, acquire_multiplier: Any, ada_distribution: Any) -> Vault:
    """
    Record the acquire-window results.

    Rejected with ImmutableField once the vault is locked.

    NO COMMIT - caller must commit.
    """
    vault = get_vault(db, vault_id, for_update=True)
    if VaultStage(vault.stage) in ACQUIRE_FROZEN_STAGES:
        raise ImmutableField("vault", vault.id, "acquire_multiplier")

    return _record_config(
        db,
        vault_id,
        {"acquire_multiplier": acquire_multiplier, "ada_distribution": ada_distribution},
    )
