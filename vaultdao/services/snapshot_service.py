"""
Snapshot service - Vault token balances used as voting power
"""

import logging
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import select
from vaultdao.core.governance.models import Snapshot
from vaultdao.core.vaults.models import VaultStage
from vaultdao.core.common.errors import InvalidTransition
from vaultdao.services.vault_service import get_vault

logger = logging.getLogger(__name__)


def _normalize_balances(address_balances: Mapping[str, Any]) -> Dict[str, str]:
    """Balances as non-negative integer strings, keyed by address"""
    normalized = {}
    for address, balance in address_balances.items():
        if not address:
            raise ValueError("Snapshot address must not be empty")
        try:
            value = int(str(balance))
        except ValueError:
            raise ValueError(f"Balance for '{address}' is not an integer: {balance!r}")
        if value < 0:
            raise ValueError(f"Balance for '{address}' must not be negative")
        normalized[address] = str(value)
    return normalized


def create_snapshot(
    db: Session,
    vault_id: UUID,
    asset_id: str,
    address_balances: Mapping[str, Any],
) -> Snapshot:
    """
    Record token balances per address for a vault in governance.

    NO COMMIT - caller must commit.

    Raises:
        EntityNotFound: vault does not exist
        InvalidTransition: vault is not locked
        ValueError: a balance is not a non-negative integer
    """
    vault = get_vault(db, vault_id)
    if vault.stage != VaultStage.LOCKED:
        raise InvalidTransition(
            "vault",
            vault.id,
            vault.stage,
            VaultStage.LOCKED,
            reason="snapshots require a vault in governance",
        )

    snapshot = Snapshot(
        vault_id=vault.id,
        asset_id=asset_id,
        address_balances=_normalize_balances(address_balances),
    )
    db.add(snapshot)
    db.flush()

    logger.info(
        "Snapshot created",
        extra={
            "snapshot_id": str(snapshot.id),
            "vault_id": str(vault.id),
            "asset_id": asset_id,
            "address_count": len(snapshot.address_balances),
            "total_voting_power": total_voting_power(snapshot),
        },
    )
    return snapshot


def get_latest_snapshot(db: Session, vault_id: UUID) -> Optional[Snapshot]:
    """Most recent snapshot of a vault, or None"""
    return db.execute(
        select(Snapshot)
        .where(Snapshot.vault_id == vault_id)
        .order_by(Snapshot.created_at.desc())
        .limit(1)
    ).scalar_one_or_none()


def list_snapshots(db: Session, vault_id: UUID) -> List[Snapshot]:
    """Snapshots of a vault, newest first"""
    get_vault(db, vault_id)
    return list(
        db.execute(
            select(Snapshot)
            .where(Snapshot.vault_id == vault_id)
            .order_by(Snapshot.created_at.desc())
        ).scalars().all()
    )


def voting_power(snapshot: Snapshot, address: str) -> int:
    return int((snapshot.address_balances or {}).get(address, 0))


def total_voting_power(snapshot: Snapshot) -> int:
    return sum(int(balance) for balance in (snapshot.address_balances or {}).values())
