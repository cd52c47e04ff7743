"""
Asset service - Asset ledger and status transition guard
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import select
from vaultdao.core.assets.models import Asset, AssetStatus, AssetOriginType, AssetType
from vaultdao.core.vaults.models import Vault
from vaultdao.core.common.errors import EntityNotFound, ImmutableField, InvalidTransition
from vaultdao.utils.metrics import record_asset_transition

logger = logging.getLogger(__name__)

# Legal status edges; everything else is rejected
ASSET_TRANSITIONS = {
    AssetStatus.PENDING: frozenset({AssetStatus.LOCKED}),
    AssetStatus.LOCKED: frozenset({AssetStatus.RELEASED, AssetStatus.DISTRIBUTED}),
    AssetStatus.RELEASED: frozenset(),
    AssetStatus.DISTRIBUTED: frozenset(),
}

# Timestamp column stamped when entering a status
_STATUS_TIMESTAMPS = {
    AssetStatus.LOCKED: "locked_at",
    AssetStatus.RELEASED: "released_at",
    AssetStatus.DISTRIBUTED: "distributed_at",
}

IMMUTABLE_ASSET_FIELDS = frozenset({"origin_type", "status", "vault_id"})
MUTABLE_ASSET_FIELDS = frozenset({"policy_id", "asset_id", "type", "quantity", "added_by", "metadata"})


def get_asset(db: Session, asset_id: UUID, for_update: bool = False) -> Asset:
    """
    Get asset by id.

    Raises EntityNotFound if not found.
    """
    stmt = select(Asset).where(Asset.id == asset_id)
    if for_update:
        stmt = stmt.with_for_update()
    asset = db.execute(stmt).scalar_one_or_none()
    if not asset:
        raise EntityNotFound("asset", asset_id)
    return asset


def list_vault_assets(db: Session, vault_id: UUID, status: Optional[AssetStatus] = None) -> List[Asset]:
    stmt = select(Asset).where(Asset.vault_id == vault_id)
    if status is not None:
        stmt = stmt.where(Asset.status == AssetStatus(status))
    return list(db.execute(stmt.order_by(Asset.created_at, Asset.id)).scalars().all())


def create_asset(
    db: Session,
    vault_id: UUID,
    policy_id: str,
    asset_id: str,
    type: AssetType = AssetType.NFT,
    quantity: Decimal = Decimal("1"),
    origin_type: Optional[AssetOriginType] = None,
    added_by: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Asset:
    """
    Record an asset in a vault (status: pending).

    origin_type can only be set here.

    NO COMMIT - caller must commit.
    """
    vault = db.get(Vault, vault_id)
    if not vault:
        raise EntityNotFound("vault", vault_id)

    asset = Asset(
        vault_id=vault.id,
        policy_id=policy_id,
        asset_id=asset_id,
        type=AssetType(type),
        quantity=quantity,
        status=AssetStatus.PENDING,
        origin_type=AssetOriginType(origin_type) if origin_type is not None else None,
        added_by=added_by,
        asset_metadata=metadata,
    )
    db.add(asset)
    db.flush()

    logger.info(
        "Asset created",
        extra={
            "asset_id": str(asset.id),
            "vault_id": str(vault.id),
            "origin_type": asset.origin_type.value if asset.origin_type else None,
        },
    )
    return asset


def _apply_transition(asset: Asset, target: AssetStatus) -> Asset:
    # Caller holds the row lock
    current = AssetStatus(asset.status)
    if target not in ASSET_TRANSITIONS[current]:
        raise InvalidTransition("asset", asset.id, current, target)

    now = datetime.now(timezone.utc)
    asset.status = target
    setattr(asset, _STATUS_TIMESTAMPS[target], now)
    asset.updated_at = now

    record_asset_transition(current.value, target.value)
    logger.info(
        "Asset status changed",
        extra={
            "asset_id": str(asset.id),
            "vault_id": str(asset.vault_id),
            "from_status": current.value,
            "to_status": target.value,
        },
    )
    return asset


def transition_asset(db: Session, asset_id: UUID, target_status: AssetStatus) -> Asset:
    """
    Move an asset to a new status.

    Legal edges: pending -> locked, locked -> released, locked -> distributed.
    The row is locked (SELECT FOR UPDATE) before the check, so concurrent
    transitions on the same asset are serialized.

    NO COMMIT - caller must commit.

    Raises:
        EntityNotFound: asset does not exist
        InvalidTransition: edge not allowed
    """
    target = AssetStatus(target_status)
    asset = get_asset(db, asset_id, for_update=True)
    _apply_transition(asset, target)
    db.flush()
    return asset


def update_asset(db: Session, asset_id: UUID, **fields: Any) -> Asset:
    """
    Update mutable asset fields.

    origin_type, status and vault_id are rejected (status changes go
    through transition_asset).

    NO COMMIT - caller must commit.
    """
    asset = get_asset(db, asset_id, for_update=True)

    for field in fields:
        if field in IMMUTABLE_ASSET_FIELDS:
            raise ImmutableField("asset", asset.id, field)
        if field not in MUTABLE_ASSET_FIELDS:
            raise ValueError(f"Unknown asset field: {field}")

    for field, value in fields.items():
        if field == "metadata":
            asset.asset_metadata = value
        elif field == "type":
            asset.type = AssetType(value)
        else:
            setattr(asset, field, value)

    asset.updated_at = datetime.now(timezone.utc)
    db.flush()

    logger.info("Asset updated", extra={"asset_id": str(asset.id), "fields": sorted(fields.keys())})
    return asset


def _vault_assets_for_update(db: Session, vault_id: UUID, status: AssetStatus) -> List[Asset]:
    return list(
        db.execute(
            select(Asset)
            .where(Asset.vault_id == vault_id, Asset.status == status)
            .order_by(Asset.id)
            .with_for_update()
        ).scalars().all()
    )


def lock_pending_assets(db: Session, vault_id: UUID) -> int:
    """Lock every pending asset of a vault. NO COMMIT - caller must commit."""
    assets = _vault_assets_for_update(db, vault_id, AssetStatus.PENDING)
    for asset in assets:
        _apply_transition(asset, AssetStatus.LOCKED)
    db.flush()
    return len(assets)


def release_locked_assets(db: Session, vault_id: UUID) -> int:
    """Release every locked asset of a vault. NO COMMIT - caller must commit."""
    assets = _vault_assets_for_update(db, vault_id, AssetStatus.LOCKED)
    for asset in assets:
        _apply_transition(asset, AssetStatus.RELEASED)
    db.flush()
    return len(assets)


def distribute_assets(db: Session, vault_id: UUID, asset_ids: Iterable[UUID]) -> List[Asset]:
    """
    Mark listed assets of a vault as distributed.

    Only called when executing a distribution proposal. Every listed asset
    must belong to the vault and be locked.

    NO COMMIT - caller must commit.
    """
    distributed = []
    for asset_id in asset_ids:
        asset = get_asset(db, asset_id, for_update=True)
        if asset.vault_id != vault_id:
            raise EntityNotFound("asset", asset_id)
        distributed.append(_apply_transition(asset, AssetStatus.DISTRIBUTED))
    db.flush()
    return distributed
