"""
Admin API - Vault lifecycle, configuration and balance snapshots
"""

from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.schemas.assets import AssetCreateIn, AssetResponse
from vaultdao.schemas.governance import SnapshotCreateIn, SnapshotResponse
from vaultdao.schemas.vaults import (
    AcquireResultsIn,
    ApplyParamsIn,
    DispatchScriptIn,
    VaultCreateIn,
    VaultResponse,
    VaultStageIn,
)
from vaultdao.services.asset_service import create_asset
from vaultdao.services.snapshot_service import create_snapshot
from vaultdao.services.vault_service import (
    advance_vault_stage,
    create_vault,
    record_acquire_results,
    record_apply_params_result,
    record_dispatch_script,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/vaults",
    response_model=VaultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create vault",
    description="Create a vault in draft stage.",
)
async def create_vault_endpoint(request: VaultCreateIn, db: Session = Depends(get_db)) -> VaultResponse:
    with transaction(db):
        vault = create_vault(
            db,
            name=request.name,
            execution_threshold=request.execution_threshold,
            participation_threshold=request.participation_threshold,
        )
    db.refresh(vault)
    return VaultResponse.model_validate(vault)


@router.post(
    "/vaults/{vault_id}/stage",
    response_model=VaultResponse,
    summary="Advance vault stage",
    description="Forward-only. Entering locked locks pending assets; entering failed or terminated releases locked assets.",
)
async def advance_vault_stage_endpoint(
    vault_id: UUID,
    request: VaultStageIn,
    db: Session = Depends(get_db),
) -> VaultResponse:
    with transaction(db):
        vault = advance_vault_stage(db, vault_id, request.stage, reason=request.reason)
    db.refresh(vault)
    return VaultResponse.model_validate(vault)


@router.put(
    "/vaults/{vault_id}/apply-params",
    response_model=VaultResponse,
    summary="Record contract parameters",
)
async def record_apply_params_endpoint(
    vault_id: UUID,
    request: ApplyParamsIn,
    db: Session = Depends(get_db),
) -> VaultResponse:
    with transaction(db):
        vault = record_apply_params_result(db, vault_id, request.apply_params_result)
    db.refresh(vault)
    return VaultResponse.model_validate(vault)


@router.put(
    "/vaults/{vault_id}/dispatch-script",
    response_model=VaultResponse,
    summary="Record dispatch script",
)
async def record_dispatch_script_endpoint(
    vault_id: UUID,
    request: DispatchScriptIn,
    db: Session = Depends(get_db),
) -> VaultResponse:
    with transaction(db):
        vault = record_dispatch_script(db, vault_id, request.dispatch_preloaded_script)
    db.refresh(vault)
    return VaultResponse.model_validate(vault)


@router.put(
    "/vaults/{vault_id}/acquire-results",
    response_model=VaultResponse,
    summary="Record acquire results",
    description="Rejected once the vault is locked.",
)
async def record_acquire_results_endpoint(
    vault_id: UUID,
    request: AcquireResultsIn,
    db: Session = Depends(get_db),
) -> VaultResponse:
    with transaction(db):
        vault = record_acquire_results(
            db,
            vault_id,
            acquire_multiplier=request.acquire_multiplier,
            ada_distribution=request.ada_distribution,
        )
    db.refresh(vault)
    return VaultResponse.model_validate(vault)


@router.post(
    "/vaults/{vault_id}/assets",
    response_model=AssetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record asset",
    description="Record a contributed or invested asset (status pending).",
)
async def create_asset_endpoint(
    vault_id: UUID,
    request: AssetCreateIn,
    db: Session = Depends(get_db),
) -> AssetResponse:
    with transaction(db):
        asset = create_asset(
            db,
            vault_id=vault_id,
            policy_id=request.policy_id,
            asset_id=request.asset_id,
            type=request.type,
            quantity=request.quantity,
            origin_type=request.origin_type,
            added_by=request.added_by,
            metadata=request.metadata,
        )
    db.refresh(asset)
    return AssetResponse.model_validate(asset)


@router.post(
    "/vaults/{vault_id}/snapshots",
    response_model=SnapshotResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record balance snapshot",
    description="Token balances per address of a locked vault. New proposals bind the latest snapshot.",
)
async def create_snapshot_endpoint(
    vault_id: UUID,
    request: SnapshotCreateIn,
    db: Session = Depends(get_db),
) -> SnapshotResponse:
    try:
        with transaction(db):
            snapshot = create_snapshot(
                db,
                vault_id=vault_id,
                asset_id=request.asset_id,
                address_balances=request.address_balances,
            )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    db.refresh(snapshot)
    return SnapshotResponse.from_snapshot(snapshot)
