"""
Admin API - Asset status transitions and updates
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.schemas.assets import AssetResponse, AssetTransitionIn, AssetUpdateIn
from vaultdao.services.asset_service import transition_asset, update_asset

router = APIRouter()


@router.post(
    "/assets/{asset_id}/transition",
    response_model=AssetResponse,
    summary="Transition asset status",
    description="Legal edges: pending->locked, locked->released, locked->distributed.",
)
async def transition_asset_endpoint(
    asset_id: UUID,
    request: AssetTransitionIn,
    db: Session = Depends(get_db),
) -> AssetResponse:
    with transaction(db):
        asset = transition_asset(db, asset_id, request.status)
    db.refresh(asset)
    return AssetResponse.model_validate(asset)


@router.patch(
    "/assets/{asset_id}",
    response_model=AssetResponse,
    summary="Update asset",
    description="origin_type, status and vault_id cannot be changed here.",
)
async def update_asset_endpoint(
    asset_id: UUID,
    request: AssetUpdateIn,
    db: Session = Depends(get_db),
) -> AssetResponse:
    fields = request.model_dump(exclude_unset=True)
    try:
        with transaction(db):
            asset = update_asset(db, asset_id, **fields)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    db.refresh(asset)
    return AssetResponse.model_validate(asset)
