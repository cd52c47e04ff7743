"""
Client API - Vaults, their assets and snapshots, proposal submission
"""

from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from vaultdao.core.assets.models import AssetStatus
from vaultdao.infrastructure.database import get_db, transaction
from vaultdao.schemas.assets import AssetResponse
from vaultdao.schemas.governance import ProposalCreateIn, ProposalResponse, SnapshotResponse
from vaultdao.schemas.vaults import VaultResponse
from vaultdao.services.asset_service import list_vault_assets
from vaultdao.services.proposal_service import create_proposal
from vaultdao.services.snapshot_service import list_snapshots
from vaultdao.services.vault_service import get_vault

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/vaults/{vault_id}",
    response_model=VaultResponse,
    summary="Get vault",
)
async def get_vault_endpoint(vault_id: UUID, db: Session = Depends(get_db)) -> VaultResponse:
    vault = get_vault(db, vault_id)
    return VaultResponse.model_validate(vault)


@router.get(
    "/vaults/{vault_id}/assets",
    response_model=List[AssetResponse],
    summary="List vault assets",
    description="Assets held by a vault, optionally filtered by status.",
)
async def list_vault_assets_endpoint(
    vault_id: UUID,
    asset_status: Optional[AssetStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
) -> List[AssetResponse]:
    get_vault(db, vault_id)
    assets = list_vault_assets(db, vault_id, status=asset_status)
    return [AssetResponse.model_validate(asset) for asset in assets]


@router.post(
    "/vaults/{vault_id}/proposals",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create proposal",
    description="Submit a governance proposal. The vault must be locked; the payload must match the proposal type.",
)
async def create_proposal_endpoint(
    vault_id: UUID,
    request: ProposalCreateIn,
    db: Session = Depends(get_db),
) -> ProposalResponse:
    try:
        with transaction(db):
            proposal = create_proposal(
                db,
                vault_id=vault_id,
                creator_id=request.creator_id,
                proposal_type=request.proposal_type,
                title=request.title,
                description=request.description,
                payload=request.payload(),
                vote_options=request.ballot(),
                abstain=request.abstain,
                start_date=request.start_date,
                end_date=request.end_date,
            )
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    db.refresh(proposal)
    return ProposalResponse.model_validate(proposal)


@router.get(
    "/vaults/{vault_id}/snapshots",
    response_model=List[SnapshotResponse],
    summary="List vault snapshots",
    description="Balance snapshots of a vault, newest first.",
)
async def list_snapshots_endpoint(vault_id: UUID, db: Session = Depends(get_db)) -> List[SnapshotResponse]:
    return [SnapshotResponse.from_snapshot(snapshot) for snapshot in list_snapshots(db, vault_id)]
