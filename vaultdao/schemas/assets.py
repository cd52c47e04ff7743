"""
Asset API request/response schemas
"""

from pydantic import AliasChoices, BaseModel, Field
from decimal import Decimal
from typing import Any, Dict, Optional
from datetime import datetime
from uuid import UUID

from vaultdao.core.assets.models import AssetStatus, AssetOriginType, AssetType


class AssetCreateIn(BaseModel):
    """Request schema for recording an asset in a vault (admin)"""
    policy_id: str = Field(..., min_length=1, max_length=64, description="Policy id")
    asset_id: str = Field(..., min_length=1, max_length=128, description="Asset name (hex)")
    type: AssetType = Field(default=AssetType.NFT, description="nft, ft or ada")
    quantity: Decimal = Field(default=Decimal("1"), gt=0, description="Quantity")
    origin_type: Optional[AssetOriginType] = Field(None, description="invested or contributed (fixed once set)")
    added_by: Optional[str] = Field(None, max_length=255, description="Contributor/investor id")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Free-form metadata")


class AssetUpdateIn(BaseModel):
    """
    Request schema for updating an asset (admin)

    Extra fields are accepted so that writes to fixed fields (origin_type,
    status, vault_id) reach the service and are rejected there.
    """
    policy_id: Optional[str] = Field(None, min_length=1, max_length=64)
    asset_id: Optional[str] = Field(None, min_length=1, max_length=128)
    type: Optional[AssetType] = None
    quantity: Optional[Decimal] = Field(None, gt=0)
    added_by: Optional[str] = Field(None, max_length=255)
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"


class AssetTransitionIn(BaseModel):
    """Request schema for an asset status transition"""
    status: AssetStatus = Field(..., description="Target status")


class AssetResponse(BaseModel):
    """Asset response"""
    id: UUID
    vault_id: UUID
    policy_id: str
    asset_id: str
    type: AssetType
    quantity: Decimal
    status: AssetStatus
    origin_type: Optional[AssetOriginType] = None
    locked_at: Optional[datetime] = None
    released_at: Optional[datetime] = None
    distributed_at: Optional[datetime] = None
    added_by: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("asset_metadata", "metadata"),
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
