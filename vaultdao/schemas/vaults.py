"""
Vault API request/response schemas
"""

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID

from vaultdao.core.vaults.models import VaultStage


class VaultCreateIn(BaseModel):
    """Request schema for creating a vault (admin)"""
    name: str = Field(..., min_length=1, max_length=255, description="Vault display name")
    execution_threshold: Optional[Decimal] = Field(None, ge=0, le=100, description="Required yes share of yes+no votes, percent")
    participation_threshold: Optional[Decimal] = Field(None, ge=0, le=100, description="Required participation, percent")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Spacebudz collection",
                "execution_threshold": "60",
                "participation_threshold": "10",
            }
        }


class VaultStageIn(BaseModel):
    """Request schema for moving a vault to another stage"""
    stage: VaultStage = Field(..., description="Target stage")
    reason: Optional[str] = Field(None, description="Failure reason (stage=failed only)")


class ApplyParamsIn(BaseModel):
    """Contract parameter application result"""
    apply_params_result: Dict[str, Any] = Field(..., description="Applied contract parameters")


class DispatchScriptIn(BaseModel):
    """Preloaded dispatch script"""
    dispatch_preloaded_script: Dict[str, Any] = Field(..., description="Dispatch script used for distributions")


class AcquireResultsIn(BaseModel):
    """Acquire-window results"""
    acquire_multiplier: List[Any] = Field(..., description="[[policy_id, asset_name | null, multiplier], ...]")
    ada_distribution: List[Any] = Field(..., description="[[policy_id, asset_name, lovelace], ...]")


class VaultResponse(BaseModel):
    """Vault response"""
    id: UUID
    name: str
    stage: VaultStage
    acquire_multiplier: Optional[List[Any]] = None
    ada_distribution: Optional[List[Any]] = None
    apply_params_result: Optional[Dict[str, Any]] = None
    dispatch_preloaded_script: Optional[Dict[str, Any]] = None
    execution_threshold: Optional[Decimal] = None
    participation_threshold: Optional[Decimal] = None
    failure_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
