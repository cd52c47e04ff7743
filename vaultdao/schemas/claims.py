"""
Claim API request/response schemas
"""

from pydantic import AliasChoices, BaseModel, Field
from decimal import Decimal
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID

from vaultdao.core.claims.models import ClaimStatus, ClaimType


class ClaimResponse(BaseModel):
    """Claim response"""
    id: UUID
    user_id: Optional[str] = None
    vault_id: Optional[UUID] = None
    type: ClaimType
    status: ClaimStatus
    amount: int
    lovelace_amount: Optional[int] = None
    multiplier: Optional[Decimal] = None
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("claim_metadata", "metadata"),
    )
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NormalizeClaimsIn(BaseModel):
    """Request schema for the claims backfill"""
    limit: Optional[int] = Field(None, gt=0, description="Max claims to normalize")
    dry_run: bool = Field(default=False, description="Count only, write nothing")


class NormalizeClaimsResponse(BaseModel):
    """Claims backfill stats"""
    normalized_count: int
    skipped_count: int
    errors: List[Dict[str, Any]]
    dry_run: bool
