"""
System settings API schemas
"""

from pydantic import BaseModel, Field
from typing import Any, Dict


class SystemSettingsResponse(BaseModel):
    """Known settings (defaults overlaid with stored values)"""
    settings: Dict[str, Any] = Field(..., description="Key/value settings")


class SystemSettingsUpdateIn(BaseModel):
    """Key-wise merge into the settings document"""
    settings: Dict[str, Any] = Field(..., min_length=1, description="Keys to set; other keys are kept")

    class Config:
        json_schema_extra = {
            "example": {
                "settings": {"governance_fee_proposal_staking": 4000000},
            }
        }
