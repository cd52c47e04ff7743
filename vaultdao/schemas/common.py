"""
Common Pydantic schemas
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class HealthResponse(BaseModel):
    """Health check response"""
    status: str


class ReadyResponse(BaseModel):
    """Readiness check response"""
    status: str
    database: str


class ErrorBody(BaseModel):
    """Error payload"""
    code: str = Field(..., description="Stable error code (e.g. INVALID_TRANSITION)")
    message: str = Field(..., description="Human readable message")
    details: Dict[str, Any] = Field(default_factory=dict, description="Entity id, offending field or value")
    trace_id: Optional[str] = Field(None, description="Request trace id")


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint"""
    error: ErrorBody


# Documented on every router that can raise a DomainError
ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}
