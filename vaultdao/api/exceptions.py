"""
Global exception handlers
"""

import logging
from decimal import Decimal
from typing import Any, Dict
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from vaultdao.core.common.errors import (
    DomainError,
    EntityNotFound,
    InvalidTransition,
    ImmutableField,
    InvalidPayloadForType,
    UnknownVoteOption,
    InvalidVoteValue,
    DuplicateVote,
    ProposalNotActive,
    SnapshotRequired,
    NoVotingPower,
    InvalidClaimAmount,
    ConstraintViolation,
)
from vaultdao.utils.metrics import record_domain_error
from vaultdao.utils.trace_id import get_trace_id

logger = logging.getLogger(__name__)

# Domain error -> HTTP status
DOMAIN_ERROR_STATUS = {
    EntityNotFound: status.HTTP_404_NOT_FOUND,
    InvalidTransition: status.HTTP_409_CONFLICT,
    ImmutableField: status.HTTP_409_CONFLICT,
    DuplicateVote: status.HTTP_409_CONFLICT,
    ProposalNotActive: status.HTTP_409_CONFLICT,
    SnapshotRequired: status.HTTP_409_CONFLICT,
    ConstraintViolation: status.HTTP_409_CONFLICT,
    InvalidPayloadForType: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnknownVoteOption: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidVoteValue: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NoVotingPower: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidClaimAmount: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def status_for(exc: DomainError) -> int:
    for error_cls in type(exc).__mro__:
        if error_cls in DOMAIN_ERROR_STATUS:
            return DOMAIN_ERROR_STATUS[error_cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render domain errors with their code and details"""
    trace_id = get_trace_id(request)
    status_code = status_for(exc)

    record_domain_error(exc.code)
    logger.warning(
        exc.message,
        extra={"error_code": exc.code, "details": exc.details, "trace_id": trace_id},
    )

    error_response: Dict[str, Any] = {"error": exc.to_dict()}
    error_response["error"]["trace_id"] = trace_id

    return JSONResponse(status_code=status_code, content=error_response)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions"""
    trace_id = get_trace_id(request)

    # Detail already shaped as {"error": {...}}: keep its code
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        error_response: Dict[str, Any] = exc.detail.copy()
        if isinstance(error_response["error"], dict) and "trace_id" not in error_response["error"]:
            error_response["error"]["trace_id"] = trace_id
    else:
        error_response = {
            "error": {
                "code": f"HTTP_{exc.status_code}",
                "message": exc.detail if isinstance(exc.detail, str) else str(exc.detail),
                "details": {},
                "trace_id": trace_id,
            }
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response,
    )


def _convert_non_serializable(obj):
    """Recursively convert non-JSON-serializable objects to strings"""
    if isinstance(obj, (Decimal, Exception)):
        return str(obj)
    elif isinstance(obj, dict):
        return {key: _convert_non_serializable(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_convert_non_serializable(item) for item in obj]
    elif isinstance(obj, type):
        return str(obj)
    return obj


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation exceptions"""
    trace_id = get_trace_id(request)

    error_response: Dict[str, Any] = {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": _convert_non_serializable(exc.errors())},
            "trace_id": trace_id,
        }
    }

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions"""
    trace_id = get_trace_id(request)

    error_response: Dict[str, Any] = {
        "error": {
            "code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": {},
            "trace_id": trace_id,
        }
    }

    logger.exception("Unhandled exception", exc_info=exc, extra={"trace_id": trace_id})

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response,
    )
