"""
Prometheus metrics for observability
"""

import re
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.core import CollectorRegistry

# Create a custom registry to avoid conflicts
metrics_registry = CollectorRegistry()

# HTTP request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["path", "method", "status"],
    registry=metrics_registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["path", "method"],
    registry=metrics_registry,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Asset ledger metrics
asset_transitions_total = Counter(
    "asset_transitions_total",
    "Total asset status transitions",
    ["from_status", "to_status"],
    registry=metrics_registry,
)

# Vault lifecycle metrics
vault_stage_changes_total = Counter(
    "vault_stage_changes_total",
    "Total vault stage changes",
    ["to_stage"],
    registry=metrics_registry,
)

# Governance metrics
votes_cast_total = Counter(
    "votes_cast_total",
    "Total votes cast",
    ["option_kind"],  # fixed, custom
    registry=metrics_registry,
)

# Error metrics
domain_errors_total = Counter(
    "domain_errors_total",
    "Total domain errors returned to callers",
    ["code"],
    registry=metrics_registry,
)

# Claims metrics
claims_normalized_total = Counter(
    "claims_normalized_total",
    "Total legacy claims normalized",
    registry=metrics_registry,
)


def record_http_request(
    path: str,
    method: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """
    Record HTTP request metrics.
    
    Args:
        path: Request path (normalized)
        method: HTTP method
        status_code: Response status code
        duration_seconds: Request duration in seconds
    """
    normalized_path = _normalize_path(path)

    http_requests_total.labels(
        path=normalized_path,
        method=method.upper(),
        status=str(status_code),
    ).inc()

    http_request_duration_seconds.labels(
        path=normalized_path,
        method=method.upper(),
    ).observe(duration_seconds)


def record_asset_transition(from_status: str, to_status: str) -> None:
    """Record asset status transition"""
    asset_transitions_total.labels(from_status=from_status, to_status=to_status).inc()


def record_vault_stage_change(to_stage: str) -> None:
    """Record vault stage change"""
    vault_stage_changes_total.labels(to_stage=to_stage).inc()


def record_vote_cast(option_kind: str) -> None:
    """
    Record vote cast.

    Args:
        option_kind: fixed (yes/no/abstain) or custom (proposal vote option)
    """
    votes_cast_total.labels(option_kind=option_kind).inc()


def record_domain_error(code: str) -> None:
    """Record domain error by code"""
    domain_errors_total.labels(code=code).inc()


def record_claims_normalized(count: int = 1) -> None:
    """Record normalized claims"""
    claims_normalized_total.inc(count)


def _normalize_path(path: str) -> str:
    """
    Normalize path for metrics (replace UUIDs and IDs with placeholders).
    
    Examples:
        /api/v1/vaults/123e4567-... -> /api/v1/vaults/{id}
        /admin/v1/system-settings -> /admin/v1/system-settings
    """
    path = re.sub(
        r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}',
        '{id}',
        path,
        flags=re.IGNORECASE,
    )

    # Replace numeric IDs (if any remain)
    path = re.sub(r'/\d+', '/{id}', path)

    return path


def get_metrics_output() -> bytes:
    """Get Prometheus metrics output"""
    return generate_latest(metrics_registry)


__all__ = [
    "metrics_registry",
    "record_http_request",
    "record_asset_transition",
    "record_vault_stage_change",
    "record_vote_cast",
    "record_domain_error",
    "record_claims_normalized",
    "get_metrics_output",
    "CONTENT_TYPE_LATEST",
]
