"""
Claim service - Legacy claim metadata normalization
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, Dict, Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import select
from vaultdao.core.claims.models import Claim
from vaultdao.core.common.errors import DomainError, EntityNotFound, InvalidClaimAmount
from vaultdao.utils.metrics import record_claims_normalized

logger = logging.getLogger(__name__)

LOVELACE_PER_ADA = Decimal("1000000")

# Values at or above this are taken as lovelace already
LOVELACE_CUTOFF = Decimal("1000000")

ADA_AMOUNT_KEY = "adaAmount"
MULTIPLIER_KEY = "multiplier"
LEGACY_KEYS = (ADA_AMOUNT_KEY, MULTIPLIER_KEY)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise InvalidOperation(value)
    amount = Decimal(str(value).strip())
    if not amount.is_finite():
        raise InvalidOperation(value)
    return amount


def ada_amount_to_lovelace(value: Any, claim_id: Optional[UUID] = None) -> int:
    """
    Convert a legacy adaAmount to lovelace.

    >= 1,000,000 is already lovelace (truncated to int); below that it is
    ADA, multiplied by 1,000,000 and rounded down.

    Raises:
        InvalidClaimAmount: value is not numeric
    """
    try:
        amount = _to_decimal(value)
    except (InvalidOperation, ValueError) as e:
        raise InvalidClaimAmount(claim_id, ADA_AMOUNT_KEY, value) from e

    if amount >= LOVELACE_CUTOFF:
        return int(amount)
    return int((amount * LOVELACE_PER_ADA).to_integral_value(rounding=ROUND_DOWN))


def needs_normalization(claim: Claim) -> bool:
    metadata = claim.claim_metadata or {}
    return any(key in metadata for key in LEGACY_KEYS)


def normalize_claim(claim: Claim) -> bool:
    """
    Move legacy metadata amounts into their columns.

    - metadata.adaAmount -> lovelace_amount (only when the column is NULL)
    - metadata.multiplier -> multiplier (only when the column is NULL)
    Both keys are removed afterwards; other metadata keys are kept.

    Idempotent: a normalized claim is left unchanged.

    Returns:
        True if the claim changed
    """
    if not needs_normalization(claim):
        return False

    metadata = dict(claim.claim_metadata)
    ada_amount = metadata.pop(ADA_AMOUNT_KEY, None)
    multiplier = metadata.pop(MULTIPLIER_KEY, None)

    # Convert both before writing anything
    lovelace_amount = claim.lovelace_amount
    if ada_amount is not None and lovelace_amount is None:
        lovelace_amount = ada_amount_to_lovelace(ada_amount, claim.id)

    multiplier_value = claim.multiplier
    if multiplier is not None and multiplier_value is None:
        try:
            multiplier_value = _to_decimal(multiplier)
        except (InvalidOperation, ValueError) as e:
            raise InvalidClaimAmount(claim.id, MULTIPLIER_KEY, multiplier) from e

    claim.lovelace_amount = lovelace_amount
    claim.multiplier = multiplier_value

    # New dict so the JSON column is flagged dirty
    claim.claim_metadata = metadata

    logger.info(
        "Claim normalized",
        extra={
            "claim_id": str(claim.id),
            "lovelace_amount": claim.lovelace_amount,
            "multiplier": str(claim.multiplier) if claim.multiplier is not None else None,
        },
    )
    return True


def get_claim(db: Session, claim_id: UUID) -> Claim:
    """
    Get claim by id, normalized on read.

    NO COMMIT - caller must commit (a normalized legacy row is flushed).
    """
    claim = db.execute(select(Claim).where(Claim.id == claim_id)).scalar_one_or_none()
    if not claim:
        raise EntityNotFound("claim", claim_id)

    if normalize_claim(claim):
        db.flush()
        record_claims_normalized()
    return claim


def normalize_claims(db: Session, limit: Optional[int] = None, dry_run: bool = False) -> Dict[str, Any]:
    """
    Backfill: normalize every claim that still carries legacy metadata keys.

    Safe to re-run. A claim that fails is reported in `errors` and skipped;
    the others are still normalized.

    NO COMMIT - caller must commit (dry_run leaves the session untouched).

    Returns:
        Dict with normalized_count, skipped_count, errors
    """
    stats = {
        "normalized_count": 0,
        "skipped_count": 0,
        "errors": [],
    }

    claims = db.execute(
        select(Claim).order_by(Claim.created_at, Claim.id)
    ).scalars().all()

    candidates = [claim for claim in claims if needs_normalization(claim)]
    stats["skipped_count"] = len(claims) - len(candidates)
    if limit is not None:
        candidates = candidates[:limit]

    for claim in candidates:
        if dry_run:
            stats["normalized_count"] += 1
            continue
        try:
            normalize_claim(claim)
        except DomainError as e:
            stats["errors"].append({"claim_id": str(claim.id), "code": e.code, "error": e.message})
            continue
        stats["normalized_count"] += 1

    if not dry_run and stats["normalized_count"]:
        db.flush()
        record_claims_normalized(stats["normalized_count"])

    logger.info(
        "Claims normalization finished",
        extra={
            "normalized_count": stats["normalized_count"],
            "skipped_count": stats["skipped_count"],
            "error_count": len(stats["errors"]),
            "dry_run": dry_run,
        },
    )
    return stats
