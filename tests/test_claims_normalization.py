"""
Tests for legacy claim metadata normalization
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from vaultdao.core.claims.models import Claim, ClaimStatus, ClaimType
from vaultdao.core.common.errors import EntityNotFound, InvalidClaimAmount
from vaultdao.services.claim_service import (
    ada_amount_to_lovelace,
    get_claim,
    normalize_claim,
    normalize_claims,
)


def _legacy_claim(db_session, metadata, **kwargs) -> Claim:
    claim = Claim(
        user_id=kwargs.pop("user_id", "user-1"),
        type=kwargs.pop("type", ClaimType.CONTRIBUTOR),
        amount=kwargs.pop("amount", 1000),
        claim_metadata=metadata,
        **kwargs,
    )
    db_session.add(claim)
    db_session.commit()
    return claim


@pytest.mark.parametrize("value, expected", [
    ("2.5", 2_500_000),
    (2.5, 2_500_000),
    (0.1234567, 123_456),
    ("0.000001", 1),
    (0, 0),
    (999_999, 999_999_000_000),
    (3_000_000, 3_000_000),
    ("3000000", 3_000_000),
    ("1000000.9", 1_000_000),
])
def test_ada_amount_to_lovelace(value, expected):
    """Below 1,000,000 the value is ADA; at or above it is already lovelace"""
    assert ada_amount_to_lovelace(value) == expected


@pytest.mark.parametrize("value", ["abc", None, True, "NaN", "Infinity", "", [1]])
def test_ada_amount_to_lovelace_rejects_non_numeric(value):
    claim_id = uuid4()

    with pytest.raises(InvalidClaimAmount) as exc_info:
        ada_amount_to_lovelace(value, claim_id)

    assert exc_info.value.details["claim_id"] == str(claim_id)
    assert exc_info.value.details["field"] == "adaAmount"


def test_normalize_claim_moves_legacy_keys(db_session):
    claim = _legacy_claim(db_session, {"adaAmount": "2.5", "multiplier": "1.25", "txHash": "ab12"})

    assert normalize_claim(claim) is True
    db_session.commit()
    db_session.expire_all()

    claim = db_session.get(Claim, claim.id)
    assert claim.lovelace_amount == 2_500_000
    assert claim.multiplier == Decimal("1.25")
    assert claim.claim_metadata == {"txHash": "ab12"}
    assert claim.status == ClaimStatus.AVAILABLE


def test_normalize_claim_keeps_existing_columns(db_session):
    """Columns already set win; the legacy keys are still removed"""
    claim = _legacy_claim(
        db_session,
        {"adaAmount": 9, "multiplier": 3},
        lovelace_amount=42,
        multiplier=Decimal("2"),
    )

    assert normalize_claim(claim) is True
    assert claim.lovelace_amount == 42
    assert claim.multiplier == Decimal("2")
    assert claim.claim_metadata == {}


def test_normalize_claim_is_idempotent(db_session):
    claim = _legacy_claim(db_session, {"adaAmount": 5})

    assert normalize_claim(claim) is True
    db_session.commit()
    assert normalize_claim(claim) is False
    assert claim.lovelace_amount == 5_000_000


@pytest.mark.parametrize("metadata", [None, {}, {"txHash": "ab12"}])
def test_normalize_claim_without_legacy_keys(db_session, metadata):
    claim = _legacy_claim(db_session, metadata)

    assert normalize_claim(claim) is False
    assert claim.claim_metadata == metadata
    assert claim.lovelace_amount is None


def test_normalize_claim_failure_leaves_claim_untouched(db_session):
    claim = _legacy_claim(db_session, {"adaAmount": "2", "multiplier": "many"})

    with pytest.raises(InvalidClaimAmount) as exc_info:
        normalize_claim(claim)

    assert exc_info.value.details["field"] == "multiplier"
    assert claim.lovelace_amount is None
    assert claim.claim_metadata == {"adaAmount": "2", "multiplier": "many"}


def test_get_claim_normalizes_on_read(db_session):
    claim = _legacy_claim(db_session, {"adaAmount": "1.5"})

    claim = get_claim(db_session, claim.id)
    db_session.commit()

    assert claim.lovelace_amount == 1_500_000
    assert claim.claim_metadata == {}


def test_get_claim_not_found(db_session):
    with pytest.raises(EntityNotFound):
        get_claim(db_session, uuid4())


def test_normalize_claims_stats(db_session):
    _legacy_claim(db_session, {"adaAmount": "2.5"})
    _legacy_claim(db_session, {"multiplier": 4})
    _legacy_claim(db_session, {"txHash": "ab12"}, lovelace_amount=10)

    stats = normalize_claims(db_session)
    db_session.commit()

    assert stats["normalized_count"] == 2
    assert stats["skipped_count"] == 1
    assert stats["errors"] == []

    again = normalize_claims(db_session)
    assert again["normalized_count"] == 0
    assert again["skipped_count"] == 3


def test_normalize_claims_limit(db_session):
    for _ in range(3):
        _legacy_claim(db_session, {"adaAmount": 1})

    assert normalize_claims(db_session, limit=2)["normalized_count"] == 2
    db_session.commit()
    assert normalize_claims(db_session, limit=2)["normalized_count"] == 1


def test_normalize_claims_dry_run_changes_nothing(db_session):
    claim = _legacy_claim(db_session, {"adaAmount": 1})

    stats = normalize_claims(db_session, dry_run=True)

    assert stats["normalized_count"] == 1
    assert claim.lovelace_amount is None
    assert claim.claim_metadata == {"adaAmount": 1}


def test_normalize_claims_reports_bad_rows(db_session):
    """A bad amount is reported and skipped; the other claims are normalized"""
    bad = _legacy_claim(db_session, {"adaAmount": "abc"})
    good = _legacy_claim(db_session, {"adaAmount": "3"})

    stats = normalize_claims(db_session)
    db_session.commit()

    assert stats["normalized_count"] == 1
    assert len(stats["errors"]) == 1
    assert stats["errors"][0]["claim_id"] == str(bad.id)
    assert stats["errors"][0]["code"] == "INVALID_CLAIM_AMOUNT"
    assert good.lovelace_amount == 3_000_000
    assert bad.claim_metadata == {"adaAmount": "abc"}
