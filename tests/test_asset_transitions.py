"""
Tests for the asset status transition guard and origin_type immutability
"""

import pytest
from decimal import Decimal
from uuid import uuid4

from vaultdao.core.assets.models import AssetStatus, AssetOriginType, AssetType
from vaultdao.core.common.errors import EntityNotFound, ImmutableField, InvalidTransition
from vaultdao.services.asset_service import (
    get_asset,
    transition_asset,
    update_asset,
    lock_pending_assets,
    release_locked_assets,
)
from vaultdao.utils.metrics import metrics_registry

from factories import add_asset


def _transitions_count(from_status: str, to_status: str) -> float:
    value = metrics_registry.get_sample_value(
        "asset_transitions_total",
        {"from_status": from_status, "to_status": to_status},
    )
    return value or 0.0


def _asset_in(db_session, vault, status: AssetStatus):
    asset = add_asset(db_session, vault)
    if status in (AssetStatus.LOCKED, AssetStatus.RELEASED, AssetStatus.DISTRIBUTED):
        transition_asset(db_session, asset.id, AssetStatus.LOCKED)
    if status in (AssetStatus.RELEASED, AssetStatus.DISTRIBUTED):
        transition_asset(db_session, asset.id, status)
    db_session.commit()
    return asset


def test_create_asset_starts_pending(db_session, draft_vault):
    """New assets are pending with no transition timestamps"""
    asset = add_asset(db_session, draft_vault, quantity=Decimal("3"), type=AssetType.FT)
    db_session.commit()

    asset = get_asset(db_session, asset.id)
    assert asset.status == AssetStatus.PENDING
    assert asset.origin_type == AssetOriginType.CONTRIBUTED
    assert asset.type == AssetType.FT
    assert asset.quantity == Decimal("3")
    assert asset.locked_at is None
    assert asset.released_at is None
    assert asset.distributed_at is None


def test_create_asset_unknown_vault(db_session):
    from vaultdao.services.asset_service import create_asset

    with pytest.raises(EntityNotFound):
        create_asset(db_session, uuid4(), "policy", "asset")


@pytest.mark.parametrize(
    "start, target, stamp",
    [
        (AssetStatus.PENDING, AssetStatus.LOCKED, "locked_at"),
        (AssetStatus.LOCKED, AssetStatus.RELEASED, "released_at"),
        (AssetStatus.LOCKED, AssetStatus.DISTRIBUTED, "distributed_at"),
    ],
)
def test_legal_transitions(db_session, draft_vault, start, target, stamp):
    """Legal edges succeed and stamp updated_at plus the status timestamp"""
    asset = _asset_in(db_session, draft_vault, start)
    before = _transitions_count(start.value, target.value)

    asset = transition_asset(db_session, asset.id, target)
    db_session.commit()

    asset = get_asset(db_session, asset.id)
    assert asset.status == target
    assert getattr(asset, stamp) is not None
    assert asset.updated_at is not None
    assert _transitions_count(start.value, target.value) == before + 1


@pytest.mark.parametrize(
    "start, target",
    [
        (AssetStatus.PENDING, AssetStatus.RELEASED),
        (AssetStatus.PENDING, AssetStatus.DISTRIBUTED),
        (AssetStatus.PENDING, AssetStatus.PENDING),
        (AssetStatus.LOCKED, AssetStatus.PENDING),
        (AssetStatus.LOCKED, AssetStatus.LOCKED),
        (AssetStatus.RELEASED, AssetStatus.LOCKED),
        (AssetStatus.RELEASED, AssetStatus.DISTRIBUTED),
        (AssetStatus.DISTRIBUTED, AssetStatus.RELEASED),
        (AssetStatus.DISTRIBUTED, AssetStatus.LOCKED),
    ],
)
def test_illegal_transitions_rejected(db_session, draft_vault, start, target):
    """Any edge outside the table fails and leaves the asset untouched"""
    asset = _asset_in(db_session, draft_vault, start)

    with pytest.raises(InvalidTransition) as exc_info:
        transition_asset(db_session, asset.id, target)

    error = exc_info.value
    assert error.code == "INVALID_TRANSITION"
    assert error.details["entity_id"] == str(asset.id)
    assert error.details["from"] == start.value
    assert error.details["to"] == target.value

    db_session.rollback()
    assert get_asset(db_session, asset.id).status == start


def test_transition_unknown_asset(db_session):
    with pytest.raises(EntityNotFound):
        transition_asset(db_session, uuid4(), AssetStatus.LOCKED)


def test_origin_type_cannot_change_after_creation(db_session, draft_vault):
    """Direct attribute writes on a persisted asset are rejected"""
    asset = add_asset(db_session, draft_vault, origin_type=AssetOriginType.CONTRIBUTED)
    db_session.commit()

    with pytest.raises(ImmutableField) as exc_info:
        asset.origin_type = AssetOriginType.INVESTED

    assert exc_info.value.details["field"] == "origin_type"
    db_session.expire_all()
    assert get_asset(db_session, asset.id).origin_type == AssetOriginType.CONTRIBUTED


def test_origin_type_unset_is_still_immutable(db_session, draft_vault):
    """An asset created without origin_type cannot receive one later"""
    asset = add_asset(db_session, draft_vault, origin_type=None)
    db_session.commit()

    with pytest.raises(ImmutableField):
        asset.origin_type = AssetOriginType.INVESTED


@pytest.mark.parametrize("field, value", [
    ("origin_type", AssetOriginType.INVESTED),
    ("status", AssetStatus.LOCKED),
    ("vault_id", uuid4()),
])
def test_update_asset_rejects_fixed_fields(db_session, draft_vault, field, value):
    asset = add_asset(db_session, draft_vault)
    db_session.commit()

    with pytest.raises(ImmutableField) as exc_info:
        update_asset(db_session, asset.id, **{field: value})

    assert exc_info.value.details["field"] == field


def test_update_asset_mutable_fields(db_session, draft_vault):
    asset = add_asset(db_session, draft_vault)
    db_session.commit()

    update_asset(db_session, asset.id, quantity=Decimal("2"), metadata={"image": "ipfs://abc"}, added_by="user-7")
    db_session.commit()

    asset = get_asset(db_session, asset.id)
    assert asset.quantity == Decimal("2")
    assert asset.asset_metadata == {"image": "ipfs://abc"}
    assert asset.added_by == "user-7"
    assert asset.status == AssetStatus.PENDING


def test_update_asset_unknown_field(db_session, draft_vault):
    asset = add_asset(db_session, draft_vault)
    db_session.commit()

    with pytest.raises(ValueError):
        update_asset(db_session, asset.id, colour="red")


def test_bulk_lock_and_release(db_session, draft_vault):
    """Bulk helpers only touch assets in the matching status"""
    first = add_asset(db_session, draft_vault, asset_name="01")
    second = add_asset(db_session, draft_vault, asset_name="02")
    db_session.commit()

    assert lock_pending_assets(db_session, draft_vault.id) == 2
    assert lock_pending_assets(db_session, draft_vault.id) == 0

    transition_asset(db_session, first.id, AssetStatus.DISTRIBUTED)
    assert release_locked_assets(db_session, draft_vault.id) == 1
    db_session.commit()

    assert get_asset(db_session, first.id).status == AssetStatus.DISTRIBUTED
    assert get_asset(db_session, second.id).status == AssetStatus.RELEASED
