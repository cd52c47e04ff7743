"""
Tests for proposal payload validation, proposal lifecycle and execution effects
"""

import pytest
from datetime import datetime, timezone

from vaultdao.core.assets.models import AssetStatus
from vaultdao.core.governance.models import ProposalStatus, ProposalType
from vaultdao.core.vaults.models import VaultStage
from vaultdao.core.common.errors import InvalidPayloadForType, InvalidTransition, SnapshotRequired
from vaultdao.services.asset_service import get_asset, list_vault_assets
from vaultdao.services.proposal_service import (
    create_proposal,
    execute_proposal,
    finalize_proposal,
    get_proposal,
    mark_fee_paid,
    open_voting,
    validate_proposal_payload,
)
from vaultdao.services.system_settings_service import proposal_fee_key, set_setting
from vaultdao.services.vault_service import create_vault, get_vault, record_dispatch_script
from vaultdao.services.vote_service import cast_vote

from factories import VOTER_1, add_asset, lock_vault, open_proposal

TOKENS = [{"policy_id": "d5e6bf05", "asset_name": "74657374", "amount": 100}]
TERMINATION_DATE = datetime(2026, 12, 31, tzinfo=timezone.utc)


@pytest.mark.parametrize("proposal_type, payload", [
    (ProposalType.STAKING, {"fungible_tokens": TOKENS}),
    (ProposalType.STAKING, {"non_fungible_tokens": TOKENS}),
    (ProposalType.STAKING, {"fungible_tokens": TOKENS, "non_fungible_tokens": TOKENS}),
    (ProposalType.DISTRIBUTION, {"distribution_assets": TOKENS}),
    (ProposalType.BURNING, {"burn_assets": TOKENS}),
    (ProposalType.MARKETPLACE_ACTION, {"marketplace_actions": [{"action": "list", "price": 10}]}),
    (ProposalType.TERMINATION, {"termination_reason": "wind down", "termination_date": TERMINATION_DATE}),
    (ProposalType.EXPANSION, {}),
    (ProposalType.EXPANSION, None),
])
def test_valid_payloads(proposal_type, payload):
    fields = validate_proposal_payload(proposal_type, payload)
    assert fields == (payload or {})


@pytest.mark.parametrize("proposal_type, payload, missing, forbidden", [
    (ProposalType.STAKING, {}, ["fungible_tokens", "non_fungible_tokens"], []),
    (ProposalType.STAKING, {"burn_assets": TOKENS}, ["fungible_tokens", "non_fungible_tokens"], ["burn_assets"]),
    (ProposalType.DISTRIBUTION, {}, ["distribution_assets"], []),
    (ProposalType.DISTRIBUTION, {"distribution_assets": TOKENS, "fungible_tokens": TOKENS}, [], ["fungible_tokens"]),
    (ProposalType.BURNING, {"burn_assets": []}, ["burn_assets"], []),
    (ProposalType.MARKETPLACE_ACTION, {"marketplace_actions": None}, ["marketplace_actions"], []),
    (ProposalType.TERMINATION, {"termination_reason": "wind down"}, ["termination_date"], []),
    (ProposalType.TERMINATION, {"termination_reason": "", "termination_date": TERMINATION_DATE}, ["termination_reason"], []),
    (ProposalType.EXPANSION, {"distribution_assets": TOKENS}, [], ["distribution_assets"]),
    (ProposalType.EXPANSION, {"colour": "red"}, [], ["colour"]),
])
def test_invalid_payloads(proposal_type, payload, missing, forbidden):
    """Both missing and foreign fields are reported in one error"""
    with pytest.raises(InvalidPayloadForType) as exc_info:
        validate_proposal_payload(proposal_type, payload)

    error = exc_info.value
    assert error.code == "INVALID_PAYLOAD_FOR_TYPE"
    assert error.details["proposal_type"] == proposal_type.value
    assert error.details["missing"] == missing
    assert error.details["forbidden"] == forbidden


def test_empty_foreign_fields_are_ignored():
    """Fields of another type count only when populated"""
    fields = validate_proposal_payload(
        ProposalType.BURNING,
        {"burn_assets": TOKENS, "fungible_tokens": [], "termination_reason": None},
    )
    assert fields == {"burn_assets": TOKENS}


def test_create_proposal_requires_locked_vault(db_session, draft_vault):
    with pytest.raises(InvalidTransition) as exc_info:
        create_proposal(db_session, draft_vault.id, "creator-1", ProposalType.EXPANSION, "Grow")

    details = exc_info.value.details
    assert details["entity"] == "vault"
    assert details["from"] == "draft"
    assert details["to"] == "locked"


def test_create_proposal_with_fee_is_unpaid(db_session, locked_vault):
    proposal = create_proposal(
        db_session,
        locked_vault.id,
        "creator-1",
        ProposalType.BURNING,
        "Burn the spare tokens",
        payload={"burn_assets": TOKENS},
    )
    db_session.commit()

    proposal = get_proposal(db_session, proposal.id)
    assert proposal.status == ProposalStatus.UNPAID
    assert proposal.burn_assets == TOKENS
    assert proposal.fungible_tokens is None
    assert proposal.has_custom_vote_options is False


def test_create_proposal_without_fee_is_upcoming(db_session, locked_vault):
    set_setting(db_session, proposal_fee_key(ProposalType.EXPANSION), 0)
    db_session.commit()

    proposal = create_proposal(db_session, locked_vault.id, "creator-1", ProposalType.EXPANSION, "Grow")
    db_session.commit()

    assert proposal.status == ProposalStatus.UPCOMING


def test_create_proposal_invalid_payload_writes_nothing(db_session, locked_vault):
    with pytest.raises(InvalidPayloadForType):
        create_proposal(
            db_session,
            locked_vault.id,
            "creator-1",
            ProposalType.DISTRIBUTION,
            "Distribute",
            payload={"burn_assets": TOKENS},
        )

    db_session.rollback()
    assert get_vault(db_session, locked_vault.id).proposals == []


def test_create_proposal_requires_snapshot(db_session):
    vault = create_vault(db_session, "Unsnapshotted vault")
    add_asset(db_session, vault)
    lock_vault(db_session, vault, snapshot=False)

    with pytest.raises(SnapshotRequired) as exc_info:
        create_proposal(db_session, vault.id, "creator-1", ProposalType.EXPANSION, "Grow")

    assert exc_info.value.details["vault_id"] == str(vault.id)


def test_create_proposal_binds_latest_snapshot(db_session, locked_vault):
    proposal = create_proposal(db_session, locked_vault.id, "creator-1", ProposalType.EXPANSION, "Grow")

    assert proposal.snapshot is not None
    assert proposal.snapshot.vault_id == locked_vault.id


def _distribution_error(db_session, vault, entries):
    with pytest.raises(InvalidPayloadForType) as exc_info:
        create_proposal(
            db_session,
            vault.id,
            "creator-1",
            ProposalType.DISTRIBUTION,
            "Distribute",
            payload={"distribution_assets": entries},
        )
    error = exc_info.value
    assert error.details["missing"] == []
    assert error.details["forbidden"] == []
    return error.details["invalid"]["distribution_assets"]


@pytest.mark.parametrize("entry, reason", [
    ({"id": "lovelace", "amount": 5}, "malformed asset id"),
    ({"amount": 5}, "missing asset id"),
    ("not-a-uuid", "malformed asset id"),
])
def test_distribution_rejects_unresolvable_entries(db_session, locked_vault, entry, reason):
    invalid = _distribution_error(db_session, locked_vault, [entry])

    assert invalid == [{"entry": entry, "reason": reason}]
    db_session.rollback()
    assert get_vault(db_session, locked_vault.id).proposals == []


def test_distribution_rejects_asset_of_another_vault(db_session, locked_vault):
    other = create_vault(db_session, "Other vault")
    foreign = add_asset(db_session, other)
    lock_vault(db_session, other)
    entry = {"id": str(foreign.id), "amount": 1}

    invalid = _distribution_error(db_session, locked_vault, [entry])

    assert invalid == [{"entry": entry, "reason": "not a locked asset of this vault"}]


def test_distribution_rejects_asset_not_locked(db_session, locked_vault):
    pending = add_asset(db_session, locked_vault, asset_name="70656e64696e67")
    locked = list_vault_assets(db_session, locked_vault.id, status=AssetStatus.LOCKED)[0]
    entries = [{"id": str(locked.id)}, {"id": str(pending.id)}]

    invalid = _distribution_error(db_session, locked_vault, entries)

    assert invalid == [{"entry": entries[1], "reason": "not a locked asset of this vault"}]


def test_distribution_rejects_duplicate_asset(db_session, locked_vault):
    asset = list_vault_assets(db_session, locked_vault.id)[0]
    entries = [{"id": str(asset.id)}, {"id": str(asset.id).upper()}]

    invalid = _distribution_error(db_session, locked_vault, entries)

    assert invalid == [{"entry": entries[1], "reason": "duplicate asset id"}]


def test_custom_vote_options_kept_in_order(db_session, locked_vault):
    proposal = create_proposal(
        db_session,
        locked_vault.id,
        "creator-1",
        ProposalType.EXPANSION,
        "Pick a collection",
        vote_options=["Alpha", {"label": "Beta", "order": 5}, "Gamma"],
    )
    db_session.commit()
    db_session.expire_all()

    proposal = get_proposal(db_session, proposal.id)
    assert proposal.has_custom_vote_options is True
    assert [(option.label, option.order) for option in proposal.vote_options] == [
        ("Alpha", 0),
        ("Gamma", 2),
        ("Beta", 5),
    ]


def test_lifecycle_order(db_session, locked_vault):
    """unpaid -> upcoming -> active -> passed -> executed"""
    proposal = create_proposal(db_session, locked_vault.id, "creator-1", ProposalType.EXPANSION, "Grow")

    with pytest.raises(InvalidTransition):
        open_voting(db_session, proposal.id)

    mark_fee_paid(db_session, proposal.id)
    with pytest.raises(InvalidTransition):
        mark_fee_paid(db_session, proposal.id)

    open_voting(db_session, proposal.id)
    assert proposal.start_date is not None

    with pytest.raises(InvalidTransition):
        execute_proposal(db_session, proposal.id)

    cast_vote(db_session, proposal.id, "voter-1", "yes", VOTER_1)
    proposal, result = finalize_proposal(db_session, proposal.id)
    assert proposal.status == ProposalStatus.PASSED
    assert result.is_successful is True
    assert proposal.end_date is not None

    with pytest.raises(InvalidTransition):
        finalize_proposal(db_session, proposal.id)

    execute_proposal(db_session, proposal.id)
    db_session.commit()

    proposal = get_proposal(db_session, proposal.id)
    assert proposal.status == ProposalStatus.EXECUTED
    assert proposal.execution_date is not None


def test_rejected_proposal_cannot_execute(db_session, locked_vault):
    proposal = open_proposal(db_session, locked_vault)
    cast_vote(db_session, proposal.id, "voter-1", "no", VOTER_1)
    proposal, _ = finalize_proposal(db_session, proposal.id)
    assert proposal.status == ProposalStatus.REJECTED

    with pytest.raises(InvalidTransition) as exc_info:
        execute_proposal(db_session, proposal.id)

    assert exc_info.value.details["from"] == "rejected"
    assert exc_info.value.details["to"] == "executed"


def _passed_distribution(db_session, vault):
    asset = list_vault_assets(db_session, vault.id)[0]
    proposal = open_proposal(
        db_session,
        vault,
        ProposalType.DISTRIBUTION,
        payload={"distribution_assets": [{"id": str(asset.id), "amount": 1}]},
    )
    cast_vote(db_session, proposal.id, "voter-1", "yes", VOTER_1)
    finalize_proposal(db_session, proposal.id)
    db_session.commit()
    return proposal, asset


def test_execute_distribution_distributes_assets(db_session, locked_vault):
    record_dispatch_script(db_session, locked_vault.id, {"cbor": "8200581c"})
    proposal, asset = _passed_distribution(db_session, locked_vault)

    execute_proposal(db_session, proposal.id)
    db_session.commit()

    asset = get_asset(db_session, asset.id)
    assert asset.status == AssetStatus.DISTRIBUTED
    assert asset.distributed_at is not None
    assert get_proposal(db_session, proposal.id).status == ProposalStatus.EXECUTED


def test_execute_distribution_leaves_unlisted_assets_locked(db_session):
    vault = create_vault(db_session, "Two asset vault")
    listed = add_asset(db_session, vault, asset_name="6c6973746564")
    unlisted = add_asset(db_session, vault, asset_name="756e6c6973746564")
    lock_vault(db_session, vault)
    record_dispatch_script(db_session, vault.id, {"cbor": "8200581c"})
    proposal = open_proposal(
        db_session,
        vault,
        ProposalType.DISTRIBUTION,
        payload={"distribution_assets": [{"id": str(listed.id), "amount": 1}]},
    )
    cast_vote(db_session, proposal.id, "voter-1", "yes", VOTER_1)
    finalize_proposal(db_session, proposal.id)

    execute_proposal(db_session, proposal.id)
    db_session.commit()

    assert get_asset(db_session, listed.id).status == AssetStatus.DISTRIBUTED
    assert get_asset(db_session, unlisted.id).status == AssetStatus.LOCKED
    assert get_asset(db_session, unlisted.id).distributed_at is None


def test_execute_distribution_requires_dispatch_script(db_session, locked_vault):
    proposal, asset = _passed_distribution(db_session, locked_vault)

    with pytest.raises(InvalidTransition) as exc_info:
        execute_proposal(db_session, proposal.id)

    assert exc_info.value.details["missing_fields"] == ["dispatch_preloaded_script"]
    db_session.rollback()
    assert get_asset(db_session, asset.id).status == AssetStatus.LOCKED
    assert get_proposal(db_session, proposal.id).status == ProposalStatus.PASSED


def test_execute_termination_moves_vault_to_terminating(db_session, locked_vault):
    proposal = open_proposal(
        db_session,
        locked_vault,
        ProposalType.TERMINATION,
        payload={"termination_reason": "wind down", "termination_date": TERMINATION_DATE},
    )
    cast_vote(db_session, proposal.id, "voter-1", "yes", VOTER_1)
    finalize_proposal(db_session, proposal.id)

    execute_proposal(db_session, proposal.id)
    db_session.commit()

    assert get_vault(db_session, locked_vault.id).stage == VaultStage.TERMINATING
    assert get_proposal(db_session, proposal.id).termination_reason == "wind down"
