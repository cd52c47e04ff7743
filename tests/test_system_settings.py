"""
Tests for the system settings document and governance fees
"""

from vaultdao.core.governance.models import ProposalType
from vaultdao.core.system_settings.models import SystemSettings, SYSTEM_SETTINGS_ID
from vaultdao.services.system_settings_service import (
    DEFAULT_SYSTEM_SETTINGS,
    VOTING_FEE_KEY,
    delete_setting,
    ensure_system_settings,
    get_all_settings,
    get_governance_fee,
    get_setting,
    get_voting_fee,
    proposal_fee_key,
    set_setting,
    update_settings,
)
from scripts.seed_system_settings import seed_system_settings


def test_defaults_without_row(db_session):
    """Reads fall back to defaults when the settings row does not exist"""
    assert get_all_settings(db_session) == DEFAULT_SYSTEM_SETTINGS
    assert get_setting(db_session, "governance_fee_proposal_staking") is None
    assert get_setting(db_session, "missing", default=3) == 3
    assert get_governance_fee(db_session, ProposalType.STAKING) == 5_000_000
    assert get_governance_fee(db_session, ProposalType.TERMINATION) == 10_000_000
    assert get_voting_fee(db_session) == 0


def test_ensure_is_idempotent(db_session):
    first = ensure_system_settings(db_session)
    db_session.commit()
    set_setting(db_session, VOTING_FEE_KEY, 250_000)
    db_session.commit()

    second = ensure_system_settings(db_session)

    assert first.id == second.id == SYSTEM_SETTINGS_ID
    assert second.data[VOTING_FEE_KEY] == 250_000
    assert db_session.query(SystemSettings).count() == 1


def test_update_merges_keys(db_session):
    """Keys not in the update keep their stored value"""
    update_settings(db_session, {"governance_fee_proposal_burning": 1, "maintenance_banner": "soon"})
    db_session.commit()
    update_settings(db_session, {"governance_fee_proposal_staking": 2})
    db_session.commit()
    db_session.expire_all()

    assert get_setting(db_session, "governance_fee_proposal_burning") == 1
    assert get_setting(db_session, "governance_fee_proposal_staking") == 2
    assert get_setting(db_session, "maintenance_banner") == "soon"
    assert get_setting(db_session, "governance_fee_proposal_expansion") == 10_000_000


def test_get_all_ignores_unknown_keys(db_session):
    set_setting(db_session, "maintenance_banner", "soon")
    set_setting(db_session, proposal_fee_key(ProposalType.DISTRIBUTION), 7)
    db_session.commit()

    settings = get_all_settings(db_session)

    assert "maintenance_banner" not in settings
    assert settings["governance_fee_proposal_distribution"] == 7
    assert set(settings) == set(DEFAULT_SYSTEM_SETTINGS)


def test_delete_setting(db_session):
    set_setting(db_session, VOTING_FEE_KEY, 100)
    db_session.commit()

    assert delete_setting(db_session, VOTING_FEE_KEY) is True
    db_session.commit()
    assert delete_setting(db_session, VOTING_FEE_KEY) is False

    # Default applies again once the stored value is gone
    assert get_voting_fee(db_session) == 0
    assert get_governance_fee(db_session, ProposalType.STAKING) == 5_000_000


def test_delete_setting_without_row(db_session):
    assert delete_setting(db_session, VOTING_FEE_KEY) is False


def test_seed_adds_only_missing_keys(db_session):
    db_session.add(SystemSettings(id=SYSTEM_SETTINGS_ID, data={"governance_fee_proposal_staking": 1}))
    db_session.commit()

    added = seed_system_settings(db_session)
    db_session.commit()

    assert "governance_fee_proposal_staking" not in added
    assert set(added) == set(DEFAULT_SYSTEM_SETTINGS) - {"governance_fee_proposal_staking"}
    assert get_setting(db_session, "governance_fee_proposal_staking") == 1

    assert seed_system_settings(db_session) == {}


def test_stored_zero_is_not_replaced_by_default(db_session):
    """A falsy stored value wins over a non-matching default; other keys are untouched"""
    set_setting(db_session, "governance_fee_proposal_burning", 3_000_001)
    set_setting(db_session, VOTING_FEE_KEY, 0)
    db_session.commit()
    db_session.expire_all()

    assert get_setting(db_session, "governance_fee_voting", -1) == 0
    assert get_setting(db_session, "governance_fee_proposal_burning", -1) == 3_000_001
    assert get_voting_fee(db_session) == 0
