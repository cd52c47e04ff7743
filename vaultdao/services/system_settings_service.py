"""
System settings service - Key-wise access to the singleton settings document
"""

import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
from vaultdao.core.system_settings.models import SystemSettings, SYSTEM_SETTINGS_ID
from vaultdao.core.governance.models import ProposalType

logger = logging.getLogger(__name__)

VOTING_FEE_KEY = "governance_fee_voting"

# Governance fees in lovelace
GOVERNANCE_FEE_DEFAULTS: Dict[str, int] = {
    "governance_fee_proposal_staking": 5_000_000,
    "governance_fee_proposal_distribution": 5_000_000,
    "governance_fee_proposal_termination": 10_000_000,
    "governance_fee_proposal_burning": 3_000_000,
    "governance_fee_proposal_marketplace_action": 5_000_000,
    "governance_fee_proposal_expansion": 10_000_000,
    VOTING_FEE_KEY: 0,
}

DEFAULT_SYSTEM_SETTINGS: Dict[str, Any] = dict(GOVERNANCE_FEE_DEFAULTS)


def proposal_fee_key(proposal_type: ProposalType) -> str:
    return f"governance_fee_proposal_{ProposalType(proposal_type).value}"


def _load_settings_row(db: Session, for_update: bool = False) -> Optional[SystemSettings]:
    stmt = select(SystemSettings).where(SystemSettings.id == SYSTEM_SETTINGS_ID)
    if for_update:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def ensure_system_settings(db: Session) -> SystemSettings:
    """
    Get the settings row, creating it with the defaults if missing.

    Idempotent: an existing row is returned untouched.

    NO COMMIT - caller must commit.
    """
    row = _load_settings_row(db, for_update=True)
    if row:
        return row

    row = SystemSettings(id=SYSTEM_SETTINGS_ID, data=dict(DEFAULT_SYSTEM_SETTINGS))
    db.add(row)
    db.flush()
    logger.info("System settings initialized", extra={"keys": sorted(row.data.keys())})
    return row


def get_setting(db: Session, key: str, default: Any = None) -> Any:
    """Get one setting. Unknown key (or no settings row) returns the caller's default."""
    row = _load_settings_row(db)
    if row is None or not row.data:
        return default
    return row.data.get(key, default)


def get_all_settings(db: Session) -> Dict[str, Any]:
    """
    Get known settings: defaults overlaid with stored values.

    Stored keys without a default are not included.
    """
    row = _load_settings_row(db)
    stored = (row.data if row else None) or {}
    return {key: stored.get(key, default) for key, default in DEFAULT_SYSTEM_SETTINGS.items()}


def update_settings(db: Session, values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge values into the settings document, key by key.

    Keys not present in `values` keep their stored value.

    NO COMMIT - caller must commit.

    Returns:
        The full stored document after the merge
    """
    row = ensure_system_settings(db)
    merged = dict(row.data or {})
    merged.update(values)
    # New dict so the JSON column is flagged dirty
    row.data = merged
    db.flush()

    logger.info("System settings updated", extra={"keys": sorted(values.keys())})
    return dict(row.data)


def set_setting(db: Session, key: str, value: Any) -> Dict[str, Any]:
    """Set a single setting. NO COMMIT - caller must commit."""
    return update_settings(db, {key: value})


def delete_setting(db: Session, key: str) -> bool:
    """
    Remove a single key from the settings document.

    NO COMMIT - caller must commit.

    Returns:
        True if the key existed
    """
    row = _load_settings_row(db, for_update=True)
    if row is None or key not in (row.data or {}):
        return False

    remaining = {k: v for k, v in row.data.items() if k != key}
    row.data = remaining
    db.flush()

    logger.info("System setting deleted", extra={"key": key})
    return True


def get_governance_fee(db: Session, proposal_type: ProposalType) -> int:
    """Governance fee (lovelace) for creating a proposal of this type"""
    key = proposal_fee_key(proposal_type)
    return int(get_setting(db, key, GOVERNANCE_FEE_DEFAULTS[key]))


def get_voting_fee(db: Session) -> int:
    """Governance fee (lovelace) for casting a vote"""
    return int(get_setting(db, VOTING_FEE_KEY, GOVERNANCE_FEE_DEFAULTS[VOTING_FEE_KEY]))
