"""
Services layer - Vault lifecycle, asset ledger, snapshots, governance and claims logic
"""

from vaultdao.services.asset_service import (
    create_asset,
    transition_asset,
    update_asset,
)
from vaultdao.services.vault_service import (
    create_vault,
    advance_vault_stage,
    fail_vault,
    record_acquire_results,
)
from vaultdao.services.proposal_service import (
    validate_proposal_payload,
    create_proposal,
    finalize_proposal,
    execute_proposal,
)
from vaultdao.services.snapshot_service import create_snapshot, get_latest_snapshot
from vaultdao.services.vote_service import cast_vote, tally, calculate_result
from vaultdao.services.claim_service import normalize_claim, normalize_claims
from vaultdao.services.system_settings_service import get_setting, update_settings

__all__ = [
    # Assets
    "create_asset",
    "transition_asset",
    "update_asset",
    # Vaults
    "create_vault",
    "advance_vault_stage",
    "fail_vault",
    "record_acquire_results",
    # Proposals
    "validate_proposal_payload",
    "create_proposal",
    "finalize_proposal",
    "execute_proposal",
    # Snapshots
    "create_snapshot",
    "get_latest_snapshot",
    # Votes
    "cast_vote",
    "tally",
    "calculate_result",
    # Claims
    "normalize_claim",
    "normalize_claims",
    # System settings
    "get_setting",
    "update_settings",
]
