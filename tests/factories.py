"""
Test factories - build vaults, assets and proposals through the services
"""

from sqlalchemy.orm import Session

from vaultdao.core.vaults.models import Vault, VaultStage
from vaultdao.core.assets.models import Asset, AssetOriginType, AssetType
from vaultdao.core.governance.models import Proposal, ProposalStatus, ProposalType, Snapshot
from vaultdao.services.asset_service import create_asset
from vaultdao.services.proposal_service import create_proposal, mark_fee_paid, open_voting
from vaultdao.services.snapshot_service import create_snapshot
from vaultdao.services.vault_service import (
    advance_vault_stage,
    record_acquire_results,
    record_apply_params_result,
)

ACQUIRE_MULTIPLIER = [["f0ff48bbb7bbe9d59a40f1ce90e9e9d0ff5002ec48f232b49ca0fb9a", None, 12]]
ADA_DISTRIBUTION = [["f0ff48bbb7bbe9d59a40f1ce90e9e9d0ff5002ec48f232b49ca0fb9a", "", 2500000]]
POLICY_ID = "d5e6bf0500378d4f0da4e8dde6becec7621cd8cbf5cbb9b87013d4cc"
VAULT_TOKEN = POLICY_ID + "5654"

VOTER_1 = "addr_test1qz_voter1"
VOTER_2 = "addr_test1qz_voter2"
VOTER_3 = "addr_test1qz_voter3"
SNAPSHOT_BALANCES = {VOTER_1: 100, VOTER_2: 100, VOTER_3: 100}


def add_asset(db: Session, vault: Vault, asset_name: str = "537061636542756433303432", **kwargs) -> Asset:
    """Record an NFT in a vault (pending)"""
    kwargs.setdefault("origin_type", AssetOriginType.CONTRIBUTED)
    kwargs.setdefault("type", AssetType.NFT)
    return create_asset(db, vault.id, POLICY_ID, asset_name, **kwargs)


def take_snapshot(db: Session, vault: Vault, balances=None) -> Snapshot:
    """Record vault token balances (defaults to three voters holding 100 each)"""
    return create_snapshot(db, vault.id, VAULT_TOKEN, SNAPSHOT_BALANCES if balances is None else balances)


def lock_vault(db: Session, vault: Vault, snapshot: bool = True) -> Vault:
    """Drive a draft vault through its stages up to locked, then snapshot its balances"""
    record_apply_params_result(db, vault.id, {"script_hash": "a1b2c3", "params": [1, 2]})
    advance_vault_stage(db, vault.id, VaultStage.PUBLISHED)
    advance_vault_stage(db, vault.id, VaultStage.CONTRIBUTION)
    advance_vault_stage(db, vault.id, VaultStage.ACQUIRE)
    record_acquire_results(db, vault.id, ACQUIRE_MULTIPLIER, ADA_DISTRIBUTION)
    vault = advance_vault_stage(db, vault.id, VaultStage.LOCKED)
    if snapshot:
        take_snapshot(db, vault)
    return vault


def open_proposal(
    db: Session,
    vault: Vault,
    proposal_type: ProposalType = ProposalType.EXPANSION,
    payload=None,
    vote_options=None,
    abstain: bool = False,
    end_date=None,
) -> Proposal:
    """Create a proposal and take it to active (voting open)"""
    proposal = create_proposal(
        db,
        vault_id=vault.id,
        creator_id="creator-1",
        proposal_type=proposal_type,
        title="Test proposal",
        payload=payload,
        vote_options=vote_options,
        abstain=abstain,
        end_date=end_date,
    )
    if proposal.status == ProposalStatus.UNPAID:
        mark_fee_paid(db, proposal.id)
    return open_voting(db, proposal.id)
