"""
Models registry for Alembic - Import all models here to ensure Base.metadata is complete

Import order follows foreign key dependencies:
1. Vault (no foreign keys)
2. Asset, Snapshot, Proposal, Claim (depend on Vault)
3. VoteOption, Vote (depend on Proposal)
4. SystemSettings (standalone)
"""

# Import Base first
from vaultdao.infrastructure.database import Base

# 1. Vault
from vaultdao.core.vaults.models import Vault, VaultStage

# 2. Vault children
from vaultdao.core.assets.models import Asset, AssetStatus, AssetOriginType, AssetType
from vaultdao.core.governance.models import (
    Snapshot, Proposal, ProposalType, ProposalStatus,
    VoteOption, Vote, VoteChoice,
)
from vaultdao.core.claims.models import Claim, ClaimType, ClaimStatus

# 3. Settings
from vaultdao.core.system_settings.models import SystemSettings, SYSTEM_SETTINGS_ID

__all__ = [
    "Base",
    "Vault",
    "VaultStage",
    "Asset",
    "AssetStatus",
    "AssetOriginType",
    "AssetType",
    "Snapshot",
    "Proposal",
    "ProposalType",
    "ProposalStatus",
    "VoteOption",
    "Vote",
    "VoteChoice",
    "Claim",
    "ClaimType",
    "ClaimStatus",
    "SystemSettings",
    "SYSTEM_SETTINGS_ID",
]
