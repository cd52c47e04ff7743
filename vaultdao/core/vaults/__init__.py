"""
Vault models
"""

from vaultdao.core.vaults.models import Vault, VaultStage

__all__ = ["Vault", "VaultStage"]
