"""
Claim models
"""

from vaultdao.core.claims.models import Claim, ClaimType, ClaimStatus

__all__ = ["Claim", "ClaimType", "ClaimStatus"]
