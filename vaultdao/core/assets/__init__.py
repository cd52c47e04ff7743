"""
Asset models
"""

from vaultdao.core.assets.models import Asset, AssetStatus, AssetOriginType, AssetType

__all__ = ["Asset", "AssetStatus", "AssetOriginType", "AssetType"]
