"""
vaultdao - Vault lifecycle, asset ledger and governance core
"""

__version__ = "0.1.0"
