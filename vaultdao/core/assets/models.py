"""
Asset models - Assets contributed to or acquired by a vault
"""

from decimal import Decimal
from sqlalchemy import Column, String, ForeignKey, Enum as SQLEnum, Numeric, DateTime, Index, Uuid, inspect
from sqlalchemy.orm import relationship, validates
import enum
from vaultdao.core.common.base_model import BaseModel, enum_values
from vaultdao.core.common.errors import ImmutableField
from vaultdao.infrastructure.database import JSONType


class AssetStatus(str, enum.Enum):
    """Asset status enum"""
    PENDING = "pending"  # Contribution/investment recorded, not yet locked in the vault
    LOCKED = "locked"
    RELEASED = "released"  # Returned to its owner (vault failed or terminated)
    DISTRIBUTED = "distributed"  # Paid out by an executed distribution proposal


class AssetOriginType(str, enum.Enum):
    """How the asset entered the vault"""
    INVESTED = "invested"
    CONTRIBUTED = "contributed"


class AssetType(str, enum.Enum):
    """Asset kind"""
    NFT = "nft"
    FT = "ft"
    ADA = "ada"


class Asset(BaseModel):
    """
    Asset model - One asset position held by a vault

    status moves only pending -> locked -> released | distributed
    (see services.asset_service). origin_type is written once, at creation.
    """

    __tablename__ = "assets"

    vault_id = Column(Uuid(as_uuid=True), ForeignKey("vaults.id", name="fk_assets_vault_id"), nullable=False, index=True)
    policy_id = Column(String(64), nullable=False)
    asset_id = Column(String(128), nullable=False)  # Asset name in hex
    type = Column(SQLEnum(AssetType, name="assets_type_enum", create_constraint=True, values_callable=enum_values), nullable=False, default=AssetType.NFT)
    quantity = Column(Numeric(20, 2), nullable=False, default=Decimal("1"))

    status = Column(
        SQLEnum(AssetStatus, name="assets_status_enum", create_constraint=True, values_callable=enum_values),
        nullable=False,
        default=AssetStatus.PENDING,
        server_default=AssetStatus.PENDING.value,
        index=True,
    )
    origin_type = Column(
        SQLEnum(AssetOriginType, name="assets_origin_type_enum", create_constraint=True, values_callable=enum_values),
        nullable=True,
    )

    locked_at = Column(DateTime(timezone=True), nullable=True)
    released_at = Column(DateTime(timezone=True), nullable=True)
    distributed_at = Column(DateTime(timezone=True), nullable=True)

    added_by = Column(String(255), nullable=True)  # Contributor/investor id
    asset_metadata = Column("metadata", JSONType, nullable=True)  # DB column: metadata

    # Relationships
    vault = relationship("Vault", back_populates="assets")

    __table_args__ = (
        Index("ix_assets_vault_status", "vault_id", "status"),
    )

    @validates("origin_type")
    def _guard_origin_type(self, key, value):
        # Persisted rows already carry their origin; new rows may set it freely
        if inspect(self).has_identity:
            raise ImmutableField("asset", self.id, key)
        return value

    def __repr__(self) -> str:
        return f"<Asset(id={self.id}, vault_id={self.vault_id}, status={self.status}, origin_type={self.origin_type})>"
