"""
Claim models - Payouts owed to vault participants
"""

from sqlalchemy import Column, String, ForeignKey, Enum as SQLEnum, BigInteger, Numeric, Text, Uuid
import enum
from vaultdao.core.common.base_model import BaseModel, enum_values
from vaultdao.infrastructure.database import JSONType


class ClaimType(str, enum.Enum):
    """Claim type enum"""
    LP = "lp"
    CONTRIBUTOR = "contributor"
    ACQUIRER = "acquirer"
    L4VA = "l4va"
    FINAL_DISTRIBUTION = "final_distribution"
    CANCELLATION = "cancellation"
    DISTRIBUTION = "distribution"
    TERMINATION = "termination"
    EXPANSION = "expansion"


class ClaimStatus(str, enum.Enum):
    """Claim status enum"""
    AVAILABLE = "available"
    PENDING = "pending"
    CLAIMED = "claimed"
    FAILED = "failed"


class Claim(BaseModel):
    """
    Claim model - An amount a user can claim from a vault

    Legacy rows kept the ADA amount and multiplier inside metadata
    (keys adaAmount / multiplier). services.claim_service.normalize_claim
    moves them into lovelace_amount / multiplier.
    """

    __tablename__ = "claims"

    user_id = Column(String(255), nullable=True, index=True)
    vault_id = Column(Uuid(as_uuid=True), ForeignKey("vaults.id", name="fk_claims_vault_id"), nullable=True, index=True)

    type = Column(SQLEnum(ClaimType, name="claims_type_enum", create_constraint=True, values_callable=enum_values), nullable=False)
    status = Column(
        SQLEnum(ClaimStatus, name="claims_status_enum", create_constraint=True, values_callable=enum_values),
        nullable=False,
        default=ClaimStatus.AVAILABLE,
        server_default=ClaimStatus.AVAILABLE.value,
    )

    amount = Column(BigInteger, nullable=False, default=0)  # VT tokens
    lovelace_amount = Column(BigInteger, nullable=True)
    multiplier = Column(Numeric(30, 10), nullable=True)
    description = Column(Text, nullable=True)
    claim_metadata = Column("metadata", JSONType, nullable=True)  # DB column: metadata

    def __repr__(self) -> str:
        return f"<Claim(id={self.id}, type={self.type}, status={self.status}, lovelace_amount={self.lovelace_amount})>"
