"""
Vault models - Pooled-asset vaults and their lifecycle stage
"""

from sqlalchemy import Column, String, Enum as SQLEnum, Numeric, Text
from sqlalchemy.orm import relationship
import enum
from vaultdao.core.common.base_model import BaseModel, enum_values
from vaultdao.infrastructure.database import JSONType


class VaultStage(str, enum.Enum):
    """Vault lifecycle stage"""
    DRAFT = "draft"
    PUBLISHED = "published"
    CONTRIBUTION = "contribution"
    ACQUIRE = "acquire"
    LOCKED = "locked"  # Governance phase: proposals and voting
    TERMINATING = "terminating"
    TERMINATED = "terminated"
    FAILED = "failed"  # Contribution/acquire thresholds not met


class Vault(BaseModel):
    """
    Vault model - Aggregate record for a tokenized vault

    The JSON configuration columns stay NULL until the matching on-chain
    action completes:
    - apply_params_result: contract parameters applied at publication
    - acquire_multiplier / ada_distribution: computed when the acquire window closes
    - dispatch_preloaded_script: dispatch script used by distributions

    Vaults are never hard-deleted; `stage` carries the lifecycle.
    """

    __tablename__ = "vaults"

    name = Column(String(255), nullable=False)
    stage = Column(
        SQLEnum(VaultStage, name="vault_stage", create_constraint=True, values_callable=enum_values),
        nullable=False,
        default=VaultStage.DRAFT,
        index=True,
    )

    acquire_multiplier = Column(JSONType, nullable=True)  # [[policy_id, asset_name | null, multiplier], ...]
    ada_distribution = Column(JSONType, nullable=True)  # [[policy_id, asset_name, lovelace], ...]
    apply_params_result = Column(JSONType, nullable=True)
    dispatch_preloaded_script = Column(JSONType, nullable=True)

    # Governance thresholds in percent (NULL = settings default)
    execution_threshold = Column(Numeric(5, 2), nullable=True)
    participation_threshold = Column(Numeric(5, 2), nullable=True)

    failure_reason = Column(Text, nullable=True)

    # Relationships
    assets = relationship("Asset", back_populates="vault")
    proposals = relationship("Proposal", back_populates="vault")

    def __repr__(self) -> str:
        return f"<Vault(id={self.id}, name={self.name}, stage={self.stage})>"
