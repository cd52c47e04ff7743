"""
System settings model - Singleton key/value document
"""

import uuid
from sqlalchemy import Column
from vaultdao.core.common.base_model import BaseModel
from vaultdao.infrastructure.database import JSONType

# Fixed primary key of the single settings row
SYSTEM_SETTINGS_ID = uuid.UUID("470ba027-d444-404d-a377-b41257d0efe7")


class SystemSettings(BaseModel):
    """
    SystemSettings model - One row holding every tunable as a JSON document

    Writes go key by key through services.system_settings_service; the
    document is never replaced as a whole.
    """

    __tablename__ = "system_settings"

    data = Column(JSONType, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<SystemSettings(id={self.id}, keys={sorted((self.data or {}).keys())})>"
