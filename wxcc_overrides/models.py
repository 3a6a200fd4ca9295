from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from .database import Base


class AgentMapping(Base):
    """Operator-chosen display name for an opaque WxCC override name"""

    __tablename__ = "wxcc_agent_mappings"

    id = Column(Integer, primary_key=True, index=True)
    override_name = Column(String(255), unique=True, index=True, nullable=False)  # override.name in WxCC
    agent_name = Column(String(255), nullable=False)
    # Locally tracked engaged flag; flipping it on is checked for schedule conflicts
    working_hours_active = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
