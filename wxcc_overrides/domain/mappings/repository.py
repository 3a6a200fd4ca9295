"""Mapping repository - Database operations for override name mappings"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import AgentMapping

logger = logging.getLogger(__name__)


class MappingRepository:
    """Repository for mapping database operations"""

    @staticmethod
    def get_mapping(db: Session, override_name: str) -> Optional[AgentMapping]:
        """Get the mapping for an override name"""
        return db.query(AgentMapping).filter(AgentMapping.override_name == override_name).first()

    @staticmethod
    def get_all_mappings(db: Session) -> list[AgentMapping]:
        """Get all mappings ordered by override name"""
        return db.query(AgentMapping).order_by(AgentMapping.override_name).all()

    @staticmethod
    def upsert_mapping(db: Session, override_name: str, agent_name: str) -> AgentMapping:
        """Create a mapping, or rename an existing one keeping its working hours flag"""
        mapping = MappingRepository.get_mapping(db, override_name)
        if mapping is None:
            mapping = AgentMapping(
                override_name=override_name, agent_name=agent_name, working_hours_active=False
            )
            db.add(mapping)
        else:
            mapping.agent_name = agent_name

        db.commit()
        db.refresh(mapping)
        return mapping

    @staticmethod
    def update_working_hours(
        db: Session, override_name: str, working_hours_active: bool
    ) -> Optional[AgentMapping]:
        """Set the working hours flag; None if there is no mapping"""
        mapping = MappingRepository.get_mapping(db, override_name)
        if mapping is None:
            return None

        mapping.working_hours_active = working_hours_active
        db.commit()
        db.refresh(mapping)
        return mapping

    @staticmethod
    def cleanup_orphaned_mappings(db: Session, active_override_names: list[str]) -> int:
        """Delete mappings whose override no longer exists in WxCC. Returns deleted count"""
        if not active_override_names:
            logger.warning("⚠️ No active override names provided for cleanup")
            return 0

        deleted = (
            db.query(AgentMapping)
            .filter(AgentMapping.override_name.notin_(active_override_names))
            .delete(synchronize_session=False)
        )
        db.commit()

        if deleted:
            logger.info(f"🧹 Cleaned up {deleted} orphaned mappings")
        return deleted

    @staticmethod
    def get_active_working_hours_mappings(db: Session) -> list[AgentMapping]:
        """Get mappings with working hours switched on"""
        return (
            db.query(AgentMapping)
            .filter(AgentMapping.working_hours_active.is_(True))
            .order_by(AgentMapping.override_name)
            .all()
        )
