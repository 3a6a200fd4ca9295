"""Mapping service - Business logic for override name mappings"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import MappingNotFound, OverrideNotFound, ScheduleConflict
from ...models import AgentMapping
from ..overrides.schemas import Agent, ScheduleValidationError, UpdateAgentRequest, ValidationResult
from ..overrides.service import OverrideService
from .repository import MappingRepository
from .schemas import MappingRequest, OverrideMappingResponse, WorkingHoursToggleRequest

logger = logging.getLogger(__name__)


class MappingService:
    """Service layer for mapping business logic

    WxCC stays the system of record for overrides; the local table only
    holds display names and a working hours flag keyed by override name.
    """

    def __init__(self, db: Session, override_service: OverrideService):
        self.db = db
        self.repo = MappingRepository()
        self.overrides = override_service

    def _to_response(self, override_name: str, mapping: Optional[AgentMapping], agent: Optional[Agent]):
        return OverrideMappingResponse(
            overrideName=override_name,
            agentName=mapping.agent_name if mapping else None,
            workingHoursActive=bool(mapping.working_hours_active) if mapping else False,
            isMapped=mapping is not None,
            startDateTime=agent.startDateTime if agent else None,
            endDateTime=agent.endDateTime if agent else None,
            containerId=agent.containerId if agent else None,
            containerName=agent.containerName if agent else None,
        )

    async def _agents_by_override_name(self) -> dict[str, Agent]:
        agents: dict[str, Agent] = {}
        for container in await self.overrides.get_all_containers_with_agents():
            for agent in container.agents:
                agents[agent.agentId] = agent
        return agents

    async def find_agent(self, override_name: str) -> Optional[Agent]:
        """WxCC override for this name, searching every container"""
        return (await self._agents_by_override_name()).get(override_name)

    async def get_all_mappings(self) -> list[OverrideMappingResponse]:
        """Every WxCC override joined with its mapping; drops mappings for vanished overrides"""
        agents = await self._agents_by_override_name()
        mappings = {m.override_name: m for m in self.repo.get_all_mappings(self.db)}

        responses = [
            self._to_response(name, mappings.get(name), agent) for name, agent in agents.items()
        ]

        if agents:
            cleaned = self.repo.cleanup_orphaned_mappings(self.db, list(agents))
            if cleaned:
                logger.info(f"🧹 Cleaned up {cleaned} orphaned mappings during fetch")

        logger.info(
            f"✅ Fetched {len(responses)} overrides, {sum(r.isMapped for r in responses)} mapped"
        )
        return sorted(responses, key=lambda r: r.overrideName)

    def get_active_working_hours_mappings(self) -> list[OverrideMappingResponse]:
        return [
            self._to_response(m.override_name, m, None)
            for m in self.repo.get_active_working_hours_mappings(self.db)
        ]

    async def create_or_update_mapping(self, data: MappingRequest) -> OverrideMappingResponse:
        """Map an override name to an agent name; the override must exist in WxCC"""
        logger.info(f"📥 Mapping override {data.overrideName} -> {data.agentName}")

        agent = await self.find_agent(data.overrideName)
        if agent is None:
            logger.warning(f"⚠️ Override {data.overrideName} not found in WxCC")
            raise OverrideNotFound(data.overrideName)

        existed = self.repo.get_mapping(self.db, data.overrideName) is not None
        mapping = self.repo.upsert_mapping(self.db, data.overrideName, data.agentName)
        logger.info(f"✅ Mapping {'updated' if existed else 'created'} for {data.overrideName}")

        return self._to_response(data.overrideName, mapping, agent)

    async def validate_working_hours_activation(
        self, override_name: str, agent: Optional[Agent]
    ) -> ValidationResult:
        """Check the override's current window against the other engaged overrides in its container"""
        if agent is None:
            return ValidationResult(
                isValid=False,
                errors=[
                    ScheduleValidationError(
                        field="overrideName",
                        message=f"Override '{override_name}' not found in WxCC",
                        agentId=override_name,
                    )
                ],
            )

        candidate = UpdateAgentRequest(
            workingHours=True, startDateTime=agent.startDateTime, endDateTime=agent.endDateTime
        )
        return await self.overrides.validate_schedule_conflict_for_override(
            override_name, agent.containerId, candidate
        )

    async def update_working_hours(self, data: WorkingHoursToggleRequest) -> OverrideMappingResponse:
        """Toggle the working hours flag; switching on is rejected if it would conflict"""
        mapping = self.repo.get_mapping(self.db, data.overrideName)
        if mapping is None:
            logger.error(f"❌ Working hours toggle failed - no mapping for {data.overrideName}")
            raise MappingNotFound(data.overrideName)

        before = mapping.working_hours_active
        logger.info(
            f"🔄 Working hours for {data.overrideName}: {before} -> {data.workingHoursActive}"
        )

        agent = await self.find_agent(data.overrideName)
        if data.workingHoursActive:
            result = await self.validate_working_hours_activation(data.overrideName, agent)
            if not result.isValid:
                logger.error(
                    f"❌ Working hours validation failed for {data.overrideName}: "
                    f"{[e.message for e in result.errors]}"
                )
                raise ScheduleConflict(result.errors)

        updated = self.repo.update_working_hours(self.db, data.overrideName, data.workingHoursActive)
        if updated is None:
            raise MappingNotFound(data.overrideName)

        logger.info(f"✅ Working hours {'activated' if updated.working_hours_active else 'deactivated'} for {data.overrideName}")
        return self._to_response(data.overrideName, updated, agent)
