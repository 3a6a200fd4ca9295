"""Override service - container reads and the whole-container update workflow"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional, Protocol

from ...errors import EntryNotFound, UpstreamError, UpstreamWriteFailed, ValidationFailed
from ...logging_config import log_schedule_conflict, log_validation_error
from ...utils.time_window import to_wire_format, utc_now
from .schemas import (
    Agent,
    AgentResponse,
    ContainerResponse,
    OverrideContainer,
    UpdateAgentRequest,
    ValidationResult,
    WxccContainerPayload,
    WxccOverride,
    WxccOverrideContainer,
)
from .status import safe_is_live, safe_status
from .validator import validate

logger = logging.getLogger(__name__)


class OverridesApi(Protocol):
    async def list_override_containers(self) -> list[WxccOverrideContainer]: ...

    async def get_override_container(self, container_id: str) -> WxccOverrideContainer: ...

    async def replace_override_container(
        self, container_id: str, payload: WxccContainerPayload
    ) -> WxccOverrideContainer: ...


class OverrideService:
    """Service layer for override containers

    WxCC only accepts whole-container writes, so every update is a
    read-modify-write of the full override list. Two concurrent updates to
    the same container race; the later PUT wins.
    """

    def __init__(
        self,
        client: OverridesApi,
        clock: Callable[[], datetime] = utc_now,
        organization_id: Optional[str] = None,
        default_timezone: str = "UTC",
        default_version: int = 0,
    ):
        self.client = client
        self.clock = clock
        self.organization_id = organization_id
        self.default_timezone = default_timezone
        self.default_version = default_version

    # ========================================================================
    # READS
    # ========================================================================

    def to_agent(self, override: WxccOverride, container: WxccOverrideContainer, now: datetime) -> Agent:
        return Agent(
            agentId=override.name,
            containerId=container.id,
            containerName=container.name,
            workingHours=override.workingHours,
            startDateTime=override.startDateTime,
            endDateTime=override.endDateTime,
            status=safe_status(override.workingHours, override.startDateTime, override.endDateTime, now),
        )

    def to_container(self, detail: WxccOverrideContainer, now: datetime) -> OverrideContainer:
        return OverrideContainer(
            id=detail.id,
            name=detail.name,
            description=detail.description,
            createdAt=detail.createdTime,
            updatedAt=detail.lastModifiedTime,
            agents=[self.to_agent(o, detail, now) for o in detail.overrides],
        )

    async def get_all_containers_with_agents(self) -> list[OverrideContainer]:
        """Fetch every container with its agents; containers that fail to load are skipped"""
        now = self.clock()
        containers = []

        for basic in await self.client.list_override_containers():
            try:
                detail = await self.client.get_override_container(basic.id)
            except UpstreamError as e:
                logger.error(f"❌ Failed to fetch container details for {basic.id}: {e}")
                continue
            containers.append(self.to_container(detail, now))
            logger.info(f"📦 Processed container {detail.id} ({len(detail.overrides)} agents)")

        logger.info(f"✅ Fetched {len(containers)} containers with agents")
        return containers

    async def get_container_by_id(self, container_id: str) -> OverrideContainer:
        detail = await self.client.get_override_container(container_id)
        return self.to_container(detail, self.clock())

    def build_container_response(self, container: OverrideContainer, now: datetime) -> ContainerResponse:
        agents = [
            AgentResponse(
                **agent.model_dump(),
                isCurrentlyActive=safe_is_live(
                    agent.workingHours, agent.startDateTime, agent.endDateTime, now
                ),
            )
            for agent in container.agents
        ]
        active = [a for a in agents if a.isCurrentlyActive]
        return ContainerResponse(
            id=container.id,
            name=container.name,
            description=container.description,
            agents=agents,
            activeAgents=active,
            totalAgents=len(agents),
            activeCount=len(active),
        )

    async def get_container_for_frontend(self, container_id: str) -> ContainerResponse:
        container = await self.get_container_by_id(container_id)
        return self.build_container_response(container, self.clock())

    async def get_all_containers_for_frontend(self) -> list[ContainerResponse]:
        containers = await self.get_all_containers_with_agents()
        now = self.clock()
        return [self.build_container_response(c, now) for c in containers]

    async def get_active_agents(self) -> list[AgentResponse]:
        """Agents whose window contains now and whose working hours are on, across all containers"""
        containers = await self.get_all_containers_with_agents()
        now = self.clock()

        active = []
        for container in containers:
            for agent in container.agents:
                if safe_is_live(agent.workingHours, agent.startDateTime, agent.endDateTime, now):
                    active.append(AgentResponse(**agent.model_dump(), isCurrentlyActive=True))

        logger.info(f"🟢 Found {len(active)} active agents")
        return active

    # ========================================================================
    # VALIDATION
    # ========================================================================

    async def validate_schedule_conflict_for_override(
        self, override_name: str, container_id: str, update: UpdateAgentRequest
    ) -> ValidationResult:
        """Validate a prospective window for an override against the rest of its container"""
        container = await self.client.get_override_container(container_id)
        result = validate(container.overrides, override_name, update, self.clock())
        self._log_conflicts(result, container_id)
        return result

    def _log_conflicts(self, result: ValidationResult, container_id: str) -> None:
        for error in result.errors:
            if error.conflictingAgentId:
                log_schedule_conflict(error.agentId, error.conflictingAgentId, container_id)

    # ========================================================================
    # UPDATE WORKFLOW
    # ========================================================================

    def build_container_payload(
        self, container: WxccOverrideContainer, overrides: list[WxccOverride], now: datetime
    ) -> WxccContainerPayload:
        """Complete container object for the PUT; WxCC rejects partial bodies"""
        return WxccContainerPayload(
            id=container.id,
            organizationId=container.organizationId or self.organization_id,
            version=container.version if container.version is not None else self.default_version,
            name=container.name,
            description=container.description,
            timezone=container.timezone or self.default_timezone,
            createdTime=container.createdTime,
            lastModifiedTime=to_wire_format(now),
            overrides=overrides,
        )

    async def update_agent_schedule(
        self, container_id: str, agent_id: str, update: UpdateAgentRequest
    ) -> Agent:
        """
        Update one override's schedule via whole-container replacement

        Steps:
        1. GET the full container
        2. Find the override by name (agentId is override.name)
        3. Validate against the other overrides in the container
        4-6. Overlay the new fields, normalize dates to WxCC format, splice in place
        7. Rebuild the complete container object
        8. PUT it and return the override as WxCC stored it

        Raises:
            EntryNotFound: agent_id is not in the container (nothing is written)
            ValidationFailed: with every collected rule violation
            UpstreamReadFailed / UpstreamWriteFailed: WxCC call failed
        """
        logger.info(f"✏️ Updating agent {agent_id} in container {container_id}")

        container = await self.client.get_override_container(container_id)

        index = container.find_override(agent_id)
        if index is None:
            logger.warning(f"⚠️ Agent {agent_id} not found in container {container_id}")
            raise EntryNotFound(container_id, agent_id)

        now = self.clock()
        result = validate(container.overrides, agent_id, update, now)
        if not result.isValid:
            self._log_conflicts(result, container_id)
            log_validation_error("update_agent_schedule", result.errors)
            raise ValidationFailed(result.errors)

        updated = container.overrides[index].model_copy(
            update={
                "workingHours": update.workingHours,
                "startDateTime": to_wire_format(update.startDateTime),
                "endDateTime": to_wire_format(update.endDateTime),
            }
        )
        overrides = list(container.overrides)
        overrides[index] = updated

        payload = self.build_container_payload(container, overrides, now)
        stored = await self.client.replace_override_container(container_id, payload)

        stored_index = stored.find_override(agent_id)
        if stored_index is None:
            logger.error(f"❌ WxCC response for container {container_id} is missing agent {agent_id}")
            raise UpstreamWriteFailed(
                f"Updated container {container_id} returned without agent {agent_id}"
            )

        agent = self.to_agent(stored.overrides[stored_index], stored, now)
        logger.info(f"✅ Updated agent {agent_id} in container {container_id} (status: {agent.status.value})")
        return agent
