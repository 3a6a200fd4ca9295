"""
In-memory stand-in for the WxCC Overrides API

Used when WXCC_MOCK_MODE=true so the console can be demoed without a WxCC
tenant. Demo windows are laid out relative to the "now" passed in, so the
console shows a mix of live, pending, elapsed and disengaged agents.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..domain.overrides.schemas import WxccContainerPayload, WxccOverride, WxccOverrideContainer
from ..errors import UpstreamReadFailed, UpstreamWriteFailed
from ..utils.time_window import to_wire_format

logger = logging.getLogger(__name__)


def _window(now: datetime, start_minutes: int, end_minutes: int) -> tuple[str, str]:
    return (
        to_wire_format(now + timedelta(minutes=start_minutes)),
        to_wire_format(now + timedelta(minutes=end_minutes)),
    )


def build_demo_containers(now: datetime, organization_id: str = "demo-org") -> list[WxccOverrideContainer]:
    created = to_wire_format(now - timedelta(days=7))
    layout = {
        ("container-1", "Sales Team Override", "Override container for sales team agents during peak hours"): [
            ("john.doe", True, -60, 120),
            ("jane.smith", True, 150, 300),
            ("mike.johnson", True, -180, -90),
            ("sarah.williams", False, 24 * 60, 25 * 60),
        ],
        ("container-2", "Support Team Override", "Emergency support override container for critical incidents"): [
            ("alex.brown", True, -30, 90),
            ("lisa.davis", False, -15, 60),
            ("david.wilson", True, 120, 240),
        ],
    }

    containers = []
    for (container_id, name, description), agents in layout.items():
        overrides = []
        for agent_name, engaged, start_minutes, end_minutes in agents:
            start, end = _window(now, start_minutes, end_minutes)
            overrides.append(
                WxccOverride(name=agent_name, workingHours=engaged, startDateTime=start, endDateTime=end)
            )
        containers.append(
            WxccOverrideContainer(
                id=container_id,
                organizationId=organization_id,
                version=1,
                name=name,
                description=description,
                timezone="UTC",
                createdTime=created,
                lastModifiedTime=created,
                overrides=overrides,
            )
        )
    return containers


class InMemoryWxccApiClient:
    """Same interface as WxccApiClient, backed by a dict of containers"""

    def __init__(self, containers: Optional[list[WxccOverrideContainer]] = None):
        self.containers: dict[str, WxccOverrideContainer] = {
            c.id: c.model_copy(deep=True) for c in (containers or [])
        }
        self.replace_calls: list[tuple[str, WxccContainerPayload]] = []

    async def aclose(self) -> None:
        return None

    async def list_override_containers(self) -> list[WxccOverrideContainer]:
        return [c.model_copy(update={"overrides": []}) for c in self.containers.values()]

    async def get_override_container(self, container_id: str) -> WxccOverrideContainer:
        container = self.containers.get(container_id)
        if container is None:
            raise UpstreamReadFailed(f"Failed to fetch container {container_id}: not found", 404)
        return container.model_copy(deep=True)

    async def replace_override_container(
        self, container_id: str, payload: WxccContainerPayload
    ) -> WxccOverrideContainer:
        if container_id not in self.containers:
            raise UpstreamWriteFailed(f"Failed to update container {container_id}: not found", 404)

        self.replace_calls.append((container_id, payload))
        stored = WxccOverrideContainer.model_validate(payload.model_dump())
        stored.version = (payload.version or 0) + 1
        self.containers[container_id] = stored
        logger.info(f"🧪 Mock WxCC stored container {container_id} at version {stored.version}")
        return stored.model_copy(deep=True)
