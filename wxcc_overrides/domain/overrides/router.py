"""Override router - FastAPI endpoints for containers and agent schedules"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from ... import config
from .schemas import UpdateAgentRequest
from .service import OverrideService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Overrides"])


def get_override_service(request: Request) -> OverrideService:
    """Dependency injection for OverrideService"""
    return OverrideService(
        request.app.state.wxcc_client,
        organization_id=config.WXCC_ORG_ID or None,
        default_timezone=config.WXCC_DEFAULT_TIMEZONE,
        default_version=config.WXCC_DEFAULT_CONTAINER_VERSION,
    )


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "success": True,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": config.SERVICE_NAME,
    }


# ============================================================================
# CONTAINERS
# ============================================================================


@router.get("/overrides/containers")
async def get_all_containers(service: OverrideService = Depends(get_override_service)):
    """Get all override containers with their agents and status"""
    containers = await service.get_all_containers_for_frontend()
    return {
        "success": True,
        "data": [c.model_dump(mode="json") for c in containers],
        "count": len(containers),
    }


@router.get("/overrides/containers/{container_id}")
async def get_container(container_id: str, service: OverrideService = Depends(get_override_service)):
    """Get a specific container with its agents"""
    container = await service.get_container_for_frontend(container_id)
    return {"success": True, "data": container.model_dump(mode="json")}


# ============================================================================
# AGENTS
# ============================================================================


@router.put("/overrides/containers/{container_id}/agents/{agent_id}")
async def update_agent_schedule(
    container_id: str,
    agent_id: str,
    data: UpdateAgentRequest,
    service: OverrideService = Depends(get_override_service),
):
    """Update an agent's schedule with validation"""
    logger.info(f"📥 PUT schedule for {agent_id} in {container_id}")
    agent = await service.update_agent_schedule(container_id, agent_id, data)
    return {
        "success": True,
        "data": agent.model_dump(mode="json"),
        "message": "Agent schedule updated successfully",
    }


@router.get("/overrides/active")
async def get_active_agents(service: OverrideService = Depends(get_override_service)):
    """Get currently active agents across all containers"""
    agents = await service.get_active_agents()
    return {
        "success": True,
        "data": [a.model_dump(mode="json") for a in agents],
        "count": len(agents),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


__all__ = [
    "router",
    "get_override_service",
    "health_check",
    "get_all_containers",
    "get_container",
    "update_agent_schedule",
    "get_active_agents",
]
