"""Mapping router - FastAPI endpoints for override name mappings"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ..overrides.router import get_override_service
from ..overrides.service import OverrideService
from .schemas import MappingRequest, WorkingHoursToggleRequest
from .service import MappingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/overrides", tags=["Mappings"])


def get_mapping_service(
    db: Session = Depends(get_db),
    override_service: OverrideService = Depends(get_override_service),
) -> MappingService:
    """Dependency injection for MappingService"""
    return MappingService(db, override_service)


@router.get("/mappings")
async def get_all_mappings(service: MappingService = Depends(get_mapping_service)):
    """Get every WxCC override with its mapping status"""
    mappings = await service.get_all_mappings()
    return {
        "success": True,
        "data": [m.model_dump(mode="json") for m in mappings],
        "count": len(mappings),
    }


@router.get("/mappings/active")
async def get_active_working_hours_mappings(service: MappingService = Depends(get_mapping_service)):
    """Get mappings with working hours switched on"""
    mappings = service.get_active_working_hours_mappings()
    return {
        "success": True,
        "data": [m.model_dump(mode="json") for m in mappings],
        "count": len(mappings),
    }


@router.post("/map")
async def create_or_update_mapping(
    data: MappingRequest, service: MappingService = Depends(get_mapping_service)
):
    """Map an override name to a human-readable agent name"""
    mapping = await service.create_or_update_mapping(data)
    return {
        "success": True,
        "data": mapping.model_dump(mode="json"),
        "message": "Mapping saved successfully",
    }


@router.patch("/working-hours")
async def update_working_hours(
    data: WorkingHoursToggleRequest, service: MappingService = Depends(get_mapping_service)
):
    """Toggle the working hours flag for a mapped override"""
    mapping = await service.update_working_hours(data)
    state = "activated" if mapping.workingHoursActive else "deactivated"
    return {
        "success": True,
        "data": mapping.model_dump(mode="json"),
        "message": f"Working hours {state} successfully",
    }


__all__ = [
    "router",
    "get_mapping_service",
    "get_all_mappings",
    "get_active_working_hours_mappings",
    "create_or_update_mapping",
    "update_working_hours",
]
