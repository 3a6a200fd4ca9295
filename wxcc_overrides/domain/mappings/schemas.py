"""Mapping domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator


def _required_name(v: str, field: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError(f"{field} cannot be empty")
    return v


class MappingRequest(BaseModel):
    """Schema for creating or renaming a mapping"""

    overrideName: str
    agentName: str

    @field_validator("overrideName")
    @classmethod
    def validate_override_name(cls, v):
        return _required_name(v, "overrideName")

    @field_validator("agentName")
    @classmethod
    def validate_agent_name(cls, v):
        return _required_name(v, "agentName")


class WorkingHoursToggleRequest(BaseModel):
    """Schema for flipping the locally tracked working hours flag"""

    overrideName: str
    workingHoursActive: bool

    @field_validator("overrideName")
    @classmethod
    def validate_override_name(cls, v):
        return _required_name(v, "overrideName")


class OverrideMappingResponse(BaseModel):
    """An override joined with its local mapping, if any"""

    overrideName: str
    agentName: Optional[str] = None
    workingHoursActive: bool = False
    isMapped: bool
    startDateTime: Optional[str] = None
    endDateTime: Optional[str] = None
    containerId: Optional[str] = None
    containerName: Optional[str] = None
