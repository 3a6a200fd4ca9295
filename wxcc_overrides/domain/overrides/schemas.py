"""Override domain schemas - Pydantic models for WxCC payloads and console responses"""

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AgentStatus(str, Enum):
    """Derived lifecycle label, recomputed on every read"""

    ENGAGED_NOW = "engaged-now"
    DISENGAGED = "disengaged"
    PENDING = "pending"
    ELAPSED = "elapsed"


# ============================================================================
# WXCC WIRE MODELS
# ============================================================================


class WxccOverride(BaseModel):
    """One override inside a container; `name` is its unique key"""

    name: str
    workingHours: bool = False
    startDateTime: str
    endDateTime: str


class WxccOverrideContainer(BaseModel):
    """Override container as returned by WxCC (overrides only on detail reads)"""

    id: str
    name: str
    organizationId: Optional[str] = None
    version: Optional[int] = None
    description: Optional[str] = None
    timezone: Optional[str] = None
    createdTime: Optional[str] = None
    lastModifiedTime: Optional[str] = None
    overrides: list[WxccOverride] = Field(default_factory=list)

    def find_override(self, name: str) -> Optional[int]:
        """Index of the override with this exact name, or None"""
        for index, override in enumerate(self.overrides):
            if override.name == name:
                return index
        return None


class WxccContainerPayload(BaseModel):
    """Complete container object required by the WxCC PUT contract"""

    id: str
    organizationId: Optional[str]
    version: int
    name: str
    description: Optional[str] = None
    timezone: str
    createdTime: Optional[str] = None
    lastModifiedTime: str
    overrides: list[WxccOverride]


# ============================================================================
# CONSOLE MODELS
# ============================================================================


class Agent(BaseModel):
    """An override as shown in the console, with its container context"""

    agentId: str
    containerId: str
    containerName: str
    workingHours: bool
    startDateTime: str
    endDateTime: str
    status: AgentStatus


class AgentResponse(Agent):
    isCurrentlyActive: bool


class OverrideContainer(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    agents: list[Agent] = Field(default_factory=list)


class ContainerResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    agents: list[AgentResponse]
    activeAgents: list[AgentResponse]
    totalAgents: int
    activeCount: int


class Classification(BaseModel):
    state: AgentStatus
    isLive: bool


# ============================================================================
# UPDATE + VALIDATION
# ============================================================================


class UpdateAgentRequest(BaseModel):
    """Schema for an agent schedule update

    Accepts the console's field names and the short engaged/start/end forms.
    Dates stay raw strings here; parsing belongs to the validator.
    """

    model_config = ConfigDict(populate_by_name=True)

    workingHours: bool = Field(validation_alias=AliasChoices("workingHours", "engaged"))
    startDateTime: str = Field(validation_alias=AliasChoices("startDateTime", "start"))
    endDateTime: str = Field(validation_alias=AliasChoices("endDateTime", "end"))


class ScheduleValidationError(BaseModel):
    field: str
    message: str
    agentId: Optional[str] = None
    conflictingAgentId: Optional[str] = None


class ValidationResult(BaseModel):
    isValid: bool
    errors: list[ScheduleValidationError] = Field(default_factory=list)
