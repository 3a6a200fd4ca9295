"""Error hierarchy for the override console.

Every error carries the HTTP status and short label the API layer renders,
so services raise domain errors and never build responses themselves.
"""

from typing import Any, Optional


class OverrideConsoleError(Exception):
    """Base exception for all override console errors."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.error, "message": self.message}


class ConfigurationError(OverrideConsoleError):
    """Required settings are missing at startup."""

    error = "Configuration error"


class InvalidTimestamp(OverrideConsoleError, ValueError):
    """A date/time value could not be parsed."""

    status_code = 400
    error = "Invalid timestamp"

    def __init__(self, value: Any):
        super().__init__(f"Invalid date input: {value!r}")
        self.value = value


class ValidationFailed(OverrideConsoleError):
    """One or more schedule rules rejected an update.

    Carries every collected violation so the operator can fix them in one
    round-trip.
    """

    status_code = 400
    error = "Validation error"

    def __init__(self, errors: list, message: Optional[str] = None):
        self.errors = list(errors)
        if message is None:
            message = "Validation failed: " + ", ".join(e.message for e in self.errors)
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["errors"] = [e.model_dump(exclude_none=True) for e in self.errors]
        return body


class ScheduleConflict(ValidationFailed):
    """Enabling working hours on a mapping would overlap another engaged override."""

    status_code = 409
    error = "Schedule conflict"


class EntryNotFound(OverrideConsoleError):
    """The named override does not exist in the container."""

    status_code = 404
    error = "Resource not found"

    def __init__(self, container_id: str, entry_name: str):
        super().__init__(f"Agent {entry_name} not found in container {container_id}")
        self.container_id = container_id
        self.entry_name = entry_name


class OverrideNotFound(OverrideConsoleError):
    """The override name is not present in any container."""

    status_code = 404
    error = "Override not found"

    def __init__(self, override_name: str):
        super().__init__(f"Override name '{override_name}' not found in WxCC")
        self.override_name = override_name


class MappingNotFound(OverrideConsoleError):
    """No local mapping exists for the override name."""

    status_code = 404
    error = "Mapping not found"

    def __init__(self, override_name: str):
        super().__init__(f"No mapping found for override name: {override_name}")
        self.override_name = override_name


class UpstreamError(OverrideConsoleError):
    """WxCC API transport failure or non-2xx response."""

    status_code = 502
    error = "Upstream error"

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class UpstreamReadFailed(UpstreamError):
    """A read against the WxCC API failed."""

    error = "Failed to fetch from WxCC"

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message, upstream_status)
        if upstream_status == 404:
            self.status_code = 404
            self.error = "Container not found"


class UpstreamWriteFailed(UpstreamError):
    """A whole-container write against the WxCC API failed."""

    error = "Failed to update agent schedule"
