"""
Logging setup and structured logging helpers

JSON lines (rendered by structlog) for production log shipping, the plain
text format for local development. Call sites keep using stdlib loggers;
helpers attach their fields via `extra` so the JSON output carries them.
"""

import logging
import sys
from typing import Any, Optional

import httpx
import structlog

logger = logging.getLogger("wxcc_overrides")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_json_formatter(service: str, environment: str) -> structlog.stdlib.ProcessorFormatter:
    """Formatter turning stdlib records (and their `extra` fields) into JSON lines"""

    def add_service_context(_logger, _method_name, event_dict):
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_service_context,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
    )


def setup_logging(
    level: str = "INFO",
    fmt: str = "json",
    service: str = "wxcc-overrides-api",
    environment: str = "development",
) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(build_json_formatter(service, environment))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)

    # Reduce verbosity of third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def log_api_call(
    method: str, url: str, duration_ms: Optional[float] = None, status: Optional[int] = None
) -> None:
    logger.info(
        "API Call",
        extra={"type": "api_call", "method": method, "url": url, "duration": duration_ms, "status": status},
    )


def log_validation_error(operation: str, errors: list) -> None:
    logger.warning(
        "Validation Error",
        extra={
            "type": "validation_error",
            "operation": operation,
            "errors": [e.model_dump(exclude_none=True) for e in errors],
        },
    )


def log_schedule_conflict(agent_id: str, conflicting_agent_id: str, container_id: str) -> None:
    logger.error(
        f"⚠️ Schedule conflict: {agent_id} overlaps {conflicting_agent_id} in {container_id}",
        extra={
            "type": "schedule_conflict",
            "agentId": agent_id,
            "conflictingAgentId": conflicting_agent_id,
            "containerId": container_id,
        },
    )


def log_wxcc_api_error(operation: str, error: BaseException, context: Optional[dict] = None) -> None:
    """Log a failed WxCC call, pulling the vendor's error details out of the response body"""
    details: dict[str, Any] = {}
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        details = {
            "status": response.status_code,
            "statusText": response.reason_phrase,
            "wxccErrorMessage": body.get("message") or body.get("error"),
            "wxccErrorCode": body.get("code"),
            "wxccErrorDetails": body.get("details"),
            "requestUrl": str(error.request.url),
            "requestMethod": error.request.method,
        }

    logger.error(
        f"❌ WxCC API Error during {operation}: {error}",
        extra={"type": "wxcc_api_error", "operation": operation, "context": context, **details},
    )
