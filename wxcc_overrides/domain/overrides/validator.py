"""
Schedule validation for override updates

Date problems are accumulated so the operator sees all of them at once. The
conflict scan stops at the first conflicting override: only engaged
overrides conflict, and only one conflict can be resolved at a time.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from ...errors import InvalidTimestamp
from ...utils.time_window import overlaps, parse_instant
from .schemas import ScheduleValidationError, UpdateAgentRequest, ValidationResult, WxccOverride

logger = logging.getLogger(__name__)


def find_schedule_conflict(
    entries: Iterable[WxccOverride],
    target_name: str,
    start: datetime,
    end: datetime,
) -> Optional[WxccOverride]:
    """First other engaged override whose window overlaps [start, end], if any"""
    for entry in entries:
        if entry.name == target_name:
            continue
        if not entry.workingHours:
            continue

        try:
            entry_start = parse_instant(entry.startDateTime)
            entry_end = parse_instant(entry.endDateTime)
        except InvalidTimestamp as e:
            logger.warning(f"⚠️ Skipping override {entry.name} in conflict scan: {e}")
            continue

        if overlaps(start, end, entry_start, entry_end):
            return entry

    return None


def validate(
    container_entries: Iterable[WxccOverride],
    target_name: str,
    candidate: UpdateAgentRequest,
    now: datetime,
) -> ValidationResult:
    errors: list[ScheduleValidationError] = []

    try:
        start = parse_instant(candidate.startDateTime)
        end = parse_instant(candidate.endDateTime)
    except InvalidTimestamp:
        errors.append(
            ScheduleValidationError(
                field="dateTime",
                message="Invalid date format. Use ISO 8601 format",
                agentId=target_name,
            )
        )
        return ValidationResult(isValid=False, errors=errors)

    # Checked at the minute precision the window is stored at
    start = start.replace(second=0, microsecond=0)
    end = end.replace(second=0, microsecond=0)

    if start >= end:
        errors.append(
            ScheduleValidationError(
                field="startDateTime",
                message="Start date must be before end date",
                agentId=target_name,
            )
        )

    if end < parse_instant(now):
        errors.append(
            ScheduleValidationError(
                field="endDateTime",
                message="End date cannot be in the past",
                agentId=target_name,
            )
        )

    if candidate.workingHours:
        conflicting = find_schedule_conflict(container_entries, target_name, start, end)
        if conflicting is not None:
            errors.append(
                ScheduleValidationError(
                    field="schedule",
                    message=f"Schedule conflicts with agent {conflicting.name}",
                    agentId=target_name,
                    conflictingAgentId=conflicting.name,
                )
            )

    logger.debug(f"Validated schedule for {target_name}: {len(errors)} error(s)")
    return ValidationResult(isValid=not errors, errors=errors)
