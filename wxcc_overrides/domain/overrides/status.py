"""
Agent status derivation

Status is never persisted; it is recomputed from the override window, the
workingHours flag and an explicit "now" on every read:

    workingHours false              -> disengaged
    workingHours true, now < start  -> pending
    workingHours true, now > end    -> elapsed
    otherwise                       -> engaged-now

"Currently live" is computed separately because dashboards need it apart
from the label.
"""

import logging
from datetime import datetime

from ...errors import InvalidTimestamp
from ...utils.time_window import InstantLike, is_within, parse_instant
from .schemas import AgentStatus, Classification, WxccOverride

logger = logging.getLogger(__name__)


def determine_status(
    engaged: bool, start: InstantLike, end: InstantLike, now: datetime
) -> AgentStatus:
    if not engaged:
        return AgentStatus.DISENGAGED

    now = parse_instant(now)
    start_at = parse_instant(start)
    end_at = parse_instant(end)

    if now < start_at:
        return AgentStatus.PENDING
    if now > end_at:
        return AgentStatus.ELAPSED
    return AgentStatus.ENGAGED_NOW


def is_currently_live(
    engaged: bool, start: InstantLike, end: InstantLike, now: datetime
) -> bool:
    if not engaged:
        return False
    return is_within(parse_instant(now), parse_instant(start), parse_instant(end))


def safe_status(engaged: bool, start: InstantLike, end: InstantLike, now: datetime) -> AgentStatus:
    """determine_status that degrades to disengaged on malformed timestamps"""
    try:
        return determine_status(engaged, start, end, now)
    except InvalidTimestamp as e:
        logger.warning(f"⚠️ Unreadable schedule window, showing as disengaged: {e}")
        return AgentStatus.DISENGAGED


def safe_is_live(engaged: bool, start: InstantLike, end: InstantLike, now: datetime) -> bool:
    try:
        return is_currently_live(engaged, start, end, now)
    except InvalidTimestamp as e:
        logger.warning(f"⚠️ Unreadable schedule window, showing as not live: {e}")
        return False


def classify(entry: WxccOverride, now: datetime) -> Classification:
    """Derive {state, isLive} for an override; never raises for display purposes"""
    return Classification(
        state=safe_status(entry.workingHours, entry.startDateTime, entry.endDateTime, now),
        isLive=safe_is_live(entry.workingHours, entry.startDateTime, entry.endDateTime, now),
    )
