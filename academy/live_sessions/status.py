"""Live session time-lock status.

Pure functions of (now, start, end, recording). Status is a view computed on
every read and is never persisted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta

from academy.clock import as_utc


class LiveSessionStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    JOINABLE = "joinable"
    LIVE = "live"
    COMPLETED = "completed"
    MISSED = "missed"


@dataclass(frozen=True)
class LiveSessionPolicy:
    # How early students may connect before the nominal start
    join_window: timedelta = timedelta(minutes=15)
    # Assumed length of a session that has no explicit end time
    default_duration: timedelta = timedelta(hours=2)


DEFAULT_POLICY = LiveSessionPolicy()

JOINABLE_STATUSES = frozenset({LiveSessionStatus.JOINABLE, LiveSessionStatus.LIVE})


def derive_status(
    now: datetime,
    start_time: datetime,
    end_time: datetime | None = None,
    has_recording: bool = False,
    policy: LiveSessionPolicy = DEFAULT_POLICY,
) -> LiveSessionStatus:
    now = as_utc(now)
    start = as_utc(start_time)
    end = as_utc(end_time) if end_time is not None else start + policy.default_duration

    if now < start - policy.join_window:
        return LiveSessionStatus.UPCOMING
    if now <= start:
        return LiveSessionStatus.JOINABLE
    if now <= end:
        return LiveSessionStatus.LIVE
    return LiveSessionStatus.COMPLETED if has_recording else LiveSessionStatus.MISSED


def can_join(status: LiveSessionStatus) -> bool:
    return status in JOINABLE_STATUSES
