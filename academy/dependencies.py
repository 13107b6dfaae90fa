"""Academy service FastAPI dependencies.

Routes import auth, clock, settings and audit wiring from here so tests can
swap any of them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Request

from academy.audit.sink import AuditSink, LogAuditSink
from academy.clock import Clock, utc_now
from academy.config import Settings
from academy.live_sessions.status import LiveSessionPolicy
from shared.auth.dependencies import get_current_user_required, require_roles
from shared.constants import ADMIN_ROLES, Role

# Routes import auth from here, not from shared directly
get_current_user = get_current_user_required

require_admin = require_roles(*ADMIN_ROLES, detail="Administrator access required.")
require_teacher = require_roles(
    Role.TEACHER, Role.ADMIN, Role.SUPER_ADMIN, detail="Teacher access required."
)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_clock() -> Clock:
    return utc_now


def get_audit_sink(request: Request) -> AuditSink:
    sink = getattr(request.app.state, "audit_sink", None)
    return sink if sink is not None else LogAuditSink()


def get_live_session_policy(settings: Settings = Depends(get_settings)) -> LiveSessionPolicy:
    return LiveSessionPolicy(
        join_window=timedelta(minutes=settings.live_join_window_minutes),
        default_duration=timedelta(minutes=settings.live_default_duration_minutes),
    )
