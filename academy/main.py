import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from academy.audit.sink import build_audit_sink
from academy.database import dispose_db, init_db
from academy.dependencies import get_settings
from academy.enrollment.router import router as enrollment_router
from academy.live_sessions.router import router as live_session_router
from academy.live_sessions.teacher_router import router as teacher_live_session_router
from academy.payments.admin_router import router as admin_payment_router
from academy.payments.router import router as payment_router
from academy.progress.router import router as progress_router
from shared.database.redis_client import get_redis_client
from shared.middleware import RequestIdLogFilter
from shared.middleware.error_handler import error_envelope_middleware
from shared.middleware.request_id import request_id_middleware


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(levelname)s:%(name)s:[%(request_id)s] %(message)s",
    )
    request_filter = RequestIdLogFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(request_filter)


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Academy Enrollment Service

Enrollment, payment confirmation, learning progress and live classes.

* **Enrollment** — free courses activate immediately; paid courses go through
  proof of payment and admin review (or a signed provider webhook).
* **Progress** — lesson completion toggles; progress is recomputed from the
  completion set on every toggle and read.
* **Live sessions** — status (upcoming → joinable → live → completed/missed) is
  derived on every read; the meeting link is only exposed while joinable.

### Authentication
```
Authorization: Bearer <access_token>
```
"""

_TAGS_METADATA = [
    {"name": "Enrollment", "description": "Free enrollment and my enrollments."},
    {"name": "Payments", "description": "Proof-of-payment submission and provider webhook."},
    {"name": "admin-payments", "description": "Admin review of submitted payments."},
    {"name": "Progress", "description": "Lesson completion and course progress."},
    {"name": "Live Sessions", "description": "Live classes for enrolled students."},
    {"name": "teacher-live-sessions", "description": "Live class management for teachers."},
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(settings.academy_database_url)
    redis_client = get_redis_client(settings.redis_url) if settings.audit_sink == "redis" else None
    app.state.audit_sink = build_audit_sink(settings, redis_client)
    yield
    if redis_client is not None:
        await redis_client.aclose()
    await dispose_db()


def create_app() -> FastAPI:
    settings = get_settings()
    _configure_logging(settings.log_level)
    app = FastAPI(
        title="Academy Enrollment Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Middleware (applied in reverse-registration order: last added = outermost)
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(enrollment_router, prefix="/api/v1")
    app.include_router(payment_router, prefix="/api/v1")
    app.include_router(admin_payment_router, prefix="/api/v1")
    app.include_router(progress_router, prefix="/api/v1")
    app.include_router(live_session_router, prefix="/api/v1")
    app.include_router(teacher_live_session_router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="academy")

    return app


app = create_app()
