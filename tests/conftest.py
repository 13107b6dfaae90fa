from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from academy.config import Settings
from academy.database import get_db
from academy.dependencies import get_audit_sink, get_clock, get_settings
from academy.main import create_app
from academy.models import Course, Enrollment, Lesson, LiveSession
from academy.models.enums import CourseStatus, EnrollmentStatus
from shared.auth.config import AuthSettings
from shared.auth.dependencies import get_auth_settings
from shared.constants import Role
from shared.database.postgres import Base, get_async_engine, get_session
from shared.events.schemas import AuditEvent

JWT_SECRET = "test-jwt-secret"
WEBHOOK_SECRET = "test-webhook-secret"
NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RecordingAuditSink:
    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    async def publish(self, event: AuditEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.type.value for e in self.events]


# ── Database ──────────────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    eng = get_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'academy.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ── Seed helpers ──────────────────────────────────────────────────────────────


@pytest.fixture
def teacher_id() -> UUID:
    return uuid4()


@pytest.fixture
def student_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_course(session_factory, teacher_id):
    async def _make(
        price: Decimal = Decimal("49.00"),
        status: CourseStatus = CourseStatus.PUBLISHED,
        lessons: int = 0,
        owner: UUID | None = None,
    ) -> Course:
        async with session_factory() as session:
            course = Course(
                title="Intro to Statistics",
                teacher_id=owner or teacher_id,
                price=price,
                status=status,
            )
            session.add(course)
            await session.flush()
            for i in range(lessons):
                session.add(
                    Lesson(
                        course_id=course.course_id,
                        title=f"Lesson {i + 1}",
                        week=i // 3 + 1,
                        sort_order=i,
                    )
                )
            await session.commit()
            return course

    return _make


@pytest.fixture
def make_enrollment(session_factory):
    async def _make(
        course: Course,
        user_id: UUID,
        status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
    ) -> Enrollment:
        async with session_factory() as session:
            enrollment = Enrollment(
                user_id=user_id,
                course_id=course.course_id,
                status=status,
                paid=status in (EnrollmentStatus.ACTIVE, EnrollmentStatus.COMPLETED),
                progress=Decimal("0.00"),
                enrolled_at=NOW,
            )
            session.add(enrollment)
            await session.commit()
            return enrollment

    return _make


@pytest.fixture
def make_live_session(session_factory):
    async def _make(course: Course, **fields) -> LiveSession:
        fields.setdefault("title", "Office hours")
        fields.setdefault("meeting_link", "https://meet.example.com/abc")
        fields.setdefault("start_time", NOW + timedelta(days=1))
        async with session_factory() as session:
            live = LiveSession(course_id=course.course_id, **fields)
            session.add(live)
            await session.commit()
            return live

    return _make


async def lesson_ids(session_factory, course: Course) -> list[UUID]:
    async with session_factory() as session:
        result = await session.execute(
            select(Lesson.lesson_id)
            .where(Lesson.course_id == course.course_id)
            .order_by(Lesson.sort_order)
        )
        return list(result.scalars().all())


# ── HTTP ──────────────────────────────────────────────────────────────────────


def make_token(user_id: UUID, *roles: Role) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": f"{user_id.hex[:8]}@example.com",
        "roles": [r.value for r in (roles or (Role.STUDENT,))],
        "iss": "academy-identity",
        "aud": "academy-services",
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def auth_headers(user_id: UUID, *roles: Role) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, *roles)}"}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        payment_webhook_secret=WEBHOOK_SECRET,
        live_join_window_minutes=15,
        live_default_duration_minutes=120,
    )


@pytest_asyncio.fixture
async def client(
    session_factory, clock, audit_sink, settings
) -> AsyncGenerator[AsyncClient, None]:
    app = create_app()

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async for session in get_session(session_factory):
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_audit_sink] = lambda: audit_sink
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_auth_settings] = lambda: AuthSettings(secret=JWT_SECRET)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
