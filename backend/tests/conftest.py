# backend/tests/conftest.py
"""
Shared fixtures for the Lessonbook test suite.

Services and routes run over a fresh in-memory store per test. Repository
tests that need SQL build their own SQLite engine (see
tests/repositories/conftest.py).

Time is pinned: ``tests._utils.timeline.FIXED_NOW`` is the clock every service under test sees,
so sessions on 2025-05-10 are in the future.
"""

from __future__ import annotations

from datetime import datetime
import os
from types import SimpleNamespace
from typing import Callable, Dict

# Settings are read at import time; keep tests off any on-disk database
os.environ.setdefault("LESSONBOOK_DATABASE_URL", "sqlite://")
os.environ.setdefault("LESSONBOOK_STORAGE_BACKEND", "memory")

from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from lessonbook.api.dependencies import get_booking_service, get_data_source  # noqa: E402
from lessonbook.api.dependencies.services import get_repositories  # noqa: E402
from lessonbook.auth import create_access_token  # noqa: E402
from lessonbook.core.enums import ApprovalStatus, RoleName  # noqa: E402
from lessonbook.main import create_app  # noqa: E402
from lessonbook.models.user import User  # noqa: E402
from lessonbook.principal import Actor  # noqa: E402
from lessonbook.repositories.factory import Repositories, RepositoryFactory  # noqa: E402
from lessonbook.repositories.memory import InMemoryStore  # noqa: E402
from lessonbook.schemas.booking import BookingCreate  # noqa: E402
from lessonbook.services.booking_service import BookingService  # noqa: E402
from tests._utils.timeline import fixed_clock, session_at  # noqa: E402


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return fixed_clock


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def repositories(store: InMemoryStore) -> Repositories:
    return RepositoryFactory.create_repositories(store)


@pytest.fixture
def seeded(repositories: Repositories) -> SimpleNamespace:
    """Two students, an approved and a pending teacher, a teacher with no profile, an admin."""
    users = repositories.users
    profiles = repositories.teacher_profiles

    student = users.insert(name="Sam Student", email="sam@example.com", role=RoleName.STUDENT.value)
    other_student = users.insert(
        name="Olive Other", email="olive@example.com", role=RoleName.STUDENT.value
    )
    teacher = users.insert(
        name="Tara Teacher",
        email="tara@example.com",
        role=RoleName.TEACHER.value,
        timezone="America/New_York",
        locale="en",
    )
    other_teacher = users.insert(
        name="Otto Tutor",
        email="otto@example.com",
        role=RoleName.TEACHER.value,
        timezone="Europe/Berlin",
        locale="de",
    )
    teacher_without_profile = users.insert(
        name="Nina Noprofile", email="nina@example.com", role=RoleName.TEACHER.value
    )
    admin = users.insert(name="Ada Admin", email="ada@example.com", role=RoleName.ADMIN.value)

    profile = profiles.insert(
        user_id=teacher.id,
        approval_status=ApprovalStatus.APPROVED.value,
        headline="Piano and music theory",
    )
    other_profile = profiles.insert(
        user_id=other_teacher.id,
        approval_status=ApprovalStatus.APPROVED.value,
        headline="German conversation",
    )
    pending_teacher = users.insert(
        name="Paul Pending", email="paul@example.com", role=RoleName.TEACHER.value
    )
    pending_profile = profiles.insert(
        user_id=pending_teacher.id, approval_status=ApprovalStatus.PENDING.value
    )

    return SimpleNamespace(
        student=student,
        other_student=other_student,
        teacher=teacher,
        other_teacher=other_teacher,
        teacher_without_profile=teacher_without_profile,
        admin=admin,
        profile=profile,
        other_profile=other_profile,
        pending_teacher=pending_teacher,
        pending_profile=pending_profile,
    )


@pytest.fixture
def booking_service(repositories: Repositories, clock: Callable[[], datetime]) -> BookingService:
    return BookingService(repositories, clock=clock)


@pytest.fixture
def app(store: InMemoryStore, clock: Callable[[], datetime]):
    application = create_app()

    def _booking_service(repositories: Repositories = Depends(get_repositories)) -> BookingService:
        return BookingService(repositories, clock=clock)

    application.dependency_overrides[get_data_source] = lambda: store
    application.dependency_overrides[get_booking_service] = _booking_service
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token({"sub": user.id, "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def actor_for() -> Callable[[User], Actor]:
    def _actor(user: User) -> Actor:
        return Actor(user_id=user.id, role=RoleName(user.role))

    return _actor


@pytest.fixture
def make_booking(booking_service: BookingService, actor_for, seeded):
    """Create a booking for ``student`` (default: seeded student) on ``profile``."""

    def _make(
        day: int = 10,
        hour: int = 10,
        minute: int = 0,
        minutes: int = 60,
        student=None,
        profile=None,
    ):
        start, end = session_at(day, hour, minute, minutes)
        data = BookingCreate(
            teacher_profile_id=(profile or seeded.profile).id,
            start_time=start,
            end_time=end,
        )
        return booking_service.create_booking(actor_for(student or seeded.student), data)

    return _make
