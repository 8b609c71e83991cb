"""SQLite-backed fixtures for the SQL repositories."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Iterator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from lessonbook.core.enums import ApprovalStatus, RoleName
from lessonbook.database import build_engine, init_db
from lessonbook.repositories.factory import Repositories, RepositoryFactory


@pytest.fixture
def db() -> Iterator[Session]:
    engine = build_engine("sqlite://")
    init_db(engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def sql_repositories(db: Session) -> Repositories:
    return RepositoryFactory.create_repositories(db)


@pytest.fixture
def sql_seeded(db: Session, sql_repositories: Repositories) -> SimpleNamespace:
    users = sql_repositories.users
    student = users.insert(name="Sam Student", email="sam@example.com", role=RoleName.STUDENT.value)
    other_student = users.insert(
        name="Olive Other", email="olive@example.com", role=RoleName.STUDENT.value
    )
    teacher = users.insert(name="Tara Teacher", email="tara@example.com", role=RoleName.TEACHER.value)
    profile = sql_repositories.teacher_profiles.insert(
        user_id=teacher.id, approval_status=ApprovalStatus.APPROVED.value
    )
    db.commit()
    return SimpleNamespace(
        student=student, other_student=other_student, teacher=teacher, profile=profile
    )
