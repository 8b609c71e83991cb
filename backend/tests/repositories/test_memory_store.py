"""In-memory store semantics the services rely on."""

from __future__ import annotations

import pytest

from lessonbook.core.exceptions import OverlapConstraintViolation, StaleWriteViolation
from lessonbook.models.booking import BookingStatus
from lessonbook.repositories.interfaces import BookingCriteria
from tests._utils.timeline import session_at


def _fields(seeded, day=10, hour=10, minute=0, status="PENDING"):
    start, end = session_at(day, hour, minute)
    return {
        "student_id": seeded.student.id,
        "teacher_profile_id": seeded.profile.id,
        "start_time": start,
        "end_time": end,
        "status": status,
    }


def test_insert_enforces_no_overlap(repositories, seeded):
    repo = repositories.bookings
    with repo.transaction():
        repo.insert(**_fields(seeded))
    with pytest.raises(OverlapConstraintViolation):
        with repo.transaction():
            repo.insert(**_fields(seeded, minute=30))


def test_inactive_rows_skip_the_guard(repositories, seeded):
    repo = repositories.bookings
    with repo.transaction():
        repo.insert(**_fields(seeded))
        repo.insert(**_fields(seeded, status="COMPLETED"))
    _, total = repo.list_bookings(BookingCriteria(), 0, 10)
    assert total == 2


def test_transaction_restores_state_on_error(repositories, seeded, store):
    repo = repositories.bookings
    with repo.transaction():
        booking = repo.insert(**_fields(seeded))

    with pytest.raises(RuntimeError):
        with repo.transaction():
            repo.update_fields(booking.id, status="CONFIRMED", teacher_notes="x")
            repo.insert(**_fields(seeded, day=11))
            raise RuntimeError("boom")

    assert store.get("bookings", booking.id).status == "PENDING"
    assert store.get("bookings", booking.id).teacher_notes is None
    assert len(store.rows("bookings")) == 1


def test_nested_transactions_join_the_outer_one(repositories, seeded, store):
    repo = repositories.bookings
    with pytest.raises(RuntimeError):
        with repo.transaction():
            with repositories.notifications.transaction():
                repo.insert(**_fields(seeded))
            raise RuntimeError("outer fails")
    assert store.rows("bookings") == []


def test_lock_teacher_requires_transaction(repositories, seeded):
    with pytest.raises(RuntimeError):
        repositories.bookings.lock_teacher(seeded.profile.id)
    with repositories.bookings.transaction():
        repositories.bookings.lock_teacher(seeded.profile.id)


def test_statuses_and_datetimes_are_normalized(repositories, seeded):
    repo = repositories.bookings
    fields = _fields(seeded)
    fields["status"] = BookingStatus.CONFIRMED
    fields["start_time"] = fields["start_time"].replace(tzinfo=None)
    with repo.transaction():
        booking = repo.insert(**fields)
    assert booking.status == "CONFIRMED"
    assert booking.start_time.tzinfo is not None


def test_guarded_update_refuses_a_changed_row(repositories, seeded, store):
    repo = repositories.bookings
    with repo.transaction():
        booking = repo.insert(**_fields(seeded))
        repo.update_fields(booking.id, expected_status="PENDING", status="CONFIRMED")

    with pytest.raises(StaleWriteViolation):
        with repo.transaction():
            repo.update_fields(booking.id, expected_status="PENDING", status="NO_SHOW")

    assert store.get("bookings", booking.id).status == "CONFIRMED"


def test_find_for_update_requires_transaction(repositories, seeded):
    repo = repositories.bookings
    with repo.transaction():
        booking = repo.insert(**_fields(seeded))
        assert repo.find_by_id_for_update(booking.id) is booking
    with pytest.raises(RuntimeError):
        repo.find_by_id_for_update(booking.id)
