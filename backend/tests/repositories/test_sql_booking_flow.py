"""BookingService wired to the SQL repositories."""

from __future__ import annotations

import pytest
from sqlalchemy import update

from lessonbook.core.enums import RoleName
from lessonbook.core.exceptions import ConcurrentUpdateException, SlotUnavailableException
from lessonbook.models.booking import Booking
from lessonbook.models.notification import Notification
from lessonbook.principal import Actor
from lessonbook.schemas.booking import BookingCreate, BookingUpdate
from lessonbook.services.booking_service import BookingService
from tests._utils.timeline import fixed_clock, session_at


@pytest.fixture
def sql_service(sql_repositories) -> BookingService:
    return BookingService(sql_repositories, clock=fixed_clock)


def _request(service, seeded, student, hour, minute=0):
    start, end = session_at(10, hour, minute)
    return service.create_booking(
        Actor(user_id=student.id, role=RoleName.STUDENT),
        BookingCreate(teacher_profile_id=seeded.profile.id, start_time=start, end_time=end),
    )


def test_lifecycle_commits_bookings_and_notifications(sql_service, sql_seeded, db):
    booking = _request(sql_service, sql_seeded, sql_seeded.student, 10)
    teacher = Actor(user_id=sql_seeded.teacher.id, role=RoleName.TEACHER)

    sql_service.update_booking(booking.id, teacher, BookingUpdate(status="CONFIRMED"))
    cancelled = sql_service.cancel_booking(
        booking.id, Actor(user_id=sql_seeded.student.id, role=RoleName.STUDENT)
    )

    db.expire_all()
    stored = db.query(Booking).filter(Booking.id == booking.id).one()
    assert stored.status == "CANCELLED"
    assert stored.canceled_by == sql_seeded.student.id
    assert stored.cancel_reason == cancelled.cancel_reason

    types = sorted(n.type for n in db.query(Notification).all())
    assert types == ["BOOKING_CANCELLED", "BOOKING_CONFIRMED", "BOOKING_REQUEST"]


def test_conflict_leaves_no_row(sql_service, sql_seeded, db):
    _request(sql_service, sql_seeded, sql_seeded.student, 10)
    with pytest.raises(SlotUnavailableException):
        _request(sql_service, sql_seeded, sql_seeded.other_student, 10, minute=30)

    assert db.query(Booking).count() == 1
    assert db.query(Notification).count() == 1


def test_confirm_that_lost_a_race_to_cancel_does_not_revive_booking(
    sql_service, sql_seeded, sql_repositories, db, monkeypatch
):
    booking = _request(sql_service, sql_seeded, sql_seeded.student, 10)
    bookings = sql_repositories.bookings
    read_locked = bookings.find_by_id_for_update

    def _read_then_student_cancels(booking_id):
        # The teacher's request has read PENDING; the student's cancel commits next
        stale = read_locked(booking_id)
        db.connection().execute(
            update(Booking.__table__)
            .where(Booking.__table__.c.id == booking_id)
            .values(status="CANCELLED", cancel_reason="sick", canceled_by=sql_seeded.student.id)
        )
        db.commit()
        return stale

    monkeypatch.setattr(bookings, "find_by_id_for_update", _read_then_student_cancels)
    teacher = Actor(user_id=sql_seeded.teacher.id, role=RoleName.TEACHER)

    with pytest.raises(ConcurrentUpdateException) as exc_info:
        sql_service.update_booking(booking.id, teacher, BookingUpdate(status="CONFIRMED"))
    assert exc_info.value.status_code == 409
    assert exc_info.value.code == "ConcurrentUpdate"

    db.expire_all()
    stored = db.query(Booking).filter(Booking.id == booking.id).one()
    assert stored.status == "CANCELLED"
    assert stored.cancel_reason == "sick"
    assert [n.type for n in db.query(Notification).all()] == ["BOOKING_REQUEST"]
