"""Counterparty addressing and failure handling of the dispatcher."""

from __future__ import annotations

import logging

import pytest

from lessonbook.core.enums import EntityType, NotificationType
from lessonbook.models.booking import BookingStatus
from lessonbook.services.notification_dispatcher import BookingTransition, NotificationDispatcher


@pytest.fixture
def booking(make_booking):
    return make_booking()


def _dispatcher(repositories, **kwargs) -> NotificationDispatcher:
    return NotificationDispatcher(
        repositories.notifications, repositories.users, repositories.teacher_profiles, **kwargs
    )


def _transition(actor, new_status, previous=BookingStatus.PENDING, reason=None):
    return BookingTransition(
        previous_status=previous, new_status=new_status, actor=actor, cancel_reason=reason
    )


class TestReceiver:
    def test_creation_goes_to_teacher(self, repositories, booking, seeded, actor_for):
        transition = BookingTransition(
            previous_status=None, new_status=BookingStatus.PENDING, actor=actor_for(seeded.student)
        )
        assert transition.is_creation
        assert _dispatcher(repositories).resolve_receiver_id(booking, transition) == seeded.teacher.id

    def test_student_action_goes_to_teacher(self, repositories, booking, seeded, actor_for):
        transition = _transition(actor_for(seeded.student), BookingStatus.CANCELLED)
        assert _dispatcher(repositories).resolve_receiver_id(booking, transition) == seeded.teacher.id

    def test_teacher_action_goes_to_student(self, repositories, booking, seeded, actor_for):
        transition = _transition(actor_for(seeded.teacher), BookingStatus.CONFIRMED)
        assert _dispatcher(repositories).resolve_receiver_id(booking, transition) == seeded.student.id

    @pytest.mark.parametrize("target,expected", [("student", "student"), ("teacher", "teacher")])
    def test_admin_action_follows_setting(self, repositories, booking, seeded, actor_for, target, expected):
        dispatcher = _dispatcher(repositories, admin_notification_target=target)
        transition = _transition(actor_for(seeded.admin), BookingStatus.CONFIRMED)
        assert dispatcher.resolve_receiver_id(booking, transition) == getattr(seeded, expected).id


class TestDispatch:
    def test_confirmation_row(self, repositories, booking, seeded, actor_for):
        notification = _dispatcher(repositories).dispatch(
            booking, _transition(actor_for(seeded.teacher), BookingStatus.CONFIRMED)
        )

        assert notification.receiver_id == seeded.student.id
        assert notification.sender_id == seeded.teacher.id
        assert notification.type == NotificationType.BOOKING_CONFIRMED.value
        assert notification.title == "Booking Confirmed"
        assert notification.entity_type == EntityType.BOOKING.value
        assert notification.entity_id == booking.id
        assert notification.is_read is False
        assert "Saturday, May 10, 2025 at 6:00 AM" in notification.message

    def test_message_uses_receiver_locale(self, repositories, make_booking, seeded, actor_for):
        # Otto teaches in Berlin with a German locale
        booking = make_booking(profile=seeded.other_profile)
        notification = _dispatcher(repositories).dispatch(
            booking, _transition(actor_for(seeded.student), BookingStatus.CANCELLED, reason="Ill")
        )
        assert notification.receiver_id == seeded.other_teacher.id
        assert "on 2025-05-10 at 12:00" in notification.message
        assert notification.message.endswith("Reason: Ill")

    def test_noop_dispatches_nothing(self, repositories, booking, seeded, actor_for, store):
        before = len(store.rows("notifications"))
        result = _dispatcher(repositories).dispatch(
            booking,
            _transition(actor_for(seeded.teacher), BookingStatus.PENDING, previous=BookingStatus.PENDING),
        )
        assert result is None
        assert len(store.rows("notifications")) == before

    def test_store_failure_is_logged_not_raised(
        self, repositories, booking, seeded, actor_for, monkeypatch, caplog
    ):
        dispatcher = _dispatcher(repositories)

        def _broken(**fields):
            raise RuntimeError("disk full")

        monkeypatch.setattr(dispatcher.repository, "insert", _broken)

        with caplog.at_level(logging.ERROR):
            result = dispatcher.dispatch(
                booking, _transition(actor_for(seeded.teacher), BookingStatus.CONFIRMED)
            )

        assert result is None
        assert "Failed to create BOOKING_CONFIRMED notification" in caplog.text
