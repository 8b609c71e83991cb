"""HTTP surface of /api/v1/bookings."""

from __future__ import annotations

import pytest

from tests._utils.timeline import iso, session_at

BOOKINGS_URL = "/api/v1/bookings"


def _payload(profile_id: str, day: int = 10, hour: int = 10, minute: int = 0, **extra):
    start, end = session_at(day, hour, minute)
    return {"teacherProfileId": profile_id, "startTime": iso(start), "endTime": iso(end), **extra}


@pytest.fixture
def created(client, seeded, auth_headers):
    response = client.post(
        BOOKINGS_URL,
        json=_payload(seeded.profile.id, notes="First lesson"),
        headers=auth_headers(seeded.student),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get(BOOKINGS_URL)
        assert response.status_code == 401
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "Unauthenticated"

    def test_garbage_token(self, client):
        response = client.get(BOOKINGS_URL, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.headers.get("www-authenticate") == "Bearer"


class TestCreate:
    def test_created_booking_envelope(self, created, seeded):
        assert created["status"] == "PENDING"
        assert created["studentId"] == seeded.student.id
        assert created["teacherProfileId"] == seeded.profile.id
        assert created["notes"] == "First lesson"
        assert created["startTime"].startswith("2025-05-10T10:00:00")

    def test_teacher_cannot_create(self, client, seeded, auth_headers):
        response = client.post(
            BOOKINGS_URL, json=_payload(seeded.profile.id), headers=auth_headers(seeded.teacher)
        )
        assert response.status_code == 403
        assert response.json()["code"] == "Forbidden"

    def test_unknown_teacher(self, client, seeded, auth_headers):
        response = client.post(
            BOOKINGS_URL, json=_payload("01J00000000000000000000000"), headers=auth_headers(seeded.student)
        )
        assert response.status_code == 404
        assert response.json()["code"] == "TeacherNotFound"

    def test_unapproved_teacher(self, client, seeded, auth_headers):
        response = client.post(
            BOOKINGS_URL,
            json=_payload(seeded.pending_profile.id),
            headers=auth_headers(seeded.student),
        )
        assert response.status_code == 404

    def test_slot_unavailable(self, client, created, seeded, auth_headers):
        response = client.post(
            BOOKINGS_URL,
            json=_payload(seeded.profile.id, minute=30),
            headers=auth_headers(seeded.other_student),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "SlotUnavailable"

    def test_invalid_range(self, client, seeded, auth_headers):
        start, _ = session_at(10, 10)
        response = client.post(
            BOOKINGS_URL,
            json={"teacherProfileId": seeded.profile.id, "startTime": iso(start), "endTime": iso(start)},
            headers=auth_headers(seeded.student),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "InvalidTimeRange"

    def test_malformed_body(self, client, seeded, auth_headers):
        response = client.post(
            BOOKINGS_URL,
            json={"teacherProfileId": seeded.profile.id, "startTime": "tomorrow"},
            headers=auth_headers(seeded.student),
        )
        body = response.json()
        assert response.status_code == 400
        assert body["code"] == "ValidationError"
        assert {tuple(e["loc"])[-1] for e in body["errors"]} >= {"startTime", "endTime"}

    def test_unknown_fields_are_rejected(self, client, seeded, auth_headers):
        response = client.post(
            BOOKINGS_URL,
            json=_payload(seeded.profile.id, price=10),
            headers=auth_headers(seeded.student),
        )
        assert response.status_code == 400


class TestRead:
    def test_detail_includes_party_summaries(self, client, created, seeded, auth_headers):
        response = client.get(f"{BOOKINGS_URL}/{created['id']}", headers=auth_headers(seeded.teacher))
        body = response.json()

        assert response.status_code == 200
        assert body["id"] == created["id"]
        assert body["student"] == {
            "id": seeded.student.id,
            "name": "Sam Student",
            "email": "sam@example.com",
        }
        assert body["teacherProfile"]["name"] == "Tara Teacher"
        assert body["teacherProfile"]["approvalStatus"] == "APPROVED"

    def test_outsider_is_forbidden(self, client, created, seeded, auth_headers):
        response = client.get(
            f"{BOOKINGS_URL}/{created['id']}", headers=auth_headers(seeded.other_student)
        )
        assert response.status_code == 403

    def test_missing(self, client, seeded, auth_headers):
        response = client.get(f"{BOOKINGS_URL}/nope", headers=auth_headers(seeded.admin))
        assert response.status_code == 404
        assert response.json()["instance"] == f"{BOOKINGS_URL}/nope"


class TestList:
    def test_student_listing_metadata(self, client, created, seeded, auth_headers):
        response = client.get(BOOKINGS_URL, headers=auth_headers(seeded.student))
        body = response.json()

        assert response.status_code == 200
        assert [b["id"] for b in body["data"]] == [created["id"]]
        assert body["metadata"] == {"total": 1, "page": 1, "limit": 10, "totalPages": 1}

    def test_filters_use_camel_case_params(self, client, created, seeded, auth_headers):
        response = client.get(
            BOOKINGS_URL,
            params={
                "status": "CONFIRMED,CANCELLED",
                "teacherProfileId": seeded.profile.id,
                "fromDate": "2025-05-01T00:00:00Z",
            },
            headers=auth_headers(seeded.admin),
        )
        assert response.status_code == 200
        assert response.json()["metadata"]["total"] == 0

    def test_teacher_without_profile(self, client, seeded, auth_headers):
        response = client.get(BOOKINGS_URL, headers=auth_headers(seeded.teacher_without_profile))
        assert response.status_code == 404

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 101}, {"status": "LOST"}])
    def test_bad_query(self, client, seeded, auth_headers, params):
        response = client.get(BOOKINGS_URL, params=params, headers=auth_headers(seeded.admin))
        assert response.status_code == 400


class TestUpdateAndCancel:
    def test_teacher_confirms_with_link(self, client, created, seeded, auth_headers):
        response = client.patch(
            f"{BOOKINGS_URL}/{created['id']}",
            json={"status": "confirmed", "meetingLink": "https://meet.example.com/abc"},
            headers=auth_headers(seeded.teacher),
        )
        body = response.json()
        assert response.status_code == 200
        assert body["data"]["status"] == "CONFIRMED"
        assert body["data"]["meetingLink"] == "https://meet.example.com/abc"
        assert body["message"]

    def test_student_cannot_confirm(self, client, created, seeded, auth_headers):
        response = client.patch(
            f"{BOOKINGS_URL}/{created['id']}",
            json={"status": "CONFIRMED"},
            headers=auth_headers(seeded.student),
        )
        assert response.status_code == 403
        assert response.json()["code"] == "TransitionDenied"

    def test_delete_is_a_soft_cancel(self, client, created, seeded, auth_headers):
        response = client.delete(
            f"{BOOKINGS_URL}/{created['id']}",
            params={"reason": "Schedule clash"},
            headers=auth_headers(seeded.student),
        )
        data = response.json()["data"]
        assert response.status_code == 200
        assert data["status"] == "CANCELLED"
        assert data["cancelReason"] == "Schedule clash"
        assert data["canceledBy"] == seeded.student.id

        again = client.get(f"{BOOKINGS_URL}/{created['id']}", headers=auth_headers(seeded.student))
        assert again.json()["status"] == "CANCELLED"

    def test_cancelled_booking_cannot_be_revived(self, client, created, seeded, auth_headers):
        client.delete(f"{BOOKINGS_URL}/{created['id']}", headers=auth_headers(seeded.student))
        response = client.patch(
            f"{BOOKINGS_URL}/{created['id']}",
            json={"status": "CONFIRMED"},
            headers=auth_headers(seeded.admin),
        )
        assert response.status_code == 403

    def test_patch_and_delete_share_the_reason_policy(self, client, make_booking, seeded, auth_headers):
        via_patch = make_booking(day=11)
        via_delete = make_booking(day=12)

        patched = client.patch(
            f"{BOOKINGS_URL}/{via_patch.id}",
            json={"status": "CANCELLED"},
            headers=auth_headers(seeded.student),
        ).json()["data"]
        deleted = client.delete(
            f"{BOOKINGS_URL}/{via_delete.id}", headers=auth_headers(seeded.student)
        ).json()["data"]

        assert patched["cancelReason"] == deleted["cancelReason"]
        assert patched["cancelReason"]
