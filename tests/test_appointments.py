"""Tests for appointment endpoints."""

import re
from datetime import UTC, datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
from httpx import AsyncClient

from app.core.exceptions import DocumentRenderError, EmailDeliveryError

REFERENCE_PATTERN = re.compile(r"^[A-Z]+-\d{4}-\d{6}$")


async def _book(client: AsyncClient, headers: dict, data: dict) -> dict:
    response = await client.post("/api/v1/appointments/book", json=data, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _fetch(client: AsyncClient, headers: dict, appointment_id: str) -> dict:
    response = await client.get(f"/api/v1/appointments/{appointment_id}", headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_book_appointment(
    client: AsyncClient,
    auth_headers: dict,
    test_user: dict,
    sample_appointment_data: dict,
    email_outbox,
) -> None:
    """A new request starts Pending without a reference ID."""
    data = await _book(client, auth_headers, sample_appointment_data)

    assert data["fullName"] == "Jane Doe"
    assert data["status"] == "Pending"
    assert data["appointmentId"] is None
    assert data["emailStatus"] == "pending"
    assert data["checkedIn"] is False
    assert data["patientId"] == str(test_user["id"])
    assert data["address"]["city"] == "Madurai"
    assert data["substanceUse"]["type"] is None

    assert email_outbox.subjects() == [
        "New Appointment Request - Jane Doe",
        "Appointment Request Received - SOBER Psychiatric Centre",
    ]
    assert email_outbox.sent[1]["to"] == "jane.doe@example.com"


@pytest.mark.asyncio
async def test_book_accepts_snake_case(client: AsyncClient, auth_headers: dict) -> None:
    data = await _book(
        client,
        auth_headers,
        {"full_name": "Arun Kumar", "phone": "9123456780", "primary_concern": "Insomnia"},
    )
    assert data["fullName"] == "Arun Kumar"
    assert data["appointmentType"] == "Consultation"
    assert data["mode"] == "In-Person"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"primaryConcern": None},
        {"fullName": "   "},
        {"phone": ""},
    ],
)
async def test_book_requires_essential_details(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
    overrides: dict,
) -> None:
    response = await client.post(
        "/api/v1/appointments/book",
        json={**sample_appointment_data, **overrides},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Please provide essential details"


@pytest.mark.asyncio
async def test_book_rejects_malformed_payload(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    response = await client.post(
        "/api/v1/appointments/book",
        json={**sample_appointment_data, "age": "thirty"},
        headers=auth_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_book_requires_authentication(
    client: AsyncClient,
    sample_appointment_data: dict,
) -> None:
    response = await client.post("/api/v1/appointments/book", json=sample_appointment_data)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_booking_survives_email_failure(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
    email_outbox,
) -> None:
    """Submission emails are best-effort."""
    email_outbox.error = EmailDeliveryError("Brevo API Error", status_code=500)

    data = await _book(client, auth_headers, sample_appointment_data)

    assert data["status"] == "Pending"
    assert email_outbox.sent == []


@pytest.mark.asyncio
async def test_my_appointments_newest_first(
    client: AsyncClient,
    auth_headers: dict,
    other_headers: dict,
    sample_appointment_data: dict,
) -> None:
    first = await _book(client, auth_headers, sample_appointment_data)
    second = await _book(client, auth_headers, {**sample_appointment_data, "fullName": "Jane B"})
    await _book(client, other_headers, {**sample_appointment_data, "fullName": "Someone Else"})

    response = await client.get("/api/v1/appointments/my", headers=auth_headers)

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_get_appointment_access(
    client: AsyncClient,
    auth_headers: dict,
    other_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    """Owner and admin can read a record; anyone else is refused."""
    created = await _book(client, auth_headers, sample_appointment_data)
    url = f"/api/v1/appointments/{created['id']}"

    assert (await client.get(url, headers=auth_headers)).status_code == 200
    assert (await client.get(url, headers=admin_headers)).status_code == 200

    response = await client.get(url, headers=other_headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized"


@pytest.mark.asyncio
async def test_get_unknown_appointment(client: AsyncClient, admin_headers: dict) -> None:
    response = await client.get(f"/api/v1/appointments/{uuid4()}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Appointment not found"


@pytest.mark.asyncio
async def test_admin_routes_require_admin(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)

    for method, url in [
        ("GET", "/api/v1/appointments/admin/all"),
        ("PUT", f"/api/v1/appointments/admin/confirm/{created['id']}"),
        ("PUT", f"/api/v1/appointments/admin/reject/{created['id']}"),
        ("DELETE", f"/api/v1/appointments/admin/{created['id']}"),
    ]:
        response = await client.request(method, url, headers=auth_headers)
        assert response.status_code == 403, url
        assert response.json()["message"] == "Admin access required"


@pytest.mark.asyncio
async def test_admin_lists_all_newest_first(
    client: AsyncClient,
    auth_headers: dict,
    other_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    first = await _book(client, auth_headers, sample_appointment_data)
    second = await _book(client, other_headers, sample_appointment_data)

    response = await client.get("/api/v1/appointments/admin/all", headers=admin_headers)

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_confirm_assigns_reference_and_emails_slip(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    admin_user: dict,
    sample_appointment_data: dict,
    email_outbox,
    fake_renderer,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)

    response = await client.put(
        f"/api/v1/appointments/admin/confirm/{created['id']}",
        headers=admin_headers,
    )

    assert response.status_code == 200
    confirmed = response.json()
    assert confirmed["status"] == "Confirmed"
    assert REFERENCE_PATTERN.match(confirmed["appointmentId"])
    year = datetime.now(UTC).astimezone(ZoneInfo("Asia/Kolkata")).year
    assert confirmed["appointmentId"] == f"SOBER-{year}-000001"
    assert confirmed["confirmedBy"] == str(admin_user["id"])
    assert confirmed["confirmedAt"] is not None

    # The background delivery has finished by the time the client returns
    assert confirmed["appointmentId"] in fake_renderer.rendered[0]
    email = email_outbox.sent[-1]
    assert email["subject"] == f"Confirmed: Official Appointment Slip - {confirmed['appointmentId']}"
    assert email["to"] == "jane.doe@example.com"
    assert email["attachments"][0].name == "JaneDoe_Slip.pdf"
    assert email["attachments"][0].content == fake_renderer.pdf

    stored = await _fetch(client, admin_headers, created["id"])
    assert stored["emailStatus"] == "sent"


@pytest.mark.asyncio
async def test_confirm_twice_is_rejected(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    """A confirmed appointment keeps its reference ID."""
    created = await _book(client, auth_headers, sample_appointment_data)
    url = f"/api/v1/appointments/admin/confirm/{created['id']}"
    await client.put(url, headers=admin_headers)
    before = await _fetch(client, admin_headers, created["id"])

    response = await client.put(url, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Already confirmed"
    assert await _fetch(client, admin_headers, created["id"]) == before


@pytest.mark.asyncio
async def test_confirm_unknown_appointment(client: AsyncClient, admin_headers: dict) -> None:
    response = await client.put(
        f"/api/v1/appointments/admin/confirm/{uuid4()}",
        headers=admin_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_render_failure_keeps_confirmation(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
    fake_renderer,
) -> None:
    """A broken slip pipeline never rolls the confirmation back."""
    fake_renderer.error = DocumentRenderError("Chromium crashed")
    created = await _book(client, auth_headers, sample_appointment_data)

    response = await client.put(
        f"/api/v1/appointments/admin/confirm/{created['id']}",
        headers=admin_headers,
    )

    assert response.status_code == 200
    stored = await _fetch(client, admin_headers, created["id"])
    assert stored["status"] == "Confirmed"
    assert stored["appointmentId"] is not None
    assert stored["emailStatus"] == "failed"


@pytest.mark.asyncio
async def test_confirm_without_patient_email_records_failure(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    data = {**sample_appointment_data, "email": None}
    created = await _book(client, auth_headers, data)

    await client.put(f"/api/v1/appointments/admin/confirm/{created['id']}", headers=admin_headers)

    stored = await _fetch(client, admin_headers, created["id"])
    assert stored["status"] == "Confirmed"
    assert stored["emailStatus"] == "failed"


@pytest.mark.asyncio
async def test_revert_to_pending_clears_confirmation(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)
    await client.put(f"/api/v1/appointments/admin/confirm/{created['id']}", headers=admin_headers)

    response = await client.put(
        f"/api/v1/appointments/admin/pending/{created['id']}",
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Pending"
    assert data["appointmentId"] is None
    assert data["confirmedBy"] is None
    assert data["confirmedAt"] is None


@pytest.mark.asyncio
async def test_reconfirm_mints_new_reference(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)
    confirm_url = f"/api/v1/appointments/admin/confirm/{created['id']}"

    first = (await client.put(confirm_url, headers=admin_headers)).json()["appointmentId"]
    await client.put(f"/api/v1/appointments/admin/pending/{created['id']}", headers=admin_headers)
    second = (await client.put(confirm_url, headers=admin_headers)).json()["appointmentId"]

    assert first.endswith("-000001")
    assert second.endswith("-000002")


@pytest.mark.asyncio
async def test_check_in_requires_confirmation(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)

    response = await client.put(f"/api/v1/appointments/checkin/{created['id']}")

    assert response.status_code == 400
    assert response.json()["message"] == "Only confirmed appointments can be checked in"
    assert (await _fetch(client, admin_headers, created["id"]))["checkedIn"] is False


@pytest.mark.asyncio
async def test_check_in_confirmed_appointment(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)
    await client.put(f"/api/v1/appointments/admin/confirm/{created['id']}", headers=admin_headers)

    response = await client.put(f"/api/v1/appointments/checkin/{created['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["checkedIn"] is True
    assert data["checkedInAt"] is not None
    assert data["status"] == "Confirmed"


@pytest.mark.asyncio
async def test_reject_defaults_reason(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
    email_outbox,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)

    response = await client.put(
        f"/api/v1/appointments/admin/reject/{created['id']}",
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Rejected"
    assert data["rejectionReason"] == "Schedule conflict"
    assert email_outbox.sent[-1]["subject"] == (
        "Update on your Appointment Request - SOBER Psychiatric Centre"
    )


@pytest.mark.asyncio
async def test_reject_with_reason(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)

    response = await client.put(
        f"/api/v1/appointments/admin/reject/{created['id']}",
        json={"rejectionReason": "Doctor on leave"},
        headers=admin_headers,
    )

    assert response.json()["rejectionReason"] == "Doctor on leave"


@pytest.mark.asyncio
async def test_reject_survives_email_failure(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
    email_outbox,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)
    email_outbox.error = EmailDeliveryError("no recipient")

    response = await client.put(
        f"/api/v1/appointments/admin/reject/{created['id']}",
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "Rejected"


@pytest.mark.asyncio
async def test_mark_no_show(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)

    response = await client.put(
        f"/api/v1/appointments/admin/noshow/{created['id']}",
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "No-show"


@pytest.mark.asyncio
async def test_delete_appointment(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)

    response = await client.delete(
        f"/api/v1/appointments/admin/{created['id']}",
        headers=admin_headers,
    )
    assert response.status_code == 204

    response = await client.get(f"/api/v1/appointments/{created['id']}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_public_verification_projection(
    client: AsyncClient,
    auth_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)

    response = await client.get(f"/api/v1/appointments/verify/{created['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["fullName"] == "Jane Doe"
    assert data["status"] == "Pending"
    assert data["emergencyContact"]["name"] == "John Doe"
    for private_field in ("emailStatus", "notes", "confirmedBy", "rejectionReason", "bloodGroup"):
        assert private_field not in data


@pytest.mark.asyncio
async def test_public_slip(
    client: AsyncClient,
    auth_headers: dict,
    admin_headers: dict,
    sample_appointment_data: dict,
) -> None:
    created = await _book(client, auth_headers, sample_appointment_data)
    url = f"/api/v1/appointments/slip/{created['id']}"

    pending = await client.get(url)
    assert pending.status_code == 200
    assert pending.headers["content-type"].startswith("text/html")
    assert "PENDING" in pending.text

    confirmed = await client.put(
        f"/api/v1/appointments/admin/confirm/{created['id']}",
        headers=admin_headers,
    )
    slip = await client.get(url)
    assert confirmed.json()["appointmentId"] in slip.text
    assert f"/verify-appointment/{created['id']}" in slip.text
