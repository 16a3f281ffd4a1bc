"""Appointment endpoints."""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Body, Response, status
from fastapi.responses import HTMLResponse

from app.dependencies import (
    AdminUser,
    CurrentUser,
    DatabaseSession,
    Delivery,
    Notifier,
    PublicRateLimit,
)
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentPublicResponse,
    AppointmentRejectRequest,
    AppointmentResponse,
)
from app.services.appointment_service import AppointmentService

router = APIRouter()


@router.post(
    "/book",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Submit an intake request",
)
async def book_appointment(
    data: AppointmentCreate,
    current_user: CurrentUser,
    db: DatabaseSession,
    notifier: Notifier,
) -> AppointmentResponse:
    """
    Submit the intake form as a new ``Pending`` appointment.

    The clinic and the patient are emailed on a best-effort basis.

    Args:
        data: Intake form
        current_user: Authenticated patient
        db: Database session
        notifier: Appointment email composer

    Returns:
        Created appointment
    """
    service = AppointmentService(db, notifier)
    return await service.create_appointment(current_user["id"], data)


@router.get(
    "/my",
    response_model=list[AppointmentResponse],
    tags=["Appointments"],
    summary="List own appointments",
)
async def my_appointments(
    current_user: CurrentUser,
    db: DatabaseSession,
) -> list[AppointmentResponse]:
    """List the caller's appointments, newest first."""
    return await AppointmentService(db).list_for_patient(current_user["id"])


@router.get(
    "/admin/all",
    response_model=list[AppointmentResponse],
    tags=["Appointments Admin"],
    summary="List all appointments",
)
async def all_appointments(
    _admin: AdminUser,
    db: DatabaseSession,
) -> list[AppointmentResponse]:
    """List every appointment, newest first."""
    return await AppointmentService(db).list_all()


@router.put(
    "/admin/confirm/{appointment_id}",
    response_model=AppointmentResponse,
    tags=["Appointments Admin"],
    summary="Confirm appointment",
)
async def confirm_appointment(
    appointment_id: UUID,
    admin: AdminUser,
    db: DatabaseSession,
    delivery: Delivery,
    background_tasks: BackgroundTasks,
) -> AppointmentResponse:
    """
    Confirm an appointment and assign its reference ID.

    The response is sent as soon as the confirmation is stored; the slip PDF
    is rendered and emailed afterwards, and its outcome is recorded in
    ``emailStatus``.

    Args:
        appointment_id: Appointment ID
        admin: Authenticated admin
        db: Database session
        delivery: Slip delivery pipeline
        background_tasks: Starlette background task queue

    Returns:
        Confirmed appointment
    """
    appointment = await AppointmentService(db).confirm_appointment(appointment_id, admin["id"])
    background_tasks.add_task(delivery.deliver, appointment)
    return appointment


@router.put(
    "/admin/reject/{appointment_id}",
    response_model=AppointmentResponse,
    tags=["Appointments Admin"],
    summary="Reject appointment",
)
async def reject_appointment(
    appointment_id: UUID,
    admin: AdminUser,
    db: DatabaseSession,
    notifier: Notifier,
    data: AppointmentRejectRequest | None = Body(None),
) -> AppointmentResponse:
    """Reject an appointment, defaulting the reason to ``Schedule conflict``."""
    service = AppointmentService(db, notifier)
    return await service.reject_appointment(
        appointment_id,
        admin["id"],
        data.rejection_reason if data else None,
    )


@router.put(
    "/admin/noshow/{appointment_id}",
    response_model=AppointmentResponse,
    tags=["Appointments Admin"],
    summary="Mark appointment as no-show",
)
async def mark_no_show(
    appointment_id: UUID,
    _admin: AdminUser,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Record that the patient did not attend."""
    return await AppointmentService(db).mark_no_show(appointment_id)


@router.put(
    "/admin/pending/{appointment_id}",
    response_model=AppointmentResponse,
    tags=["Appointments Admin"],
    summary="Revert appointment to pending",
)
async def revert_to_pending(
    appointment_id: UUID,
    _admin: AdminUser,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Move an appointment back to ``Pending``, clearing its reference ID."""
    return await AppointmentService(db).revert_to_pending(appointment_id)


@router.delete(
    "/admin/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Appointments Admin"],
    summary="Delete appointment",
)
async def delete_appointment(
    appointment_id: UUID,
    _admin: AdminUser,
    db: DatabaseSession,
) -> Response:
    """Permanently delete an appointment."""
    await AppointmentService(db).delete_appointment(appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/verify/{appointment_id}",
    response_model=AppointmentPublicResponse,
    dependencies=[PublicRateLimit],
    tags=["Appointments Public"],
    summary="Front-desk verification",
)
async def verify_appointment(
    appointment_id: UUID,
    db: DatabaseSession,
) -> AppointmentPublicResponse:
    """Reduced appointment view for the QR verification page."""
    return await AppointmentService(db).get_public(appointment_id)


@router.get(
    "/slip/{appointment_id}",
    response_class=HTMLResponse,
    dependencies=[PublicRateLimit],
    tags=["Appointments Public"],
    summary="Printable appointment slip",
)
async def appointment_slip(
    appointment_id: UUID,
    db: DatabaseSession,
) -> HTMLResponse:
    """Printable slip HTML; unconfirmed records show ``PENDING``."""
    html = await AppointmentService(db).render_slip_html(appointment_id)
    return HTMLResponse(content=html)


@router.put(
    "/checkin/{appointment_id}",
    response_model=AppointmentResponse,
    dependencies=[PublicRateLimit],
    tags=["Appointments Public"],
    summary="Check in at the front desk",
)
async def check_in(
    appointment_id: UUID,
    db: DatabaseSession,
) -> AppointmentResponse:
    """Flag arrival; only confirmed appointments can be checked in."""
    return await AppointmentService(db).check_in(appointment_id)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
) -> AppointmentResponse:
    """
    Get an appointment for its owner or an admin.

    Args:
        appointment_id: Appointment ID
        current_user: Authenticated user
        db: Database session

    Returns:
        Appointment details
    """
    return await AppointmentService(db).get_appointment(appointment_id, current_user)
