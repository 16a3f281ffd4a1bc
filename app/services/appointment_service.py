"""Appointment service for business logic."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, NotFoundException, UnauthorizedException
from app.core.templates import render_slip
from app.models.appointments import appointments
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentPublicResponse,
    AppointmentResponse,
    EmailStatus,
)
from app.services.lifecycle import AppointmentAction, resolve_transition
from app.services.notification_service import AppointmentNotifier
from app.services.reference_ids import ReferenceIdGenerator

logger = structlog.get_logger(__name__)

ESSENTIAL_FIELDS = ("full_name", "phone", "primary_concern")
NESTED_FIELDS = {"address", "emergency_contact", "substance_use"}


class AppointmentService:
    """Service for managing appointments."""

    DEFAULT_REJECTION_REASON = "Schedule conflict"

    def __init__(self, db: AsyncSession, notifier: AppointmentNotifier | None = None):
        """Initialize service with database session and optional email notifier."""
        self.db = db
        self.notifier = notifier

    async def create_appointment(
        self,
        patient_id: UUID,
        data: AppointmentCreate,
    ) -> AppointmentResponse:
        """
        Create a new appointment request.

        Args:
            patient_id: ID of the submitting patient
            data: Intake form data

        Returns:
            Created appointment in ``Pending`` status

        Raises:
            BadRequestException: If name, phone or primary concern is missing
        """
        if any(not (getattr(data, field) or "").strip() for field in ESSENTIAL_FIELDS):
            raise BadRequestException("Please provide essential details")

        values = data.model_dump(exclude=NESTED_FIELDS)
        for field in NESTED_FIELDS:
            nested = getattr(data, field)
            values[field] = nested.model_dump(mode="json", by_alias=True) if nested else None
        values["appointment_type"] = data.appointment_type.value
        values["mode"] = data.mode.value
        values["patient_id"] = patient_id

        stmt = insert(appointments).values(**values).returning(appointments)
        result = await self.db.execute(stmt)
        await self.db.commit()

        appointment = AppointmentResponse.model_validate(dict(result.fetchone()._mapping))
        logger.info(
            "appointment_submitted",
            appointment_id=str(appointment.id),
            patient_id=str(patient_id),
        )

        await self._notify("admin_alert", appointment)
        await self._notify("request_received", appointment)

        return appointment

    async def list_for_patient(self, patient_id: UUID) -> list[AppointmentResponse]:
        """List a patient's own appointments, newest first."""
        stmt = (
            select(appointments)
            .where(appointments.c.patient_id == patient_id)
            .order_by(appointments.c.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [AppointmentResponse.model_validate(dict(row._mapping)) for row in result]

    async def list_all(self) -> list[AppointmentResponse]:
        """List every appointment, newest first."""
        stmt = select(appointments).order_by(appointments.c.created_at.desc())
        result = await self.db.execute(stmt)
        return [AppointmentResponse.model_validate(dict(row._mapping)) for row in result]

    async def get_appointment(self, appointment_id: UUID, user: dict) -> AppointmentResponse:
        """
        Get appointment by ID for its owner or an admin.

        Raises:
            NotFoundException: If appointment not found
            UnauthorizedException: If the caller is neither owner nor admin
        """
        row = await self._get_row(appointment_id)

        if user["role"] != "admin" and row.patient_id != user["id"]:
            raise UnauthorizedException("Not authorized")

        return AppointmentResponse.model_validate(dict(row._mapping))

    async def get_public(self, appointment_id: UUID) -> AppointmentPublicResponse:
        """Reduced view used by the front desk, no account needed."""
        row = await self._get_row(appointment_id)
        return AppointmentPublicResponse.model_validate(dict(row._mapping))

    async def render_slip_html(self, appointment_id: UUID) -> str:
        """Render the printable slip; unconfirmed records show ``PENDING``."""
        row = await self._get_row(appointment_id)
        appointment = AppointmentResponse.model_validate(dict(row._mapping))
        return render_slip(appointment, appointment.appointment_id)

    async def confirm_appointment(
        self,
        appointment_id: UUID,
        admin_id: UUID,
        confirmed_at: datetime | None = None,
    ) -> AppointmentResponse:
        """
        Confirm an appointment and assign its reference ID.

        The reference number is reserved in the same transaction as the
        status change, so a failed update releases it again.

        Args:
            appointment_id: Appointment ID
            admin_id: Confirming admin
            confirmed_at: Confirmation instant, defaults to now

        Returns:
            Confirmed appointment

        Raises:
            NotFoundException: If appointment not found
            TransitionConflictException: If it is already confirmed
        """
        row = await self._get_row(appointment_id)
        status = resolve_transition(AppointmentAction.CONFIRM, row.status)

        confirmed_at = confirmed_at or datetime.now(UTC)
        reference_id = await ReferenceIdGenerator(self.db).next_id(confirmed_at)

        if row.appointment_id:
            logger.info(
                "reference_id_superseded",
                appointment_id=str(appointment_id),
                previous_reference_id=row.appointment_id,
                reference_id=reference_id,
            )

        appointment = await self._apply(
            appointment_id,
            status=status.value,
            appointment_id=reference_id,
            confirmed_by=admin_id,
            confirmed_at=confirmed_at,
            email_status=EmailStatus.PENDING.value,
        )
        logger.info(
            "appointment_confirmed",
            appointment_id=str(appointment_id),
            reference_id=reference_id,
            admin_id=str(admin_id),
        )
        return appointment

    async def reject_appointment(
        self,
        appointment_id: UUID,
        admin_id: UUID,
        reason: str | None = None,
    ) -> AppointmentResponse:
        """
        Reject an appointment and notify the patient.

        A missing or blank reason falls back to ``DEFAULT_REJECTION_REASON``.
        """
        row = await self._get_row(appointment_id)
        status = resolve_transition(AppointmentAction.REJECT, row.status)

        appointment = await self._apply(
            appointment_id,
            status=status.value,
            rejection_reason=(reason or "").strip() or self.DEFAULT_REJECTION_REASON,
            confirmed_by=admin_id,
            confirmed_at=datetime.now(UTC),
        )
        logger.info("appointment_rejected", appointment_id=str(appointment_id))

        await self._notify("rejection", appointment)
        return appointment

    async def revert_to_pending(self, appointment_id: UUID) -> AppointmentResponse:
        """Move an appointment back to ``Pending`` and drop its confirmation."""
        row = await self._get_row(appointment_id)
        status = resolve_transition(AppointmentAction.REVERT_TO_PENDING, row.status)

        return await self._apply(
            appointment_id,
            status=status.value,
            appointment_id=None,
            confirmed_by=None,
            confirmed_at=None,
        )

    async def mark_no_show(self, appointment_id: UUID) -> AppointmentResponse:
        """Record that the patient did not turn up."""
        row = await self._get_row(appointment_id)
        status = resolve_transition(AppointmentAction.MARK_NO_SHOW, row.status)
        return await self._apply(appointment_id, status=status.value)

    async def check_in(
        self,
        appointment_id: UUID,
        at: datetime | None = None,
    ) -> AppointmentResponse:
        """
        Flag arrival at the front desk.

        Raises:
            TransitionConflictException: Unless the appointment is confirmed
        """
        row = await self._get_row(appointment_id)
        resolve_transition(AppointmentAction.CHECK_IN, row.status)

        return await self._apply(
            appointment_id,
            checked_in=True,
            checked_in_at=at or datetime.now(UTC),
        )

    async def delete_appointment(self, appointment_id: UUID) -> None:
        """Permanently delete an appointment."""
        await self._get_row(appointment_id)

        await self.db.execute(delete(appointments).where(appointments.c.id == appointment_id))
        await self.db.commit()
        logger.info("appointment_deleted", appointment_id=str(appointment_id))

    async def _get_row(self, appointment_id: UUID):
        result = await self.db.execute(
            select(appointments).where(appointments.c.id == appointment_id)
        )
        row = result.fetchone()
        if not row:
            raise NotFoundException("Appointment not found")
        return row

    async def _apply(self, record_id: UUID, /, **values: Any) -> AppointmentResponse:
        stmt = (
            update(appointments)
            .where(appointments.c.id == record_id)
            .values(**values)
            .returning(appointments)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()

        if not row:
            raise NotFoundException("Appointment not found")
        return AppointmentResponse.model_validate(dict(row._mapping))

    async def _notify(self, kind: str, appointment: AppointmentResponse) -> None:
        # Submission and rejection emails never fail the operation
        if self.notifier is None:
            return
        try:
            await getattr(self.notifier, f"send_{kind}")(appointment)
        except Exception as e:
            logger.warning(
                "appointment_notification_failed",
                kind=kind,
                appointment_id=str(appointment.id),
                error=str(e),
            )
