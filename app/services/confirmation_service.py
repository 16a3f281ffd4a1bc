"""Slip generation and delivery that runs after a confirmation is committed."""

from collections.abc import Callable
from uuid import UUID

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.templates import render_slip
from app.models.appointments import appointments
from app.schemas.appointments import AppointmentResponse, EmailStatus
from app.services.notification_service import AppointmentNotifier
from app.services.pdf_service import DocumentRenderer

logger = structlog.get_logger(__name__)


class ConfirmationDelivery:
    """
    Render the slip, email it to the patient and record the outcome.

    Runs detached from the request, so it opens its own session and never
    raises: every failure ends up as ``email_status = failed`` in the log.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        renderer: DocumentRenderer,
        notifier: AppointmentNotifier,
    ):
        self.session_factory = session_factory
        self.renderer = renderer
        self.notifier = notifier

    async def deliver(self, appointment: AppointmentResponse) -> EmailStatus:
        """
        Deliver the confirmation slip for a freshly confirmed appointment.

        Args:
            appointment: Snapshot of the appointment as it was confirmed

        Returns:
            Delivery outcome that was recorded
        """
        reference_id = appointment.appointment_id
        try:
            html = render_slip(appointment, reference_id)
            pdf = await self.renderer.render(html)
            receipt = await self.notifier.send_confirmation(appointment, pdf)
            logger.info(
                "confirmation_email_sent",
                appointment_id=str(appointment.id),
                reference_id=reference_id,
                message_id=receipt.get("messageId"),
            )
            await self._record_outcome(appointment.id, reference_id, EmailStatus.SENT)
            return EmailStatus.SENT
        except Exception as e:
            logger.error(
                "confirmation_delivery_failed",
                appointment_id=str(appointment.id),
                reference_id=reference_id,
                error=str(e),
            )
            try:
                await self._record_outcome(appointment.id, reference_id, EmailStatus.FAILED)
            except Exception as update_error:
                logger.error(
                    "email_status_update_failed",
                    appointment_id=str(appointment.id),
                    error=str(update_error),
                )
            return EmailStatus.FAILED

    async def _record_outcome(
        self,
        appointment_id: UUID,
        reference_id: str | None,
        outcome: EmailStatus,
    ) -> None:
        # Only the confirmation that produced this delivery may be updated
        stmt = (
            update(appointments)
            .where(
                appointments.c.id == appointment_id,
                appointments.c.appointment_id == reference_id,
            )
            .values(email_status=outcome.value)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()

        if result.rowcount == 0:
            logger.warning(
                "email_status_stale",
                appointment_id=str(appointment_id),
                reference_id=reference_id,
                outcome=outcome.value,
            )
