"""Transactional email delivery through the Brevo HTTP API."""

import base64
import re
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from app.config import settings
from app.core.exceptions import EmailDeliveryError
from app.core.templates import render_template, slip_filename

logger = structlog.get_logger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:.*?;base64,")
_WHITESPACE = re.compile(r"\s")


@dataclass
class EmailAttachment:
    """File attached to an outgoing email."""

    name: str
    content: bytes | str


def normalize_attachment_content(content: bytes | str) -> str:
    """
    Convert attachment content to the bare base64 string the provider expects.

    Raw bytes are encoded; strings are assumed to be base64 already and have
    any ``data:...;base64,`` prefix and embedded whitespace removed.
    """
    if isinstance(content, bytes):
        return base64.b64encode(content).decode("ascii")
    return _WHITESPACE.sub("", _DATA_URL_PREFIX.sub("", content))


class EmailDispatcher:
    """Send one HTML email to one recipient per call."""

    def __init__(
        self,
        api_key: str | None,
        api_url: str,
        sender_name: str,
        sender_email: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.sender_name = sender_name
        self.sender_email = sender_email
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "EmailDispatcher":
        """Build a dispatcher from application settings."""
        return cls(
            api_key=settings.brevo_api_key,
            api_url=settings.brevo_api_url,
            sender_name=settings.email_from_name,
            sender_email=settings.email_from_address,
            timeout=settings.email_timeout_seconds,
        )

    def build_payload(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> dict[str, Any]:
        """Assemble the provider request body."""
        payload: dict[str, Any] = {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html,
        }
        if attachments:
            payload["attachment"] = [
                {"name": item.name, "content": normalize_attachment_content(item.content)}
                for item in attachments
            ]
        return payload

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> dict[str, Any]:
        """
        Send an email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            attachments: Optional files to attach

        Returns:
            Provider receipt, e.g. ``{"messageId": "..."}``

        Raises:
            EmailDeliveryError: If the API key is missing, the request fails,
                or the provider answers with a non-2xx status
        """
        if not self.api_key:
            raise EmailDeliveryError("BREVO_API_KEY is missing")

        payload = self.build_payload(to, subject, html, attachments)
        headers = {"api-key": self.api_key, "Content-Type": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("email_delivery_failed", to=to, subject=subject, error=str(e))
            raise EmailDeliveryError(f"Email transport error: {e}") from e

        if not response.is_success:
            message = _provider_message(response) or "Brevo API Error"
            logger.error(
                "email_delivery_failed",
                to=to,
                subject=subject,
                status_code=response.status_code,
                error=message,
            )
            raise EmailDeliveryError(message, status_code=response.status_code)

        receipt = response.json() if response.content else {}
        logger.info("email_sent", to=to, subject=subject, message_id=receipt.get("messageId"))
        return receipt


def _provider_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None


class AppointmentNotifier:
    """Compose and send the appointment emails."""

    def __init__(self, dispatcher: EmailDispatcher, admin_email: str | None = None):
        self.dispatcher = dispatcher
        self.admin_email = admin_email or settings.admin_notification_email

    async def send_admin_alert(self, appointment: Any) -> dict[str, Any]:
        """Tell the clinic inbox about a new intake request."""
        html = render_template("emails/admin_alert.html", appointment=appointment)
        return await self.dispatcher.send(
            self.admin_email,
            f"New Appointment Request - {appointment.full_name}",
            html,
        )

    async def send_request_received(self, appointment: Any) -> dict[str, Any]:
        """Acknowledge a submission to the patient."""
        html = render_template("emails/request_received.html", appointment=appointment)
        return await self.dispatcher.send(
            _recipient(appointment),
            f"Appointment Request Received - {settings.clinic_name}",
            html,
        )

    async def send_rejection(self, appointment: Any) -> dict[str, Any]:
        """Tell the patient their request could not be scheduled."""
        html = render_template("emails/rejection.html", appointment=appointment)
        return await self.dispatcher.send(
            _recipient(appointment),
            f"Update on your Appointment Request - {settings.clinic_name}",
            html,
        )

    async def send_confirmation(self, appointment: Any, pdf: bytes) -> dict[str, Any]:
        """
        Send the confirmation email with the slip PDF attached.

        Args:
            appointment: Confirmed appointment
            pdf: Rendered slip

        Returns:
            Provider receipt
        """
        reference_id = appointment.appointment_id
        html = render_template(
            "emails/confirmation.html",
            appointment=appointment,
            reference_id=reference_id,
        )
        return await self.dispatcher.send(
            _recipient(appointment),
            f"Confirmed: Official Appointment Slip - {reference_id}",
            html,
            attachments=[EmailAttachment(name=slip_filename(appointment.full_name), content=pdf)],
        )


def _recipient(appointment: Any) -> str:
    if not appointment.email:
        raise EmailDeliveryError("no recipient")
    return appointment.email
