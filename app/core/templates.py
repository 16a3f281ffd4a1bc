"""Jinja2 rendering for the appointment slip and the transactional emails."""

import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from app.config import settings

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

NOT_AVAILABLE = "N/A"


def long_date(value: date | datetime | str | None) -> str:
    """Format like ``1 March 2025``."""
    parsed = _as_date(value)
    if parsed is None:
        return NOT_AVAILABLE
    return f"{parsed.day} {parsed:%B %Y}"


def short_date(value: date | datetime | str | None) -> str:
    """Format like ``1 Mar 2025``."""
    parsed = _as_date(value)
    if parsed is None:
        return NOT_AVAILABLE
    return f"{parsed.day} {parsed:%b %Y}"


def _as_date(value: date | datetime | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        return None


def format_address(value: Any) -> str:
    """Flatten an address object into ``street, city, state - pincode``."""
    if value is None:
        return "Not Provided"

    if isinstance(value, str):
        if not value.startswith("{"):
            return value or "Not Provided"
        try:
            value = json.loads(value.replace("'", '"'))
        except ValueError:
            return value

    if not isinstance(value, dict):
        value = value.model_dump() if hasattr(value, "model_dump") else vars(value)

    parts = [(value.get(key) or "").strip() for key in ("street", "city", "state")]
    locality = ", ".join(part for part in parts if part)
    pincode = (value.get("pincode") or "").strip()
    if locality and pincode:
        return f"{locality} - {pincode}"
    return locality or pincode or "Not Provided"


def slip_filename(full_name: str | None) -> str:
    """Attachment name: alphanumeric patient name (max 30 chars) + ``_Slip.pdf``."""
    safe_name = re.sub(r"[^a-zA-Z0-9]", "", full_name or "")[:30]
    return f"{safe_name or 'Appointment'}_Slip.pdf"


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["long_date"] = long_date
    env.filters["short_date"] = short_date
    env.filters["address"] = format_address
    env.globals["clinic"] = {
        "name": settings.clinic_name,
        "address": settings.clinic_address,
        "helpline": settings.clinic_helpline,
    }
    return env


jinja_env = _build_environment()


def render_template(name: str, **context: Any) -> str:
    """Render any template under ``app/templates``."""
    context.setdefault("frontend_url", settings.frontend_url.rstrip("/"))
    context.setdefault("current_year", datetime.now().year)
    return jinja_env.get_template(name).render(**context)


def render_slip(appointment: Any, reference_id: str | None) -> str:
    """
    Build the self-contained slip document for an appointment.

    The same HTML is served to browsers and printed to PDF, so it carries its
    own styles and print rules.
    """
    return render_template(
        "slip.html",
        appointment=appointment,
        reference_id=reference_id or "PENDING",
    )
