"""Database models."""

from app.models.appointment_sequences import appointment_sequences
from app.models.appointments import appointments
from app.models.base import metadata
from app.models.users import users

__all__ = [
    "appointment_sequences",
    "appointments",
    "metadata",
    "users",
]
