"""Per-year counters backing the human-readable appointment reference IDs."""

from sqlalchemy import Column, DateTime, Integer, Table

from app.models.base import metadata, utcnow

appointment_sequences = Table(
    "appointment_sequences",
    metadata,
    Column("year", Integer, primary_key=True, autoincrement=False),
    Column("last_value", Integer, nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow),
)
