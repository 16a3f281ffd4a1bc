"""Human-readable appointment reference IDs (``SOBER-2025-000042``)."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.appointment_sequences import appointment_sequences
from app.models.appointments import appointments
from app.models.base import utcnow
from app.schemas.appointments import AppointmentStatus

SEQUENCE_WIDTH = 6

# Statuses that held a reference ID before per-year counters existed
NUMBERED_STATUSES = (AppointmentStatus.CONFIRMED.value, AppointmentStatus.COMPLETED.value)


def format_reference_id(prefix: str, year: int, sequence: int) -> str:
    """Render ``<PREFIX>-<YEAR>-<SEQUENCE>`` with a zero-padded sequence."""
    return f"{prefix}-{year:04d}-{sequence:0{SEQUENCE_WIDTH}d}"


class ReferenceIdGenerator:
    """
    Reserve the next number in a per-year sequence.

    The counter row is incremented atomically inside the caller's transaction,
    so concurrent confirmations never read the same value and a rolled-back
    confirmation gives its number back.
    """

    def __init__(
        self,
        db: AsyncSession,
        prefix: str | None = None,
        timezone: str | None = None,
    ):
        """Initialize generator bound to the caller's session."""
        self.db = db
        self.prefix = prefix or settings.reference_id_prefix
        self.tz = ZoneInfo(timezone or settings.clinic_timezone)

    def year_of(self, at: datetime) -> int:
        """Calendar year of ``at`` as seen from the clinic."""
        if at.tzinfo is None:
            at = at.replace(tzinfo=UTC)
        return at.astimezone(self.tz).year

    async def next_id(self, at: datetime) -> str:
        """
        Reserve and format the reference ID for a confirmation at ``at``.

        Args:
            at: Confirmation instant

        Returns:
            Reference ID such as ``SOBER-2025-000042``
        """
        year = self.year_of(at)
        sequence = await self._reserve(year)
        return format_reference_id(self.prefix, year, sequence)

    async def _reserve(self, year: int) -> int:
        bump = (
            update(appointment_sequences)
            .where(appointment_sequences.c.year == year)
            .values(
                last_value=appointment_sequences.c.last_value + 1,
                updated_at=utcnow(),
            )
            .returning(appointment_sequences.c.last_value)
        )
        value = (await self.db.execute(bump)).scalar_one_or_none()
        if value is not None:
            return value

        # First confirmation of the year: continue from the numbers already
        # handed out by counting existing confirmed records.
        seed = await self.count_numbered(year)
        dialect = postgresql if self.db.get_bind().dialect.name == "postgresql" else sqlite
        upsert = dialect.insert(appointment_sequences).values(year=year, last_value=seed + 1)
        upsert = upsert.on_conflict_do_update(
            index_elements=[appointment_sequences.c.year],
            set_={
                "last_value": appointment_sequences.c.last_value + 1,
                "updated_at": utcnow(),
            },
        ).returning(appointment_sequences.c.last_value)
        return (await self.db.execute(upsert)).scalar_one()

    async def count_numbered(self, year: int) -> int:
        """Count appointments created in ``year`` that are Confirmed or Completed."""
        start = datetime(year, 1, 1, tzinfo=self.tz).astimezone(UTC)
        end = datetime(year + 1, 1, 1, tzinfo=self.tz).astimezone(UTC)

        stmt = (
            select(func.count())
            .select_from(appointments)
            .where(
                appointments.c.created_at >= start,
                appointments.c.created_at < end,
                appointments.c.status.in_(NUMBERED_STATUSES),
            )
        )
        return (await self.db.execute(stmt)).scalar() or 0
