"""Create users, appointments and appointment_sequences tables.

Revision ID: 001
Revises:
Create Date: 2025-03-01 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False, server_default="patient"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("role IN ('patient', 'admin')", name="users_role_check"),
    )
    op.create_index("idx_users_email", "users", ["email"], unique=True)

    op.create_table(
        "appointments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("appointment_id", sa.String(32), nullable=True),
        sa.Column("patient_id", sa.Uuid(), nullable=True),
        # Identity
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("gender", sa.Text()),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("age", sa.Integer()),
        sa.Column("blood_group", sa.Text()),
        sa.Column("height", sa.Text()),
        sa.Column("weight", sa.Text()),
        sa.Column("govt_id", sa.Text()),
        sa.Column("marital_status", sa.Text()),
        sa.Column("occupation", sa.Text()),
        sa.Column("education", sa.Text()),
        # Contact
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("secondary_phone", sa.String(20)),
        sa.Column("whatsapp", sa.String(20)),
        sa.Column("email", sa.Text()),
        sa.Column("address", sa.JSON()),
        # Emergency & family
        sa.Column("father_name", sa.Text()),
        sa.Column("mother_name", sa.Text()),
        sa.Column("spouse_name", sa.Text()),
        sa.Column("guardian_name", sa.Text()),
        sa.Column("guardian_phone", sa.String(20)),
        sa.Column("emergency_contact", sa.JSON()),
        sa.Column("family_members_count", sa.Integer()),
        sa.Column("family_medical_history", sa.Text()),
        sa.Column("family_psychiatric_history", sa.Text()),
        # Clinical
        sa.Column("primary_concern", sa.Text(), nullable=False),
        sa.Column("duration_of_issue", sa.Text()),
        sa.Column("previous_treatment", sa.Text()),
        sa.Column("current_medications", sa.Text()),
        sa.Column("allergies", sa.Text()),
        sa.Column("suicidal_thoughts", sa.Text()),
        sa.Column("self_harm_history", sa.Text()),
        sa.Column("substance_use", sa.JSON()),
        sa.Column("smoking_habit", sa.Text()),
        sa.Column("medical_conditions", sa.Text()),
        sa.Column("insurance_details", sa.Text()),
        # Preferences
        sa.Column("preferred_doctor", sa.Text()),
        sa.Column("preferred_date", sa.Date()),
        sa.Column("preferred_time_slot", sa.Text()),
        sa.Column("appointment_type", sa.Text(), nullable=False, server_default="Consultation"),
        sa.Column("mode", sa.Text(), nullable=False, server_default="In-Person"),
        # Status management
        sa.Column("status", sa.Text(), nullable=False, server_default="Pending"),
        sa.Column("checked_in", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("checked_in_at", sa.TIMESTAMP(timezone=True)),
        sa.Column("confirmed_by", sa.Uuid()),
        sa.Column("confirmed_at", sa.TIMESTAMP(timezone=True)),
        sa.Column("rejection_reason", sa.Text()),
        sa.Column("notes", sa.Text()),
        sa.Column("email_status", sa.Text(), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.UniqueConstraint("appointment_id", name="appointments_appointment_id_key"),
        sa.CheckConstraint(
            "status IN ('Pending', 'Confirmed', 'Rejected', 'Completed', 'Cancelled', 'No-show')",
            name="appointments_status_check",
        ),
        sa.CheckConstraint(
            "email_status IN ('pending', 'sent', 'failed')",
            name="appointments_email_status_check",
        ),
        sa.CheckConstraint(
            "(confirmed_by IS NULL) = (confirmed_at IS NULL)",
            name="appointments_confirmation_pair_check",
        ),
    )
    op.create_index("idx_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("idx_appointments_created_at", "appointments", ["created_at"])

    op.create_table(
        "appointment_sequences",
        sa.Column("year", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("last_value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("appointment_sequences")
    op.drop_index("idx_appointments_created_at", table_name="appointments")
    op.drop_index("idx_appointments_patient_id", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("idx_users_email", table_name="users")
    op.drop_table("users")
