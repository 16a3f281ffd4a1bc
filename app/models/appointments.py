"""Appointments table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Integer,
    String,
    Table,
    Text,
    Uuid,
)

from app.models.base import metadata, utcnow

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Human-readable reference, assigned on confirmation
    Column("appointment_id", String(32), nullable=True, unique=True),
    # Ownership
    Column("patient_id", Uuid, nullable=True, index=True),
    # Step 1: Identity
    Column("full_name", Text, nullable=False),
    Column("gender", Text),
    Column("date_of_birth", Date),
    Column("age", Integer),
    Column("blood_group", Text),
    Column("height", Text),
    Column("weight", Text),
    Column("govt_id", Text),
    Column("marital_status", Text),
    Column("occupation", Text),
    Column("education", Text),
    # Step 2: Contact
    Column("phone", String(20), nullable=False),
    Column("secondary_phone", String(20)),
    Column("whatsapp", String(20)),
    Column("email", Text),
    Column("address", JSON),
    # Step 3: Emergency & family
    Column("father_name", Text),
    Column("mother_name", Text),
    Column("spouse_name", Text),
    Column("guardian_name", Text),
    Column("guardian_phone", String(20)),
    Column("emergency_contact", JSON),
    Column("family_members_count", Integer),
    Column("family_medical_history", Text),
    Column("family_psychiatric_history", Text),
    # Step 4: Clinical
    Column("primary_concern", Text, nullable=False),
    Column("duration_of_issue", Text),
    Column("previous_treatment", Text),
    Column("current_medications", Text),
    Column("allergies", Text),
    Column("suicidal_thoughts", Text),
    Column("self_harm_history", Text),
    Column("substance_use", JSON),
    Column("smoking_habit", Text),
    Column("medical_conditions", Text),
    Column("insurance_details", Text),
    # Step 5: Preferences (advisory, never enforced)
    Column("preferred_doctor", Text),
    Column("preferred_date", Date),
    Column("preferred_time_slot", Text),
    Column("appointment_type", Text, nullable=False, default="Consultation"),
    Column("mode", Text, nullable=False, default="In-Person"),
    # Status management
    Column("status", Text, nullable=False, default="Pending", server_default="Pending"),
    Column("checked_in", Boolean, nullable=False, default=False),
    Column("checked_in_at", DateTime(timezone=True)),
    Column("confirmed_by", Uuid),
    Column("confirmed_at", DateTime(timezone=True)),
    Column("rejection_reason", Text),
    Column("notes", Text),
    # Confirmation slip delivery outcome
    Column("email_status", Text, nullable=False, default="pending", server_default="pending"),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow, index=True),
    Column("updated_at", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow),
    # Constraints
    CheckConstraint(
        "status IN ('Pending', 'Confirmed', 'Rejected', 'Completed', 'Cancelled', 'No-show')",
        name="appointments_status_check",
    ),
    CheckConstraint(
        "email_status IN ('pending', 'sent', 'failed')",
        name="appointments_email_status_check",
    ),
    CheckConstraint(
        "(confirmed_by IS NULL) = (confirmed_at IS NULL)",
        name="appointments_confirmation_pair_check",
    ),
)
