"""Appointment schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    REJECTED = "Rejected"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No-show"


class EmailStatus(str, Enum):
    """Delivery outcome of the confirmation slip email."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class AppointmentType(str, Enum):
    """Kind of visit requested."""

    GENERAL_CONSULTATION = "General Consultation"
    FOLLOW_UP_VISIT = "Follow-up Visit"
    DIAGNOSTIC_REVIEW = "Diagnostic Review"
    CONSULTATION = "Consultation"
    OP = "OP"
    IP = "IP"


class AppointmentMode(str, Enum):
    """How the consultation takes place."""

    IN_PERSON = "In-Person"
    ONLINE = "Online"


def _blank_strings_to_none(data: Any) -> Any:
    """Treat untouched form inputs ("") as missing values."""
    if isinstance(data, dict):
        return {
            key: None if isinstance(value, str) and not value.strip() else value
            for key, value in data.items()
        }
    return data


class CamelModel(BaseModel):
    """Base schema speaking camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Address(CamelModel):
    """Postal address captured in the contact step."""

    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None


class EmergencyContact(CamelModel):
    """Person to call in an emergency."""

    name: str | None = None
    phone: str | None = None


class SubstanceUse(CamelModel):
    """Substance use history from the clinical step."""

    substance_type: str | None = Field(None, alias="type")
    frequency: str | None = None
    last_consumption: date | None = None

    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data: Any) -> Any:
        """Drop empty form inputs before field validation."""
        return _blank_strings_to_none(data)


class AppointmentIntake(CamelModel):
    """Fields of the multi-step intake form."""

    # Step 1: Identity
    full_name: str | None = Field(None, max_length=200)
    gender: str | None = None
    date_of_birth: date | None = None
    age: int | None = Field(None, ge=0, le=150)
    blood_group: str | None = None
    height: str | None = None
    weight: str | None = None
    govt_id: str | None = None
    marital_status: str | None = None
    occupation: str | None = None
    education: str | None = None

    # Step 2: Contact
    phone: str | None = Field(None, max_length=20)
    secondary_phone: str | None = Field(None, max_length=20)
    whatsapp: str | None = Field(None, max_length=20)
    email: EmailStr | None = None
    address: Address | None = None

    # Step 3: Emergency & family
    father_name: str | None = None
    mother_name: str | None = None
    spouse_name: str | None = None
    guardian_name: str | None = None
    guardian_phone: str | None = Field(None, max_length=20)
    emergency_contact: EmergencyContact | None = None
    family_members_count: int | None = Field(None, ge=0)
    family_medical_history: str | None = None
    family_psychiatric_history: str | None = None

    # Step 4: Clinical
    primary_concern: str | None = Field(None, max_length=2000)
    duration_of_issue: str | None = None
    previous_treatment: str | None = None
    current_medications: str | None = None
    allergies: str | None = None
    suicidal_thoughts: str | None = None
    self_harm_history: str | None = None
    substance_use: SubstanceUse | None = None
    smoking_habit: str | None = None
    medical_conditions: str | None = None
    insurance_details: str | None = None

    # Step 5: Preferences
    preferred_doctor: str | None = None
    preferred_date: date | None = None
    preferred_time_slot: str | None = None
    appointment_type: AppointmentType = AppointmentType.CONSULTATION
    mode: AppointmentMode = AppointmentMode.IN_PERSON


class AppointmentCreate(AppointmentIntake):
    """Schema for submitting a new intake request."""

    @model_validator(mode="before")
    @classmethod
    def blank_strings_to_none(cls, data: Any) -> Any:
        """Drop empty form inputs before field validation."""
        return _blank_strings_to_none(data)


class AppointmentRejectRequest(CamelModel):
    """Optional payload of the reject action."""

    rejection_reason: str | None = Field(None, max_length=1000)


class AppointmentResponse(AppointmentIntake):
    """Schema for appointment response."""

    id: UUID
    appointment_id: str | None = None
    patient_id: UUID | None = None
    full_name: str
    phone: str
    primary_concern: str
    email: str | None = None
    status: AppointmentStatus
    checked_in: bool = False
    checked_in_at: datetime | None = None
    confirmed_by: UUID | None = None
    confirmed_at: datetime | None = None
    rejection_reason: str | None = None
    notes: str | None = None
    email_status: EmailStatus
    created_at: datetime
    updated_at: datetime


class AppointmentPublicResponse(CamelModel):
    """Reduced projection shown on the front-desk verification page."""

    id: UUID
    appointment_id: str | None = None
    patient_id: UUID | None = None
    full_name: str
    gender: str | None = None
    date_of_birth: date | None = None
    age: int | None = None
    phone: str
    email: str | None = None
    govt_id: str | None = None
    occupation: str | None = None
    address: Address | None = None
    emergency_contact: EmergencyContact | None = None
    primary_concern: str
    duration_of_issue: str | None = None
    substance_use: SubstanceUse | None = None
    previous_treatment: str | None = None
    current_medications: str | None = None
    family_psychiatric_history: str | None = None
    preferred_doctor: str | None = None
    preferred_date: date | None = None
    preferred_time_slot: str | None = None
    status: AppointmentStatus
    checked_in: bool = False
