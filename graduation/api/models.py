"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase, matching the registration frontend.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# Registration flow


class Level1Request(CamelModel):
    """Request model for attendance confirmation."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    promotion: str = Field(..., min_length=1, description="Graduating class / cohort label")
    is_attending: bool = False


class AttendeeIn(CamelModel):
    """Guest entry; incomplete entries are dropped at Level 2."""

    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: str | None = None


class Level2Request(CamelModel):
    """Request model for guest registration."""

    attendee_count: int = Field(..., ge=0)
    attendees: list[AttendeeIn] = []


class AttendeeUpdateIn(AttendeeIn):
    """Guest entry for Level 3; an id updates an existing guest, no id adds one."""

    id: int | None = None


class Level3UpdateRequest(CamelModel):
    """Request model for guest amendments."""

    attendees: list[AttendeeUpdateIn] = []


class MessageResponse(CamelModel):
    message: str


class GraduateName(CamelModel):
    first_name: str
    last_name: str


class AttendeeOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    date_of_birth: date


class Level3Response(CamelModel):
    """Current guest list behind a Level 3 link."""

    graduate: GraduateName
    attendees: list[AttendeeOut]


# Administration


class CreateAdminRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    email: EmailStr


class CreateAdminResponse(CamelModel):
    success: bool
    message: str


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminOut(CamelModel):
    id: int
    username: str
    email: str
    role: str


class LoginResponse(CamelModel):
    token: str
    user: AdminOut


class UpsertAdminRequest(CamelModel):
    username: str = Field(..., min_length=1)
    email: EmailStr
    role: str = Field(..., min_length=1)
    password: str | None = None


class RegistrationSummaryOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    promotion: str
    is_attending: bool | None = None
    registration_complete: bool
    attendee_count: int


class RegistrationsResponse(CamelModel):
    graduates: list[RegistrationSummaryOut]


class GraduateDetailOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    promotion: str
    is_attending: bool | None = None
    registration_complete: bool
    registration_stage: int
    registration_date: datetime | None = None
    last_updated: datetime | None = None


class RegistrationDetailResponse(CamelModel):
    graduate: GraduateDetailOut
    attendees: list[AttendeeOut]


class InvitationIn(CamelModel):
    email: str
    first_name: str | None = None
    last_name: str | None = None
    promotion: str | None = None


class GenerateInvitationsRequest(CamelModel):
    graduates: list[InvitationIn] = Field(..., min_length=1)


class InvitationOut(CamelModel):
    email: str
    status: str
    message: str
    token: str | None = None
    link: str | None = None


class GenerateInvitationsResponse(CamelModel):
    message: str
    invitations: list[InvitationOut]


class SendInvitationsRequest(CamelModel):
    emails: list[str] = Field(..., min_length=1)


class SendResultOut(CamelModel):
    email: str
    status: str
    message: str


class SendInvitationsResponse(CamelModel):
    message: str
    sent: int
    results: list[SendResultOut]


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
