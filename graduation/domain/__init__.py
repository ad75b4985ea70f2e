"""
Domain layer - Pure business logic with zero framework imports.

This package contains the registration state machine, the invitation
batch processor and administrator management. It defines its own port
interfaces for infrastructure abstraction.
"""

from .admins import AdminService, UpsertOutcome
from .exceptions import (
    AdministratorExists,
    AuthError,
    ConflictError,
    Forbidden,
    GraduateNotFound,
    InternalError,
    InvalidToken,
    NotFoundError,
    RegistrationError,
    Unauthorized,
    ValidationError,
)
from .invitations import InvitationRequest, InvitationService
from .ports import (
    AdministratorRepository,
    AttendeeEntry,
    AttendeeRepository,
    AuthTokenCodec,
    GraduateRepository,
    NotificationSender,
    RegistrationState,
)
from .registration import RegistrationService
from .tokens import TokenIssuer

__all__ = [
    "AdminService",
    "AdministratorExists",
    "AdministratorRepository",
    "AttendeeEntry",
    "AttendeeRepository",
    "AuthError",
    "AuthTokenCodec",
    "ConflictError",
    "Forbidden",
    "GraduateNotFound",
    "GraduateRepository",
    "InternalError",
    "InvalidToken",
    "InvitationRequest",
    "InvitationService",
    "NotFoundError",
    "NotificationSender",
    "RegistrationError",
    "RegistrationService",
    "RegistrationState",
    "TokenIssuer",
    "Unauthorized",
    "UpsertOutcome",
    "ValidationError",
]
