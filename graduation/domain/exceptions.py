"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each family onto one HTTP status.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class ValidationError(RegistrationError):
    """Missing or malformed input (400)."""

    pass


class NotFoundError(RegistrationError):
    """Unknown email, id or token (404)."""

    pass


class GraduateNotFound(NotFoundError):
    """No graduate row for the given email or id."""

    pass


class InvalidToken(NotFoundError):
    """
    Stage token unknown, expired, or not valid for the current stage.

    The three causes are indistinguishable to callers.
    """

    pass


class AuthError(RegistrationError):
    """Missing, invalid or expired credentials (401)."""

    pass


class Unauthorized(AuthError):
    """Username/password mismatch or bad bearer token."""

    pass


class Forbidden(AuthError):
    """Authenticated caller lacks the required role (403)."""

    pass


class ConflictError(RegistrationError):
    """Request conflicts with stored state (409)."""

    pass


class AdministratorExists(ConflictError):
    """Username or email already taken by another administrator."""

    pass


class InternalError(RegistrationError):
    """Datastore or mail transport failure (500)."""

    pass
