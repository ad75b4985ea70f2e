"""
Administrator domain service - accounts, login and registration review.

Passwords are hashed with bcrypt. Login always runs one bcrypt comparison,
against a dummy hash when the username is unknown, so response time does
not reveal which usernames exist.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import bcrypt

from .exceptions import Forbidden, GraduateNotFound, Unauthorized, ValidationError
from .ports import (
    Administrator,
    AdministratorRepository,
    Attendee,
    AttendeeRepository,
    AuthTokenCodec,
    Graduate,
    GraduateRepository,
    RegistrationSummary,
)

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

# Pre-computed bcrypt hash for timing oracle prevention.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10)).decode()


class UpsertOutcome(Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass
class LoginResult:
    token: str
    admin: Administrator


@dataclass
class RegistrationDetail:
    graduate: Graduate
    attendees: list[Attendee]


@dataclass
class AdminService:
    """Domain service for administrator accounts and registration review."""

    administrators: AdministratorRepository
    graduates: GraduateRepository
    attendees: AttendeeRepository
    token_codec: AuthTokenCodec
    bcrypt_cost: int = 10

    def create_admin(self, username: str, password: str, email: str) -> int:
        """
        Create an administrator with the ``admin`` role.

        Raises:
            AdministratorExists: If the username or email is taken
        """
        admin_id = self.administrators.create(
            username, email, self._hash_password(password), ADMIN_ROLE
        )
        logger.info("Created administrator %s", username)
        return admin_id

    def login(self, username: str, password: str) -> LoginResult:
        """
        Check credentials and issue a bearer token.

        Raises:
            Unauthorized: If the username is unknown or the password is wrong
        """
        admin = self.administrators.find_by_username(username)
        stored_hash = admin.password_hash if admin is not None else _DUMMY_BCRYPT_HASH

        # Always run bcrypt so unknown usernames cost the same as bad passwords
        password_valid = bcrypt.checkpw(password.encode(), stored_hash.encode())

        if admin is None or not password_valid:
            logger.warning("Failed login attempt for %s", username)
            raise Unauthorized("Invalid username or password")

        self.administrators.touch_last_login(admin.id)
        token = self.token_codec.encode(
            {"id": admin.id, "username": admin.username, "role": admin.role}
        )
        logger.info("Administrator %s logged in", admin.username)
        return LoginResult(token=token, admin=admin)

    def upsert_admin(
        self,
        caller: dict[str, Any],
        username: str,
        email: str,
        role: str,
        password: str | None = None,
    ) -> UpsertOutcome:
        """
        Create an administrator, or update the one matching username or email.

        Only fields that differ from the stored row are written; a password,
        when given, is always rehashed and written.

        Raises:
            Forbidden: If the caller is not an admin
            ValidationError: If a new administrator has no password
        """
        if caller.get("role") != ADMIN_ROLE:
            raise Forbidden("Unauthorized")

        existing = self.administrators.find_by_username_or_email(username, email)
        if existing is None:
            if not password:
                raise ValidationError("Password is required for new users")
            self.administrators.create(username, email, self._hash_password(password), role)
            logger.info("Administrator %s created by %s", username, caller.get("username"))
            return UpsertOutcome.CREATED

        changes: dict[str, Any] = {}
        if email != existing.email:
            changes["email"] = email
        if role != existing.role:
            changes["role"] = role
        if password:
            changes["password"] = self._hash_password(password)

        if not changes:
            return UpsertOutcome.UNCHANGED

        self.administrators.update_fields(existing.id, changes)
        logger.info(
            "Administrator %s updated by %s (%s)",
            existing.username,
            caller.get("username"),
            ", ".join(sorted(changes)),
        )
        return UpsertOutcome.UPDATED

    def list_registrations(self) -> list[RegistrationSummary]:
        return self.graduates.list_summaries()

    def get_registration(self, graduate_id: int) -> RegistrationDetail:
        """
        Raises:
            GraduateNotFound: If no graduate has this id
        """
        graduate = self.graduates.find_by_id(graduate_id)
        if graduate is None:
            raise GraduateNotFound(graduate_id)
        return RegistrationDetail(
            graduate=graduate, attendees=self.attendees.list_for_graduate(graduate_id)
        )

    def authenticate(self, token: str) -> dict[str, Any]:
        """
        Decode a bearer token into its claims.

        Raises:
            Unauthorized: If the token is invalid or expired
        """
        return self.token_codec.decode(token)

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt with the configured cost factor."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()
