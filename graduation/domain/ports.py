"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the records the domain works with and the interfaces
(ports) it requires from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Protocol


class RegistrationState(str, Enum):
    """
    Registration State Machine states for a graduate.

    Derived from the stored ``registration_stage`` integer and the
    ``registration_complete`` flag.

    State Transitions:
    - STAGE1 -> STAGE2   (Level 1 submitted)
    - STAGE2 -> STAGE2   (Level 1 resubmitted before guests are registered)
    - STAGE2 -> STAGE3   (Level 2 guests submitted)
    - STAGE3 -> COMPLETE (Level 3 confirmation)
    - COMPLETE -> COMPLETE (further Level 3 amendments)
    - STAGE3|COMPLETE -> STAGE2 (Level 1 resubmitted, e.g. no longer attending)

    Any state may be reset to STAGE1 by an administrator re-invitation,
    which is an override and not part of the graduate-driven table.
    """

    STAGE1 = "STAGE1"
    STAGE2 = "STAGE2"
    STAGE3 = "STAGE3"
    COMPLETE = "COMPLETE"

    @classmethod
    def of(cls, stage: int, complete: bool) -> "RegistrationState":
        """Map stored columns onto a state."""
        if complete and stage == 3:
            return cls.COMPLETE
        try:
            return _STAGE_NUMBERS[stage]
        except KeyError:
            raise ValueError(f"Unknown registration stage: {stage}") from None

    @property
    def stage_number(self) -> int:
        """Value written to the ``registration_stage`` column."""
        return 3 if self is RegistrationState.COMPLETE else int(self.value[-1])

    def can_transition_to(self, target: "RegistrationState") -> bool:
        return target in LEGAL_TRANSITIONS[self]


_STAGE_NUMBERS = {
    1: RegistrationState.STAGE1,
    2: RegistrationState.STAGE2,
    3: RegistrationState.STAGE3,
}

LEGAL_TRANSITIONS: dict[RegistrationState, frozenset[RegistrationState]] = {
    RegistrationState.STAGE1: frozenset({RegistrationState.STAGE2}),
    RegistrationState.STAGE2: frozenset({RegistrationState.STAGE2, RegistrationState.STAGE3}),
    RegistrationState.STAGE3: frozenset({RegistrationState.STAGE2, RegistrationState.COMPLETE}),
    RegistrationState.COMPLETE: frozenset({RegistrationState.STAGE2, RegistrationState.COMPLETE}),
}

# States whose guest list can be viewed and amended through the Level 3 link
GUEST_AMENDMENT_STATES = frozenset({RegistrationState.STAGE3, RegistrationState.COMPLETE})


@dataclass
class Graduate:
    """Stored graduate row."""

    id: int
    email: str
    first_name: str
    last_name: str
    promotion: str
    is_attending: bool | None
    registration_stage: int
    registration_complete: bool
    registration_token: str | None = None
    token_expiry: datetime | None = None
    registration_date: datetime | None = None
    last_updated: datetime | None = None

    @property
    def state(self) -> RegistrationState:
        return RegistrationState.of(self.registration_stage, self.registration_complete)


@dataclass
class Attendee:
    """Stored guest row, owned by one graduate."""

    id: int
    graduate_id: int
    first_name: str
    last_name: str
    date_of_birth: date


@dataclass
class AttendeeEntry:
    """Guest details as submitted by a graduate; any field may be missing."""

    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: str | None = None
    id: int | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.first_name and self.last_name and self.date_of_birth)


@dataclass
class Administrator:
    """Stored administrator row. ``password_hash`` never leaves the domain."""

    id: int
    username: str
    email: str
    password_hash: str
    role: str
    last_login: datetime | None = None


@dataclass
class RegistrationSummary:
    """One line of the admin registrations overview."""

    id: int
    first_name: str
    last_name: str
    email: str
    promotion: str
    is_attending: bool | None
    registration_complete: bool
    attendee_count: int


class GraduateRepository(Protocol):
    """Port interface for graduate persistence."""

    def find_by_email(self, email: str) -> Graduate | None: ...

    def find_by_id(self, graduate_id: int) -> Graduate | None: ...

    def find_by_live_token(self, token: str) -> Graduate | None:
        """
        Find the graduate holding ``token`` whose expiry lies in the future.

        Unknown and expired tokens both return None.
        """
        ...

    def record_level1(
        self,
        graduate_id: int,
        first_name: str,
        last_name: str,
        promotion: str,
        is_attending: bool,
        token: str,
        token_expiry: datetime,
    ) -> None:
        """Write identity fields, set stage 2 (incomplete) and overwrite the stage token."""
        ...

    def advance_to_stage3(self, graduate_id: int, token: str, token_expiry: datetime) -> None:
        """Set stage 3 and overwrite the stage token."""
        ...

    def mark_complete(self, graduate_id: int) -> None: ...

    def create_invited(
        self,
        email: str,
        first_name: str,
        last_name: str,
        promotion: str,
        token: str,
        token_expiry: datetime,
    ) -> int:
        """Insert a stage 1 graduate and return its id."""
        ...

    def reset_invitation(self, email: str, token: str, token_expiry: datetime) -> None:
        """Overwrite the token and restart the graduate at stage 1, incomplete."""
        ...

    def list_summaries(self) -> list[RegistrationSummary]: ...


class AttendeeRepository(Protocol):
    """Port interface for guest persistence, always scoped to one graduate."""

    def list_for_graduate(self, graduate_id: int) -> list[Attendee]: ...

    def delete_for_graduate(self, graduate_id: int) -> None: ...

    def add(self, graduate_id: int, first_name: str, last_name: str, date_of_birth: str) -> int: ...

    def update_scoped(
        self,
        graduate_id: int,
        attendee_id: int,
        first_name: str,
        last_name: str,
        date_of_birth: str,
    ) -> bool:
        """
        Update an attendee only if it belongs to ``graduate_id``.

        Returns:
            True if a row was updated, False if the id is unknown or foreign
        """
        ...


class AdministratorRepository(Protocol):
    """Port interface for administrator persistence."""

    def find_by_username(self, username: str) -> Administrator | None: ...

    def find_by_username_or_email(self, username: str, email: str) -> Administrator | None: ...

    def create(self, username: str, email: str, password_hash: str, role: str) -> int:
        """
        Insert an administrator.

        Raises:
            AdministratorExists: If username or email is already taken
        """
        ...

    def update_fields(self, admin_id: int, fields: dict[str, Any]) -> None:
        """Update only the given columns (email, role, password)."""
        ...

    def touch_last_login(self, admin_id: int) -> None: ...


class NotificationSender(Protocol):
    """Port interface for outbound mail. Adapters own the templates."""

    def send_level2_link(self, graduate: Graduate, link: str) -> None: ...

    def send_attendee_summary(
        self,
        graduate: Graduate,
        attendee_count: int,
        attendees: list[AttendeeEntry],
        link: str,
    ) -> None: ...

    def send_invitation(self, graduate: Graduate, link: str) -> None: ...


class AuthTokenCodec(Protocol):
    """Port interface for signed administrator bearer tokens."""

    def encode(self, claims: dict[str, Any]) -> str: ...

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature and expiry.

        Raises:
            Unauthorized: If the token is malformed, forged or expired
        """
        ...
