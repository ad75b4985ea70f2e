"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A fixed clock and a token issuer bound to it
- In-memory repositories implementing the domain ports
- A notifier that records every message instead of sending it
- Domain services wired to those fakes
"""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest

from graduation.adapters.auth.jwt_codec import JwtTokenCodec
from graduation.domain.admins import AdminService
from graduation.domain.exceptions import AdministratorExists
from graduation.domain.invitations import InvitationService
from graduation.domain.ports import (
    Administrator,
    Attendee,
    AttendeeEntry,
    Graduate,
    RegistrationSummary,
)
from graduation.domain.registration import RegistrationService
from graduation.domain.tokens import TokenIssuer

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
FRONTEND_URL = "https://grad.example.edu"
JWT_SECRET = "test-secret"


class FakeClock:
    """Mutable clock so tests can move time past a token's expiry."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now += timedelta(**kwargs)


class InMemoryAttendeeRepository:
    """Implements AttendeeRepository over a dict."""

    def __init__(self) -> None:
        self.rows: dict[int, Attendee] = {}
        self._next_id = 1

    def list_for_graduate(self, graduate_id: int) -> list[Attendee]:
        return [replace(row) for row in self.rows.values() if row.graduate_id == graduate_id]

    def delete_for_graduate(self, graduate_id: int) -> None:
        for attendee_id in [key for key, row in self.rows.items() if row.graduate_id == graduate_id]:
            del self.rows[attendee_id]

    def add(self, graduate_id: int, first_name: str, last_name: str, date_of_birth: str) -> int:
        attendee_id = self._next_id
        self._next_id += 1
        self.rows[attendee_id] = Attendee(
            id=attendee_id,
            graduate_id=graduate_id,
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date.fromisoformat(date_of_birth),
        )
        return attendee_id

    def update_scoped(
        self,
        graduate_id: int,
        attendee_id: int,
        first_name: str,
        last_name: str,
        date_of_birth: str,
    ) -> bool:
        row = self.rows.get(attendee_id)
        if row is None or row.graduate_id != graduate_id:
            return False
        row.first_name = first_name
        row.last_name = last_name
        row.date_of_birth = date.fromisoformat(date_of_birth)
        return True


class InMemoryGraduateRepository:
    """Implements GraduateRepository over a dict, checking expiry with the fake clock."""

    def __init__(self, clock: FakeClock, attendees: InMemoryAttendeeRepository) -> None:
        self.rows: dict[int, Graduate] = {}
        self._clock = clock
        self._attendees = attendees
        self._next_id = 1

    def seed(self, email: str, **fields: Any) -> Graduate:
        """Insert a pre-existing graduate (stage 1 unless overridden)."""
        values = {
            "first_name": "",
            "last_name": "",
            "promotion": "",
            "is_attending": None,
            "registration_stage": 1,
            "registration_complete": False,
        }
        values.update(fields)
        graduate = Graduate(id=self._next_id, email=email, registration_date=self._clock(), **values)
        self.rows[graduate.id] = graduate
        self._next_id += 1
        return graduate

    def find_by_email(self, email: str) -> Graduate | None:
        for row in self.rows.values():
            if row.email.lower() == email:
                return replace(row)
        return None

    def find_by_id(self, graduate_id: int) -> Graduate | None:
        row = self.rows.get(graduate_id)
        return replace(row) if row is not None else None

    def find_by_live_token(self, token: str) -> Graduate | None:
        for row in self.rows.values():
            if (
                row.registration_token == token
                and row.token_expiry is not None
                and row.token_expiry > self._clock()
            ):
                return replace(row)
        return None

    def record_level1(self, graduate_id, first_name, last_name, promotion, is_attending, token, token_expiry):
        row = self.rows[graduate_id]
        row.first_name = first_name
        row.last_name = last_name
        row.promotion = promotion
        row.is_attending = is_attending
        row.registration_stage = 2
        row.registration_complete = False
        row.registration_token = token
        row.token_expiry = token_expiry
        row.last_updated = self._clock()

    def advance_to_stage3(self, graduate_id, token, token_expiry):
        row = self.rows[graduate_id]
        row.registration_stage = 3
        row.registration_token = token
        row.token_expiry = token_expiry
        row.last_updated = self._clock()

    def mark_complete(self, graduate_id):
        row = self.rows[graduate_id]
        row.registration_complete = True
        row.last_updated = self._clock()

    def create_invited(self, email, first_name, last_name, promotion, token, token_expiry) -> int:
        graduate = self.seed(
            email,
            first_name=first_name,
            last_name=last_name,
            promotion=promotion,
            registration_token=token,
            token_expiry=token_expiry,
        )
        return graduate.id

    def reset_invitation(self, email, token, token_expiry):
        for row in self.rows.values():
            if row.email.lower() == email:
                row.registration_token = token
                row.token_expiry = token_expiry
                row.registration_stage = 1
                row.registration_complete = False
                row.last_updated = self._clock()

    def list_summaries(self) -> list[RegistrationSummary]:
        rows = sorted(self.rows.values(), key=lambda row: (row.last_name, row.first_name))
        return [
            RegistrationSummary(
                id=row.id,
                first_name=row.first_name,
                last_name=row.last_name,
                email=row.email,
                promotion=row.promotion,
                is_attending=row.is_attending,
                registration_complete=row.registration_complete,
                attendee_count=len(self._attendees.list_for_graduate(row.id)),
            )
            for row in rows
        ]


class InMemoryAdministratorRepository:
    """Implements AdministratorRepository over a dict with unique username/email."""

    def __init__(self, clock: FakeClock) -> None:
        self.rows: dict[int, Administrator] = {}
        self._clock = clock
        self._next_id = 1

    def find_by_username(self, username: str) -> Administrator | None:
        for row in self.rows.values():
            if row.username == username:
                return replace(row)
        return None

    def find_by_username_or_email(self, username: str, email: str) -> Administrator | None:
        for row in sorted(self.rows.values(), key=lambda row: row.id):
            if row.username == username or row.email == email:
                return replace(row)
        return None

    def create(self, username: str, email: str, password_hash: str, role: str) -> int:
        for row in self.rows.values():
            if row.username == username or row.email == email:
                raise AdministratorExists(username)
        admin_id = self._next_id
        self._next_id += 1
        self.rows[admin_id] = Administrator(
            id=admin_id, username=username, email=email, password_hash=password_hash, role=role
        )
        return admin_id

    def update_fields(self, admin_id: int, fields: dict[str, Any]) -> None:
        row = self.rows[admin_id]
        if "email" in fields:
            row.email = fields["email"]
        if "role" in fields:
            row.role = fields["role"]
        if "password" in fields:
            row.password_hash = fields["password"]

    def touch_last_login(self, admin_id: int) -> None:
        self.rows[admin_id].last_login = self._clock()


class RecordingNotifier:
    """Implements NotificationSender by recording calls."""

    def __init__(self) -> None:
        self.level2_links: list[tuple[Graduate, str]] = []
        self.summaries: list[tuple[Graduate, int, list[AttendeeEntry], str]] = []
        self.invitations: list[tuple[Graduate, str]] = []
        self.fail_for: set[str] = set()

    def send_level2_link(self, graduate: Graduate, link: str) -> None:
        self._check(graduate)
        self.level2_links.append((graduate, link))

    def send_attendee_summary(self, graduate, attendee_count, attendees, link) -> None:
        self._check(graduate)
        self.summaries.append((graduate, attendee_count, list(attendees), link))

    def send_invitation(self, graduate: Graduate, link: str) -> None:
        self._check(graduate)
        self.invitations.append((graduate, link))

    def _check(self, graduate: Graduate) -> None:
        if graduate.email in self.fail_for:
            raise ConnectionError("SMTP unavailable")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_issuer(clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(mode="rolling", rolling_hours=48, clock=clock)


@pytest.fixture
def attendee_repo() -> InMemoryAttendeeRepository:
    return InMemoryAttendeeRepository()


@pytest.fixture
def graduate_repo(clock: FakeClock, attendee_repo: InMemoryAttendeeRepository) -> InMemoryGraduateRepository:
    return InMemoryGraduateRepository(clock, attendee_repo)


@pytest.fixture
def admin_repo(clock: FakeClock) -> InMemoryAdministratorRepository:
    return InMemoryAdministratorRepository(clock)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def registration_service(
    graduate_repo: InMemoryGraduateRepository,
    attendee_repo: InMemoryAttendeeRepository,
    notifier: RecordingNotifier,
    token_issuer: TokenIssuer,
) -> RegistrationService:
    return RegistrationService(
        graduates=graduate_repo,
        attendees=attendee_repo,
        notifier=notifier,
        tokens=token_issuer,
        frontend_url=FRONTEND_URL,
        max_guests=2,
    )


@pytest.fixture
def invitation_service(
    graduate_repo: InMemoryGraduateRepository,
    notifier: RecordingNotifier,
    token_issuer: TokenIssuer,
) -> InvitationService:
    return InvitationService(
        graduates=graduate_repo,
        notifier=notifier,
        tokens=token_issuer,
        frontend_url=FRONTEND_URL,
    )


@pytest.fixture
def admin_service(
    admin_repo: InMemoryAdministratorRepository,
    graduate_repo: InMemoryGraduateRepository,
    attendee_repo: InMemoryAttendeeRepository,
) -> AdminService:
    # Minimum bcrypt cost
    return AdminService(
        administrators=admin_repo,
        graduates=graduate_repo,
        attendees=attendee_repo,
        token_codec=JwtTokenCodec(JWT_SECRET),
        bcrypt_cost=4,
    )
