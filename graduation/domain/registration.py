"""
Registration domain service - Registration State Machine implementation.

This module contains the core business logic for the graduate-facing
registration flow. Every step is gated by a stage token held on the
graduate row.

Registration State Machine
==========================

States:
- STAGE1:   invited, details not yet confirmed
- STAGE2:   attendance confirmed, guests pending (holds the Level 2 token)
- STAGE3:   guests submitted, confirmation pending (holds the Level 3 token)
- COMPLETE: guest list confirmed; further amendments keep it COMPLETE

Transitions:
    submit_level1   any state       -> STAGE2   (new token)
    submit_level2   STAGE2          -> STAGE3   (new token)
    update_level3   STAGE3|COMPLETE -> COMPLETE (token kept)

A token is accepted only if it is stored on a graduate, its expiry lies in
the future (checked against database time), and the graduate's current
state allows the requested operation. Callers cannot tell these failures
apart: all three raise InvalidToken.

A graduate who declines at Level 1 is left in STAGE2 holding a token that
is never mailed to them.
"""

import logging
from collections.abc import Collection
from dataclasses import dataclass
from datetime import date

from .exceptions import GraduateNotFound, InvalidToken, ValidationError
from .ports import (
    GUEST_AMENDMENT_STATES,
    Attendee,
    AttendeeEntry,
    AttendeeRepository,
    Graduate,
    GraduateRepository,
    NotificationSender,
    RegistrationState,
)
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)


@dataclass
class GuestList:
    """Graduate name plus current guests, as shown on the Level 3 page."""

    graduate: Graduate
    attendees: list[Attendee]


@dataclass
class RegistrationService:
    """
    Domain service for the graduate registration flow.

    Orchestrates token validation, stage transitions, guest persistence
    and notification dispatch.
    """

    graduates: GraduateRepository
    attendees: AttendeeRepository
    notifier: NotificationSender
    tokens: TokenIssuer
    frontend_url: str
    max_guests: int | None = 2

    def submit_level1(
        self,
        email: str,
        first_name: str,
        last_name: str,
        promotion: str,
        is_attending: bool,
    ) -> None:
        """
        Confirm graduate details and attendance.

        Accepted from every state, so a graduate who already registered
        guests can still change their answer. Registered guests are kept
        until Level 2 replaces them.

        Raises:
            GraduateNotFound: If no graduate was invited with this email
        """
        graduate = self.graduates.find_by_email(normalize_email(email))
        if graduate is None:
            raise GraduateNotFound(email)

        if graduate.state in GUEST_AMENDMENT_STATES:
            logger.info(
                "Graduate %s resubmitted level 1 from %s; guests kept until level 2",
                graduate.id,
                graduate.state.value,
            )

        issued = self.tokens.issue()
        self.graduates.record_level1(
            graduate.id,
            first_name,
            last_name,
            promotion,
            is_attending,
            issued.token,
            issued.expiry,
        )
        logger.info(
            "Graduate %s completed level 1 (attending=%s)", graduate.id, is_attending
        )

        if is_attending:
            graduate.first_name = first_name
            graduate.last_name = last_name
            self.notifier.send_level2_link(graduate, self._link(2, issued.token))

    def submit_level2(
        self, token: str, attendee_count: int, attendees: list[AttendeeEntry]
    ) -> list[AttendeeEntry]:
        """
        Replace the graduate's guest list and move to stage 3.

        Entries missing a first name, last name or date of birth are
        dropped without error. When ``attendee_count`` is zero nothing is
        stored regardless of the entries sent.

        Returns:
            The guest entries that were stored

        Raises:
            InvalidToken: If the token is unknown, expired or not a Level 2 token
            ValidationError: If a date is malformed or the guest cap is exceeded
        """
        graduate = self._graduate_for(token, {RegistrationState.STAGE2})

        accepted: list[AttendeeEntry] = []
        if attendee_count > 0:
            for entry in attendees:
                if entry.is_complete:
                    accepted.append(
                        AttendeeEntry(
                            first_name=entry.first_name,
                            last_name=entry.last_name,
                            date_of_birth=normalize_date_of_birth(entry.date_of_birth),
                        )
                    )
        self._check_guest_cap(len(accepted))

        issued = self.tokens.issue()

        # Delete-then-insert is not wrapped in a transaction
        self.attendees.delete_for_graduate(graduate.id)
        for entry in accepted:
            self.attendees.add(graduate.id, entry.first_name, entry.last_name, entry.date_of_birth)

        self.graduates.advance_to_stage3(graduate.id, issued.token, issued.expiry)
        logger.info("Graduate %s registered %d guest(s)", graduate.id, len(accepted))

        self.notifier.send_attendee_summary(
            graduate, attendee_count, accepted, self._link(3, issued.token)
        )
        return accepted

    def get_level3(self, token: str) -> GuestList:
        """
        Read the guest list behind a Level 3 link.

        Raises:
            InvalidToken: If the token is unknown, expired or not a Level 3 token
        """
        graduate = self._graduate_for(token, GUEST_AMENDMENT_STATES)
        return GuestList(graduate=graduate, attendees=self.attendees.list_for_graduate(graduate.id))

    def update_level3(self, token: str, attendees: list[AttendeeEntry]) -> None:
        """
        Amend guests and mark the registration complete.

        Entries with an id update that guest only if it belongs to this
        graduate; entries without an id are added. The token is not rotated,
        so the same link keeps working for later amendments.

        Raises:
            InvalidToken: If the token is unknown, expired or not a Level 3 token
            ValidationError: If an entry is incomplete or the guest cap is exceeded
        """
        graduate = self._graduate_for(token, GUEST_AMENDMENT_STATES)

        entries: list[AttendeeEntry] = []
        for entry in attendees:
            if not entry.is_complete:
                raise ValidationError("Guest first name, last name and date of birth are required")
            entries.append(
                AttendeeEntry(
                    first_name=entry.first_name,
                    last_name=entry.last_name,
                    date_of_birth=normalize_date_of_birth(entry.date_of_birth),
                    id=entry.id,
                )
            )

        new_count = sum(1 for entry in entries if entry.id is None)
        if new_count and self.max_guests is not None:
            existing = self.attendees.list_for_graduate(graduate.id)
            self._check_guest_cap(len(existing) + new_count)

        for entry in entries:
            if entry.id is not None:
                updated = self.attendees.update_scoped(
                    graduate.id, entry.id, entry.first_name, entry.last_name, entry.date_of_birth
                )
                if not updated:
                    logger.warning(
                        "Graduate %s tried to update attendee %s it does not own",
                        graduate.id,
                        entry.id,
                    )
            else:
                self.attendees.add(graduate.id, entry.first_name, entry.last_name, entry.date_of_birth)

        self.graduates.mark_complete(graduate.id)
        logger.info("Graduate %s confirmed guest list", graduate.id)

    def _graduate_for(self, token: str, allowed: Collection[RegistrationState]) -> Graduate:
        graduate = self.graduates.find_by_live_token(token)
        if graduate is None:
            raise InvalidToken()
        if graduate.state not in allowed:
            logger.info(
                "Rejected stage token for graduate %s in state %s",
                graduate.id,
                graduate.state.value,
            )
            raise InvalidToken()
        return graduate

    def _check_guest_cap(self, count: int) -> None:
        if self.max_guests is not None and count > self.max_guests:
            raise ValidationError(f"Each graduate is allowed {self.max_guests} guests only")

    def _link(self, level: int, token: str) -> str:
        return f"{self.frontend_url.rstrip('/')}/registration/level{level}/{token}"


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def normalize_date_of_birth(value: str) -> str:
    """
    Reduce a submitted date of birth to ``YYYY-MM-DD``.

    Browsers send either a bare date or a full ISO timestamp such as
    ``2001-04-05T00:00:00.000Z``; the time and zone are dropped.

    Raises:
        ValidationError: If the remaining text is not a calendar date
    """
    text = str(value).strip().split("T")[0].split(" ")[0]
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid date of birth: {value}") from None
