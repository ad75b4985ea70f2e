"""
Console notification sender adapter - Implements NotificationSender protocol.

This module provides a console-based implementation of the domain's
notification port, logging registration links to stdout for development.
"""

import logging

from graduation.domain.ports import AttendeeEntry, Graduate

logger = logging.getLogger(__name__)


class ConsoleNotificationSender:
    """
    Implements NotificationSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints links to stdout instead of mailing them.
    """

    def send_level2_link(self, graduate: Graduate, link: str) -> None:
        """
        Log the Level 2 link (simulates email delivery).

        The link is logged at INFO level to be visible in docker-compose logs.
        """
        logger.info("[LEVEL2] Email: %s Link: %s", graduate.email, link)

    def send_attendee_summary(
        self,
        graduate: Graduate,
        attendee_count: int,
        attendees: list[AttendeeEntry],
        link: str,
    ) -> None:
        guests = ", ".join(
            f"{attendee.first_name} {attendee.last_name} ({attendee.date_of_birth})"
            for attendee in attendees
        )
        logger.info(
            "[LEVEL3] Email: %s Guests: %d [%s] Link: %s",
            graduate.email,
            attendee_count,
            guests,
            link,
        )

    def send_invitation(self, graduate: Graduate, link: str) -> None:
        logger.info("[INVITATION] Email: %s Link: %s", graduate.email, link)
