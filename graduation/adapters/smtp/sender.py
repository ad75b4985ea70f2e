"""
SMTP notification sender adapter - Implements NotificationSender protocol.

Renders the HTML templates and delivers them over SMTP with STARTTLS.
Delivery failures are raised as InternalError; the state change that
triggered the mail has already been committed by then.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from graduation.domain.exceptions import InternalError
from graduation.domain.ports import AttendeeEntry, Graduate

from .templates import EventDetails, render_attendee_summary, render_invitation, render_level2_link

logger = logging.getLogger(__name__)


class SmtpNotificationSender:
    """
    Implements NotificationSender protocol via smtplib.

    One SMTP connection is opened per message.
    """

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        event: EventDetails,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._event = event
        self._username = username
        self._password = password
        self._use_tls = use_tls

    def send_level2_link(self, graduate: Graduate, link: str) -> None:
        subject, html = render_level2_link(graduate, link, self._event)
        self._send(graduate.email, subject, html)

    def send_attendee_summary(
        self,
        graduate: Graduate,
        attendee_count: int,
        attendees: list[AttendeeEntry],
        link: str,
    ) -> None:
        subject, html = render_attendee_summary(graduate, attendee_count, attendees, link, self._event)
        self._send(graduate.email, subject, html)

    def send_invitation(self, graduate: Graduate, link: str) -> None:
        subject, html = render_invitation(graduate, link, self._event)
        self._send(graduate.email, subject, html)

    def _send(self, to_email: str, subject: str, html: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["From"] = self._sender
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            with smtplib.SMTP(self._host, self._port) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send '%s' to %s: %s", subject, to_email, exc)
            raise InternalError(f"Failed to send email to {to_email}") from exc

        logger.info("Email '%s' sent to %s", subject, to_email)
