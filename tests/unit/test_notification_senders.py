"""
Unit tests for the notification sender adapters and email templates.

Tests verify the console sender logs links in the expected format, the
templates carry the ceremony copy with escaped user input, and the SMTP
sender drives smtplib correctly.
"""

import logging
import smtplib
from unittest.mock import MagicMock, patch

import pytest

from graduation.adapters.smtp import ConsoleNotificationSender, EventDetails, SmtpNotificationSender
from graduation.adapters.smtp.templates import (
    render_attendee_summary,
    render_invitation,
    render_level2_link,
)
from graduation.domain.exceptions import InternalError
from graduation.domain.ports import AttendeeEntry, Graduate, NotificationSender

EVENT = EventDetails(
    organization_name="ESA",
    ceremony_date="Wednesday, 25 June 2025",
    ceremony_time="2:00 PM",
    ceremony_venue="Grand Hall",
    response_deadline="23 June 2025",
    max_guests=2,
)
LINK = "https://grad.example.edu/registration/level3/abc"


def _graduate(**fields) -> Graduate:
    values = {
        "id": 1,
        "email": "ada@x.com",
        "first_name": "Ada",
        "last_name": "Byron",
        "promotion": "2025",
        "is_attending": True,
        "registration_stage": 2,
        "registration_complete": False,
    }
    values.update(fields)
    return Graduate(**values)


class TestConsoleNotificationSender:
    """Tests for ConsoleNotificationSender."""

    def test_implements_protocol(self) -> None:
        """ConsoleNotificationSender uses structural subtyping, not inheritance."""
        sender: NotificationSender = ConsoleNotificationSender()
        assert ConsoleNotificationSender.__bases__ == (object,)
        assert callable(sender.send_attendee_summary)

    def test_level2_link_format(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            ConsoleNotificationSender().send_level2_link(_graduate(), "https://x/level2/t")

        assert caplog.records[0].getMessage() == "[LEVEL2] Email: ada@x.com Link: https://x/level2/t"

    def test_summary_lists_guests(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            ConsoleNotificationSender().send_attendee_summary(
                _graduate(), 1, [AttendeeEntry("Ann", "Lee", "1970-01-02")], LINK
            )

        message = caplog.records[0].getMessage()
        assert message.startswith("[LEVEL3] Email: ada@x.com Guests: 1")
        assert "Ann Lee (1970-01-02)" in message
        assert message.endswith(LINK)

    def test_invitation_format(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            ConsoleNotificationSender().send_invitation(_graduate(), "https://x/level1/t")

        assert caplog.records[0].getMessage() == "[INVITATION] Email: ada@x.com Link: https://x/level1/t"


class TestTemplates:
    """Tests for the HTML templates."""

    def test_level2_link(self) -> None:
        subject, html = render_level2_link(_graduate(), "https://x/level2/t", EVENT)

        assert subject == "ESA Graduation Ceremony - Registration Confirmation"
        assert "Dear Ada," in html
        assert 'href="https://x/level2/t"' in html
        assert "Grand Hall" in html
        assert "by 23 June 2025" in html
        assert "allowed 2 guest cards only" in html

    def test_summary_lists_each_guest(self) -> None:
        attendees = [AttendeeEntry("Ann", "Lee", "1970-01-02"), AttendeeEntry("Bob", "Lee", "1968-03-04")]

        subject, html = render_attendee_summary(_graduate(), 2, attendees, LINK, EVENT)

        assert subject == "ESA Graduation Ceremony - Registration Information"
        assert "<strong>Guest 1:</strong> Ann Lee, Date of Birth: 1970-01-02" in html
        assert "<strong>Guest 2:</strong> Bob Lee, Date of Birth: 1968-03-04" in html
        assert "Update Guest Information" in html

    def test_summary_without_guests_prompts_registration(self) -> None:
        _, html = render_attendee_summary(_graduate(), 0, [], LINK, EVENT)

        assert "<strong>0 attendees</strong>" in html
        assert "Register Your Guests" in html
        assert "Guest 1:" not in html

    def test_user_input_is_escaped(self) -> None:
        graduate = _graduate(first_name="<script>alert(1)</script>")
        attendees = [AttendeeEntry("<b>Ann</b>", "Lee", "1970-01-02")]

        _, html = render_attendee_summary(graduate, 1, attendees, LINK, EVENT)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "<b>Ann</b>" not in html

    def test_invitation_falls_back_to_generic_name(self) -> None:
        subject, html = render_invitation(_graduate(first_name="", last_name=""), "https://x/level1/t", EVENT)

        assert subject == "ESA Graduation Ceremony - Registration"
        assert "Dear Graduate," in html
        assert "Graduation Registration" in html

    def test_no_guest_cap_line_when_unlimited(self) -> None:
        event = EventDetails("ESA", "d", "t", "Hall", "deadline", max_guests=None)
        _, html = render_level2_link(_graduate(), "https://x", event)
        assert "guest cards only" not in html


class TestSmtpNotificationSender:
    """Tests for SmtpNotificationSender."""

    def _sender(self, **kwargs) -> SmtpNotificationSender:
        return SmtpNotificationSender(
            host="smtp.example.com",
            port=587,
            sender="noreply@example.com",
            event=EVENT,
            **kwargs,
        )

    def test_sends_html_message(self) -> None:
        with patch("smtplib.SMTP") as smtp_class:
            server = smtp_class.return_value.__enter__.return_value

            self._sender(username="user", password="pw").send_level2_link(_graduate(), "https://x/t")

        smtp_class.assert_called_once_with("smtp.example.com", 587)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("user", "pw")
        message = server.send_message.call_args.args[0]
        assert message["To"] == "ada@x.com"
        assert message["From"] == "noreply@example.com"
        assert message["Subject"] == "ESA Graduation Ceremony - Registration Confirmation"
        assert message.get_payload()[0].get_content_type() == "text/html"

    def test_skips_login_and_tls_when_not_configured(self) -> None:
        with patch("smtplib.SMTP") as smtp_class:
            server = smtp_class.return_value.__enter__.return_value

            self._sender(use_tls=False).send_invitation(_graduate(), "https://x/t")

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    def test_transport_failure_raises_internal_error(self) -> None:
        failing = MagicMock()
        failing.__enter__.return_value.send_message.side_effect = smtplib.SMTPServerDisconnected("gone")

        with patch("smtplib.SMTP", return_value=failing), pytest.raises(InternalError):
            self._sender().send_attendee_summary(_graduate(), 0, [], LINK)

    def test_connection_refused_raises_internal_error(self) -> None:
        with patch("smtplib.SMTP", side_effect=ConnectionRefusedError()), pytest.raises(InternalError):
            self._sender().send_invitation(_graduate(), "https://x/t")
