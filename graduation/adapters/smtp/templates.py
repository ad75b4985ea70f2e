"""
HTML email templates for the registration flow.

Each ``render_*`` function returns ``(subject, html)``. Every value taken
from a graduate or guest is HTML-escaped before interpolation.
"""

from dataclasses import dataclass
from html import escape

from graduation.domain.ports import AttendeeEntry, Graduate

COLOR = "#662d91"

GREETING = (
    "Thank you for registering to attend your graduation ceremony &ndash; "
    "we are excited to celebrate this milestone with you!"
)
CLOSING = "Thank you for your cooperation, and we look forward to celebrating together!"


@dataclass(frozen=True)
class EventDetails:
    """Ceremony copy shared by every template."""

    organization_name: str
    ceremony_date: str
    ceremony_time: str
    ceremony_venue: str
    response_deadline: str
    max_guests: int | None = 2


def _paragraph(text: str) -> str:
    return '<p style="font-size: 16px;">' + text + "</p>"


def _rule() -> str:
    return f'<hr style="border: 0; height: 1px; background-color: {COLOR}; margin: 20px 0;">'


def _link(href: str, label: str | None = None) -> str:
    text = escape(label) if label else escape(href)
    return f'<a href="{escape(href, quote=True)}" style="color: {COLOR};">{text}</a>'


def _event_block(event: EventDetails) -> list[str]:
    return [
        _rule(),
        '<p style="font-size: 18px; font-weight: bold;">&#127891; Graduation Ceremony Details</p>',
        _paragraph("<strong>Date:</strong> " + escape(event.ceremony_date)),
        _paragraph("<strong>Time:</strong> " + escape(event.ceremony_time)),
        _paragraph("<strong>Venue:</strong> " + escape(event.ceremony_venue)),
        _rule(),
    ]


def _guest_policy(event: EventDetails) -> list[str]:
    items = []
    if event.max_guests is not None:
        items.append(
            f"<li><strong>Each graduate is allowed {event.max_guests} guest cards only.</strong></li>"
        )
    items.append(
        "<li>" + escape(event.ceremony_venue) + " has <strong>strict security policies</strong> "
        "&ndash; the names must match the guests' official IDs.</li>"
    )
    items.append("<li>No one will be admitted without proper ID matching the submitted names.</li>")
    return [
        _paragraph("<strong>Please note:</strong>"),
        f'<ul style="color: {COLOR}; font-size: 16px;">' + "".join(items) + "</ul>",
    ]


def _wrap(parts: list[str], event: EventDetails) -> str:
    parts = parts + [
        _paragraph(CLOSING),
        _paragraph("Best regards,<br>" + escape(event.organization_name) + " team"),
    ]
    return (
        f'<div style="font-family: Arial, sans-serif; color: {COLOR}; max-width: 800px; margin: 0 auto;">\n'
        + "\n".join(parts)
        + "\n</div>"
    )


def render_level2_link(graduate: Graduate, link: str, event: EventDetails) -> tuple[str, str]:
    """Attendance confirmed: ask for guest details."""
    subject = f"{event.organization_name} Graduation Ceremony - Registration Confirmation"
    parts = [
        _paragraph("Dear " + escape(graduate.first_name) + ","),
        _paragraph(GREETING),
        _paragraph(
            "Below, you will find the event details, as well as an important "
            "request regarding your guests:"
        ),
        *_event_block(event),
        _paragraph(
            "To ensure smooth access on the day of the event, please click the link below "
            "and provide the full names of the guests who will be accompanying you."
        ),
        _paragraph(_link(link)),
        *_guest_policy(event),
        _paragraph(
            "To avoid any inconvenience, kindly complete this form <strong>by "
            + escape(event.response_deadline)
            + ".</strong>"
        ),
    ]
    return subject, _wrap(parts, event)


def render_attendee_summary(
    graduate: Graduate,
    attendee_count: int,
    attendees: list[AttendeeEntry],
    link: str,
    event: EventDetails,
) -> tuple[str, str]:
    """Guests submitted: confirm them, or prompt for guests when none were given."""
    subject = f"{event.organization_name} Graduation Ceremony - Registration Information"
    deadline = escape(event.response_deadline)

    if attendee_count == 0:
        intro = "Below, you will find the event details, as well as an important request regarding your guests:"
        details = [
            _paragraph(
                "We noticed that you registered with <strong>0 attendees</strong> for the upcoming "
                "graduation ceremony. If guests will be accompanying you, please click the link "
                "below and provide their full names."
            ),
            _paragraph(_link(link, "Register Your Guests")),
        ]
        closing = f"To avoid any inconvenience, kindly complete this form <strong>by {deadline}</strong>."
    else:
        intro = "Below, you will find the event details, as well as information about your registered guests:"
        details = [_paragraph("Below is the information you submitted for your guests:")]
        for index, attendee in enumerate(attendees, start=1):
            details.append(
                _paragraph(
                    f"<strong>Guest {index}:</strong> "
                    + escape(f"{attendee.first_name} {attendee.last_name}")
                    + ", Date of Birth: "
                    + escape(str(attendee.date_of_birth))
                )
            )
        details += [
            _paragraph(
                "If any of the above details are incorrect or need to be updated, "
                "please click the link below to make changes:"
            ),
            _paragraph(_link(link, "Update Guest Information")),
        ]
        closing = f"To avoid any inconvenience, kindly complete any updates <strong>by {deadline}</strong>."

    parts = [
        _paragraph("Dear " + escape(graduate.first_name) + ","),
        _paragraph(GREETING),
        _paragraph(intro),
        *_event_block(event),
        *details,
        *_guest_policy(event),
        _paragraph(closing),
    ]
    return subject, _wrap(parts, event)


def render_invitation(graduate: Graduate, link: str, event: EventDetails) -> tuple[str, str]:
    """Initial invitation carrying the Level 1 link."""
    subject = f"{event.organization_name} Graduation Ceremony - Registration"
    name = f"{graduate.first_name or 'Graduate'} {graduate.last_name or ''}".strip()
    parts = [
        _paragraph("Dear " + escape(name) + ","),
        _paragraph(
            "We are pleased to invite you to register for the upcoming "
            + escape(event.organization_name)
            + " graduation ceremony."
        ),
        _paragraph("Please click the link below to confirm your attendance:"),
        _paragraph(_link(link, "Graduation Registration")),
    ]
    return subject, _wrap(parts, event)
