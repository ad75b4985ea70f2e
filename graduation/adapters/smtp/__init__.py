"""Notification adapters - Console and SMTP implementations."""

from .console import ConsoleNotificationSender
from .sender import SmtpNotificationSender
from .templates import EventDetails

__all__ = ["ConsoleNotificationSender", "EventDetails", "SmtpNotificationSender"]
