"""Relay contact-form submissions to a Telegram chat."""

from .errors import ConfigurationError, ForwardingError, LeadNotifierError
from .formatter import escape_html, format_message
from .pipeline import HandlerOptions, HttpResponse, Submission, SubmissionHandler
from .settings import Settings
from .telegram import TelegramForwarder, Transport, send_message

__all__ = [
    "ConfigurationError",
    "ForwardingError",
    "HandlerOptions",
    "HttpResponse",
    "LeadNotifierError",
    "Settings",
    "Submission",
    "SubmissionHandler",
    "TelegramForwarder",
    "Transport",
    "escape_html",
    "format_message",
    "send_message",
]
