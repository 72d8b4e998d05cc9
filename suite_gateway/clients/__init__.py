"""Expose constructed client wrappers."""

from .google_auth import GoogleOAuthClient, OAuthStateEncoder
from .google_calendar import GoogleCalendarClient
from .google_drive import GoogleDriveClient
from .google_mail import GmailClient

__all__ = [
    "GmailClient",
    "GoogleCalendarClient",
    "GoogleDriveClient",
    "GoogleOAuthClient",
    "OAuthStateEncoder",
]
