"""External collaborators: credential store and integration provider clients."""

from .credentials import Credential, CredentialProvider, TokenStore
from .google import CalendarProvider, GmailProvider, GoogleCalendarProvider, MailProvider
from .oauth import GOOGLE_SCOPES, GoogleOAuthClient
from .web import WebClient

__all__ = [
    "Credential",
    "CredentialProvider",
    "TokenStore",
    "CalendarProvider",
    "GmailProvider",
    "GoogleCalendarProvider",
    "MailProvider",
    "GOOGLE_SCOPES",
    "GoogleOAuthClient",
    "WebClient",
]
