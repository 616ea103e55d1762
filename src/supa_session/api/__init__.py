"""API module for supa-session."""

from supa_session.api.client import BackendAuthClient
from supa_session.api.exceptions import (
    AuthenticationFailed,
    AuthError,
    MissingField,
    NetworkError,
    NoActiveSession,
    OAuthFailed,
    RefreshFailed,
    StoreError,
)
from supa_session.api.models import RawAuthResponse, Session, SessionModel, UserProfile

__all__ = [
    # Client
    "BackendAuthClient",
    # Exceptions
    "AuthError",
    "AuthenticationFailed",
    "OAuthFailed",
    "RefreshFailed",
    "MissingField",
    "NoActiveSession",
    "NetworkError",
    "StoreError",
    # Models
    "SessionModel",
    "UserProfile",
    "Session",
    "RawAuthResponse",
]
