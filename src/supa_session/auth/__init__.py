"""Authentication module for supa-session."""

from supa_session.auth.credential_store import (
    ACCESS_TOKEN_SLOT,
    REFRESH_TOKEN_SLOT,
    SESSION_SLOTS,
    TOKEN_DATA_SLOT,
    CredentialStore,
)
from supa_session.auth.oauth_callback import OAuthCallbackServer, callback_url
from supa_session.auth.session_manager import SessionManager

__all__ = [
    # Credential storage
    "CredentialStore",
    "ACCESS_TOKEN_SLOT",
    "REFRESH_TOKEN_SLOT",
    "TOKEN_DATA_SLOT",
    "SESSION_SLOTS",
    # Session lifecycle
    "SessionManager",
    # OAuth callback
    "OAuthCallbackServer",
    "callback_url",
]
