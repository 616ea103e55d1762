"""Shared fixtures."""

from unittest.mock import patch

import keyring.errors
import pytest
import pytest_asyncio

from supa_session.api.client import BackendAuthClient
from supa_session.api.models import Session, UserProfile
from supa_session.auth.credential_store import CredentialStore
from supa_session.auth.session_manager import SessionManager

BASE_URL = "https://test.supabase.co"
ANON_KEY = "test-anon-key"
TOKEN_URL = f"{BASE_URL}/auth/v1/token"
PROFILES_URL = f"{BASE_URL}/rest/v1/profiles"


@pytest.fixture
def fake_keyring():
    """Replace the keyring with an in-memory dict keyed by (service, name)."""
    secrets: dict[tuple[str, str], str] = {}

    def set_password(service, name, value):
        secrets[(service, name)] = value

    def get_password(service, name):
        return secrets.get((service, name))

    def delete_password(service, name):
        if (service, name) not in secrets:
            raise keyring.errors.PasswordDeleteError("Not found")
        del secrets[(service, name)]

    with patch("supa_session.auth.credential_store.keyring") as mock:
        mock.errors = keyring.errors
        mock.set_password.side_effect = set_password
        mock.get_password.side_effect = get_password
        mock.delete_password.side_effect = delete_password
        yield secrets


@pytest.fixture
def profile_row():
    return {
        "id": "user-123",
        "email": "ada@example.com",
        "tier": "pro",
        "tokens_remaining": 420000,
        "daily_token_limit": 500000,
    }


@pytest.fixture
def session():
    return Session(
        access_token="access-1",
        refresh_token="refresh-1",
        expires_at=4102444800,  # 2100-01-01
        user=UserProfile(id="user-123", email="ada@example.com", tier="pro"),
    )


@pytest_asyncio.fixture
async def manager(fake_keyring):
    async with BackendAuthClient(BASE_URL, ANON_KEY) as client:
        yield SessionManager(client, CredentialStore())
