"""Secure credential storage in the OS keyring.

The session is persisted as three named secrets under one keyring service:

- ``access-token``: the bearer token
- ``refresh-token``: the refresh token
- ``token-data``: JSON with ``expires_at`` and the user profile

Security considerations:
- Secrets only ever go to the OS keyring (macOS Keychain, Windows
  Credential Manager, Secret Service / KWallet on Linux)
- Keyring access may require user unlock (OS-dependent)
- Log lines name slots, never values
"""

import logging

import keyring
import keyring.errors

from supa_session.api.exceptions import StoreError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "supa-session"

ACCESS_TOKEN_SLOT = "access-token"
REFRESH_TOKEN_SLOT = "refresh-token"
TOKEN_DATA_SLOT = "token-data"

SESSION_SLOTS = (ACCESS_TOKEN_SLOT, REFRESH_TOKEN_SLOT, TOKEN_DATA_SLOT)


class CredentialStore:
    """Named secrets in the OS keyring, scoped to one service name."""

    def __init__(self, service: str = DEFAULT_SERVICE):
        self.service = service

    def set(self, name: str, value: str) -> None:
        """Store a secret.

        Raises:
            StoreError: If the keyring backend rejects the write
        """
        try:
            keyring.set_password(self.service, name, value)
        except keyring.errors.KeyringError as e:
            raise StoreError(f"Could not write '{name}' to keyring: {e}", name) from e
        logger.debug(f"Stored keyring slot: {name}")

    def get(self, name: str) -> str | None:
        """Read a secret.

        Returns:
            The stored value, or None if the slot is empty

        Raises:
            StoreError: If the keyring backend fails
        """
        try:
            return keyring.get_password(self.service, name)
        except keyring.errors.KeyringError as e:
            raise StoreError(f"Could not read '{name}' from keyring: {e}", name) from e

    def delete(self, name: str) -> bool:
        """Remove a secret.

        Returns:
            True if the slot was deleted, False if it didn't exist

        Raises:
            StoreError: If the keyring backend fails for another reason
        """
        try:
            keyring.delete_password(self.service, name)
        except keyring.errors.PasswordDeleteError:
            return False
        except keyring.errors.KeyringError as e:
            raise StoreError(f"Could not delete '{name}' from keyring: {e}", name) from e
        logger.debug(f"Deleted keyring slot: {name}")
        return True
