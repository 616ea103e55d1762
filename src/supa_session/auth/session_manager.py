"""Session lifecycle: login, OAuth, refresh, warm start and logout.

The manager owns the single in-memory session of the process. Mutating
operations run under one asyncio lock, so at most one of them touches the
backend and the keyring at a time. Readers never take the lock.

Every mutating path persists the new session before installing it, so a
failed call leaves the previous state untouched.
"""

import asyncio
import logging

from supa_session.api.client import BackendAuthClient
from supa_session.api.exceptions import NoActiveSession, StoreError
from supa_session.api.models import RawAuthResponse, Session, UserProfile
from supa_session.auth.credential_store import (
    ACCESS_TOKEN_SLOT,
    REFRESH_TOKEN_SLOT,
    SESSION_SLOTS,
    TOKEN_DATA_SLOT,
    CredentialStore,
)

logger = logging.getLogger(__name__)


class SessionManager:
    """Authentication state machine over Unauthenticated and Authenticated.

    Usage:
        async with BackendAuthClient(url, anon_key) as client:
            manager = SessionManager(client, CredentialStore())
            manager.restore_from_store()
            if manager.is_expired():
                await manager.login(email, password)
    """

    def __init__(self, client: BackendAuthClient, store: CredentialStore):
        self.client = client
        self.store = store
        self._session: Session | None = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Session | None:
        """The current session, if any."""
        return self._session

    @property
    def is_busy(self) -> bool:
        """Whether a mutating operation is in flight."""
        return self._lock.locked()

    def is_authenticated(self) -> bool:
        return self._session is not None

    def is_expired(self) -> bool:
        """True without a session, or when the access token is stale."""
        if self._session is None:
            return True
        return self._session.is_expired()

    def seconds_until_expiry(self) -> int | None:
        if self._session is None:
            return None
        return self._session.seconds_until_expiry()

    def current_user(self) -> UserProfile | None:
        return self._session.user if self._session else None

    def current_access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    def _persist(self, session: Session) -> None:
        """Write the session to the keyring.

        Raises:
            StoreError: If any slot cannot be written
        """
        self.store.set(ACCESS_TOKEN_SLOT, session.access_token)
        self.store.set(REFRESH_TOKEN_SLOT, session.refresh_token)
        self.store.set(TOKEN_DATA_SLOT, session.token_data())

    def _install(self, session: Session) -> Session:
        """Persist `session`, then make it current.

        A failed write is rolled back so the keyring never mixes slots from
        two sessions: the previous session is written back, or all slots are
        cleared when there was none.

        Raises:
            StoreError: If the new session cannot be persisted
        """
        previous = self._session
        try:
            self._persist(session)
        except StoreError:
            self._rollback(previous)
            raise
        self._session = session
        return session

    def _rollback(self, previous: Session | None) -> None:
        try:
            if previous is not None:
                self._persist(previous)
                return
            for slot in SESSION_SLOTS:
                self.store.delete(slot)
        except StoreError as e:
            logger.warning(f"Could not roll back keyring after failed write: {e}")

    async def _establish(self, grant: RawAuthResponse, refresh_token: str) -> Session:
        """Turn a token grant into a persisted, installed session."""
        profile = await self.client.fetch_profile(grant.access_token)
        session = Session(
            access_token=grant.access_token,
            refresh_token=refresh_token,
            expires_at=grant.expires_at,
            user=profile,
        )
        return self._install(session)

    async def login(self, email: str, password: str) -> Session:
        """Log in with email and password.

        Raises:
            AuthenticationFailed: If the backend rejects the credentials
            MissingField: If the backend response lacks a token
            NetworkError: If the backend could not be reached
            StoreError: If the session cannot be persisted
        """
        async with self._lock:
            grant = await self.client.login_with_password(email, password)
            session = await self._establish(grant, grant.refresh_token or "")
            logger.info(f"Logged in as {session.user.email or email}")
            return session

    def start_oauth(self, provider: str, redirect_uri: str) -> str:
        """URL the user opens to sign in with an OAuth provider."""
        return self.client.build_oauth_url(provider, redirect_uri)

    async def complete_oauth(self, code: str) -> Session:
        """Finish an OAuth sign-in with the code from the redirect.

        Raises:
            OAuthFailed: If the backend rejects the code
            MissingField: If the backend response lacks a token
            NetworkError: If the backend could not be reached
            StoreError: If the session cannot be persisted
        """
        async with self._lock:
            grant = await self.client.exchange_oauth_code(code)
            session = await self._establish(grant, grant.refresh_token or "")
            logger.info(f"OAuth sign-in completed for {session.user.email or session.user.id}")
            return session

    async def refresh(self) -> Session:
        """Renew the access token with the stored refresh token.

        Raises:
            NoActiveSession: If there is no session to refresh
            RefreshFailed: If the backend rejects the refresh token
            MissingField: If the backend response lacks an access token
            NetworkError: If the backend could not be reached
            StoreError: If the session cannot be persisted
        """
        async with self._lock:
            current = self._session
            if current is None:
                raise NoActiveSession("refresh")

            grant = await self.client.refresh(current.refresh_token)
            # Backend either rotates the refresh token or keeps the old one
            session = await self._establish(grant, grant.refresh_token or current.refresh_token)
            logger.info("Session refreshed")
            return session

    async def refresh_if_expiring(self, threshold: int = 300) -> Session | None:
        """Refresh only when the session expires within `threshold` seconds.

        Returns:
            The new session, or None when there is no session or no refresh
            was needed
        """
        remaining = self.seconds_until_expiry()
        if remaining is None or remaining > threshold:
            return None
        return await self.refresh()

    def restore_from_store(self) -> Session | None:
        """Warm start from the keyring without touching the network.

        The restored session is not validated against the backend; callers
        check `is_expired()` and refresh as needed. Call it before any
        mutating operation: while one is in flight nothing is restored, since
        that operation would overwrite the result.

        Returns:
            The restored session, or None if any slot is missing, the stored
            data is malformed or a mutating operation is in flight
        """
        if self._lock.locked():
            logger.warning("Not restoring session while another operation is in flight")
            return None

        try:
            access_token = self.store.get(ACCESS_TOKEN_SLOT)
            refresh_token = self.store.get(REFRESH_TOKEN_SLOT)
            token_data = self.store.get(TOKEN_DATA_SLOT)
        except StoreError as e:
            logger.warning(f"Could not read stored session: {e}")
            return None

        if access_token is None or refresh_token is None or token_data is None:
            return None

        try:
            session = Session.from_record(access_token, refresh_token, token_data)
        except ValueError:
            logger.warning("Stored session data is malformed, ignoring it")
            return None

        self._session = session
        logger.debug("Session restored from keyring")
        return session

    async def logout(self) -> None:
        """Forget the session and delete the persisted record.

        Never raises; deletion is best-effort.
        """
        async with self._lock:
            for slot in SESSION_SLOTS:
                try:
                    self.store.delete(slot)
                except StoreError as e:
                    logger.warning(f"Could not delete keyring slot '{slot}': {e}")
            self._session = None
            logger.info("Logged out")

    async def refresh_profile_only(self) -> UserProfile | None:
        """Re-read the profile with the current access token.

        Tokens are not renewed. Without a session this does nothing.

        Returns:
            The updated profile, or None when not authenticated

        Raises:
            StoreError: If the updated session cannot be persisted
        """
        async with self._lock:
            current = self._session
            if current is None:
                return None

            profile = await self.client.fetch_profile(current.access_token)
            self._install(current.model_copy(update={"user": profile}))
            return profile
