"""HTTP client for the authentication backend."""

import logging
import time
from typing import Any

import httpx

from supa_session.api.exceptions import (
    AuthenticationFailed,
    AuthError,
    NetworkError,
    OAuthFailed,
    RefreshFailed,
)
from supa_session.api.models import DEFAULT_TOKEN_LIFETIME, RawAuthResponse, UserProfile

logger = logging.getLogger(__name__)

TOKEN_PATH = "/auth/v1/token"
AUTHORIZE_PATH = "/auth/v1/authorize"
PROFILES_PATH = "/rest/v1/profiles"


class BackendAuthClient:
    """Async client for the token grants and the profile table.

    Usage:
        async with BackendAuthClient(url, anon_key) as client:
            grant = await client.login_with_password(email, password)
            profile = await client.fetch_profile(grant.access_token)

    An injected `httpx.AsyncClient` is left open; one created here is
    closed on exit.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> "BackendAuthClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Content-Type": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def _grant(
        self,
        grant_type: str,
        body: dict[str, Any],
        error_cls: type[AuthError],
    ) -> Any:
        """POST a token grant and return the decoded JSON body.

        Raises:
            error_cls: On a non-success status, carrying the raw response text
            NetworkError: If the backend could not be reached
        """
        try:
            response = await self._client.post(
                f"{self.base_url}{TOKEN_PATH}",
                params={"grant_type": grant_type},
                json=body,
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            logger.error(f"Network error during {grant_type} grant: {type(e).__name__}")
            raise NetworkError(f"Network error during {grant_type} grant: {e}") from e

        if not response.is_success:
            # Status only; the body may echo submitted identifiers
            logger.error(f"{grant_type} grant rejected with status {response.status_code}")
            raise error_cls(response.text, response.status_code)

        try:
            return response.json()
        except ValueError:
            # Undecodable body is handled like an empty one by the parser
            return None

    async def login_with_password(self, email: str, password: str) -> RawAuthResponse:
        """Exchange email and password for tokens.

        Raises:
            AuthenticationFailed: If the backend rejects the credentials
            MissingField: If the response lacks a token
        """
        data = await self._grant(
            "password",
            {"email": email, "password": password},
            AuthenticationFailed,
        )
        return RawAuthResponse.parse(
            data, default_expires_at=int(time.time()) + DEFAULT_TOKEN_LIFETIME
        )

    async def exchange_oauth_code(self, code: str) -> RawAuthResponse:
        """Exchange an OAuth authorization code for tokens.

        Raises:
            OAuthFailed: If the backend rejects the code
            MissingField: If the response lacks a token
        """
        data = await self._grant(
            "authorization_code",
            {"grant_type": "authorization_code", "code": code},
            OAuthFailed,
        )
        return RawAuthResponse.parse(
            data, default_expires_at=int(time.time()) + DEFAULT_TOKEN_LIFETIME
        )

    async def refresh(self, refresh_token: str) -> RawAuthResponse:
        """Mint a new access token from a refresh token.

        The response may omit `refresh_token` (the caller keeps the old one)
        and `expires_at` (reported as 0, i.e. already expired).

        Raises:
            RefreshFailed: If the backend rejects the refresh token
            MissingField: If the response lacks an access token
        """
        data = await self._grant(
            "refresh_token",
            {"refresh_token": refresh_token},
            RefreshFailed,
        )
        # TODO: the 0 fallback marks a fresh token as expired; confirm with
        # the backend whether refresh responses can actually omit expires_at.
        return RawAuthResponse.parse(
            data, default_expires_at=0, require_refresh_token=False
        )

    def build_oauth_url(self, provider: str, redirect_uri: str) -> str:
        """Browser redirect target for a provider sign-in.

        Arguments are inserted as given; validating them is up to the caller.
        """
        return f"{self.base_url}{AUTHORIZE_PATH}?provider={provider}&redirect_to={redirect_uri}"

    async def fetch_profile(self, access_token: str) -> UserProfile:
        """Fetch the caller's profile row.

        Never raises: any failure yields the default profile so the
        application keeps working in a degraded mode.
        """
        try:
            response = await self._client.get(
                f"{self.base_url}{PROFILES_PATH}",
                headers=self._headers(access_token),
            )
        except httpx.RequestError as e:
            logger.warning(f"Profile fetch failed, using defaults: {type(e).__name__}")
            return UserProfile.default()

        if not response.is_success:
            logger.warning(f"Profile fetch returned {response.status_code}, using defaults")
            return UserProfile.default()

        try:
            rows = response.json()
        except ValueError:
            logger.warning("Profile response is not JSON, using defaults")
            return UserProfile.default()

        if not isinstance(rows, list) or not rows:
            logger.debug("No profile row returned, using defaults")
            return UserProfile.default()

        return UserProfile.from_row(rows[0])
