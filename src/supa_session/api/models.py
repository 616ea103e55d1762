"""Session and profile models.

All defaults for degraded profile data live here, so the client, the
session manager and the persisted record agree on them.
"""

import json
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from supa_session.api.exceptions import MissingField

DEFAULT_TIER = "free"
DEFAULT_TOKEN_QUOTA = 10000
# Lifetime assumed for password/OAuth grants that omit expires_at
DEFAULT_TOKEN_LIFETIME = 3600


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _int_or(value: Any, default: int) -> int:
    # bool is an int subclass but never a valid counter
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


class SessionModel(BaseModel):
    """Base model with common configuration.

    - populate_by_name: Allow both alias and field name in input
    - extra="ignore": Ignore unknown fields from backend responses
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


class UserProfile(SessionModel):
    """Denormalized snapshot of the account's entitlements."""

    id: str = ""
    email: str = ""
    tier: str = DEFAULT_TIER
    tokens_remaining: int = DEFAULT_TOKEN_QUOTA
    daily_limit: int = DEFAULT_TOKEN_QUOTA

    @classmethod
    def default(cls) -> "UserProfile":
        """Profile used whenever the backend cannot supply one."""
        return cls()

    @classmethod
    def from_row(cls, row: Any) -> "UserProfile":
        """Build a profile from a `profiles` row.

        Every field falls back to its default when missing or of the wrong
        type. The row calls the daily limit `daily_token_limit`.
        """
        if not isinstance(row, dict):
            return cls.default()
        return cls(
            id=_str_or(row.get("id"), ""),
            email=_str_or(row.get("email"), ""),
            tier=_str_or(row.get("tier"), DEFAULT_TIER),
            tokens_remaining=_int_or(row.get("tokens_remaining"), DEFAULT_TOKEN_QUOTA),
            daily_limit=_int_or(row.get("daily_token_limit"), DEFAULT_TOKEN_QUOTA),
        )

    @property
    def has_quota(self) -> bool:
        """Whether the account can still spend tokens."""
        return self.tokens_remaining > 0


class RawAuthResponse(SessionModel):
    """Token grant response from the backend."""

    access_token: str
    refresh_token: str | None = None
    expires_at: int

    @classmethod
    def parse(
        cls,
        payload: Any,
        *,
        default_expires_at: int,
        require_refresh_token: bool = True,
    ) -> "RawAuthResponse":
        """Parse a grant response.

        Raises:
            MissingField: If a mandatory token is absent or not a string
        """
        if not isinstance(payload, dict):
            raise MissingField("access_token")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise MissingField("access_token")

        refresh_token = payload.get("refresh_token")
        if not isinstance(refresh_token, str):
            if require_refresh_token:
                raise MissingField("refresh_token")
            refresh_token = None

        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=_int_or(payload.get("expires_at"), default_expires_at),
        )


class Session(SessionModel):
    """An authenticated session."""

    access_token: str = Field(min_length=1)
    refresh_token: str
    expires_at: int
    user: UserProfile = Field(default_factory=UserProfile.default)

    def is_expired(self, now: float | None = None) -> bool:
        """Check whether the access token is stale.

        An `expires_at` of 0 means "already expired".
        """
        if now is None:
            now = time.time()
        return self.expires_at < now

    def seconds_until_expiry(self, now: float | None = None) -> int:
        """Remaining lifetime in seconds, never negative."""
        if now is None:
            now = time.time()
        return max(0, int(self.expires_at - now))

    def token_data(self) -> str:
        """JSON blob stored in the `token-data` slot."""
        return json.dumps({"expires_at": self.expires_at, "user": self.user.model_dump()})

    @classmethod
    def from_record(cls, access_token: str, refresh_token: str, token_data: str) -> "Session":
        """Rebuild a session from the three persisted slots.

        Raises:
            ValueError: If the token data is malformed (pydantic's
                ValidationError and json.JSONDecodeError included)
        """
        data = json.loads(token_data)
        if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
            raise ValueError("token data has no user object")
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=_int_or(data.get("expires_at"), 0),
            user=UserProfile.model_validate(data["user"]),
        )
