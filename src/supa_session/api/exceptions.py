"""Exceptions for the authentication backend and credential store."""


class AuthError(Exception):
    """Base exception for session lifecycle errors."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class AuthenticationFailed(AuthError):
    """Password grant was rejected by the backend."""

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(f"Authentication failed: {detail}", detail)
        self.status_code = status_code


class OAuthFailed(AuthError):
    """Authorization code exchange was rejected."""

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(f"OAuth callback failed: {detail}", detail)
        self.status_code = status_code


class RefreshFailed(AuthError):
    """Refresh grant was rejected. The user has to log in again."""

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(f"Token refresh failed: {detail}", detail)
        self.status_code = status_code


class MissingField(AuthError):
    """Backend response lacks a mandatory token field."""

    def __init__(self, field: str):
        super().__init__(f"Missing {field}")
        self.field = field


class NoActiveSession(AuthError):
    """Operation requires an authenticated session."""

    def __init__(self, operation: str = "refresh"):
        super().__init__(f"No active session to {operation}. Log in first.")
        self.operation = operation


class NetworkError(AuthError):
    """Backend could not be reached."""


class StoreError(AuthError):
    """Secret store read, write or delete failed."""

    def __init__(self, message: str, slot: str | None = None):
        super().__init__(message)
        self.slot = slot
