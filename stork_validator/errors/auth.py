"""
Authentication error classifications for the account credential lifecycle.

AuthFailure and RefreshFailure are retried on the next renewal attempt.
PasswordResetRequired needs an out-of-band credential reset and stops the
account.
"""

from typing import Any, Dict, Optional

from .recovery import UnrecoverableError


class AuthenticationError(Exception):
    """Base class for credential lifecycle failures of a single account."""

    def __init__(self, message: str, username: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.username = username
        self.context = context or {}
        self.recoverable = True


class AuthFailure(AuthenticationError):
    """Interactive credential exchange was rejected (bad credentials, backend error)."""

    def __init__(self, message: str, error_code: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.error_code = error_code


class RefreshFailure(AuthenticationError):
    """Refresh token exchange was rejected (expired or revoked refresh token)."""

    def __init__(self, message: str, error_code: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.error_code = error_code


class PasswordResetRequired(AuthenticationError, UnrecoverableError):
    """Backend demands a new password before the account can authenticate."""

    def __init__(self, message: str, **kwargs):
        AuthenticationError.__init__(self, message, **kwargs)
        self.recoverable = False
