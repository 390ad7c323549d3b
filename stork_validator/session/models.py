"""
Session data models for the per-account credential lifecycle.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class SessionState(str, Enum):
    """Token manager states."""
    UNINITIALIZED = "uninitialized"
    VALID = "valid"
    EXPIRED = "expired"
    REFRESHING = "refreshing"
    REAUTHENTICATING = "reauthenticating"
    LOCKED = "locked"                                # Password reset required


@dataclass(frozen=True)
class TokenGrant:
    """Tokens returned by an authentication or refresh exchange."""
    access_token: str
    id_token: str
    refresh_token: str
    expires_in: float                                # Seconds until access token expiry


@dataclass(frozen=True)
class Session:
    """Access, identity and refresh tokens plus absolute expiry (epoch seconds)."""
    access_token: str
    id_token: str
    refresh_token: str
    expires_at: float = 0.0

    @classmethod
    def from_grant(cls, grant: TokenGrant, now: float) -> "Session":
        return cls(
            access_token=grant.access_token,
            id_token=grant.id_token,
            refresh_token=grant.refresh_token,
            expires_at=now + grant.expires_in,
        )

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def to_record(self) -> dict[str, Any]:
        """Durable record layout shared with the browser extension token file."""
        return {
            "accessToken": self.access_token,
            "idToken": self.id_token,
            "refreshToken": self.refresh_token,
            "isAuthenticated": True,
            "isVerifying": False,
            "expiresAt": self.expires_at,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Optional["Session"]:
        """
        Rebuild a session from a durable record.

        Returns None when the record holds no access token. Records written
        without ``expiresAt`` load as already expired.
        """
        access_token = record.get("accessToken")
        if not access_token or not isinstance(access_token, str):
            return None

        expires_at = record.get("expiresAt")
        if not isinstance(expires_at, (int, float)) or isinstance(expires_at, bool):
            expires_at = 0.0

        return cls(
            access_token=access_token,
            id_token=record.get("idToken") or "",
            refresh_token=record.get("refreshToken") or "",
            expires_at=float(expires_at),
        )
