"""
Core data models for accounts, signed price points and validation verdicts.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9]")


def sanitize_username(username: str) -> str:
    """Replace every character outside [a-zA-Z0-9] with an underscore."""
    return _UNSAFE_KEY_CHARS.sub("_", username)


@dataclass(frozen=True)
class AccountIdentity:
    """Credentials and egress quota of one account."""
    region: str
    client_id: str
    user_pool_id: str
    username: str
    password: str = field(repr=False)
    max_proxies: int = 1

    @classmethod
    def from_config(cls, entry: dict[str, Any]) -> "AccountIdentity":
        """Build an identity from a config file account entry."""
        max_proxies = entry.get("maxProxies")
        return cls(
            region=entry.get("region", ""),
            client_id=entry.get("clientId", ""),
            user_pool_id=entry.get("userPoolId", ""),
            username=entry.get("username") or "",
            password=entry.get("password") or "",
            # Zero or missing quota falls back to one proxy
            max_proxies=max_proxies or 1,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)

    @property
    def session_key(self) -> str:
        """Key of this account's durable session slot."""
        return sanitize_username(self.username)


@dataclass(frozen=True)
class SignedDataPoint:
    """One signed price point as served by the oracle."""
    asset: str
    msg_hash: Optional[str]
    price: Optional[Decimal]
    timestamp: Optional[datetime]
    payload: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def short_hash(self) -> str:
        return (self.msg_hash or "<missing>")[:10]


class VerdictOutcome(str, Enum):
    """Outcome of validating and reporting a single data point."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ValidationVerdict:
    """Result of one isolated validate+report unit."""
    index: int
    msg_hash: Optional[str]
    valid: Optional[bool]
    proxy: Optional[str]
    outcome: VerdictOutcome
    reason: Optional[str] = None
    points: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == VerdictOutcome.SUCCESS


@dataclass(frozen=True)
class VerdictAggregate:
    """Aggregate of every verdict produced in one dispatch cycle."""
    total: int
    succeeded: int
    verdicts: tuple[ValidationVerdict, ...]

    @classmethod
    def from_verdicts(cls, verdicts: list[ValidationVerdict]) -> "VerdictAggregate":
        ordered = tuple(sorted(verdicts, key=lambda v: v.index))
        return cls(
            total=len(ordered),
            succeeded=sum(1 for v in ordered if v.succeeded),
            verdicts=ordered,
        )

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def outcomes(self) -> dict[Optional[str], VerdictOutcome]:
        """Per-item outcome keyed by message hash, in dispatch order."""
        return {v.msg_hash: v.outcome for v in self.verdicts}

    @property
    def proxies_used(self) -> list[Optional[str]]:
        return [v.proxy for v in self.verdicts]


@dataclass(frozen=True)
class ProxyAssignment:
    """Egress endpoints owned by one account for its lifetime."""
    account: AccountIdentity
    proxies: tuple[str, ...] = ()
