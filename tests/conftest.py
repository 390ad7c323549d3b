"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

import pytest

from stork_validator.data.models import AccountIdentity, SignedDataPoint
from stork_validator.session.authenticator import Authenticator
from stork_validator.session.models import Session, TokenGrant
from stork_validator.session.store import SessionStore

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable epoch-seconds clock for token expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuthenticator(Authenticator):
    """Authenticator recording every exchange it is asked to perform."""

    def __init__(
        self,
        expires_in: float = 3600.0,
        auth_error: Optional[Exception] = None,
        refresh_error: Optional[Exception] = None,
    ):
        self.expires_in = expires_in
        self.auth_error = auth_error
        self.refresh_error = refresh_error
        self.authenticate_calls = 0
        self.refresh_calls: list[str] = []

    def authenticate(self, identity: AccountIdentity) -> TokenGrant:
        self.authenticate_calls += 1
        if self.auth_error is not None:
            raise self.auth_error
        n = self.authenticate_calls
        return TokenGrant(
            access_token=f"access-{n}",
            id_token=f"id-{n}",
            refresh_token=f"refresh-{n}",
            expires_in=self.expires_in,
        )

    def refresh(self, identity: AccountIdentity, refresh_token: str) -> TokenGrant:
        self.refresh_calls.append(refresh_token)
        if self.refresh_error is not None:
            raise self.refresh_error
        n = len(self.refresh_calls)
        return TokenGrant(
            access_token=f"refreshed-access-{n}",
            id_token=f"refreshed-id-{n}",
            refresh_token=refresh_token,
            expires_in=self.expires_in,
        )


def make_point(
    index: int,
    now: datetime = FIXED_NOW,
    age: timedelta = timedelta(minutes=1),
    **overrides: Any,
) -> SignedDataPoint:
    """Signed data point for asset ``ASSET<index>`` signed ``age`` before now."""
    fields = {
        "asset": f"ASSET{index}USD",
        "msg_hash": f"0x{index:064x}",
        "price": Decimal("1234.5"),
        "timestamp": now - age,
    }
    fields.update(overrides)
    return SignedDataPoint(**fields)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def identity() -> AccountIdentity:
    return AccountIdentity(
        region="ap-northeast-1",
        client_id="test-client",
        user_pool_id="ap-northeast-1_TEST",
        username="alice@example.com",
        password="hunter2",
        max_proxies=2,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def authenticator() -> FakeAuthenticator:
    return FakeAuthenticator()


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore(tmp_path / "sessions")


@pytest.fixture
def valid_session(clock: FakeClock) -> Session:
    return Session(
        access_token="stored-access",
        id_token="stored-id",
        refresh_token="stored-refresh",
        expires_at=clock.now + 600,
    )


@pytest.fixture
def sample_signed_prices() -> dict[str, Any]:
    """``data`` section of a signed prices response."""
    ts_ns = int(FIXED_NOW.timestamp() * 1_000_000_000) - 30 * 1_000_000_000
    return {
        "BTCUSD": {
            "price": "67123450000000000000000",
            "timestamped_signature": {
                "msg_hash": "0xaaaabbbbccccddddeeeeffff00001111",
                "timestamp": ts_ns,
                "signature": {"r": "0x01", "s": "0x02", "v": "0x1b"},
            },
        },
        "ETHUSD": {
            "price": "3512000000000000000000",
            "timestamped_signature": {
                "msg_hash": "0x1111222233334444555566667777",
                "timestamp": str(ts_ns),
                "signature": {"r": "0x03", "s": "0x04", "v": "0x1c"},
            },
        },
    }


@pytest.fixture
def point_factory():
    return make_point


@pytest.fixture
def authenticator_factory():
    return FakeAuthenticator
