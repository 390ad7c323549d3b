"""
Error classification system for the validation client.

Authentication errors describe the credential lifecycle of an account,
transport errors describe calls to the remote API and egress handling.
"""

from .auth import (
    AuthenticationError,
    AuthFailure,
    PasswordResetRequired,
    RefreshFailure,
)
from .transport import (
    TransportError,
    FetchFailure,
    DispatchItemFailure,
    UnsupportedEgress,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    ConfigurationError,
)
from .recovery import UnrecoverableError

__all__ = [
    # Authentication
    "AuthenticationError",
    "AuthFailure",
    "PasswordResetRequired",
    "RefreshFailure",
    # Transport
    "TransportError",
    "FetchFailure",
    "DispatchItemFailure",
    "UnsupportedEgress",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "ConfigurationError",
    # Recovery Categories
    "UnrecoverableError",
]
