"""
Account authentication against the oracle's Cognito user pool.

The authenticator only performs network exchanges; persisting and caching
the resulting tokens is the token manager's job.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import jwt
import requests
from botocore.exceptions import BotoCoreError, ClientError
from pycognito import Cognito
from pycognito.exceptions import ForceChangePasswordException, TokenVerificationException

from ..data.models import AccountIdentity
from ..errors import AuthFailure, PasswordResetRequired, RefreshFailure
from ..logging.config import get_account_logger
from .models import TokenGrant

DEFAULT_EXPIRES_IN = 3600.0

_PASSWORD_RESET_CODES = {"PasswordResetRequiredException"}


class Authenticator(ABC):
    """Credential exchange capability for one account."""

    @abstractmethod
    def authenticate(self, identity: AccountIdentity) -> TokenGrant:
        """
        Perform a full credential exchange.

        Raises:
            AuthFailure: Credentials rejected or backend unavailable
            PasswordResetRequired: Backend demands a new password
        """
        pass

    @abstractmethod
    def refresh(self, identity: AccountIdentity, refresh_token: str) -> TokenGrant:
        """
        Exchange a refresh token for new access and identity tokens.

        The returned grant carries the same refresh token.

        Raises:
            RefreshFailure: Refresh token expired, revoked or rejected
        """
        pass


def token_expires_in(access_token: str, now: Optional[float] = None) -> float:
    """Seconds until the ``exp`` claim of a JWT, read without verification."""
    if now is None:
        now = time.time()

    try:
        claims = jwt.decode(access_token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return DEFAULT_EXPIRES_IN

    exp = claims.get("exp")
    if not isinstance(exp, (int, float)):
        return DEFAULT_EXPIRES_IN
    return float(exp) - now


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class CognitoAuthenticator(Authenticator):
    """Authenticator backed by Cognito SRP login and refresh-token auth."""

    def __init__(self, cognito_factory: Callable[..., Any] = Cognito):
        self._cognito_factory = cognito_factory

    def _client(self, identity: AccountIdentity, **tokens: Any) -> Any:
        return self._cognito_factory(
            identity.user_pool_id,
            identity.client_id,
            user_pool_region=identity.region,
            username=identity.username,
            **tokens
        )

    def authenticate(self, identity: AccountIdentity) -> TokenGrant:
        logger = get_account_logger(__name__, identity.username)
        client = self._client(identity)

        try:
            client.authenticate(password=identity.password)
        except ForceChangePasswordException as e:
            logger.error("Password change required, account needs manual reset")
            raise PasswordResetRequired("New password required", username=identity.username) from e
        except ClientError as e:
            code = _error_code(e)
            if code in _PASSWORD_RESET_CODES:
                raise PasswordResetRequired(
                    f"Password reset required: {code}", username=identity.username
                ) from e
            raise AuthFailure(
                f"Authentication rejected: {code}", error_code=code, username=identity.username
            ) from e
        except (BotoCoreError, TokenVerificationException, requests.RequestException) as e:
            raise AuthFailure(f"Authentication failed: {e}", username=identity.username) from e

        logger.info("Authenticated with credentials")
        return TokenGrant(
            access_token=client.access_token,
            id_token=client.id_token,
            refresh_token=client.refresh_token,
            expires_in=token_expires_in(client.access_token),
        )

    def refresh(self, identity: AccountIdentity, refresh_token: str) -> TokenGrant:
        logger = get_account_logger(__name__, identity.username)
        client = self._client(identity, refresh_token=refresh_token)

        try:
            client.renew_access_token()
        except ClientError as e:
            code = _error_code(e)
            raise RefreshFailure(
                f"Refresh rejected: {code}", error_code=code, username=identity.username
            ) from e
        except (BotoCoreError, TokenVerificationException, requests.RequestException) as e:
            raise RefreshFailure(f"Refresh failed: {e}", username=identity.username) from e

        logger.info("Access token refreshed")
        return TokenGrant(
            access_token=client.access_token,
            id_token=client.id_token,
            refresh_token=refresh_token,
            expires_in=token_expires_in(client.access_token),
        )
