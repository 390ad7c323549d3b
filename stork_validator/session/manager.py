"""
Per-account token manager.

Keeps a currently valid access token for one account. Every renewal path
(refresh, full authentication, forced rotation) ends in ``_apply_grant``,
the single place where the in-memory session and its durable copy change.

States::

    UNINITIALIZED -> VALID -> EXPIRED -> REFRESHING -> VALID
                                              |
                                              +-> REAUTHENTICATING -> VALID
                                                        |
                                                        +-> LOCKED (password reset)
"""

import threading
import time
from typing import Callable, Optional

from ..data.models import AccountIdentity
from ..errors import PasswordResetRequired, PersistenceError, RefreshFailure
from ..logging.config import get_session_logger, log_session_transition
from .authenticator import Authenticator
from .models import Session, SessionState, TokenGrant
from .store import SessionStore


class TokenManager:
    """Owns the session of exactly one account."""

    def __init__(
        self,
        identity: AccountIdentity,
        authenticator: Authenticator,
        store: SessionStore,
        clock: Callable[[], float] = time.time,
    ):
        self.identity = identity
        self.authenticator = authenticator
        self.store = store
        self._clock = clock
        self.logger = get_session_logger(__name__, identity.username)

        self._session: Optional[Session] = None
        self._renewal: Optional[SessionState] = None
        self._locked = False
        # Reentrant: init calls get_valid_token while holding it
        self._lock = threading.RLock()

    @property
    def account_key(self) -> str:
        return self.identity.session_key

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def state(self) -> SessionState:
        if self._locked:
            return SessionState.LOCKED
        if self._renewal is not None:
            return self._renewal
        if self._session is None:
            return SessionState.UNINITIALIZED
        if self._session.is_expired(self._clock()):
            return SessionState.EXPIRED
        return SessionState.VALID

    def init(self) -> str:
        """Seed from the durable slot, then guarantee a valid token."""
        with self._lock:
            stored = self.store.load(self.account_key)
            if stored is not None:
                self._session = stored
                log_session_transition(
                    self.logger,
                    from_state=SessionState.UNINITIALIZED.value,
                    to_state=self.state.value,
                    trigger="loaded_from_store",
                )
            return self.get_valid_token()

    def get_valid_token(self) -> str:
        """
        Return an access token that has not expired.

        Raises:
            AuthFailure: Renewal fell through to authentication and it failed
            PasswordResetRequired: Account is locked pending a password reset
        """
        with self._lock:
            if self._locked:
                raise PasswordResetRequired(
                    "Account requires a password reset", username=self.identity.username
                )

            if self._session is None or self._session.is_expired(self._clock()):
                self.refresh_or_authenticate()

            return self._session.access_token

    def refresh_or_authenticate(self) -> None:
        """
        Renew the session.

        Tries the refresh token once when one is held; a rejected refresh
        clears the durable slot and falls through to one full
        authentication.
        """
        with self._lock:
            session = self._session
            if session is not None and session.refresh_token:
                grant = self._try_refresh(session.refresh_token)
                if grant is not None:
                    self._apply_grant(grant, trigger="refresh")
                    return

            self._apply_grant(self._authenticate(), trigger="authenticate")

    def force_rotation(self) -> str:
        """
        Delete the durable slot and authenticate from scratch.

        The in-memory session is only replaced once the new grant arrives;
        a failed exchange leaves it usable for later cycles.

        Raises:
            AuthFailure: The exchange failed
            PasswordResetRequired: Account is locked pending a password reset
        """
        with self._lock:
            if self._locked:
                raise PasswordResetRequired(
                    "Account requires a password reset", username=self.identity.username
                )

            self._invalidate_store()
            self._apply_grant(self._authenticate(), trigger="forced_rotation")
            return self._session.access_token

    def _authenticate(self) -> TokenGrant:
        self._renewal = SessionState.REAUTHENTICATING
        try:
            return self.authenticator.authenticate(self.identity)
        except PasswordResetRequired:
            self._locked = True
            self.logger.error("Password reset required, account will not be retried")
            raise
        finally:
            self._renewal = None

    def _try_refresh(self, refresh_token: str) -> Optional[TokenGrant]:
        self._renewal = SessionState.REFRESHING
        try:
            return self.authenticator.refresh(self.identity, refresh_token)
        except RefreshFailure as e:
            self.logger.error("Refresh token failed", error=str(e))
            if self._invalidate_store():
                self.logger.info("Deleted session file due to refresh failure")
            return None
        finally:
            self._renewal = None

    def _invalidate_store(self) -> bool:
        try:
            return self.store.invalidate(self.account_key)
        except PersistenceError as e:
            self.logger.error("Could not delete session file", error=str(e), target=e.target)
            return False

    def _apply_grant(self, grant: TokenGrant, trigger: str) -> None:
        previous = self.state
        session = Session.from_grant(grant, self._clock())

        try:
            self.store.save(self.account_key, session)
        except PersistenceError as e:
            self.logger.error("Could not persist session", error=str(e), target=e.target)

        self._session = session
        log_session_transition(
            self.logger,
            from_state=previous.value,
            to_state=SessionState.VALID.value,
            trigger=trigger,
            context={"expires_in": round(grant.expires_in)},
        )
