"""
Account supervisor.

Drives one account with two independent periodic loops: the validation
cycle (fetch batch, dispatch, aggregate) and the forced session rotation.
Failures inside either loop are logged and the loop continues on its next
tick; only a required password reset stops the account.
"""

import threading
import time
from typing import Callable, Optional, Sequence

from .client.stork_api import StorkApiClient
from .data.models import AccountIdentity, VerdictAggregate
from .dispatch.dispatcher import ValidationDispatcher
from .errors import AuthenticationError, FetchFailure, PasswordResetRequired
from .logging.config import get_account_logger
from .session.manager import TokenManager

FORCED_ROTATION_SECONDS = 60 * 60


class AccountSupervisor:
    """Runs the validation and rotation loops of one account."""

    def __init__(
        self,
        identity: AccountIdentity,
        proxies: Sequence[str],
        token_manager: TokenManager,
        api: StorkApiClient,
        dispatcher: ValidationDispatcher,
        interval_seconds: float,
        max_workers: int,
        rotation_seconds: float = FORCED_ROTATION_SECONDS,
    ):
        self.identity = identity
        self.proxies = tuple(proxies)
        self.token_manager = token_manager
        self.api = api
        self.dispatcher = dispatcher
        self.interval_seconds = interval_seconds
        self.max_workers = max_workers
        self.rotation_seconds = rotation_seconds
        self.logger = get_account_logger(__name__, identity.username)

        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self.last_aggregate: Optional[VerdictAggregate] = None

    @property
    def running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def start(self) -> None:
        """Start both loops; session initialization happens on the validation thread."""
        if self._threads:
            return

        name = self.identity.session_key
        self._threads = [
            threading.Thread(target=self._validation_loop, name=f"validate-{name}", daemon=True),
            threading.Thread(target=self._rotation_loop, name=f"rotate-{name}", daemon=True),
        ]
        for thread in self._threads:
            thread.start()

        self.logger.info(
            "Supervisor started",
            proxies=len(self.proxies),
            interval_seconds=self.interval_seconds,
            rotation_seconds=self.rotation_seconds,
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal both loops and wait for them to exit."""
        self._stop.set()
        current = threading.current_thread()
        for thread in self._threads:
            if thread is not current:
                thread.join(timeout)

    def initialize(self) -> bool:
        """
        Obtain the initial session.

        Returns:
            False only when the account is locked by a password reset
        """
        try:
            self.token_manager.init()
        except PasswordResetRequired:
            self.logger.error("Account requires a password reset, supervisor stopping")
            self._stop.set()
            return False
        except AuthenticationError as e:
            self.logger.error("Initial authentication failed, will retry next tick", error=str(e))
            return True
        except Exception:
            self.logger.exception("Session initialization error, will retry next tick")
            return True

        self.logger.info("Initial token ready")
        return True

    def run_cycle(self) -> Optional[VerdictAggregate]:
        """
        Run one dispatch cycle end to end.

        Returns:
            The cycle aggregate, or None when the cycle was aborted
        """
        try:
            token = self.token_manager.get_valid_token()
        except PasswordResetRequired:
            self.logger.error("Account requires a password reset, supervisor stopping")
            self._stop.set()
            return None
        except AuthenticationError as e:
            self.logger.error("No valid token, will retry next tick", error=str(e))
            return None

        try:
            data_points = self.api.get_signed_prices(token)
        except FetchFailure as e:
            self.logger.error("Error fetching signed prices, will retry next tick", error=str(e))
            return None

        if not data_points:
            self.logger.info("No data to validate")
            return None

        aggregate = self.dispatcher.dispatch(token, data_points, self.proxies, self.max_workers)
        self.last_aggregate = aggregate
        self.logger.info(
            "Finished validation",
            succeeded=aggregate.succeeded,
            total=aggregate.total,
            points=self._points(token),
        )
        return aggregate

    def _points(self, token: str) -> Optional[int]:
        try:
            return self.api.get_valid_count(token)
        except FetchFailure as e:
            self.logger.warning("Error fetching user stats", error=str(e))
            return None

    def rotate_session(self) -> bool:
        """Force a fresh authentication; returns True when a new token was obtained."""
        try:
            self.token_manager.force_rotation()
        except PasswordResetRequired:
            self.logger.error("Account requires a password reset, supervisor stopping")
            self._stop.set()
            return False
        except AuthenticationError as e:
            self.logger.error("Forced reauthentication failed, will retry next tick", error=str(e))
            return False

        self.logger.info("Token refreshed (forced reauth)")
        return True

    def _validation_loop(self) -> None:
        if not self.initialize():
            return
        self._run_periodically(self.interval_seconds, self._guarded_cycle, immediate=True)

    def _rotation_loop(self) -> None:
        self._run_periodically(self.rotation_seconds, self._guarded_rotation, immediate=False)

    def _guarded_cycle(self) -> None:
        try:
            self.run_cycle()
        except Exception:
            self.logger.exception("Validation process error")

    def _guarded_rotation(self) -> None:
        try:
            self.rotate_session()
        except Exception:
            self.logger.exception("Forced rotation error")

    def _run_periodically(self, period: float, action: Callable[[], object], immediate: bool) -> None:
        """Fixed-rate schedule; ticks missed while an action runs are skipped."""
        next_run = time.monotonic() + (0 if immediate else period)
        while not self._stop.wait(max(0.0, next_run - time.monotonic())):
            action()
            now = time.monotonic()
            next_run += period
            if next_run < now:
                next_run = now + period - ((now - next_run) % period)
