"""
Validation dispatcher.

Every data point is validated locally and reported through its own unit of
work. A unit always resolves to a ValidationVerdict: network errors,
rejected reports, unsupported proxies and unexpected exceptions become
failure verdicts and never affect sibling units.
"""

import math
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import datetime
from itertools import chain
from typing import Any, Callable, Optional, Protocol, Sequence

from ..data.models import SignedDataPoint, ValidationVerdict, VerdictAggregate, VerdictOutcome
from ..data.validators import FRESHNESS_WINDOW_SECONDS, validate_data_point
from ..egress.proxies import Egress, proxy_for_index, resolve_egress
from ..errors import DispatchItemFailure, FetchFailure
from ..logging.config import get_account_logger
from ..utils.time import utc_now


class VerdictReporter(Protocol):
    """Remote side of a dispatch unit."""

    def send_validation(
        self, token: str, msg_hash: str, valid: bool, egress: Optional[Egress] = None
    ) -> Any: ...

    def get_valid_count(self, token: str) -> int: ...


def partition(items: Sequence[Any], max_workers: int) -> list[list[Any]]:
    """
    Split items into contiguous batches of ceil(len / max_workers).

    Yields at most max_workers batches. Batch boundaries only group work;
    every item is still dispatched on its own.
    """
    if not items:
        return []

    chunk_size = math.ceil(len(items) / max(1, max_workers))
    return [list(items[i:i + chunk_size]) for i in range(0, len(items), chunk_size)]


class ValidationDispatcher:
    """Dispatches validate+report units for one account."""

    def __init__(
        self,
        reporter: VerdictReporter,
        username: str,
        validator: Callable[..., bool] = validate_data_point,
        freshness_seconds: float = FRESHNESS_WINDOW_SECONDS,
        fetch_points: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.reporter = reporter
        self.username = username
        self.validator = validator
        self.freshness_seconds = freshness_seconds
        self.fetch_points = fetch_points
        self._clock = clock
        self.logger = get_account_logger(__name__, username)

    def dispatch(
        self,
        token: str,
        data_points: Sequence[SignedDataPoint],
        proxies: Sequence[str],
        max_workers: int,
    ) -> VerdictAggregate:
        """
        Validate and report every data point, then aggregate the verdicts.

        Args:
            token: Access token shared by all units
            data_points: Batch fetched for this cycle
            proxies: The account's assigned proxies; item i uses proxies[i % len]
            max_workers: Size of the worker pool

        Returns:
            Aggregate holding one verdict per data point, in batch order
        """
        if not data_points:
            return VerdictAggregate.from_verdicts([])

        workers = max(1, max_workers)
        batches = partition(data_points, workers)
        now = self._clock()

        verdicts = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dispatch") as pool:
            futures: dict[Future, tuple[int, SignedDataPoint, Optional[str]]] = {}
            for index, data_point in enumerate(chain.from_iterable(batches)):
                proxy = proxy_for_index(proxies, index)
                future = pool.submit(self._run_unit, token, index, data_point, proxy, now)
                futures[future] = (index, data_point, proxy)

            for future in as_completed(futures):
                index, data_point, proxy = futures[future]
                try:
                    verdicts.append(future.result())
                except Exception as e:
                    verdicts.append(self._failure(index, data_point, None, proxy, e))

        return VerdictAggregate.from_verdicts(verdicts)

    def _run_unit(
        self,
        token: str,
        index: int,
        data_point: SignedDataPoint,
        proxy: Optional[str],
        now: datetime,
    ) -> ValidationVerdict:
        valid = None
        try:
            valid = bool(self.validator(data_point, now=now, freshness_seconds=self.freshness_seconds))
            egress = resolve_egress(proxy) if proxy else None

            if not data_point.msg_hash:
                raise DispatchItemFailure(
                    f"No message hash for asset {data_point.asset}", proxy=proxy
                )

            self.reporter.send_validation(token, data_point.msg_hash, valid, egress)
            points = self._points(token)
        except Exception as e:
            return self._failure(index, data_point, valid, proxy, e)

        self.logger.info(
            "Validation success",
            msg_hash=data_point.short_hash,
            asset=data_point.asset,
            valid=valid,
            proxy=proxy or "no-proxy",
            points=points,
        )
        return ValidationVerdict(
            index=index,
            msg_hash=data_point.msg_hash,
            valid=valid,
            proxy=proxy,
            outcome=VerdictOutcome.SUCCESS,
            points=points,
        )

    def _points(self, token: str) -> Optional[int]:
        if not self.fetch_points:
            return None
        try:
            return self.reporter.get_valid_count(token)
        except FetchFailure as e:
            self.logger.warning("Could not fetch points", error=str(e))
            return None

    def _failure(
        self,
        index: int,
        data_point: SignedDataPoint,
        valid: Optional[bool],
        proxy: Optional[str],
        error: Exception,
    ) -> ValidationVerdict:
        self.logger.error(
            "Validation failed",
            msg_hash=data_point.short_hash,
            asset=data_point.asset,
            proxy=proxy or "no-proxy",
            error=str(error),
            error_type=type(error).__name__,
        )
        return ValidationVerdict(
            index=index,
            msg_hash=data_point.msg_hash,
            valid=valid,
            proxy=proxy,
            outcome=VerdictOutcome.FAILURE,
            reason=str(error),
        )
