"""
HTTP client for the Stork oracle API.

GET endpoints are retried by the transport adapter; verdict reports are
sent once through the proxy chosen for the item.
"""

import threading
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..data.models import SignedDataPoint
from ..data.parsers import ParseError, parse_json_payload, parse_signed_prices
from ..errors import DispatchItemFailure, FetchFailure
from ..logging.config import get_logger
from ..egress.proxies import Egress

STATS_PATH = "/me"
SIGNED_PRICES_PATH = "/stork_signed_prices"
VALIDATIONS_PATH = "/stork_signed_prices/validations"


def create_session() -> requests.Session:
    """HTTP session retrying idempotent requests on transient failures."""
    s = requests.Session()
    retry = Retry(total=3, backoff_factor=1, status_forcelist=[429, 500, 502, 503, 504])
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


class StorkApiClient:
    """Oracle API calls made on behalf of an authenticated account."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        user_agent: str = "Mozilla/5.0 (Node)",
        origin: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.origin = origin
        self.logger = get_logger("stork.api")
        # requests.Session is not thread-safe; dispatch workers each get one
        self._local = threading.local()

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = create_session()
            self._local.session = session
        return session

    def _headers(self, token: str) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {token}",
            "User-Agent": self.user_agent,
        }
        if self.origin:
            headers["Origin"] = self.origin
        return headers

    def _get_data(self, token: str, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self._session().get(url, headers=self._headers(token), timeout=self.timeout)
            resp.raise_for_status()
            body = parse_json_payload(resp.content)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchFailure(f"GET {path} failed: {e}", endpoint=path, status_code=status) from e
        except (requests.RequestException, ParseError) as e:
            raise FetchFailure(f"GET {path} failed: {e}", endpoint=path) from e

        return body.get("data")

    def get_user_stats(self, token: str) -> dict[str, Any]:
        """
        Fetch account stats.

        Raises:
            FetchFailure: On network, HTTP or decoding errors
        """
        data = self._get_data(token, STATS_PATH)
        return data if isinstance(data, dict) else {}

    def get_valid_count(self, token: str) -> int:
        """
        Cumulative number of accepted validations (the account's points).

        Raises:
            FetchFailure: On transport errors or a malformed stats payload
        """
        stats = self.get_user_stats(token).get("stats") or {}
        if not isinstance(stats, dict):
            raise FetchFailure(f"Malformed stats: {stats!r}", endpoint=STATS_PATH)

        value = stats.get("stork_signed_prices_valid_count") or 0
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise FetchFailure(f"Malformed valid count: {value!r}", endpoint=STATS_PATH) from e

    def get_signed_prices(self, token: str) -> list[SignedDataPoint]:
        """
        Fetch the current batch of signed price points.

        Raises:
            FetchFailure: On network, HTTP, decoding or payload shape errors
        """
        data = self._get_data(token, SIGNED_PRICES_PATH)
        try:
            return parse_signed_prices(data)
        except ParseError as e:
            raise FetchFailure(f"Malformed signed prices: {e}", endpoint=SIGNED_PRICES_PATH) from e

    def send_validation(
        self,
        token: str,
        msg_hash: str,
        valid: bool,
        egress: Optional[Egress] = None,
    ) -> Any:
        """
        Report a verdict for one message hash.

        Raises:
            DispatchItemFailure: On network or HTTP errors
        """
        url = f"{self.base_url}{VALIDATIONS_PATH}"
        proxy_uri = egress.uri if egress else None

        try:
            resp = self._session().post(
                url,
                json={"msg_hash": msg_hash, "valid": valid},
                headers=self._headers(token),
                proxies=egress.requests_proxies() if egress else None,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise DispatchItemFailure(
                f"Validation rejected: {e}", msg_hash=msg_hash, proxy=proxy_uri, status_code=status
            ) from e
        except requests.RequestException as e:
            raise DispatchItemFailure(
                f"Validation request failed: {e}", msg_hash=msg_hash, proxy=proxy_uri
            ) from e

        try:
            return parse_json_payload(resp.content)
        except ParseError:
            return None
