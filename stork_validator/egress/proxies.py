"""Proxy pool loading, per-account allocation and egress resolution."""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence, Union
from urllib.parse import urlparse

from ..data.models import AccountIdentity, ProxyAssignment
from ..errors import UnsupportedEgress
from ..logging.config import get_logger

logger = get_logger(__name__)


class EgressFamily(str, Enum):
    """Proxy protocol families supported for report calls."""
    HTTP = "http"
    SOCKS = "socks"


_SCHEME_FAMILIES = {
    "http": EgressFamily.HTTP,
    "https": EgressFamily.HTTP,
    "socks4": EgressFamily.SOCKS,
    "socks4a": EgressFamily.SOCKS,
    "socks5": EgressFamily.SOCKS,
    "socks5h": EgressFamily.SOCKS,
}


@dataclass(frozen=True)
class Egress:
    """A resolved proxy endpoint."""
    uri: str
    family: EgressFamily
    scheme: str

    def requests_proxies(self) -> dict[str, str]:
        """Proxy mapping for a requests call; SOCKS schemes go through PySocks."""
        return {"http": self.uri, "https": self.uri}


@lru_cache(maxsize=1024)
def resolve_egress(uri: str) -> Egress:
    """
    Resolve a proxy URI into its protocol family.

    Raises:
        UnsupportedEgress: If the scheme is neither HTTP nor SOCKS family
    """
    scheme = urlparse(uri).scheme.lower()
    family = _SCHEME_FAMILIES.get(scheme)
    if family is None:
        raise UnsupportedEgress(f"Unsupported proxy protocol: {uri}", uri=uri)
    return Egress(uri=uri, family=family, scheme=scheme)


def load_proxy_pool(path: Union[str, Path]) -> list[str]:
    """
    Read the global proxy pool from a newline-delimited file.

    Blank lines and lines starting with ``#`` are ignored. A missing file
    is created empty and yields an empty pool.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("No proxy file found, creating an empty one", path=str(path))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
        return []

    pool = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            pool.append(line)

    logger.info("Proxy pool loaded", path=str(path), proxies=len(pool))
    return pool


def assign_proxies(
    accounts: Sequence[AccountIdentity],
    pool: Sequence[str],
) -> list[ProxyAssignment]:
    """
    Distribute the proxy pool across accounts.

    A single cursor runs across all accounts and wraps modulo the pool
    size; each account claims up to its max_proxies quota. With an empty
    pool every account runs without a proxy.
    """
    assignments = []
    cursor = 0

    for account in accounts:
        subset = []
        if pool:
            for _ in range(account.max_proxies):
                subset.append(pool[cursor % len(pool)])
                cursor += 1
        assignments.append(ProxyAssignment(account=account, proxies=tuple(subset)))

    return assignments


def proxy_for_index(proxies: Sequence[str], index: int) -> Optional[str]:
    """Round-robin proxy for the item at a flattened dispatch index."""
    if not proxies:
        return None
    return proxies[index % len(proxies)]
