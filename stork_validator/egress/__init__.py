"""
Egress module.

Loads the proxy pool, distributes it across accounts and resolves proxy
URIs into the HTTP or SOCKS family used for report calls.
"""
from .proxies import (
    Egress,
    EgressFamily,
    assign_proxies,
    load_proxy_pool,
    resolve_egress,
)

__all__ = ["Egress", "EgressFamily", "assign_proxies", "load_proxy_pool", "resolve_egress"]
