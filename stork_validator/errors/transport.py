"""
Transport error classifications for remote API calls and egress handling.
"""

from typing import Any, Dict, Optional


class TransportError(Exception):
    """Base class for failures talking to the remote service."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class FetchFailure(TransportError):
    """Network or remote error while fetching account stats or a batch."""

    def __init__(self, message: str, endpoint: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.endpoint = endpoint
        self.status_code = status_code


class DispatchItemFailure(TransportError):
    """Reporting the verdict for one data point failed."""

    def __init__(self, message: str, msg_hash: Optional[str] = None,
                 proxy: Optional[str] = None, status_code: Optional[int] = None,
                 **kwargs):
        super().__init__(message, **kwargs)
        self.msg_hash = msg_hash
        self.proxy = proxy
        self.status_code = status_code


class UnsupportedEgress(TransportError):
    """Egress URI uses a scheme that is neither HTTP-family nor SOCKS-family."""

    def __init__(self, message: str, uri: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.uri = uri
