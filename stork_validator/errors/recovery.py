"""
Recovery strategy classifications for error handling.

Errors carrying this mixin need human intervention and stop the owning
account instead of being retried on the next tick.
"""


class UnrecoverableError(Exception):
    """Mixin for errors that require human intervention."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.recoverable = False
