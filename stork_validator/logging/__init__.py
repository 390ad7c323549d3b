"""
Logging configuration and utilities for the validation client.
"""
from .config import configure_logging, get_account_logger, get_logger

__all__ = ["configure_logging", "get_account_logger", "get_logger"]
