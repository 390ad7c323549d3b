"""
Remote oracle API client.
"""
from .stork_api import StorkApiClient

__all__ = ["StorkApiClient"]
