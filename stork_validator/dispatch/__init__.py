"""
Validation dispatch module.

Fans a batch of signed price points out to a bounded worker pool, one
isolated validate+report unit per point.
"""
from .dispatcher import ValidationDispatcher, partition

__all__ = ["ValidationDispatcher", "partition"]
