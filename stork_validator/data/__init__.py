"""
Data models and ingestion module.

Handles account identities, signed price points from the oracle, local
validation and the verdict records produced by a dispatch cycle.
"""
