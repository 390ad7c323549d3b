"""
Utility functions module.

Time Semantics:
- Signature timestamps from the oracle are nanoseconds since the epoch
- Freshness and token expiry are judged against UTC wall-clock time
"""
