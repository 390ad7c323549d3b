"""
Stork Validator - Oracle Price Validation Client

Operates one or more credentialed accounts against the Stork oracle API:
keeps an authenticated session alive per account, fetches batches of
signed price points, validates each locally and reports the verdicts back
through rotating proxies.
"""

__version__ = "0.1.0"
__author__ = "Stork Validator Team"
