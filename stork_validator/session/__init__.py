"""
Session module.

Manages the credential lifecycle of each account: durable session slots,
the Cognito authenticator, and the token manager state machine that ties
them together.
"""
