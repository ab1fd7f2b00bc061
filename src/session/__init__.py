# This package implements authenticated-request recovery for backend queries.
# It exists so every table read or write survives an expired access token without page-level handling.
# The modules split error classification, refresh coalescing, retry policy, and the expiry path.

__all__ = ["classification", "expiry", "health", "interceptor", "refresh_gate", "wrapped_client"]
