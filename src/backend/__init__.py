# This package holds the hosted backend boundary: result types, the client protocol, and the HTTP client.
# It exists so session handling and dashboard pages never depend on transport details.

__all__ = ["client", "http_client", "results"]
