"""Auth0 Management API client library.

Architecture:
- client.py: HTTP client with client-credentials auth and token caching
- exceptions.py: Typed exceptions for upstream errors

Usage:
    from auth0_manager.core.management import ManagementClient

    client = ManagementClient("example.auth0.com", "client-id", "client-secret")
    user = client.get_user("auth0|5f7c8ec7c33c6c004bbafe82")
"""
from .client import ManagementClient, REQUEST_TIMEOUT
from .exceptions import ManagementAPIError

__all__ = [
    "ManagementClient",
    "ManagementAPIError",
    "REQUEST_TIMEOUT",
]
