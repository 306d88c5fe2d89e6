"""Observability for relationship writes, permission checks and the cache."""

from shared_kernel.authorization.observability.authorization_probe import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)

__all__ = [
    "AuthorizationProbe",
    "DefaultAuthorizationProbe",
]
