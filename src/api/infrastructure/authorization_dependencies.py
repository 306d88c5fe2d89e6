"""Authorization client construction and dependency injection.

The composition root (application lifespan or CLI) builds exactly one
`AuthorizationClient`, with its permission cache and SpiceDB store, per
process. FastAPI routes receive it through `get_authorization_client`,
which reads it from `app.state`.
"""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from infrastructure.settings import AuthorizationSettings
from shared_kernel.authorization.cache import PermissionCache
from shared_kernel.authorization.client import AuthorizationClient
from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.protocols import RelationshipStore
from shared_kernel.authorization.spicedb import SpiceDBClient, load_schema


def create_spicedb_client(
    settings: AuthorizationSettings,
    probe: AuthorizationProbe | None = None,
) -> SpiceDBClient:
    """Create the SpiceDB relationship store from settings.

    The underlying gRPC channel is opened lazily on first use.
    """
    return SpiceDBClient(
        endpoint=settings.endpoint,
        preshared_key=settings.api_key.get_secret_value(),
        use_tls=settings.use_tls,
        timeout_seconds=settings.timeout_seconds,
        probe=probe,
    )


def create_authorization_client(
    settings: AuthorizationSettings,
    store: RelationshipStore | None = None,
    probe: AuthorizationProbe | None = None,
) -> AuthorizationClient:
    """Create the process-wide authorization client.

    Args:
        settings: Authorization settings
        store: Relationship store to use instead of SpiceDB
        probe: Optional domain probe shared by the client and the store

    Returns:
        An uninitialized client; call bootstrap_schema() before use
    """
    probe = probe or DefaultAuthorizationProbe()
    if store is None:
        store = create_spicedb_client(settings, probe=probe)
    return AuthorizationClient(
        store=store,
        schema=load_schema(),
        cache=PermissionCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_size=settings.cache_max_entries,
        ),
        probe=probe,
        max_concurrent_checks=settings.max_concurrent_checks,
        invalidate_subjects=settings.invalidate_subjects,
    )


def get_authorization_client(request: Request) -> AuthorizationClient:
    """FastAPI dependency returning the client built at startup.

    Raises:
        HTTPException 503: If the application started without a client
    """
    client = getattr(request.app.state, "authorization_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authorization service is not configured",
        )
    return client
