"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI

from iam.dependencies.authorization import create_data_sync_service
from iam.presentation import router as iam_router
from infrastructure.authorization_dependencies import (
    create_authorization_client,
    get_authorization_client,
)
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import get_authorization_settings, get_settings
from infrastructure.version import __version__
from shared_kernel.authorization.client import AuthorizationClient
from shared_kernel.authorization.exceptions import SchemaWriteFailedError


@asynccontextmanager
async def fleetgate_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - The process-wide authorization client, cache and data sync service
    - Schema bootstrap and the optional bootstrap system admin

    A failed bootstrap does not stop the application; every enforcement
    point then fails closed until the service is restarted.
    """
    configure_logging(get_settings().log_level)
    probe = DefaultStartupProbe()
    settings = get_authorization_settings()

    authz = create_authorization_client(settings)
    sync_service = create_data_sync_service(authz, settings)
    app.state.authorization_client = authz
    app.state.data_sync_service = sync_service

    if settings.enabled:
        try:
            await authz.bootstrap_schema()
            probe.authorization_bootstrapped(endpoint=settings.endpoint)
        except SchemaWriteFailedError as e:
            probe.authorization_bootstrap_failed(
                endpoint=settings.endpoint, error=str(e)
            )

        admin_id = settings.bootstrap_system_admin_id
        if authz.is_initialized and admin_id:
            outcome = await sync_service.sync_system_admin(admin_id)
            probe.system_admin_bootstrapped(
                user_id=admin_id, succeeded=outcome.succeeded
            )
    else:
        probe.authorization_disabled()

    try:
        yield
    finally:
        await authz.close()
        probe.shutdown_completed()


app = FastAPI(
    title="Fleetgate API",
    description="Multi-tenant fleet management with relationship-based access control",
    version=__version__,
    lifespan=fleetgate_lifespan,
)

app.include_router(iam_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/authorization")
def health_authorization(
    authz: Annotated[AuthorizationClient, Depends(get_authorization_client)],
) -> dict:
    """Report whether the authorization schema was bootstrapped.

    Returns the bootstrap state and permission cache statistics.
    """
    stats = authz.cache_stats()
    return {
        "status": "ok" if authz.is_initialized else "degraded",
        "initialized": authz.is_initialized,
        "cache": {
            "size": stats.size,
            "max_size": stats.max_size,
            "hit_rate": stats.hit_rate,
        },
    }
