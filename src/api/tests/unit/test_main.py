"""Unit tests for main FastAPI application configuration.

Covers the lifespan wiring of the authorization client and the health
endpoints. The SpiceDB store is replaced by the in-memory fake.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from infrastructure.settings import AuthorizationSettings


@pytest.fixture
def startup_probe() -> MagicMock:
    return MagicMock()


def _run_lifespan(authz, settings, startup_probe):
    """Start and stop the real application with patched collaborators."""
    import main

    with (
        patch.object(main, "get_authorization_settings", return_value=settings),
        patch.object(main, "create_authorization_client", return_value=authz),
        patch.object(main, "configure_logging"),
        patch.object(main, "DefaultStartupProbe", return_value=startup_probe),
    ):
        with TestClient(main.app) as client:
            response = client.get("/health/authorization")
            state = main.app.state
            return response, state


class TestLifespan:
    def test_bootstraps_schema_and_exposes_client(self, authz, store, startup_probe):
        response, state = _run_lifespan(
            authz, AuthorizationSettings(), startup_probe
        )

        assert state.authorization_client is authz
        assert state.data_sync_service is not None
        assert store.schema_writes == 1
        assert response.json()["status"] == "ok"
        assert response.json()["initialized"] is True
        startup_probe.authorization_bootstrapped.assert_called_once()
        startup_probe.shutdown_completed.assert_called_once()
        assert store.closed is True

    def test_bootstrap_failure_starts_degraded(self, authz, store, startup_probe):
        store.fail_schema = ConnectionError("refused")

        response, _ = _run_lifespan(authz, AuthorizationSettings(), startup_probe)

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["initialized"] is False
        startup_probe.authorization_bootstrap_failed.assert_called_once()

    def test_bootstrap_system_admin(self, authz, store, startup_probe):
        settings = AuthorizationSettings(bootstrap_system_admin_id="root")

        _run_lifespan(authz, settings, startup_probe)

        assert store.has_tuple("system:main#admin@user:root")
        startup_probe.system_admin_bootstrapped.assert_called_once_with(
            user_id="root", succeeded=True
        )

    def test_disabled_skips_bootstrap(self, authz, store, startup_probe):
        settings = AuthorizationSettings(
            enabled=False, bootstrap_system_admin_id="root"
        )

        response, _ = _run_lifespan(authz, settings, startup_probe)

        assert store.schema_writes == 0
        assert store.write_calls == []
        assert response.json()["status"] == "degraded"
        startup_probe.authorization_disabled.assert_called_once()


class TestHealth:
    def test_health(self):
        from main import app

        # No `with` block: the lifespan is not run
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_authorization_health_reports_cache(self, installed_authz):
        from main import app

        app.state.authorization_client = installed_authz
        try:
            response = TestClient(app).get("/health/authorization")
        finally:
            del app.state.authorization_client

        body = response.json()
        assert body["status"] == "ok"
        assert body["cache"] == {"size": 0, "max_size": 1000, "hit_rate": 0.0}

    def test_routes_are_registered(self):
        from main import app

        paths = {route.path for route in app.routes}

        assert "/iam/permissions" in paths
        assert "/iam/permissions/cache" in paths
