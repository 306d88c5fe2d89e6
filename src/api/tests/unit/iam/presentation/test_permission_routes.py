"""Unit tests for the permission status routes."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from iam.presentation import router as iam_router
from shared_kernel.authorization.exceptions import NotInitializedError


@pytest.fixture
def app(installed_authz) -> FastAPI:
    app = FastAPI()

    @app.middleware("http")
    async def identity(request: Request, call_next):
        user_id = request.headers.get("X-User-Id")
        if user_id:
            request.state.user_id = user_id
        return await call_next(request)

    app.state.authorization_client = installed_authz
    app.include_router(iam_router)
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


class TestGetPermissions:
    def test_reports_each_requested_permission(self, client, seed):
        seed("site:s1#tenant@tenant:t1", "tenant:t1#member@user:u3")

        response = client.get(
            "/iam/permissions",
            params={
                "entity_type": "site",
                "entity_id": "s1",
                "permission": ["view", "manage"],
            },
            headers={"X-User-Id": "u3"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "entity_type": "site",
            "entity_id": "s1",
            "permissions": {"view": True, "manage": False},
        }

    def test_failed_check_is_reported_as_false(self, client, seed, store):
        seed("tenant:t1#owner@user:u1")
        store.fail_checks_on.add("tenant:t1")

        response = client.get(
            "/iam/permissions",
            params={
                "entity_type": "tenant",
                "entity_id": "t1",
                "permission": "manage",
            },
            headers={"X-User-Id": "u1"},
        )

        assert response.status_code == 200
        assert response.json()["permissions"] == {"manage": False}

    def test_uninitialized_client_reports_all_false(self, app, installed_authz):
        installed_authz.batch_check_permissions = AsyncMock(
            side_effect=NotInitializedError("batch check permissions")
        )

        response = TestClient(app).get(
            "/iam/permissions",
            params={
                "entity_type": "tenant",
                "entity_id": "t1",
                "permission": ["manage", "delete"],
            },
            headers={"X-User-Id": "u1"},
        )

        assert response.json()["permissions"] == {"manage": False, "delete": False}

    def test_unknown_permission_is_422(self, client):
        response = client.get(
            "/iam/permissions",
            params={
                "entity_type": "tenant",
                "entity_id": "t1",
                "permission": "fly",
            },
            headers={"X-User-Id": "u1"},
        )

        assert response.status_code == 422

    def test_requires_authentication(self, client):
        response = client.get(
            "/iam/permissions",
            params={
                "entity_type": "tenant",
                "entity_id": "t1",
                "permission": "manage",
            },
        )

        assert response.status_code == 401


class TestCacheEndpoints:
    def test_stats_for_system_admin(self, client, seed):
        seed("system:main#admin@user:root")

        response = client.get("/iam/permissions/cache", headers={"X-User-Id": "root"})

        assert response.status_code == 200
        body = response.json()
        assert body["size"] == 1
        assert body["max_size"] == 1000

    def test_stats_forbidden_for_others(self, client):
        response = client.get("/iam/permissions/cache", headers={"X-User-Id": "u1"})

        assert response.status_code == 403

    def test_clear_cache(self, client, seed, installed_authz):
        seed("system:main#admin@user:root")
        client.get("/iam/permissions/cache", headers={"X-User-Id": "root"})

        response = client.delete(
            "/iam/permissions/cache", headers={"X-User-Id": "root"}
        )

        assert response.status_code == 204
        assert len(installed_authz.cache) == 0
