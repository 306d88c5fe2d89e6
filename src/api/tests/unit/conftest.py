"""Unit test fixtures with mocked dependencies."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from shared_kernel.authorization.cache import PermissionCache
from shared_kernel.authorization.client import AuthorizationClient
from shared_kernel.authorization.spicedb.schema import load_schema
from shared_kernel.authorization.types import (
    ObjectRef,
    RelationshipTuple,
    SubjectRef,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryRelationshipStore:
    """Relationship store evaluating the bundled schema over in-memory tuples.

    Supports the subset of the schema language the bundled schema uses:
    direct relations, unions (`+`) and arrows (`relation->permission`).
    """

    def __init__(self):
        self.tuples: set[RelationshipTuple] = set()
        self.schema: str | None = None
        self.permissions: dict[tuple[str, str], list[str]] = {}
        self.schema_writes = 0
        self.write_calls: list[list[RelationshipTuple]] = []
        self.delete_calls: list[list[RelationshipTuple]] = []
        self.check_calls: list[tuple[str, str, str]] = []
        self.fail_schema: Exception | None = None
        self.fail_writes: list[Exception] = []
        # Raised after the change is applied, like a timeout on a committed call
        self.fail_after_apply: list[Exception] = []
        self.fail_checks_on: set[str] = set()
        self.check_gate: asyncio.Event | None = None
        self.in_flight_checks = 0
        self.max_in_flight_checks = 0
        self.closed = False

    async def write_schema(self, schema: str) -> None:
        self.schema_writes += 1
        if self.fail_schema is not None:
            raise self.fail_schema
        self.install_schema(schema)

    def install_schema(self, schema: str) -> None:
        self.schema = schema
        self.permissions = _parse_permissions(schema)

    async def write_relationships(self, tuples: Sequence[RelationshipTuple]) -> None:
        self.write_calls.append(list(tuples))
        if self.fail_writes:
            raise self.fail_writes.pop(0)
        self.tuples.update(tuples)
        if self.fail_after_apply:
            raise self.fail_after_apply.pop(0)

    async def delete_relationships(self, tuples: Sequence[RelationshipTuple]) -> None:
        self.delete_calls.append(list(tuples))
        if self.fail_writes:
            raise self.fail_writes.pop(0)
        self.tuples.difference_update(tuples)
        if self.fail_after_apply:
            raise self.fail_after_apply.pop(0)

    async def check_permission(
        self,
        entity: ObjectRef,
        permission: str,
        subject: SubjectRef,
    ) -> bool:
        self.check_calls.append((str(entity), permission, str(subject)))
        self.in_flight_checks += 1
        self.max_in_flight_checks = max(
            self.max_in_flight_checks, self.in_flight_checks
        )
        try:
            if self.check_gate is not None:
                await self.check_gate.wait()
            else:
                await asyncio.sleep(0)
            if str(entity) in self.fail_checks_on:
                raise ConnectionError(f"backend unavailable for {entity}")
            return self._has(entity, permission, subject, depth=0)
        finally:
            self.in_flight_checks -= 1

    async def close(self) -> None:
        self.closed = True

    def has_tuple(self, text: str) -> bool:
        return any(str(t) == text for t in self.tuples)

    def _has(
        self, entity: ObjectRef, name: str, subject: SubjectRef, depth: int
    ) -> bool:
        if depth > 10:
            return False
        terms = self.permissions.get((entity.type, name))
        if terms is None:
            return any(
                t.entity == entity and t.relation == name and t.subject == subject
                for t in self.tuples
            )
        for term in terms:
            if "->" in term:
                via, target = term.split("->")
                for t in list(self.tuples):
                    if t.entity == entity and t.relation == via:
                        parent = ObjectRef(type=t.subject.type, id=t.subject.id)
                        if self._has(parent, target, subject, depth + 1):
                            return True
            elif self._has(entity, term, subject, depth + 1):
                return True
        return False


def _parse_permissions(schema: str) -> dict[tuple[str, str], list[str]]:
    permissions: dict[tuple[str, str], list[str]] = {}
    for definition, body in re.findall(
        r"definition\s+(\w+)\s*\{([^{}]*)\}", schema
    ):
        for name, expression in re.findall(
            r"permission\s+(\w+)\s*=\s*(.+)", body
        ):
            permissions[(definition, name)] = [
                term.strip() for term in expression.split("+")
            ]
    return permissions


@pytest.fixture
def mock_db_settings():
    """Provide test database settings."""
    from infrastructure.settings import DatabaseSettings

    return DatabaseSettings(
        host="testhost",
        port=5432,
        database="testdb",
        username="testuser",
        password="testpass",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryRelationshipStore:
    return InMemoryRelationshipStore()


@pytest.fixture
def mock_authorization_probe() -> MagicMock:
    return MagicMock()


@pytest.fixture
def authz(
    store: InMemoryRelationshipStore,
    clock: FakeClock,
    mock_authorization_probe: MagicMock,
) -> AuthorizationClient:
    """An authorization client whose schema has not been bootstrapped."""
    return AuthorizationClient(
        store=store,
        schema=load_schema(),
        cache=PermissionCache(ttl_seconds=300, max_size=1000, clock=clock),
        probe=mock_authorization_probe,
    )


@pytest_asyncio.fixture
async def ready_authz(authz: AuthorizationClient) -> AuthorizationClient:
    """An authorization client with the bundled schema bootstrapped."""
    await authz.bootstrap_schema()
    return authz


@pytest.fixture
def installed_authz(
    authz: AuthorizationClient, store: InMemoryRelationshipStore
) -> AuthorizationClient:
    """A ready client built without awaiting, for use behind TestClient."""
    store.install_schema(load_schema())
    authz.assume_schema_installed()
    return authz


def grant(store: InMemoryRelationshipStore, *tuples: str) -> None:
    """Add tuples written as ``type:id#relation@type:id`` to the store."""
    for text in tuples:
        entity, rest = text.split("#", 1)
        relation, subject = rest.split("@", 1)
        entity_type, entity_id = entity.split(":", 1)
        subject_type, subject_id = subject.split(":", 1)
        store.tuples.add(
            RelationshipTuple.of(
                entity_type, entity_id, relation, subject_type, subject_id
            )
        )


@pytest.fixture
def seed(store: InMemoryRelationshipStore):
    """Seed the in-memory store directly, bypassing cache invalidation."""

    def _seed(*tuples: str) -> None:
        grant(store, *tuples)

    return _seed
