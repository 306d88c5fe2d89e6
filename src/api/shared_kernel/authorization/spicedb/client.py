"""SpiceDB client implementation of the relationship store.

Provides an async SpiceDB client wrapping the authzed library with explicit
per-call timeouts and error translation. The client never retries; callers
own retry policy.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from enum import Enum
from typing import TypeVar

from authzed.api.v1 import (
    CheckPermissionRequest,
    Client,
    Consistency,
    ObjectReference,
    Relationship,
    RelationshipUpdate,
    SubjectReference,
    WriteRelationshipsRequest,
    WriteSchemaRequest,
)
from authzed.api.v1.permission_service_pb2 import CheckPermissionResponse
from grpcutil import bearer_token_credentials, insecure_bearer_token_credentials

from shared_kernel.authorization.observability import (
    AuthorizationProbe,
    DefaultAuthorizationProbe,
)
from shared_kernel.authorization.spicedb.exceptions import (
    SpiceDBConnectionError,
    SpiceDBOperationError,
    SpiceDBTimeoutError,
)
from shared_kernel.authorization.types import ObjectRef, RelationshipTuple, SubjectRef

T = TypeVar("T")


class _ClosableClient(Client):
    """authzed Client that keeps a reference to its gRPC channel."""

    def create_channel(self, target, credentials, options=None, compression=None):
        self.channel = super().create_channel(
            target, credentials, options, compression
        )
        return self.channel


class RelationshipOperation(Enum):
    """Relationship mutation kinds supported by WriteRelationships."""

    WRITE = RelationshipUpdate.OPERATION_TOUCH
    DELETE = RelationshipUpdate.OPERATION_DELETE


def _object_reference(ref: ObjectRef) -> ObjectReference:
    return ObjectReference(object_type=ref.type, object_id=ref.id)


def _subject_reference(ref: SubjectRef) -> SubjectReference:
    if ref.relation:
        return SubjectReference(
            object=ObjectReference(object_type=ref.type, object_id=ref.id),
            optional_relation=ref.relation,
        )
    return SubjectReference(
        object=ObjectReference(object_type=ref.type, object_id=ref.id),
    )


def _build_relationship_update(
    relationship: RelationshipTuple,
    operation: RelationshipOperation,
) -> RelationshipUpdate:
    """Build a RelationshipUpdate for a tuple.

    TOUCH is used for writes so that writing an existing tuple succeeds
    instead of failing with "already exists".
    """
    return RelationshipUpdate(
        operation=operation.value,
        relationship=Relationship(
            resource=_object_reference(relationship.entity),
            relation=relationship.relation,
            subject=_subject_reference(relationship.subject),
        ),
    )


class SpiceDBClient:
    """SpiceDB client implementation of the RelationshipStore protocol."""

    def __init__(
        self,
        endpoint: str,
        preshared_key: str,
        use_tls: bool = False,
        timeout_seconds: float = 5.0,
        probe: AuthorizationProbe | None = None,
    ):
        """Initialize SpiceDB client.

        Args:
            endpoint: SpiceDB gRPC endpoint (e.g., "localhost:50051")
            preshared_key: Pre-shared key for authentication
            use_tls: Use TLS channel credentials instead of an insecure channel
            timeout_seconds: Deadline applied to every backend call
            probe: Optional domain probe for observability
        """
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self._endpoint = endpoint
        self._preshared_key = preshared_key
        self._use_tls = use_tls
        self._timeout = timeout_seconds
        self._client = None
        self._probe = probe or DefaultAuthorizationProbe()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def _ensure_client(self):
        """Lazily initialize the gRPC client inside the running event loop."""
        if self._client is None:
            try:
                if self._use_tls:
                    credentials = bearer_token_credentials(self._preshared_key)
                else:
                    credentials = insecure_bearer_token_credentials(
                        self._preshared_key
                    )

                self._client = _ClosableClient(self._endpoint, credentials)
            except Exception as e:
                self._probe.connection_failed(endpoint=self._endpoint, error=e)
                raise SpiceDBConnectionError(
                    f"Failed to connect to SpiceDB at {self._endpoint}: {e}"
                ) from e
        return self._client

    async def _call(self, awaitable: Awaitable[T], description: str) -> T:
        """Await a backend call under the configured deadline."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except TimeoutError as e:
            raise SpiceDBTimeoutError(
                f"SpiceDB {description} timed out after {self._timeout}s"
            ) from e
        except Exception as e:
            raise SpiceDBOperationError(f"SpiceDB {description} failed: {e}") from e

    async def write_schema(self, schema: str) -> None:
        """Write the schema to SpiceDB. Rewriting an identical schema is a no-op."""
        client = await self._ensure_client()
        await self._call(
            client.WriteSchema(WriteSchemaRequest(schema=schema)),
            "schema write",
        )

    async def write_relationships(self, tuples: Sequence[RelationshipTuple]) -> None:
        """Upsert relationships in a single WriteRelationships call."""
        await self._write(tuples, RelationshipOperation.WRITE)

    async def delete_relationships(self, tuples: Sequence[RelationshipTuple]) -> None:
        """Delete relationships in a single WriteRelationships call."""
        await self._write(tuples, RelationshipOperation.DELETE)

    async def _write(
        self,
        tuples: Sequence[RelationshipTuple],
        operation: RelationshipOperation,
    ) -> None:
        if not tuples:
            return
        client = await self._ensure_client()
        request = WriteRelationshipsRequest(
            updates=[_build_relationship_update(t, operation) for t in tuples]
        )
        await self._call(
            client.WriteRelationships(request),
            f"relationship {operation.name.lower()}",
        )

    async def check_permission(
        self,
        entity: ObjectRef,
        permission: str,
        subject: SubjectRef,
    ) -> bool:
        """Check if a subject has permission on an entity.

        Uses full consistency so that a check issued right after a write
        observes that write.
        """
        client = await self._ensure_client()
        request = CheckPermissionRequest(
            consistency=Consistency(fully_consistent=True),
            resource=_object_reference(entity),
            permission=permission,
            subject=_subject_reference(subject),
        )
        response = await self._call(
            client.CheckPermission(request),
            f"check {entity}#{permission}@{subject}",
        )
        return (
            response.permissionship
            == CheckPermissionResponse.PERMISSIONSHIP_HAS_PERMISSION
        )

    async def close(self) -> None:
        """Close the gRPC channel; a new client is created on next use."""
        client, self._client = self._client, None
        channel = getattr(client, "channel", None)
        if channel is not None:
            await channel.close()
