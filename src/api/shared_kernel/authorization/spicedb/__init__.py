"""SpiceDB relationship store implementation for authorization.

This module provides the SpiceDB client that implements the RelationshipStore
protocol, plus the bundled schema it is bootstrapped with.
"""

from shared_kernel.authorization.spicedb.client import SpiceDBClient
from shared_kernel.authorization.spicedb.exceptions import (
    SpiceDBConnectionError,
    SpiceDBError,
    SpiceDBOperationError,
    SpiceDBTimeoutError,
)
from shared_kernel.authorization.spicedb.schema import load_schema

__all__ = [
    "SpiceDBClient",
    "SpiceDBError",
    "SpiceDBConnectionError",
    "SpiceDBOperationError",
    "SpiceDBTimeoutError",
    "load_schema",
]
