"""Domain-Oriented Observability for IAM infrastructure layer."""

from iam.infrastructure.observability.relational_state_reader_probe import (
    DefaultRelationalStateReaderProbe,
    RelationalStateReaderProbe,
)

__all__ = [
    "DefaultRelationalStateReaderProbe",
    "RelationalStateReaderProbe",
]
