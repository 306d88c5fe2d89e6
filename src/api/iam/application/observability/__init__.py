"""Domain-Oriented Observability for IAM application layer.

Probes for application service operations following Domain-Oriented
Observability patterns.
"""

from iam.application.observability.access_probe import (
    AccessProbe,
    DefaultAccessProbe,
)
from iam.application.observability.data_sync_probe import (
    DataSyncProbe,
    DefaultDataSyncProbe,
)
from iam.application.observability.reconciliation_probe import (
    DefaultReconciliationProbe,
    ReconciliationProbe,
)

__all__ = [
    "AccessProbe",
    "DefaultAccessProbe",
    "DataSyncProbe",
    "DefaultDataSyncProbe",
    "ReconciliationProbe",
    "DefaultReconciliationProbe",
]
