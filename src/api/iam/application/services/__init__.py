"""Application services for IAM bounded context.

Application services orchestrate the translator, the authorization client
and the relational reader to fulfill use cases. They are the "front door"
to the IAM context.
"""

from iam.application.services.data_sync_service import DataSyncService
from iam.application.services.reconciliation_service import ReconciliationService

__all__ = [
    "DataSyncService",
    "ReconciliationService",
]
