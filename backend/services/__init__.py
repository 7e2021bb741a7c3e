"""Services for the application."""

from .aggregator import PeriodAggregator
from .catalog import ActivityCatalog
from .errors import RemoteStoreError, StorageError, ValidationFailure
from .ledger import LedgerBinder
from .remote import SupabaseRemoteStore
from .slots import SlotGenerator
from .storage import JsonFileStorage
from .sync import SyncReconciler, SyncState

__all__ = [
    "PeriodAggregator",
    "ActivityCatalog",
    "RemoteStoreError",
    "StorageError",
    "ValidationFailure",
    "LedgerBinder",
    "SupabaseRemoteStore",
    "SlotGenerator",
    "JsonFileStorage",
    "SyncReconciler",
    "SyncState",
]
