# Packsync Sync Module
# Content synchronization engine and components

from packsync.sync.actions import ActionType, DeleteReason, ReconciliationPlan, SyncAction
from packsync.sync.category import CategoryHandler, CategorySyncResult
from packsync.sync.engine import SyncEngine, SyncResult
from packsync.sync.item import LocalSnapshot, scan_local_files
from packsync.sync.ownership import expected_file_name, is_managed
from packsync.sync.progress import (
    CollectingProgressSink,
    NullProgressSink,
    ProgressEvent,
    ProgressSink,
    ProgressStage,
)
from packsync.sync.transfer import Downloader

__all__ = [
    # Snapshot
    "LocalSnapshot",
    "scan_local_files",
    # Ownership
    "expected_file_name",
    "is_managed",
    # Actions
    "ActionType",
    "DeleteReason",
    "SyncAction",
    "ReconciliationPlan",
    # Progress
    "ProgressEvent",
    "ProgressStage",
    "ProgressSink",
    "NullProgressSink",
    "CollectingProgressSink",
    # Transfer
    "Downloader",
    # Category
    "CategoryHandler",
    "CategorySyncResult",
    # Engine
    "SyncEngine",
    "SyncResult",
]
