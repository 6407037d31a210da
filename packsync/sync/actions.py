# Packsync Sync Actions
# Action types and the per-run reconciliation plan

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from packsync.manifest.schema import ContentItem


class ActionType(str, Enum):
    """Types of sync actions."""

    # Local copy is kept as-is
    SKIP = "skip"

    # Local file is removed
    DELETE = "delete"

    # Item is fetched from its download URL
    DOWNLOAD = "download"


class DeleteReason(str, Enum):
    """Why a local file is deleted."""

    ORPHAN = "orphan"
    ENVIRONMENT = "environment"
    INTEGRITY = "integrity"

    @property
    def description(self) -> str:
        return {
            DeleteReason.ORPHAN: "it's no longer in the manifest",
            DeleteReason.ENVIRONMENT: "it's not required on the current environment",
            DeleteReason.INTEGRITY: "it has invalid file integrity",
        }[self]


@dataclass
class SyncAction:
    """
    A synchronization action for one local path.

    ``item`` is None for orphan deletions, which have no manifest entry.
    """

    action_type: ActionType
    path: Path
    item: Optional[ContentItem] = None
    reason: str = ""
    delete_reason: Optional[DeleteReason] = None

    @property
    def name(self) -> str:
        """Local file name of the action target."""
        return self.path.name


@dataclass
class ReconciliationPlan:
    """
    Disjoint action sets computed for one category run.

    Never persisted: every run derives a fresh plan from the manifest and
    the current directory contents.
    """

    category: str
    to_delete: list[SyncAction] = field(default_factory=list)
    to_skip: list[SyncAction] = field(default_factory=list)
    to_download: list[SyncAction] = field(default_factory=list)
    considered_items: int = 0

    def add(self, action: SyncAction) -> SyncAction:
        """Add an action to the set matching its type."""
        if action.action_type == ActionType.DELETE:
            self.to_delete.append(action)
        elif action.action_type == ActionType.DOWNLOAD:
            self.to_download.append(action)
        else:
            self.to_skip.append(action)
        return action

    @property
    def actions(self) -> list[SyncAction]:
        """All actions, deletions first."""
        return [*self.to_delete, *self.to_download, *self.to_skip]

    @property
    def has_changes(self) -> bool:
        """Check if executing the plan mutates the filesystem."""
        return bool(self.to_delete or self.to_download)

