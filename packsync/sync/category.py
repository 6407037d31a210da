# Packsync Category Handler
# Reconciles one content directory against its manifest entries

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

from packsync.config.schema import Environment
from packsync.exceptions import ConfigurationError, FilesystemError, IntegrityError
from packsync.manifest.schema import ContentItem, SyncPolicy
from packsync.sync.actions import ActionType, DeleteReason, ReconciliationPlan, SyncAction
from packsync.sync.item import LocalSnapshot, scan_local_files
from packsync.sync.ownership import expected_file_name
from packsync.sync.progress import (
    NullProgressSink,
    ProgressEvent,
    ProgressSink,
    ProgressStage,
    download_title,
    format_megabytes,
    progress_by_index,
)
from packsync.sync.transfer import ProgressCallback
from packsync.utils.environment import applies
from packsync.utils.hashing import IntegrityOutcome, file_hash, verify_integrity
from packsync.utils.paths import safe_delete, sanitize_url

logger = logging.getLogger(__name__)


class Transfer(Protocol):
    """Anything that can fetch a URL into a destination path."""

    def fetch(self, url: str, destination: Path, on_progress: Optional[ProgressCallback] = None) -> None: ...


@dataclass
class CategorySyncResult:
    """Result of reconciling a category."""

    name: str
    success: bool
    total: int = 0
    considered: int = 0
    downloaded: int = 0
    skipped: int = 0
    deleted: int = 0
    duration: float = 0.0
    plan: Optional[ReconciliationPlan] = None
    executed: list[SyncAction] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        """Check if anything on disk was changed."""
        return self.downloaded > 0 or self.deleted > 0


class CategoryHandler:
    """
    Reconciles a single category directory.

    One generic algorithm parameterized by directory, extension and the
    category's policy: orphan cleanup, environment filtering, integrity
    verification of existing files and sequential downloads of the rest.
    """

    def __init__(
        self,
        name: str,
        directory: Path,
        extension: str,
        downloader: Transfer,
        environment: Environment = Environment.CLIENT,
    ):
        """
        Initialize category handler.

        Args:
            name: Category name.
            directory: Target directory.
            extension: File extension without the dot.
            downloader: Transfer agent used for downloads.
            environment: Current run context.
        """
        self.name = name
        self.directory = directory
        self.extension = extension.lstrip(".").lower()
        self.downloader = downloader
        self.environment = environment

    def expected_path(self, item: ContentItem, policy: SyncPolicy) -> Path:
        """Local path an item is stored at."""
        return self.directory / expected_file_name(item, self.extension, policy.managed_file_marker)

    def plan(self, items: Sequence[ContentItem], policy: SyncPolicy) -> ReconciliationPlan:
        """
        Compute the reconciliation plan without touching the filesystem.

        Args:
            items: Manifest items for this category, in manifest order.
            policy: Category policy.

        Returns:
            ReconciliationPlan describing what a real run would do.
        """
        return self.reconcile(items, policy, dry_run=True).plan

    def reconcile(
        self,
        items: Sequence[ContentItem],
        policy: SyncPolicy,
        progress: Optional[ProgressSink] = None,
        *,
        dry_run: bool = False,
    ) -> CategorySyncResult:
        """
        Reconcile the category directory with its manifest entries.

        Args:
            items: Manifest items for this category, in manifest order.
            policy: Category policy.
            progress: Sink for verification and download progress.
            dry_run: If True, compute the plan only.

        Returns:
            CategorySyncResult with the plan and what was executed.

        Raises:
            ConfigurationError: If the target path exists but is not a directory.
            FilesystemError: If a directory cannot be created/listed or a file cannot be deleted.
            TransferError: If a download fails.
            IntegrityError: If a freshly downloaded file fails verification.
        """
        progress = progress or NullProgressSink()
        started = time.monotonic()
        logger.info(f"Syncing {self.name}: {len(items)} items in manifest")

        plan = ReconciliationPlan(category=self.name)
        result = CategorySyncResult(name=self.name, success=False, total=len(items), plan=plan)

        exists = self._validate_directory(dry_run=dry_run)
        if exists:
            snapshot = self._snapshot(policy)
        else:
            snapshot = LocalSnapshot(self.directory, self.extension, marker=policy.managed_file_marker)

        self._delete_orphans(snapshot, items, policy, plan, result, dry_run=dry_run)
        applicable = self._filter_environment(items, policy, plan, result, dry_run=dry_run)
        plan.considered_items = result.considered = len(applicable)
        logger.info(f"{self.name}: {len(applicable)} items for the {self.environment.value} environment")

        self._classify(applicable, policy, plan, result, progress, dry_run=dry_run)
        logger.info(f"{self.name}: {len(plan.to_download)} to download, {len(plan.to_skip)} up to date")

        if not dry_run:
            self._download(plan, result, progress)

        result.skipped = len(plan.to_skip)
        result.success = True
        result.duration = time.monotonic() - started
        logger.info(f"Finished syncing {self.name} in {result.duration * 1000:.0f}ms")
        return result

    def _validate_directory(self, *, dry_run: bool) -> bool:
        """Ensure the target directory exists; returns whether it exists now."""
        if self.directory.exists() and not self.directory.is_dir():
            raise ConfigurationError(
                f"The {self.name} content must be stored in a directory called "
                f"'{self.directory.name}', a file was found instead: {self.directory}"
            )

        if not self.directory.exists():
            if dry_run:
                return False
            logger.info(f"The {self.name} directory doesn't exist, creating {self.directory}")
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FilesystemError(f"Failed to create the {self.name} directory", self.directory, e) from e

        return True

    def _snapshot(self, policy: SyncPolicy) -> LocalSnapshot:
        try:
            return scan_local_files(self.directory, self.extension, policy.managed_file_marker)
        except OSError as e:
            raise FilesystemError(f"Failed to list the files in the {self.name} directory", self.directory, e) from e

    def _delete(
        self,
        path: Path,
        reason: DeleteReason,
        plan: ReconciliationPlan,
        result: CategorySyncResult,
        *,
        item: Optional[ContentItem] = None,
        dry_run: bool,
    ) -> None:
        """Delete a file as part of the plan; any I/O failure is fatal."""
        action = plan.add(
            SyncAction(
                action_type=ActionType.DELETE,
                path=path,
                item=item,
                reason=reason.description,
                delete_reason=reason,
            )
        )
        if dry_run:
            return

        logger.info(f"Deleting '{path.name}' as {reason.description}")
        try:
            safe_delete(path, missing_ok=True)
        except OSError as e:
            raise FilesystemError(f"Failed to delete the {self.name} file", path, e) from e
        result.deleted += 1
        result.executed.append(action)

    def _delete_orphans(
        self,
        snapshot: LocalSnapshot,
        items: Sequence[ContentItem],
        policy: SyncPolicy,
        plan: ReconciliationPlan,
        result: CategorySyncResult,
        *,
        dry_run: bool,
    ) -> None:
        expected = {expected_file_name(item, self.extension, policy.managed_file_marker) for item in items}

        for path in snapshot.deletion_candidates(policy.allow_foreign_files):
            if path.name not in expected:
                self._delete(path, DeleteReason.ORPHAN, plan, result, dry_run=dry_run)

    def _filter_environment(
        self,
        items: Sequence[ContentItem],
        policy: SyncPolicy,
        plan: ReconciliationPlan,
        result: CategorySyncResult,
        *,
        dry_run: bool,
    ) -> list[ContentItem]:
        applicable: list[ContentItem] = []
        excluded: list[ContentItem] = []
        seen: set[str] = set()

        for item in items:
            if not applies(item, self.environment):
                excluded.append(item)
                continue

            name = self.expected_path(item, policy).name
            if name in seen:
                logger.warning(f"{self.name}: '{item.download_url}' maps to '{name}' more than once, ignoring")
                continue
            seen.add(name)
            applicable.append(item)

        if policy.restrict_to_current_environment:
            deleted: set[str] = set()
            for item in excluded:
                path = self.expected_path(item, policy)
                # A file still wanted by an applicable item is kept
                if path.name in seen or path.name in deleted or not path.exists():
                    continue
                deleted.add(path.name)
                self._delete(path, DeleteReason.ENVIRONMENT, plan, result, item=item, dry_run=dry_run)

        return applicable

    def _classify(
        self,
        items: list[ContentItem],
        policy: SyncPolicy,
        plan: ReconciliationPlan,
        result: CategorySyncResult,
        progress: ProgressSink,
        *,
        dry_run: bool,
    ) -> None:
        for index, item in enumerate(items):
            path = self.expected_path(item, policy)

            if not path.exists():
                plan.add(SyncAction(ActionType.DOWNLOAD, path, item, reason="missing locally"))
                continue

            if not item.verify_integrity:
                logger.info(f"'{path.name}' is set to not be verified, skipping")
                plan.add(SyncAction(ActionType.SKIP, path, item, reason="verification disabled"))
                continue

            progress.emit(
                ProgressEvent(
                    category=self.name,
                    stage=ProgressStage.VERIFYING,
                    title=f"Verifying {self.name}",
                    label=f"Verifying {item.display_name}",
                    percent=progress_by_index(index, len(items)),
                    detail="Verifying the file integrity...",
                )
            )
            outcome = self._verify(path, item)

            if outcome == IntegrityOutcome.INDETERMINATE:
                logger.info(f"'{path.name}' has an unknown integrity, keeping it")
                plan.add(SyncAction(ActionType.SKIP, path, item, reason="unknown integrity"))
            elif outcome == IntegrityOutcome.MATCH:
                logger.info(f"'{path.name}' has valid file integrity")
                plan.add(SyncAction(ActionType.SKIP, path, item, reason="valid integrity"))
            else:
                logger.info(f"'{path.name}' has invalid integrity, downloading it again")
                self._delete(path, DeleteReason.INTEGRITY, plan, result, item=item, dry_run=dry_run)
                plan.add(SyncAction(ActionType.DOWNLOAD, path, item, reason="invalid integrity"))

    def _verify(self, path: Path, item: ContentItem) -> IntegrityOutcome:
        try:
            return verify_integrity(path, item.integrity)
        except OSError as e:
            raise FilesystemError(f"Failed to read the {self.name} file", path, e) from e

    def _download(self, plan: ReconciliationPlan, result: CategorySyncResult, progress: ProgressSink) -> None:
        # Download actions are always created with their manifest item
        pending = [(action, action.item) for action in plan.to_download if action.item is not None]

        for index, (action, item) in enumerate(pending):
            title = download_title(index, len(pending), plan.considered_items)
            label = f"Downloading {item.display_name}"

            def on_progress(done: int, percent: float, total: int, title: str = title, label: str = label) -> None:
                progress.emit(
                    ProgressEvent(
                        category=self.name,
                        stage=ProgressStage.DOWNLOADING,
                        title=title,
                        label=label,
                        percent=int(percent),
                        detail=f"{format_megabytes(done)} MB / {format_megabytes(total)} MB",
                    )
                )

            on_progress(0, 0.0, 0)
            logger.info(f"Downloading '{action.name}' from {sanitize_url(item.download_url)}")
            self.downloader.fetch(item.download_url, action.path, on_progress)

            # Newly downloaded files are always verified
            if self._verify(action.path, item) == IntegrityOutcome.MISMATCH:
                self._reject_download(action.path, item)

            result.downloaded += 1
            result.executed.append(action)

    def _reject_download(self, path: Path, item: ContentItem) -> None:
        # Only reachable for a declared, supported checksum
        integrity = item.integrity
        try:
            actual = file_hash(path, algorithm=integrity.algorithm)
            safe_delete(path, missing_ok=True)
        except OSError as e:
            raise FilesystemError(f"Failed to delete the corrupted {self.name} file", path, e) from e
        raise IntegrityError(path, str(integrity), actual)
