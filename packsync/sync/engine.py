# Packsync Sync Engine
# Coordinates reconciliation across all enabled categories

import asyncio
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from packsync.config.schema import Environment, PacksyncConfig
from packsync.exceptions import CategorySyncError, PacksyncError
from packsync.manifest.schema import CategoryManifest, Manifest
from packsync.sync.actions import ReconciliationPlan
from packsync.sync.category import CategoryHandler, CategorySyncResult, Transfer
from packsync.sync.progress import NullProgressSink, ProgressSink
from packsync.sync.transfer import Downloader
from packsync.utils.environment import get_current_environment

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Result of a complete sync operation."""

    success: bool
    total_categories: int = 0
    synced_categories: int = 0
    total_items: int = 0
    downloaded: int = 0
    deleted: int = 0
    skipped: int = 0
    duration: float = 0.0
    category_results: dict[str, CategorySyncResult] = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        """Check if any category changed files on disk."""
        return self.downloaded > 0 or self.deleted > 0

    def add(self, cat_result: CategorySyncResult) -> None:
        """Aggregate a finished category."""
        self.category_results[cat_result.name] = cat_result
        self.total_items += cat_result.total
        self.downloaded += cat_result.downloaded
        self.deleted += cat_result.deleted
        self.skipped += cat_result.skipped
        if cat_result.success:
            self.synced_categories += 1


class SyncEngine:
    """
    Main synchronization engine.

    Runs the category handlers for a manifest. A fatal error in any category
    aborts the whole run and is raised as CategorySyncError; there is no
    partial-success result.
    """

    def __init__(
        self,
        config: PacksyncConfig,
        manifest: Manifest,
        *,
        downloader: Optional[Transfer] = None,
        progress: Optional[ProgressSink] = None,
        environment: Optional[Environment] = None,
    ):
        """
        Initialize sync engine.

        Args:
            config: packsync configuration (category definitions, transfer settings).
            manifest: Parsed manifest for this run.
            downloader: Optional transfer agent shared by all categories.
                        When omitted, each category gets its own Downloader.
            progress: Sink receiving progress events from every category.
            environment: Override for the configured run context.
        """
        self.config = config
        self.manifest = manifest
        self.progress = progress or NullProgressSink()
        self.environment = get_current_environment(environment or config.instance.environment)
        self._downloader = downloader
        self._owned_downloaders: list[Downloader] = []
        self._handlers: dict[str, CategoryHandler] = {}

    def close(self) -> None:
        """Close downloaders created by the engine."""
        for downloader in self._owned_downloaders:
            downloader.close()
        self._owned_downloaders.clear()

    def __enter__(self) -> "SyncEngine":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _create_downloader(self) -> Transfer:
        if self._downloader is not None:
            return self._downloader
        settings = self.config.download
        downloader = Downloader(
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            chunk_size=settings.chunk_size,
            user_agent=settings.user_agent,
        )
        self._owned_downloaders.append(downloader)
        return downloader

    def get_handler(self, category_name: str) -> CategoryHandler | None:
        """
        Get handler for a category.

        Args:
            category_name: Name of the category.

        Returns:
            CategoryHandler or None if category doesn't exist.
        """
        if category_name in self._handlers:
            return self._handlers[category_name]

        category = self.config.get_category(category_name)
        if category is None:
            return None

        handler = CategoryHandler(
            name=category_name,
            directory=self.config.get_category_path(category_name) or Path(category.directory),
            extension=category.extension,
            downloader=self._create_downloader(),
            environment=self.environment,
        )
        self._handlers[category_name] = handler
        return handler

    def get_enabled_categories(self) -> list[str]:
        """Get list of enabled category names."""
        return list(self.config.get_enabled_categories().keys())

    def get_category_manifest(self, category_name: str) -> CategoryManifest:
        """Manifest entries for a category; an empty list with the default policy if absent."""
        category_manifest = self.manifest.get_category(category_name)
        if category_manifest is None:
            logger.warning(f"The manifest has no entries for '{category_name}'")
            return CategoryManifest()
        return category_manifest

    def _resolve_categories(self, category_name: Optional[str]) -> list[str]:
        if category_name:
            if self.config.get_category(category_name) is None:
                raise KeyError(f"Category '{category_name}' not found")
            return [category_name]

        for name in self.manifest.categories:
            if self.config.get_category(name) is None:
                logger.warning(f"Ignoring manifest category '{name}': not configured locally")
        return self.get_enabled_categories()

    def plan(self, category_name: Optional[str] = None) -> dict[str, ReconciliationPlan]:
        """
        Compute plans without changing anything on disk.

        Args:
            category_name: Optional specific category. If None, plans all enabled.

        Returns:
            Dict of category name to plan.
        """
        plans: dict[str, ReconciliationPlan] = {}
        for name in self._resolve_categories(category_name):
            handler = self.get_handler(name)
            category_manifest = self.get_category_manifest(name)
            try:
                plans[name] = handler.plan(category_manifest.items, category_manifest.policy)
            except PacksyncError as e:
                raise CategorySyncError(name, e) from e
        return plans

    def _sync_category(self, name: str) -> CategorySyncResult:
        handler = self.get_handler(name)
        category_manifest = self.get_category_manifest(name)
        try:
            return handler.reconcile(category_manifest.items, category_manifest.policy, self.progress)
        except PacksyncError as e:
            logger.error(f"Syncing {name} failed: {e}")
            raise CategorySyncError(name, e) from e

    def sync(self, category_name: Optional[str] = None) -> SyncResult:
        """
        Synchronize categories.

        Args:
            category_name: Optional specific category. If None, syncs all enabled.

        Returns:
            SyncResult with details of what was done.

        Raises:
            CategorySyncError: If any category hit a fatal error.
            KeyError: If category_name is not configured.
        """
        started = time.monotonic()
        categories = self._resolve_categories(category_name)
        result = SyncResult(success=False, total_categories=len(categories))

        if self.config.parallel_categories and len(categories) > 1:
            self._sync_parallel(categories, result)
        else:
            for name in categories:
                result.add(self._sync_category(name))

        result.success = True
        result.duration = time.monotonic() - started
        return result

    def _sync_parallel(self, categories: list[str], result: SyncResult) -> None:
        # Create handlers up front so each category owns its downloader
        for name in categories:
            self.get_handler(name)

        with ThreadPoolExecutor(max_workers=len(categories), thread_name_prefix="packsync") as pool:
            futures: dict[str, Future] = {name: pool.submit(self._sync_category, name) for name in categories}

        # All categories have finished here; report the first failure in category order
        for name, future in futures.items():
            error = future.exception()
            if error is not None:
                raise error
            result.add(future.result())

    async def sync_async(self, category_name: Optional[str] = None) -> SyncResult:
        """Run sync() in a worker thread so an event loop is never blocked."""
        return await asyncio.to_thread(self.sync, category_name)
