# Packsync Console Output
# Rich-based console output and progress display

from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn
from rich.table import Table

from packsync.exceptions import (
    CategorySyncError,
    ConfigurationError,
    FilesystemError,
    IntegrityError,
    PacksyncError,
    TransferError,
)
from packsync.sync.actions import ActionType, DeleteReason, ReconciliationPlan, SyncAction
from packsync.sync.category import CategorySyncResult
from packsync.sync.engine import SyncResult
from packsync.sync.progress import ProgressEvent, ProgressStage


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync operations.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored)

    @property
    def rich(self) -> RichConsole:
        """Underlying Rich console (shared with logging and progress)."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_plans(self, plans: dict[str, ReconciliationPlan]) -> None:
        """
        Print planned changes for multiple categories.

        Args:
            plans: Dict of category name to plan.
        """
        if not plans:
            self._console.print("[dim]No categories to display[/dim]")
            return

        for name, plan in plans.items():
            self._print_category_plan(name, plan)

    def _print_category_plan(self, name: str, plan: ReconciliationPlan) -> None:
        """Print the plan for a single category."""
        self._console.print(f"\n[green]●[/green] [bold]{name}[/bold]")

        if not plan.actions:
            self._console.print("  [dim]No items[/dim]")
            return

        parts = []
        if plan.to_skip:
            parts.append(f"[green]{len(plan.to_skip)} up to date[/green]")
        if plan.to_download:
            parts.append(f"[cyan]{len(plan.to_download)} to download[/cyan]")
        if plan.to_delete:
            parts.append(f"[red]{len(plan.to_delete)} to delete[/red]")
        self._console.print(f"  {plan.considered_items} items: {', '.join(parts)}")

        if self.verbose or plan.has_changes:
            for action in plan.actions:
                if action.action_type == ActionType.SKIP and not self.verbose:
                    continue
                self._print_action(action)

    def _print_action(self, action: SyncAction) -> None:
        icon = self._get_action_icon(action)
        if action.action_type == ActionType.DELETE:
            self._console.print(f"    {icon} [red]{action.name}[/red] - {action.reason}")
        elif action.action_type == ActionType.DOWNLOAD:
            self._console.print(f"    {icon} [cyan]{action.name}[/cyan] ({action.reason})")
        else:
            self._console.print(f"    {icon} [dim]{action.name} ({action.reason})[/dim]")

    def _get_action_icon(self, action: SyncAction) -> str:
        """Get icon for an action."""
        if action.action_type == ActionType.DELETE:
            icons = {
                DeleteReason.ORPHAN: "[red]×[/red]",
                DeleteReason.ENVIRONMENT: "[yellow]×[/yellow]",
                DeleteReason.INTEGRITY: "[red]![/red]",
            }
            return icons.get(action.delete_reason, "[red]×[/red]")
        if action.action_type == ActionType.DOWNLOAD:
            return "[cyan]↓[/cyan]"
        return "[green]✓[/green]"

    def print_sync_result(self, result: SyncResult) -> None:
        """
        Print sync result summary.

        Args:
            result: Sync result to display.
        """
        self._console.print()

        for name, cat_result in result.category_results.items():
            self._print_category_result(name, cat_result)

        self._console.print()
        self._console.print(
            Panel(
                "[green]Sync completed[/green]\n"
                f"Categories: {result.synced_categories}/{result.total_categories}\n"
                f"Files: {result.downloaded} downloaded, {result.deleted} deleted, {result.skipped} up to date\n"
                f"Duration: {result.duration:.1f}s",
                title="Summary",
                border_style="green",
            )
        )

    def _print_category_result(self, name: str, result: CategorySyncResult) -> None:
        """Print result for a single category."""
        if not result.has_changes:
            self._console.print(f"[green]✓[/green] [bold]{name}[/bold] - up to date ({result.skipped} files)")
            return

        self._console.print(
            f"[green]✓[/green] [bold]{name}[/bold] - {result.downloaded} downloaded, {result.deleted} deleted"
        )
        if self.verbose:
            for action in result.executed:
                self._print_action(action)

    def print_sync_error(self, error: PacksyncError) -> None:
        """Render a fatal sync error with a short hint for the user."""
        category = None
        cause = error
        if isinstance(error, CategorySyncError):
            category = error.category
            cause = error.cause

        title = {
            ConfigurationError: "Invalid Folder",
            FilesystemError: "File System Error",
            TransferError: "Download Failed",
            IntegrityError: "File Integrity Check Failed",
        }.get(type(cause), "Sync Failed")
        if category:
            title = f"{title} ({category})"

        self._console.print(Panel(f"[red]{escape(str(cause))}[/red]", title=title, border_style="red"))

    def print_categories_list(self, categories: dict[str, dict], *, show_all: bool = False) -> None:
        """
        Print list of categories.

        Args:
            categories: Dict of category name to info dict with keys:
                        enabled (bool), directory (str), extension (str), description (str).
            show_all: Show all categories including disabled.
        """
        table = Table(show_header=True, header_style="bold")
        table.add_column("Category", no_wrap=True)
        table.add_column("Status", no_wrap=True)
        table.add_column("Directory", style="dim")
        table.add_column("Extension", style="dim")
        table.add_column("Description", style="dim")

        for name, info in sorted(categories.items()):
            enabled = info.get("enabled", False)
            if not show_all and not enabled:
                continue

            status = "[green]enabled[/green]" if enabled else "[dim]disabled[/dim]"
            table.add_row(
                name,
                status,
                info.get("directory", ""),
                info.get("extension", ""),
                info.get("description", ""),
            )

        self._console.print(table)


class RichProgressSink:
    """
    Progress sink rendering one progress bar per category.

    Use as a context manager around a sync run.
    """

    def __init__(self, console: Optional[RichConsole] = None):
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.fields[category]}"),
            TextColumn("{task.description}"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            TextColumn("[dim]{task.fields[detail]}"),
            console=console,
            transient=True,
        )
        self._tasks: dict[str, TaskID] = {}

    def __enter__(self) -> "RichProgressSink":
        self.progress.start()
        return self

    def __exit__(self, *args) -> None:
        self.progress.stop()

    def emit(self, event: ProgressEvent) -> None:
        task_id = self._tasks.get(event.category)
        if task_id is None:
            task_id = self.progress.add_task("", total=100, category=event.category, detail="")
            self._tasks[event.category] = task_id

        if event.stage == ProgressStage.DOWNLOADING:
            description = escape(f"{event.title}: {event.label}")
        else:
            description = escape(event.label)
        self.progress.update(task_id, description=description, completed=event.percent, detail=event.detail)


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
