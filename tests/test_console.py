# Tests for packsync.output.console
# Rich-based console output

from io import StringIO
from pathlib import Path

from conftest import make_item
from rich.console import Console as RichConsole

from packsync.exceptions import CategorySyncError, IntegrityError, TransferError
from packsync.output.console import Console, RichProgressSink, create_console
from packsync.sync.actions import ActionType, DeleteReason, ReconciliationPlan, SyncAction
from packsync.sync.category import CategorySyncResult
from packsync.sync.engine import SyncResult
from packsync.sync.progress import ProgressEvent, ProgressStage


def _make_console(verbose: bool = False) -> Console:
    """Create a console with captured output."""
    console = Console(verbose=verbose, colored=False)
    console._console = RichConsole(file=StringIO(), no_color=True, width=120)
    return console


def _get_output(console: Console) -> str:
    """Get captured output from console."""
    console._console.file.seek(0)
    return console._console.file.read()


def _plan() -> ReconciliationPlan:
    plan = ReconciliationPlan(category="mods", considered_items=2)
    plan.add(
        SyncAction(
            ActionType.DELETE,
            Path("/mods/old.jar"),
            reason=DeleteReason.ORPHAN.description,
            delete_reason=DeleteReason.ORPHAN,
        )
    )
    plan.add(SyncAction(ActionType.DOWNLOAD, Path("/mods/new.jar"), make_item("new.jar"), reason="missing locally"))
    plan.add(SyncAction(ActionType.SKIP, Path("/mods/kept.jar"), make_item("kept.jar"), reason="valid integrity"))
    return plan


class TestConsoleBasic:
    """Tests for basic console methods."""

    def test_print(self):
        c = _make_console()
        c.print("hello world")
        assert "hello world" in _get_output(c)

    def test_print_error(self):
        c = _make_console()
        c.print_error("something failed")
        output = _get_output(c)
        assert "Error:" in output
        assert "something failed" in output

    def test_print_warning(self):
        c = _make_console()
        c.print_warning("careful")
        assert "Warning:" in _get_output(c)

    def test_create_console(self):
        c = create_console(verbose=True)
        assert c.verbose is True


class TestPrintPlans:
    """Tests for plan output."""

    def test_changes_listed(self):
        c = _make_console()
        c.print_plans({"mods": _plan()})
        output = _get_output(c)
        assert "mods" in output
        assert "1 to download" in output
        assert "1 to delete" in output
        assert "old.jar" in output
        assert "no longer in the manifest" in output
        assert "kept.jar" not in output

    def test_verbose_lists_skipped(self):
        c = _make_console(verbose=True)
        c.print_plans({"mods": _plan()})
        assert "kept.jar" in _get_output(c)

    def test_empty(self):
        c = _make_console()
        c.print_plans({})
        assert "No categories" in _get_output(c)


class TestPrintSyncResult:
    """Tests for sync result output."""

    def test_summary(self):
        c = _make_console()
        result = SyncResult(success=True, total_categories=2)
        result.add(CategorySyncResult(name="mods", success=True, downloaded=2, deleted=1))
        result.add(CategorySyncResult(name="resourcepacks", success=True, skipped=3))

        c.print_sync_result(result)
        output = _get_output(c)

        assert "Sync completed" in output
        assert "Categories: 2/2" in output
        assert "2 downloaded, 1 deleted, 3 up to date" in output
        assert "resourcepacks" in output
        assert "up to date (3 files)" in output


class TestPrintSyncError:
    """Tests for fatal error output."""

    def test_integrity_error(self):
        c = _make_console()
        error = CategorySyncError("mods", IntegrityError(Path("/mods/a.jar"), "sha256:aa", "bb"))

        c.print_sync_error(error)
        output = _get_output(c)

        assert "File Integrity Check Failed (mods)" in output
        assert "a.jar" in output

    def test_transfer_error(self):
        c = _make_console()
        c.print_sync_error(CategorySyncError("shaderpacks", TransferError("https://example.com/s.zip")))
        assert "Download Failed (shaderpacks)" in _get_output(c)


class TestCategoriesList:
    def test_hides_disabled_by_default(self):
        c = _make_console()
        categories = {
            "mods": {"enabled": True, "directory": "/i/mods", "extension": "jar", "description": ""},
            "shaderpacks": {"enabled": False, "directory": "/i/shaderpacks", "extension": "zip", "description": ""},
        }
        c.print_categories_list(categories)
        output = _get_output(c)
        assert "mods" in output
        assert "shaderpacks" not in output

        c.print_categories_list(categories, show_all=True)
        assert "shaderpacks" in _get_output(c)


class TestRichProgressSink:
    def test_one_task_per_category(self):
        sink = RichProgressSink(RichConsole(file=StringIO()))
        with sink:
            for category in ("mods", "mods", "resourcepacks"):
                sink.emit(ProgressEvent(category, ProgressStage.DOWNLOADING, "1 of 1", "Downloading a", 50))

        assert len(sink.progress.tasks) == 2
        assert sink.progress.tasks[0].completed == 50
