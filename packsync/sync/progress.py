# Packsync Progress Events
# Structured progress reporting between the engine and any presentation layer

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class ProgressStage(str, Enum):
    """What the engine is currently doing for an item."""

    VERIFYING = "verifying"
    DOWNLOADING = "downloading"


@dataclass(frozen=True)
class ProgressEvent:
    """
    One progress update for the current item of a category.

    The category name is the channel: when categories run concurrently,
    events from different categories are told apart by it.
    """

    category: str
    stage: ProgressStage
    title: str
    label: str
    percent: int
    detail: str = ""


@runtime_checkable
class ProgressSink(Protocol):
    """Consumer of progress events (console, GUI, log)."""

    def emit(self, event: ProgressEvent) -> None: ...


class NullProgressSink:
    """Sink that discards every event."""

    def emit(self, event: ProgressEvent) -> None:
        pass


class CollectingProgressSink:
    """Sink that keeps every event in memory, in order."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    def emit(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def for_category(self, category: str) -> list[ProgressEvent]:
        return [e for e in self.events if e.category == category]


def progress_by_index(index: int, total: int) -> int:
    """Percent complete when item ``index`` (0-based) of ``total`` is current."""
    if total <= 0:
        return 0
    return min(100, max(0, int(index * 100 / total)))


def format_megabytes(num_bytes: int) -> str:
    """Format a byte count as megabytes with two decimals."""
    return f"{num_bytes / (1024 * 1024):.2f}"


def download_title(index: int, pending: int, total: int) -> str:
    """
    Title for the download step, e.g. "2 of 5 (12 total)".

    Args:
        index: 0-based index of the current download.
        pending: Number of downloads in this run.
        total: Number of items considered for the category.
    """
    title = f"{index + 1} of {pending}"
    if pending != total:
        title += f" ({total} total)"
    return title
