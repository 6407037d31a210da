# Packsync Output Module
# Rich console output and progress display

from packsync.output.console import Console, RichProgressSink, create_console

__all__ = [
    "Console",
    "RichProgressSink",
    "create_console",
]
