"""Local persistence for the CLI: event journal and resync checkpoint."""

from offerind.storage.checkpoint import Checkpoint
from offerind.storage.directories import SyncDirectories, setup_directories
from offerind.storage.journal import EventJournal

__all__ = ["Checkpoint", "EventJournal", "SyncDirectories", "setup_directories"]
