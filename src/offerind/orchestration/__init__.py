"""Wiring of the sync engine over concrete clients.

This package provides:
- `Blockchain`: facade over live sync, resync and offer state queries
- `connect`: build a `Blockchain` from a `SyncConfig`
"""

from offerind.orchestration.blockchain import Blockchain, connect

__all__ = ["Blockchain", "connect"]
