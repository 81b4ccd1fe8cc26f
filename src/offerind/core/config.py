from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SyncConfig:
    """Configuration for the offer sync engine and its CLI."""

    rpc_url: str
    ws_url: str | None = None  # required for live subscriptions only
    registry_address: str | None = None  # None: logs from any emitter
    default_floor: int | str = "genesis"  # "genesis", "latest" or a block number
    timeout_s: int = 20
    max_connections: int = 64
    concurrency: int = 16
    abi_path: Path | None = None  # contract ABI overriding the built-in signatures
    out_root: Path = Path("./data")
