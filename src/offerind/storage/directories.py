from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from offerind.core.config import SyncConfig


@dataclass(kw_only=True)
class SyncDirectories:
    """
    Layout: <out_root>/<registry address | "any">/
              journal.jsonl
              checkpoint.json
    """

    key_dir: Path

    @property
    def journal_path(self) -> Path:
        return self.key_dir / "journal.jsonl"

    @property
    def checkpoint_path(self) -> Path:
        return self.key_dir / "checkpoint.json"


def setup_directories(config: SyncConfig) -> SyncDirectories:
    key = (config.registry_address or "any").lower()
    key_dir = config.out_root / key
    key_dir.mkdir(exist_ok=True, parents=True)
    return SyncDirectories(key_dir=key_dir)
