from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path


@dataclass(slots=True)
class Checkpoint:
    """Highest block fully covered by a resync (inclusive)."""

    synced_to_block: int
    updated_at: float

    @classmethod
    def load(cls, path: Path) -> Checkpoint | None:
        """Read the checkpoint, or None when it was never written."""
        if not path.is_file():
            return None
        data = json.loads(path.read_text())
        return cls(synced_to_block=int(data["synced_to_block"]), updated_at=float(data["updated_at"]))

    def save(self, path: Path) -> None:
        """Atomically replace the checkpoint file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(asdict(self)))
        os.replace(tmp, path)

    @property
    def next_block(self) -> int:
        return self.synced_to_block + 1
