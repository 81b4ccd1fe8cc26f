from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from offerind.core.models import OfferEventModel


class EventJournal:
    """Append-only JSONL journal of normalized offer events.

    One line per event:
    {"action": "apply" | "revert", "block": int | null, "kind": ..., "offer": ..., ...}
    """

    def __init__(self, path: Path) -> None:
        """Initialize the journal at the given path.

        Args:
            path: File path for the journal JSONL file
        """
        self.path = path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        self._lock = asyncio.Lock()

    @staticmethod
    def _record(event: OfferEventModel, action: str, block: int | None) -> dict[str, Any]:
        return {"action": action, "block": block, **event.to_dict()}

    async def apply(self, event: OfferEventModel, block: int | None) -> None:
        await self._append([self._record(event, "apply", block)])

    async def revert(self, event: OfferEventModel) -> None:
        await self._append([self._record(event, "revert", None)])

    async def apply_many(self, events: list[OfferEventModel], block: int | None) -> None:
        await self._append([self._record(ev, "apply", block) for ev in events])

    async def _append(self, records: list[dict[str, Any]]) -> None:
        if not records:
            return
        text = "".join(json.dumps(rec, sort_keys=True) + "\n" for rec in records)
        async with self._lock:
            await asyncio.to_thread(self._write, self.path, text)

    @staticmethod
    def _write(path: Path, text: str) -> None:
        """Write lines to file with immediate flush and sync."""
        with open(path, "a", buffering=1) as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
