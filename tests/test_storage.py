import json
from pathlib import Path

import pytest

from offerind.core.config import SyncConfig
from offerind.core.models import ChangedEvent, CompletedEvent
from offerind.storage import Checkpoint, EventJournal, setup_directories


def _lines(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines()]


@pytest.mark.asyncio
async def test_journal_records_apply_and_revert(tmp_path: Path):
    journal = EventJournal(tmp_path / "out" / "journal.jsonl")
    completed = CompletedEvent(offer="0xA")

    await journal.apply(completed, 10)
    await journal.revert(completed)
    await journal.apply_many([ChangedEvent.of("0xA", title="Desk")], None)
    await journal.apply_many([], 11)

    assert _lines(journal.path) == [
        {"action": "apply", "block": 10, "kind": "completed", "offer": "0xA"},
        {"action": "revert", "block": None, "kind": "completed", "offer": "0xA"},
        {"action": "apply", "block": None, "kind": "changed", "offer": "0xA", "title": "Desk"},
    ]


def test_checkpoint_roundtrip(tmp_path: Path):
    path = tmp_path / "checkpoint.json"
    assert Checkpoint.load(path) is None

    Checkpoint(synced_to_block=41, updated_at=1.5).save(path)
    loaded = Checkpoint.load(path)

    assert loaded == Checkpoint(synced_to_block=41, updated_at=1.5)
    assert loaded.next_block == 42
    assert not path.with_suffix(".json.tmp").exists()


def test_setup_directories(tmp_path: Path):
    dirs = setup_directories(SyncConfig(rpc_url="http://node", registry_address="0xABC", out_root=tmp_path))

    assert dirs.key_dir == tmp_path / "0xabc"
    assert dirs.key_dir.is_dir()
    assert dirs.journal_path.name == "journal.jsonl"

    assert setup_directories(SyncConfig(rpc_url="http://node", out_root=tmp_path)).key_dir.name == "any"
