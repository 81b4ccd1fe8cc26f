import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from offerind.cli import cli
from offerind.core.errors import TransportError
from offerind.core.models import CompletedEvent, Found, Gone, OfferSnapshot, OfferStatus, ResyncResult


@pytest.fixture
def chain() -> MagicMock:
    chain = MagicMock()
    chain.__aenter__ = AsyncMock(return_value=chain)
    chain.__aexit__ = AsyncMock(return_value=False)
    return chain


def invoke(tmp_path: Path, chain: MagicMock, *args: str):
    with patch("offerind.cli.connect", return_value=chain):
        return CliRunner().invoke(cli, ["--rpc", "http://node", "--out-root", str(tmp_path), *args])


def test_resync_writes_checkpoint_and_journal(tmp_path: Path, chain: MagicMock):
    chain.resync = AsyncMock(return_value=ResyncResult(synced_to_block=42, completed=[CompletedEvent(offer="0xA")]))

    result = invoke(tmp_path, chain, "resync")

    assert result.exit_code == 0, result.output
    chain.resync.assert_awaited_once_with(None)
    assert json.loads((tmp_path / "any" / "checkpoint.json").read_text())["synced_to_block"] == 42
    assert (tmp_path / "any" / "journal.jsonl").read_text().count("\n") == 1
    assert "42" in result.output

    # second run resumes after the checkpoint
    invoke(tmp_path, chain, "resync")
    chain.resync.assert_awaited_with(43)


def test_resync_explicit_floor(tmp_path: Path, chain: MagicMock):
    chain.resync = AsyncMock(return_value=ResyncResult(synced_to_block=9))

    result = invoke(tmp_path, chain, "resync", "--from-block", "genesis", "--no-journal")

    assert result.exit_code == 0, result.output
    chain.resync.assert_awaited_once_with("genesis")
    assert (tmp_path / "any" / "journal.jsonl").exists() is False


def test_transport_failure_is_reported(tmp_path: Path, chain: MagicMock):
    chain.resync = AsyncMock(side_effect=TransportError("node unreachable"))

    result = invoke(tmp_path, chain, "resync")

    assert result.exit_code == 1
    assert "node unreachable" in result.output


def test_find_cid(tmp_path: Path, chain: MagicMock):
    chain.find_cid = AsyncMock(return_value=Found(statuses=frozenset({OfferStatus.COMPLETED})))
    assert "found" in invoke(tmp_path, chain, "find-cid", "QmX").output

    chain.find_cid = AsyncMock(return_value=Gone())
    assert "gone" in invoke(tmp_path, chain, "find-cid", "QmX").output


def test_offer(tmp_path: Path, chain: MagicMock):
    chain.read_offer = AsyncMock(
        return_value=OfferSnapshot(
            status=OfferStatus.WAITING_BUYER,
            ships_from="IT",
            seller="0xS",
            buyer="0x0",
            price="990",
            title="Lamp",
            category="home",
            attached_files="QmLamp",
        )
    )

    result = invoke(tmp_path, chain, "offer", "0xA")

    assert result.exit_code == 0, result.output
    assert "Lamp" in result.output
    assert "WAITING_BUYER" in result.output


def test_watch_requires_websocket(tmp_path: Path, chain: MagicMock):
    result = invoke(tmp_path, chain, "watch")

    assert result.exit_code == 2
    assert "websocket" in result.output
