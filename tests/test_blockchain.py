from unittest.mock import AsyncMock, MagicMock

import pytest

from offerind.core.config import SyncConfig
from offerind.core.events import CHANGE_MAPPING
from offerind.core.models import EventKind, NotFound
from offerind.decoding.codec import AbiEventCodec
from offerind.orchestration import Blockchain, connect

from tests.conftest import eventually
from tests.factories import make_log
from tests.mocks import FakeLogSource


@pytest.mark.asyncio
async def test_follow_subscribes_to_every_family(source: FakeLogSource, codec: AbiEventCodec):
    chain = Blockchain(source, codec, address="0xabc", default_floor=5)
    callback = MagicMock()

    handle = chain.follow(callback, MagicMock(), from_block=7)

    assert len(source.streams) == len(EventKind) - 1 + len(CHANGE_MAPPING)
    assert {stream.from_block for stream in source.streams} == {7}

    source.stream_for(codec.topic0("Cancelled")).push(make_log("Cancelled", block=8))
    await eventually(lambda: callback.called)
    assert callback.call_args.args[1] == 8

    handle.unsubscribe()
    await eventually(lambda: all(stream.closed for stream in source.streams))


@pytest.mark.asyncio
async def test_facade_delegates(source: FakeLogSource, codec: AbiEventCodec):
    chain = Blockchain(source, codec, default_floor="latest")

    result = await chain.resync()
    assert result.synced_to_block == 100
    assert {c["from_block"] for c in source.get_logs_calls} == {100}

    assert await chain.find_cid("QmNothing") == NotFound()


@pytest.mark.asyncio
async def test_context_manager_closes_source(codec: AbiEventCodec):
    source = FakeLogSource()
    source.aclose = AsyncMock()

    async with Blockchain(source, codec) as chain:
        assert chain.on_created == chain.live.on_created

    source.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_connect_wires_concrete_clients():
    chain = connect(SyncConfig(rpc_url="http://node", registry_address="0xabc", default_floor=12))

    assert chain.resyncer._config.default_floor == 12
    assert chain.resyncer._config.address == "0xabc"
    await chain.aclose()
