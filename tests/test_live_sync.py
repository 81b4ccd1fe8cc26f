import asyncio
from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from offerind.core.constants import OfferEvent
from offerind.core.errors import TransportError
from offerind.core.events import CHANGE_MAPPING
from offerind.core.models import BoughtEvent, ChangedEvent, CompletedEvent, CreatedEvent, EventKind
from offerind.core.use_cases.live_sync import LiveSync
from offerind.decoding.codec import AbiEventCodec

from tests.conftest import eventually
from tests.factories import BUYER, OFFER_A, OFFER_B, checksum, make_created_log, make_log
from tests.mocks import FakeLogSource


@pytest.fixture
def live(source: FakeLogSource, codec: AbiEventCodec) -> LiveSync:
    return LiveSync(source, codec)


@pytest.mark.asyncio
async def test_forward_then_revert(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    seen: list[tuple] = []
    errors: list[tuple[str, str]] = []

    handle = live.on_completed(
        lambda ev, block: seen.append(("forward", ev, block)),
        lambda ev: seen.append(("revert", ev)),
        lambda name, message: errors.append((name, message)),
    )
    stream = source.stream_for(codec.topic0("Completed"))

    log = make_log("Completed", block=7)
    stream.push(log, replace(log, removed=True))
    await eventually(lambda: len(seen) == 2)

    expected = CompletedEvent(offer=checksum(OFFER_A))
    assert seen == [("forward", expected, 7), ("revert", expected)]
    assert errors == []
    handle.unsubscribe()


@pytest.mark.asyncio
async def test_async_callbacks(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    seen: list = []

    async def on_bought(ev: BoughtEvent, block: int) -> None:
        seen.append((ev, block))

    async def on_revert(ev: BoughtEvent) -> None:
        seen.append(ev)

    live.on_bought(on_bought, on_revert)
    source.stream_for(codec.topic0("Bought")).push(make_log("Bought", block=3, buyer=BUYER))
    await eventually(lambda: len(seen) == 1)

    assert seen == [(BoughtEvent(offer=checksum(OFFER_A), buyer=checksum(BUYER)), 3)]


@pytest.mark.asyncio
async def test_decode_error_does_not_stop_delivery(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    created: list[CreatedEvent] = []
    errors: list[tuple[str, str]] = []

    handle = live.on_created(
        lambda ev, _block: created.append(ev),
        lambda _ev: None,
        lambda name, message: errors.append((name, message)),
    )
    stream = source.stream_for(codec.topic0("Created"))
    stream.push(replace(make_created_log(), data_hex="0x1234"), make_created_log())
    await eventually(lambda: len(created) == 1)

    assert [name for name, _ in errors] == ["DecodeError"]
    assert created[0].title == "Road bike"
    assert handle.active
    handle.unsubscribe()


@pytest.mark.asyncio
async def test_callback_failure_reported(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    errors: list[tuple[str, str]] = []

    def boom(_ev, _block):
        raise RuntimeError("indexer down")

    handle = live.on_cancelled(boom, lambda _ev: None, lambda *err: errors.append(err))
    source.stream_for(codec.topic0("Cancelled")).push(make_log("Cancelled"))
    await eventually(lambda: bool(errors))

    assert errors == [("RuntimeError", "indexer down")]
    assert handle.active
    handle.unsubscribe()


@pytest.mark.asyncio
async def test_transport_error_ends_delivery(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    errors: list[tuple[str, str]] = []

    handle = live.on_buyer_rejected(lambda *_: None, lambda _ev: None, lambda *err: errors.append(err))
    stream = source.stream_for(codec.topic0("BuyerRejected"))
    stream.fail(TransportError("connection lost"))
    await eventually(lambda: not handle.active)

    assert errors == [("TransportError", "connection lost")]
    assert stream.closed


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    callback = MagicMock()

    handle = live.on_completed(callback, MagicMock())
    stream = source.stream_for(codec.topic0("Completed"))
    await asyncio.sleep(0)  # let delivery start waiting on the stream
    handle.unsubscribe()
    await eventually(lambda: stream.closed)

    stream.push(make_log("Completed"))
    handle.unsubscribe()
    callback.assert_not_called()
    assert not handle.active


@pytest.mark.asyncio
async def test_on_changed_opens_one_stream_per_field(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    seen: list[tuple[ChangedEvent, int]] = []

    handle = live.on_changed(lambda ev, block: seen.append((ev, block)), lambda _ev: None, from_block=5)

    assert len(source.streams) == len(CHANGE_MAPPING)
    assert all(stream.from_block == 5 for stream in source.streams)

    source.stream_for(codec.topic0("PriceChanged")).push(make_log("PriceChanged", block=9, newPrice=250))
    source.stream_for(codec.topic0("ShipsFromChanged")).push(
        make_log("ShipsFromChanged", address=OFFER_B, block=10, newShipsFrom=b"DE")
    )
    await eventually(lambda: len(seen) == 2)

    assert sorted(seen, key=lambda item: item[1]) == [
        (ChangedEvent.of(checksum(OFFER_A), price="250"), 9),
        (ChangedEvent.of(checksum(OFFER_B), ships_from="DE"), 10),
    ]

    handle.unsubscribe()
    await eventually(lambda: all(stream.closed for stream in source.streams))
    assert not handle.active


@pytest.mark.asyncio
async def test_on_family_dispatch(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    live.on_family(EventKind.BOUGHT, MagicMock(), MagicMock())
    live.on_family(EventKind.CHANGED, MagicMock(), MagicMock())

    assert source.streams[0].topics == [codec.topic0(OfferEvent.BOUGHT.value)]
    assert len(source.streams) == 1 + len(CHANGE_MAPPING)
    for stream in source.streams:
        stream.end()


@pytest.mark.asyncio
async def test_stream_end_is_reported(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    errors: list[tuple[str, str]] = []

    handle = live.on_completed(MagicMock(), MagicMock(), lambda *err: errors.append(err))
    stream = source.stream_for(codec.topic0("Completed"))
    stream.end()
    await eventually(lambda: not handle.active)

    assert errors == [("TransportError", "Completed log stream ended")]
    assert stream.closed


@pytest.mark.asyncio
async def test_unexpected_stream_error_is_reported(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    errors: list[tuple[str, str]] = []

    handle = live.on_bought(MagicMock(), MagicMock(), lambda *err: errors.append(err))
    source.stream_for(codec.topic0("Bought")).fail(KeyError("result"))
    await eventually(lambda: not handle.active)

    assert [name for name, _ in errors] == ["KeyError"]


@pytest.mark.asyncio
async def test_failing_error_callback_keeps_delivery(live: LiveSync, source: FakeLogSource, codec: AbiEventCodec):
    created: list[CreatedEvent] = []

    def on_error(_name: str, _message: str) -> None:
        raise RuntimeError("alerting down")

    handle = live.on_created(lambda ev, _block: created.append(ev), MagicMock(), on_error)
    source.stream_for(codec.topic0("Created")).push(
        replace(make_created_log(), data_hex="0x1234"),
        make_created_log(),
    )
    await eventually(lambda: len(created) == 1)

    assert handle.active
    handle.unsubscribe()
