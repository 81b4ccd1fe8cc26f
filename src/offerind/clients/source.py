"""`ILogSource` implementation backed by a JSON-RPC node.

- historical queries, head height and contract reads go through `RPC` (HTTP)
- live streams go through `WebsocketLogStream` (`eth_subscribe`)

Replay from a past block
------------------------
`eth_subscribe` only delivers logs mined after the subscription opens. To
follow from an earlier block without a gap, `subscribe(from_block=N)`:

1. opens the live subscription and buffers what it pushes,
2. reads the head H and backfills [N, H] with `eth_getLogs`,
3. yields the backfill, then drains the buffer, skipping confirmed logs
   the backfill already yielded (same tx hash and log index).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak

from offerind.clients.rpc import RPC, filter_params
from offerind.clients.ws import WebsocketLogStream
from offerind.core.constants import PROPERTY_TYPES, Property
from offerind.core.errors import DecodeError, TransportError
from offerind.core.interfaces import TopicsFilter
from offerind.core.models import EventLog

logger = logging.getLogger(__name__)


def function_selector(name: str, arg_types: Sequence[str] = ()) -> str:
    """4-byte selector of `name(arg_types...)` as 0x-hex."""
    return "0x" + keccak(text=f"{name}({','.join(arg_types)})")[:4].hex()


async def merge_backfill(
    backfill: Sequence[EventLog],
    live: AsyncIterator[EventLog | BaseException],
) -> AsyncIterator[EventLog]:
    """Yield `backfill`, then `live`, without repeating confirmed backfill logs.

    Exceptions found on `live` are raised. A retraction of a backfilled log
    is delivered and forgets that log, so a later re-confirmation is
    delivered as well.
    """
    seen: set[tuple[str, int]] = set()
    for log in backfill:
        seen.add(log.key)
        yield log

    async for item in live:
        if isinstance(item, BaseException):
            raise item
        if item.removed:
            seen.discard(item.key)
        elif item.key in seen:
            logger.debug("Skipping log %s:%d already replayed", item.tx_hash, item.log_index)
            continue
        yield item


# queued by the live pump once its stream is over
_CLOSED = object()


async def _drain(queue: asyncio.Queue[Any]) -> AsyncIterator[EventLog | BaseException]:
    while True:
        item = await queue.get()
        if item is _CLOSED:
            return
        yield item


class EthLogSource:
    """Log source over an Ethereum node (HTTP for queries, websocket for streams)."""

    def __init__(self, rpc: RPC, ws: WebsocketLogStream | None = None) -> None:
        self._rpc = rpc
        self._ws = ws

    async def get_logs(
        self,
        *,
        topics: TopicsFilter,
        from_block: int,
        to_block: int | None,
        address: str | None = None,
    ) -> list[EventLog]:
        return await self._rpc.get_logs(
            topics=topics,
            from_block=from_block,
            to_block=to_block,
            address=address,
        )

    async def current_height(self) -> int:
        return await self._rpc.latest_block()

    async def read_contract_field(self, address: str, name: str) -> Any:
        try:
            typ = PROPERTY_TYPES[Property(name)]
        except ValueError:
            raise KeyError(f"unknown offer property {name!r}") from None
        raw = await self._rpc.call(address, function_selector(name))
        try:
            (value,) = abi_decode([typ], raw)
        except (DecodingError, ValueError) as e:
            raise DecodeError(f"{address}.{name}() returned undecodable data: {e}") from e
        return value

    async def subscribe(
        self,
        *,
        topics: TopicsFilter,
        from_block: int | None = None,
        address: str | None = None,
    ) -> AsyncIterator[EventLog]:
        if self._ws is None:
            raise TransportError("live subscriptions need a websocket endpoint")
        params = filter_params(topics, address)

        if from_block is None:
            live = self._ws.stream(params)
            try:
                async for log in live:
                    yield log
            finally:
                await live.aclose()
            return

        queue: asyncio.Queue[Any] = asyncio.Queue()
        subscribed = asyncio.Event()

        async def pump() -> None:
            live = self._ws.stream(params, on_subscribed=lambda _sub_id: subscribed.set())
            try:
                async for log in live:
                    queue.put_nowait(log)
            except TransportError as e:
                queue.put_nowait(e)
            finally:
                queue.put_nowait(_CLOSED)
                subscribed.set()
                await live.aclose()

        pump_task = asyncio.create_task(pump())
        try:
            await subscribed.wait()
            head = await self._rpc.latest_block()
            backfill = await self._rpc.get_logs(
                topics=topics,
                from_block=from_block,
                to_block=head,
                address=address,
            ) if from_block <= head else []
            logger.info("Replaying %d logs from block %d to %d before live delivery", len(backfill), from_block, head)
            async for log in merge_backfill(backfill, _drain(queue)):
                yield log
        finally:
            pump_task.cancel()

    async def aclose(self) -> None:
        await self._rpc.aclose()
