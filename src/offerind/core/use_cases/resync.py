from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from offerind.core.constants import GENESIS_BLOCK, OfferEvent
from offerind.core.events import CHANGE_MAPPING, SIMPLE_EVENTS, normalize_log
from offerind.core.interfaces import IEventCodec, ILogSource
from offerind.core.models import EventKind, OfferEventModel, ResyncResult

logger = logging.getLogger(__name__)

# "genesis", "earliest", "latest" or an explicit block number
BlockFloor = int | str


# ---------------------------------------------------------------------------
# Domain configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResyncConfig:
    """
    Domain-level configuration for historical resync.

    `default_floor` applies when `resync()` is called without a floor.
    """

    address: str | None = None
    default_floor: BlockFloor = "genesis"
    concurrency: int = 16


def resolve_floor(floor: BlockFloor, head: int) -> int:
    """Resolve a symbolic floor against the captured head height."""
    if isinstance(floor, str):
        name = floor.lower()
        if name in ("genesis", "earliest"):
            return GENESIS_BLOCK
        if name == "latest":
            return head
        if name.isdigit():
            return int(name)
        raise ValueError(f"invalid block floor {floor!r}")
    if floor < 0:
        raise ValueError("block floor must be >= 0")
    return floor


# ---------------------------------------------------------------------------
# Domain service – ResyncService
# ---------------------------------------------------------------------------


class ResyncService:
    """
    Rebuild the offer event history up to one captured head height.

    Ordering guarantees:
    - The head is read exactly once, before any query is issued.
    - Every per-event query is bounded by that same height, so all
      collections of the result describe one snapshot.
    - Queries run concurrently; the first failure cancels the others and
      fails the whole call. A partial result is never returned.
    """

    def __init__(
        self,
        source: ILogSource,
        codec: IEventCodec,
        config: ResyncConfig | None = None,
    ) -> None:
        self._source = source
        self._codec = codec
        self._config = config or ResyncConfig()

    async def resync(self, from_block: BlockFloor | None = None) -> ResyncResult:
        t0 = time.monotonic()

        # 1) Capture the snapshot boundary (single read)
        to_block = await self._source.current_height()
        start = resolve_floor(self._config.default_floor if from_block is None else from_block, to_block)

        result = ResyncResult(synced_to_block=to_block)
        if start > to_block:
            logger.info("Nothing to resync: floor %d is above head %d", start, to_block)
            return result

        # 2) Fan out one bounded query per raw event
        sem = asyncio.Semaphore(self._config.concurrency)
        events = [*SIMPLE_EVENTS.values(), *(row.event for row in CHANGE_MAPPING)]
        tasks = {
            event: asyncio.create_task(self._query(sem, event, start, to_block))
            for event in events
        }
        try:
            await asyncio.gather(*tasks.values())
        except BaseException:
            for task in tasks.values():
                task.cancel()
            raise

        # 3) Assemble per family
        def collected(kind: EventKind) -> list:
            return tasks[SIMPLE_EVENTS[kind]].result()

        result.created = collected(EventKind.CREATED)
        result.completed = collected(EventKind.COMPLETED)
        result.cancelled = collected(EventKind.CANCELLED)
        result.bought = collected(EventKind.BOUGHT)
        result.buyer_rejected = collected(EventKind.BUYER_REJECTED)
        result.changed = [ev for row in CHANGE_MAPPING for ev in tasks[row.event].result()]

        logger.info(
            "Resynced %d events over blocks %d-%d in %.2fs",
            sum(result.counts().values()),
            start,
            to_block,
            time.monotonic() - t0,
        )
        return result

    async def _query(
        self,
        sem: asyncio.Semaphore,
        event: OfferEvent,
        start: int,
        end: int,
    ) -> list[OfferEventModel]:
        async with sem:
            logs = await self._source.get_logs(
                topics=self._codec.topics_filter(event.value),
                from_block=start,
                to_block=end,
                address=self._config.address,
            )
        logger.debug("%s: %d logs in blocks %d-%d", event.value, len(logs), start, end)
        return [normalize_log(self._codec, event, log) for log in logs]
