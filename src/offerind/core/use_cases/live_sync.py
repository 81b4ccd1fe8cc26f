from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from offerind.core.constants import OfferEvent
from offerind.core.errors import DecodeError, TransportError
from offerind.core.events import CHANGE_MAPPING, SIMPLE_EVENTS, normalize_log
from offerind.core.interfaces import IEventCodec, ILogSource
from offerind.core.models import (
    BoughtEvent,
    BuyerRejectedEvent,
    CancelledEvent,
    ChangedEvent,
    CompletedEvent,
    CreatedEvent,
    EventKind,
    EventLog,
)
from offerind.core.subscription import (
    CombinedEventSubscription,
    EventSubscription,
    SimpleEventSubscription,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Callback types
# ---------------------------------------------------------------------------

# Callbacks may be plain functions or coroutine functions.
ForwardCallback = Callable[[Any, int], Awaitable[None] | None]
RevertCallback = Callable[[Any], Awaitable[None] | None]
ErrorCallback = Callable[[str, str], Awaitable[None] | None]


def nop_error(_name: str, _message: str) -> None:
    pass


async def _call(callback: Callable[..., Any], *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


async def _report(on_error: ErrorCallback, event: OfferEvent, error: Exception) -> None:
    try:
        await _call(on_error, type(error).__name__, str(error))
    except Exception:
        logger.exception("%s error callback failed", event.value)


# ---------------------------------------------------------------------------
# Domain service – LiveSync
# ---------------------------------------------------------------------------


class LiveSync:
    """
    Follow offer events as they are mined.

    Every subscription runs one delivery task per raw event stream:
    - confirmed logs → `callback(event, block_number)`
    - retracted logs (chain reorganization) → `on_revert(event)`
    - undecodable logs → `on_error("DecodeError", message)`; delivery goes on
    - stream failure or end → `on_error(<error class>, message)`; delivery stops

    Subscriptions must be opened from a running event loop.
    """

    def __init__(
        self,
        source: ILogSource,
        codec: IEventCodec,
        *,
        address: str | None = None,
    ) -> None:
        self._source = source
        self._codec = codec
        self._address = address

    def subscribe(
        self,
        event: OfferEvent,
        callback: ForwardCallback,
        on_revert: RevertCallback,
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> SimpleEventSubscription:
        """Open one live stream for a raw offer event."""
        stream = self._source.subscribe(
            topics=self._codec.topics_filter(event.value),
            from_block=from_block,
            address=self._address,
        )
        task = asyncio.create_task(
            self._deliver(event, stream, callback, on_revert, on_error),
            name=f"offerind-live-{event.value}",
        )
        logger.info("Subscribed to %s (from block %s)", event.value, from_block or "latest")
        return SimpleEventSubscription(task)

    async def _deliver(
        self,
        event: OfferEvent,
        stream: AsyncIterator[EventLog],
        callback: ForwardCallback,
        on_revert: RevertCallback,
        on_error: ErrorCallback,
    ) -> None:
        try:
            async for log in stream:
                await self._dispatch(event, log, callback, on_revert, on_error)
            raise TransportError(f"{event.value} log stream ended")
        except TransportError as e:
            logger.error("%s stream failed: %s", event.value, e)
            await _report(on_error, event, e)
        except Exception as e:
            logger.exception("%s stream failed", event.value)
            await _report(on_error, event, e)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
            logger.debug("%s delivery stopped", event.value)

    async def _dispatch(
        self,
        event: OfferEvent,
        log: EventLog,
        callback: ForwardCallback,
        on_revert: RevertCallback,
        on_error: ErrorCallback,
    ) -> None:
        try:
            normalized = normalize_log(self._codec, event, log)
        except DecodeError as e:
            logger.warning("Skipping undecodable %s log %s:%d: %s", event.value, log.tx_hash, log.log_index, e)
            await _report(on_error, event, e)
            return

        try:
            if log.removed:
                await _call(on_revert, normalized)
            else:
                await _call(callback, normalized, log.block_number)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("%s callback failed for log %s:%d", event.value, log.tx_hash, log.log_index)
            await _report(on_error, event, e)

    # -- one operation per event family ------------------------------------

    def on_created(
        self,
        callback: Callable[[CreatedEvent, int], Awaitable[None] | None],
        on_revert: Callable[[CreatedEvent], Awaitable[None] | None],
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> EventSubscription:
        return self.subscribe(OfferEvent.CREATED, callback, on_revert, on_error, from_block)

    def on_completed(
        self,
        callback: Callable[[CompletedEvent, int], Awaitable[None] | None],
        on_revert: Callable[[CompletedEvent], Awaitable[None] | None],
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> EventSubscription:
        return self.subscribe(OfferEvent.COMPLETED, callback, on_revert, on_error, from_block)

    def on_cancelled(
        self,
        callback: Callable[[CancelledEvent, int], Awaitable[None] | None],
        on_revert: Callable[[CancelledEvent], Awaitable[None] | None],
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> EventSubscription:
        return self.subscribe(OfferEvent.CANCELLED, callback, on_revert, on_error, from_block)

    def on_bought(
        self,
        callback: Callable[[BoughtEvent, int], Awaitable[None] | None],
        on_revert: Callable[[BoughtEvent], Awaitable[None] | None],
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> EventSubscription:
        return self.subscribe(OfferEvent.BOUGHT, callback, on_revert, on_error, from_block)

    def on_buyer_rejected(
        self,
        callback: Callable[[BuyerRejectedEvent, int], Awaitable[None] | None],
        on_revert: Callable[[BuyerRejectedEvent], Awaitable[None] | None],
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> EventSubscription:
        return self.subscribe(OfferEvent.BUYER_REJECTED, callback, on_revert, on_error, from_block)

    def on_changed(
        self,
        callback: Callable[[ChangedEvent, int], Awaitable[None] | None],
        on_revert: Callable[[ChangedEvent], Awaitable[None] | None],
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> EventSubscription:
        """One stream per "*Changed" event, released through a single handle."""
        subscriptions = [
            self.subscribe(row.event, callback, on_revert, on_error, from_block)
            for row in CHANGE_MAPPING
        ]
        return CombinedEventSubscription(subscriptions)

    def on_family(
        self,
        kind: EventKind,
        callback: ForwardCallback,
        on_revert: RevertCallback,
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> EventSubscription:
        """Subscribe to a normalized family by tag."""
        if kind is EventKind.CHANGED:
            return self.on_changed(callback, on_revert, on_error, from_block)
        return self.subscribe(SIMPLE_EVENTS[kind], callback, on_revert, on_error, from_block)
