"""Offer sync facade: the interface exposed to indexers and the CLI.

This module provides two layers:

1) `Blockchain`:
   - Groups the use cases (LiveSync, ResyncService, OfferStateService)
     over one log source and one codec.
   - Depends ONLY on the ILogSource / IEventCodec interfaces.

2) `connect(config)` (convenience wrapper):
   - Wires concrete implementations (RPC, WebsocketLogStream, EthLogSource,
     AbiEventCodec) for typical CLI / script usage.
"""

from __future__ import annotations

import logging

from offerind.clients.rpc import RPC
from offerind.clients.source import EthLogSource
from offerind.clients.ws import WebsocketLogStream
from offerind.core.config import SyncConfig
from offerind.core.interfaces import IEventCodec, ILogSource
from offerind.core.models import CidSearchResult, EventKind, OfferSnapshot, ResyncResult
from offerind.core.subscription import CombinedEventSubscription, EventSubscription
from offerind.core.use_cases.live_sync import (
    ErrorCallback,
    ForwardCallback,
    LiveSync,
    RevertCallback,
    nop_error,
)
from offerind.core.use_cases.offer_state import OfferStateService
from offerind.core.use_cases.resync import BlockFloor, ResyncConfig, ResyncService
from offerind.decoding.codec import AbiEventCodec
from offerind.decoding.registries import make_offer_registry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_RPC_CONNECTIONS = 32


class Blockchain:
    """Live following, historical resync and point queries for offers.

    Callers that combine `resync()` with subscriptions should subscribe from
    `synced_to_block` (or the block after it). Events from the boundary
    block may then be delivered twice and must be applied idempotently.
    """

    def __init__(
        self,
        source: ILogSource,
        codec: IEventCodec,
        *,
        address: str | None = None,
        default_floor: BlockFloor = "genesis",
        concurrency: int = 16,
    ) -> None:
        self._source = source
        self.live = LiveSync(source, codec, address=address)
        self.resyncer = ResyncService(
            source,
            codec,
            ResyncConfig(address=address, default_floor=default_floor, concurrency=concurrency),
        )
        self.offers = OfferStateService(source, codec, address=address)

        self.on_created = self.live.on_created
        self.on_completed = self.live.on_completed
        self.on_cancelled = self.live.on_cancelled
        self.on_bought = self.live.on_bought
        self.on_buyer_rejected = self.live.on_buyer_rejected
        self.on_changed = self.live.on_changed

    async def resync(self, from_block: BlockFloor | None = None) -> ResyncResult:
        return await self.resyncer.resync(from_block)

    async def find_cid(self, cid: str) -> CidSearchResult:
        return await self.offers.find_cid(cid)

    async def read_offer(self, offer: str) -> OfferSnapshot:
        return await self.offers.read_offer(offer)

    def follow(
        self,
        callback: ForwardCallback,
        on_revert: RevertCallback,
        on_error: ErrorCallback = nop_error,
        from_block: int | None = None,
    ) -> EventSubscription:
        """Subscribe to every event family behind one handle."""
        return CombinedEventSubscription(
            [self.live.on_family(kind, callback, on_revert, on_error, from_block) for kind in EventKind]
        )

    async def aclose(self) -> None:
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> Blockchain:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def connect(config: SyncConfig) -> Blockchain:
    """Build a `Blockchain` over the node described by `config`."""
    rpc = RPC(
        config.rpc_url,
        timeout_s=config.timeout_s,
        max_connections=max(MIN_RPC_CONNECTIONS, config.max_connections),
    )
    ws = WebsocketLogStream(config.ws_url, timeout_s=config.timeout_s) if config.ws_url else None
    registry = make_offer_registry(config.abi_path)
    logger.debug("Loaded %d offer event specs", len(registry))
    return Blockchain(
        EthLogSource(rpc, ws),
        AbiEventCodec(registry),
        address=config.registry_address,
        default_floor=config.default_floor,
        concurrency=config.concurrency,
    )
