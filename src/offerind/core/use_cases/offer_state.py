from __future__ import annotations

import asyncio
import logging

from offerind.core.constants import GENESIS_BLOCK, OfferEvent, Property
from offerind.core.errors import DecodeError
from offerind.core.events import CHANGE_BY_EVENT
from offerind.core.interfaces import IEventCodec, ILogSource
from offerind.core.models import (
    CidSearchResult,
    Found,
    Gone,
    NotFound,
    OfferSnapshot,
    OfferStatus,
)
from offerind.decoding.mappers import map_field

logger = logging.getLogger(__name__)

# OfferSnapshot attribute → contract getter
SNAPSHOT_PROPERTIES: dict[str, Property] = {
    "status": Property.CURRENT_STATUS,
    "ships_from": Property.SHIPS_FROM,
    "seller": Property.SELLER,
    "buyer": Property.BUYER,
    "price": Property.PRICE,
    "title": Property.TITLE,
    "category": Property.CATEGORY,
    "attached_files": Property.ATTACHED_FILES,
}


class OfferStateService:
    """
    Point queries combining log history with current contract state.

    Logs only prove that a value was set at some point; anything about the
    present is re-read from the offer contract itself.
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

    async def _read(self, offer: str, attr: str):
        value = await self._source.read_contract_field(offer, SNAPSHOT_PROPERTIES[attr].value)
        return map_field(attr, value)

    async def read_offer(self, offer: str) -> OfferSnapshot:
        """Dump the current state of one offer contract."""
        attrs = list(SNAPSHOT_PROPERTIES)
        values = await asyncio.gather(*(self._read(offer, attr) for attr in attrs))
        return OfferSnapshot(**dict(zip(attrs, values)))

    async def _status_if_attached(self, offer: str, cid: str) -> OfferStatus | None:
        attached, status = await asyncio.gather(
            self._read(offer, "attached_files"),
            self._read(offer, "status"),
        )
        if attached != cid:
            logger.debug("Offer %s no longer references %s (now %r)", offer, cid, attached)
            return None
        return status

    async def find_cid(self, cid: str) -> CidSearchResult:
        """
        Locate offers whose attached files are `cid`.

        Returns
        -------
        NotFound
            No offer ever attached `cid`.
        Gone
            Some offer attached `cid` in the past, none does now.
        Found
            The set of statuses of offers currently attaching `cid`. Several
            offers may legitimately share one CID, so the set can hold
            more than one status.
        """
        row = CHANGE_BY_EVENT[OfferEvent.ATTACHED_FILES_CHANGED]
        # "0x..." input is the raw field value; compare in its text form
        try:
            cid = map_field(row.obj_field, cid)
            topics = self._codec.topics_filter(row.event.value, {row.eth_field: cid})
        except (DecodeError, ValueError) as e:
            # does not fit the indexed field, so no offer can hold it
            logger.debug("CID %r cannot be attached: %s", cid, e)
            return NotFound()

        logs = await self._source.get_logs(
            topics=topics,
            from_block=GENESIS_BLOCK,
            to_block=None,
            address=self._address,
        )
        if not logs:
            return NotFound()

        offers = list(dict.fromkeys(map_field("offer", log.address) for log in logs))
        logger.info("CID %s was attached by %d offer(s)", cid, len(offers))

        statuses = await asyncio.gather(*(self._status_if_attached(offer, cid) for offer in offers))
        current = frozenset(s for s in statuses if s is not None)
        if not current:
            return Gone()
        return Found(statuses=current)
