"""Core data models, configuration, and event vocabulary.

This package provides:
- Data models (EventLog, normalized offer events, ResyncResult, OfferSnapshot)
- Configuration (SyncConfig)
- Error taxonomy (DecodeError, TransportError)
- Event and property names of the offer contract
"""

from offerind.core.config import SyncConfig
from offerind.core.constants import OfferEvent, Property
from offerind.core.errors import DecodeError, OfferindError, TransportError
from offerind.core.models import (
    BoughtEvent,
    BuyerRejectedEvent,
    CancelledEvent,
    ChangedEvent,
    CidSearchResult,
    CompletedEvent,
    CreatedEvent,
    EventKind,
    EventLog,
    Found,
    Gone,
    NotFound,
    OfferSnapshot,
    OfferStatus,
    ResyncResult,
)

__all__ = [
    "SyncConfig",
    "OfferEvent",
    "Property",
    "DecodeError",
    "OfferindError",
    "TransportError",
    "BoughtEvent",
    "BuyerRejectedEvent",
    "CancelledEvent",
    "ChangedEvent",
    "CidSearchResult",
    "CompletedEvent",
    "CreatedEvent",
    "EventKind",
    "EventLog",
    "Found",
    "Gone",
    "NotFound",
    "OfferSnapshot",
    "OfferStatus",
    "ResyncResult",
]
