from __future__ import annotations

from .core.config import SyncConfig
from .core.constants import OfferEvent, Property
from .core.errors import DecodeError, OfferindError, TransportError
from .core.events import CHANGE_MAPPING, ChangeMap
from .core.models import (
    BoughtEvent,
    BuyerRejectedEvent,
    CancelledEvent,
    ChangedEvent,
    CompletedEvent,
    CreatedEvent,
    Found,
    Gone,
    NotFound,
    OfferSnapshot,
    OfferStatus,
    ResyncResult,
)
from .core.subscription import CombinedEventSubscription, EventSubscription, SimpleEventSubscription
from .decoding.codec import AbiEventCodec
from .decoding.registries import make_offer_registry
from .orchestration.blockchain import Blockchain, connect

__all__ = [
    "SyncConfig",
    "OfferEvent",
    "Property",
    "DecodeError",
    "OfferindError",
    "TransportError",
    "CHANGE_MAPPING",
    "ChangeMap",
    "BoughtEvent",
    "BuyerRejectedEvent",
    "CancelledEvent",
    "ChangedEvent",
    "CompletedEvent",
    "CreatedEvent",
    "Found",
    "Gone",
    "NotFound",
    "OfferSnapshot",
    "OfferStatus",
    "ResyncResult",
    "CombinedEventSubscription",
    "EventSubscription",
    "SimpleEventSubscription",
    "AbiEventCodec",
    "make_offer_registry",
    "Blockchain",
    "connect",
]
