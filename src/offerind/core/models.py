"""Core data models: raw logs, normalized offer events and query results.

This module defines:
- `EventLog`: raw log as delivered by a log source (historical or live).
- Normalized events: one frozen dataclass per event family, all sharing
  the `offer` identity field (the emitting offer contract address).
- `ChangedEvent`: sparse single-field delta produced by every "*Changed" log.
- `OfferStatus` / `OfferSnapshot`: current on-chain state of one offer.
- `ResyncResult` and `CidSearchResult` variants returned by the use cases.

Design notes
------------
- Prices are decimal strings; uint256 values never go through float.
- A `ChangedEvent` carries exactly one `(field, value)` pair, so an instance
  with zero or several populated fields cannot be built.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union


# === Raw log ===


@dataclass(slots=True, frozen=True)
class EventLog:
    """Raw log as fetched from RPC or pushed by a subscription."""

    address: str  # lowercased 0x...
    topics: tuple[str, ...]  # lowercased 0x...
    data_hex: str  # "0x..."
    block_number: int
    tx_hash: str  # lowercased 0x...
    log_index: int
    removed: bool = False  # True when retracted by a chain reorganization

    @property
    def key(self) -> tuple[str, int]:
        """Identity of the log within the chain: (tx_hash, log_index)."""
        return (self.tx_hash, self.log_index)

    @property
    def data(self) -> bytes:
        h = self.data_hex[2:] if self.data_hex.lower().startswith("0x") else self.data_hex
        return bytes.fromhex(h) if h else b""


# === Normalized events ===


class EventKind(str, Enum):
    """Normalized event families."""

    CREATED = "created"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    BOUGHT = "bought"
    BUYER_REJECTED = "buyer_rejected"
    CHANGED = "changed"


@dataclass(slots=True, frozen=True)
class CreatedEvent:
    kind: ClassVar[EventKind] = EventKind.CREATED

    offer: str
    seller: str
    title: str
    price: str
    category: str
    ships_from: str
    attached_files: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, **asdict(self)}


@dataclass(slots=True, frozen=True)
class CompletedEvent:
    kind: ClassVar[EventKind] = EventKind.COMPLETED

    offer: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "offer": self.offer}


@dataclass(slots=True, frozen=True)
class CancelledEvent:
    kind: ClassVar[EventKind] = EventKind.CANCELLED

    offer: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "offer": self.offer}


@dataclass(slots=True, frozen=True)
class BoughtEvent:
    kind: ClassVar[EventKind] = EventKind.BOUGHT

    offer: str
    buyer: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "offer": self.offer, "buyer": self.buyer}


@dataclass(slots=True, frozen=True)
class BuyerRejectedEvent:
    kind: ClassVar[EventKind] = EventKind.BUYER_REJECTED

    offer: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "offer": self.offer}


# Offer attributes a "*Changed" event may carry
CHANGEABLE_FIELDS: tuple[str, ...] = ("title", "price", "category", "ships_from", "attached_files")


@dataclass(slots=True, frozen=True)
class ChangedEvent:
    """Sparse delta: exactly one offer attribute changed.

    Use the named accessors (`title`, `price`, ...) to read the value; they
    return None for every attribute other than the populated one.
    """

    kind: ClassVar[EventKind] = EventKind.CHANGED

    offer: str
    field: str
    value: str

    def __post_init__(self) -> None:
        if self.field not in CHANGEABLE_FIELDS:
            raise ValueError(f"{self.field!r} is not a changeable offer field")

    @classmethod
    def of(cls, offer: str, **changes: str) -> ChangedEvent:
        """Build from a single keyword, e.g. ``ChangedEvent.of(addr, price="10")``."""
        if len(changes) != 1:
            raise ValueError(f"ChangedEvent takes exactly one field, got {sorted(changes)}")
        ((name, value),) = changes.items()
        return cls(offer=offer, field=name, value=value)

    def _get(self, name: str) -> str | None:
        return self.value if self.field == name else None

    @property
    def title(self) -> str | None:
        return self._get("title")

    @property
    def price(self) -> str | None:
        return self._get("price")

    @property
    def category(self) -> str | None:
        return self._get("category")

    @property
    def ships_from(self) -> str | None:
        return self._get("ships_from")

    @property
    def attached_files(self) -> str | None:
        return self._get("attached_files")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "offer": self.offer, self.field: self.value}


OfferEventModel = Union[
    CreatedEvent,
    CompletedEvent,
    CancelledEvent,
    BoughtEvent,
    BuyerRejectedEvent,
    ChangedEvent,
]


# === Offer state ===


class OfferStatus(str, Enum):
    WAITING_BUYER = "0"
    PENDING_CONFIRMATION = "1"
    COMPLETED = "2"
    CANCELLED = "3"


@dataclass(slots=True, frozen=True)
class OfferSnapshot:
    """Current state of one offer, read directly from its contract."""

    status: OfferStatus
    ships_from: str
    seller: str
    buyer: str
    price: str
    title: str
    category: str
    attached_files: str


# === Use case results ===


@dataclass(slots=True)
class ResyncResult:
    """Every event up to (and including) `synced_to_block`, grouped by family."""

    synced_to_block: int
    created: list[CreatedEvent] = field(default_factory=list)
    completed: list[CompletedEvent] = field(default_factory=list)
    cancelled: list[CancelledEvent] = field(default_factory=list)
    bought: list[BoughtEvent] = field(default_factory=list)
    buyer_rejected: list[BuyerRejectedEvent] = field(default_factory=list)
    changed: list[ChangedEvent] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            EventKind.CREATED.value: len(self.created),
            EventKind.COMPLETED.value: len(self.completed),
            EventKind.CANCELLED.value: len(self.cancelled),
            EventKind.BOUGHT.value: len(self.bought),
            EventKind.BUYER_REJECTED.value: len(self.buyer_rejected),
            EventKind.CHANGED.value: len(self.changed),
        }

    def events(self) -> list[OfferEventModel]:
        """All events, family by family."""
        return [
            *self.created,
            *self.completed,
            *self.cancelled,
            *self.bought,
            *self.buyer_rejected,
            *self.changed,
        ]


@dataclass(slots=True, frozen=True)
class NotFound:
    """The CID was never attached to any offer."""


@dataclass(slots=True, frozen=True)
class Gone:
    """The CID was attached in the past but no offer references it anymore."""


@dataclass(slots=True, frozen=True)
class Found:
    """The CID is currently attached; one status per referencing offer state."""

    statuses: frozenset[OfferStatus]


CidSearchResult = Union[NotFound, Gone, Found]
