"""Builders for raw offer logs, encoded with the real event signatures."""

from __future__ import annotations

from typing import Any

from eth_abi import encode
from eth_utils import to_checksum_address

from offerind.core.models import EventLog
from offerind.decoding.registries import make_offer_registry
from offerind.decoding.registry import spec_by_name
from offerind.decoding.utils import encode_topic_value

REGISTRY = make_offer_registry()

OFFER_A = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
OFFER_B = "0xfb6916095ca1df60bb79ce92ce3ea74c37c5d359"
SELLER = "0xdbf03b407c01e7cd3cbea99509d93f8dddc8c6fb"
BUYER = "0xd1220a0cf47c7b9be7a2e6ba89f429762e7b9adb"


def checksum(address: str) -> str:
    return to_checksum_address(address)


def make_log(
    event: str,
    *,
    address: str = OFFER_A,
    block: int = 1,
    log_index: int = 0,
    tx_hash: str | None = None,
    removed: bool = False,
    **fields: Any,
) -> EventLog:
    """Encode one offer event; `fields` are keyed by raw parameter name."""
    spec = spec_by_name(REGISTRY, event)
    assert spec is not None, event
    topics = [spec.topic0] + [encode_topic_value(fields[tf.name], tf.type) for tf in spec.topic_fields]
    ordered = sorted(spec.data_fields, key=lambda df: df.position)
    data = encode(spec.data_types, [fields[df.name] for df in ordered]) if ordered else b""
    return EventLog(
        address=address.lower(),
        topics=tuple(topics),
        data_hex="0x" + data.hex(),
        block_number=block,
        tx_hash=tx_hash or "0x" + format(block * 1000 + log_index, "064x"),
        log_index=log_index,
        removed=removed,
    )


def make_created_log(**overrides: Any) -> EventLog:
    fields: dict[str, Any] = dict(
        seller=SELLER,
        title="Road bike",
        price=1_500_000_000_000_000_000,
        category=b"sports",
        shipsFrom=b"US",
        attachedFiles=b"QmBikePhotos",
    )
    fields.update(overrides)
    return make_log("Created", **fields)
