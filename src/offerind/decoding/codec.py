"""ABI-driven implementation of the `IEventCodec` contract."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from offerind.core.errors import DecodeError
from offerind.core.models import EventLog
from offerind.decoding.decoder import decode_event
from offerind.decoding.mappers import map_field
from offerind.decoding.registry import spec_by_name
from offerind.decoding.specs import EventRegistry, EventSpec
from offerind.decoding.utils import encode_topic_value

logger = logging.getLogger(__name__)


class AbiEventCodec:
    """Decode offer logs with an `EventRegistry` and the field mappers.

    `decode` always includes the emitting contract under "offer".
    """

    def __init__(self, registry: EventRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> EventRegistry:
        return self._registry

    def spec(self, event: str) -> EventSpec:
        spec = spec_by_name(self._registry, event)
        if spec is None:
            raise KeyError(f"no spec registered for event {event!r}")
        return spec

    def topic0(self, event: str) -> str:
        return self.spec(event).topic0

    def topics_filter(self, event: str, indexed: Mapping[str, Any] | None = None) -> list[str | None]:
        spec = self.spec(event)
        topics: list[str | None] = [spec.topic0]
        for name, value in (indexed or {}).items():
            tf = spec.topic_field(name)
            if tf is None:
                raise ValueError(f"{event}: {name!r} is not an indexed parameter")
            while len(topics) <= tf.index:
                topics.append(None)
            topics[tf.index] = encode_topic_value(value, tf.type)
        return topics

    def decode(self, event: str, log: EventLog) -> dict[str, Any]:
        spec = self.spec(event)
        if not log.topics or log.topics[0].lower() != spec.topic0:
            raise DecodeError(f"log {log.tx_hash}:{log.log_index} is not a {event} event")

        parsed = decode_event(log=log, registry=self._registry)
        assert parsed is not None  # topic0 checked above

        values = {"offer": map_field("offer", log.address)}
        for name, value in parsed.values.items():
            values[name] = map_field(name, value)
        logger.debug("Decoded %s at block %d: %s", event, log.block_number, values)
        return values
