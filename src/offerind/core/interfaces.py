from __future__ import annotations

from collections.abc import AsyncIterator, Mapping, Sequence
from typing import Any, List, Protocol, runtime_checkable

from offerind.core.models import EventLog

# Topic position filter: None matches anything, a list matches any member.
TopicsFilter = Sequence[str | list[str] | None]


# ---------------------------------------------------------------------------
# ILogSource
# ---------------------------------------------------------------------------

@runtime_checkable
class ILogSource(Protocol):
    """
    Abstract source of EVM logs and contract state.

    Domain expectations:
    - Historical queries are finite and ordered by (block, log index).
    - Live streams tag every log as confirmed (`removed=False`) or retracted
      (`removed=True`).
    - Timeouts, retries and reconnection are the source's concern; failures
      surface as `TransportError`.
    """

    async def get_logs(
        self,
        *,
        topics: TopicsFilter,
        from_block: int,
        to_block: int | None,
        address: str | None = None,
    ) -> List[EventLog]:
        """
        Return all logs matching `topics` over the inclusive block range.

        `to_block=None` means up to the current head.
        """
        ...

    def subscribe(
        self,
        *,
        topics: TopicsFilter,
        from_block: int | None = None,
        address: str | None = None,
    ) -> AsyncIterator[EventLog]:
        """
        Open a live stream of logs matching `topics`.

        With `from_block`, logs from that block onwards are replayed before
        live delivery starts. The stream ends when the consumer stops
        iterating (or its task is cancelled).
        """
        ...

    async def current_height(self) -> int:
        """Return the current chain head height."""
        ...

    async def read_contract_field(self, address: str, name: str) -> Any:
        """Read the current value of a public getter on `address`."""
        ...


# ---------------------------------------------------------------------------
# IEventCodec
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventCodec(Protocol):
    """
    Decoder from raw logs to normalized field mappings.

    Domain expectations:
    - Output keys are normalized field names (e.g. "ships_from"), already
      converted to their normalized types.
    - Any malformed or unexpected input raises `DecodeError`.
    """

    def topic0(self, event: str) -> str:
        """Return the topic identifier of `event`."""
        ...

    def topics_filter(self, event: str, indexed: Mapping[str, Any] | None = None) -> list[str | None]:
        """Build a topics filter for `event`, optionally constraining indexed raw fields."""
        ...

    def decode(self, event: str, log: EventLog) -> dict[str, Any]:
        """Decode one raw log of `event` into normalized fields."""
        ...
