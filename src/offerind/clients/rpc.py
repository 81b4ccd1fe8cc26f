"""Lightweight JSON-RPC client for Ethereum-compatible nodes.

This module provides:
- `RPC`: an async client with sane timeouts/connection limits
- Helper utilities to format block numbers, filters and raw log records

It returns `EventLog` records ready for downstream decoding. Every failure
(HTTP, node-side JSON-RPC error, malformed payload) surfaces as
`TransportError`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from offerind.core.errors import TransportError
from offerind.core.models import EventLog

logger = logging.getLogger(__name__)


def to_hex_block(x: int | str | None) -> str:
    """Return a 0x-prefixed hex block number ("latest" for None)."""
    if x is None:
        return "latest"
    if isinstance(x, str):
        return x
    return hex(x)


def filter_params(
    topics: Sequence[str | list[str] | None],
    address: str | None = None,
) -> dict[str, Any]:
    """Build the `address`/`topics` part of an eth_getLogs / eth_subscribe filter."""
    params: dict[str, Any] = {
        "topics": [
            t.lower() if isinstance(t, str) else ([x.lower() for x in t] if t is not None else None)
            for t in topics
        ]
    }
    if address is not None:
        params["address"] = address.lower()
    return params


def _int(v: Any) -> int:
    if isinstance(v, int):
        return v
    return int(v, 16)


def log_from_rpc(rl: dict[str, Any]) -> EventLog:
    """Map one JSON-RPC log object onto `EventLog`."""
    try:
        topics = tuple((t if isinstance(t, str) else t.decode()).lower() for t in rl.get("topics", []))
        return EventLog(
            address=rl["address"].lower(),
            topics=topics,
            data_hex=str(rl.get("data") or "0x"),
            block_number=_int(rl["blockNumber"]),
            tx_hash=(rl.get("transactionHash") or rl.get("transaction_hash") or "").lower(),
            log_index=_int(rl["logIndex"]),
            removed=bool(rl.get("removed", False)),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise TransportError(f"malformed log object from node: {e}") from e


class RPC:
    """Minimal async RPC client.

    Parameters
    ----------
    url : str
        RPC endpoint URL.
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        max_connections: int = 64,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._ids = 0
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            http2=transport is None,
            transport=transport,
        )

    async def request(self, method: str, params: list[Any]) -> Any:
        """Send one JSON-RPC request and return its `result`."""
        self._ids += 1
        payload = {"jsonrpc": "2.0", "id": self._ids, "method": method, "params": params}
        try:
            r = await self.client.post(self.url, json=payload)
            r.raise_for_status()
            data = r.json()
        except httpx.HTTPError as e:
            logger.error("%s failed: %s", method, e)
            raise TransportError(f"{method} failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"{method} returned invalid JSON") from e
        if "error" in data:
            e = data["error"]
            raise TransportError(f"RPC error: {e.get('code')} {e.get('message')}")
        return data.get("result")

    async def latest_block(self) -> int:
        """Return the latest block number as an int."""
        return _int(await self.request("eth_blockNumber", []))

    async def get_logs(
        self,
        *,
        topics: Sequence[str | list[str] | None],
        from_block: int,
        to_block: int | None,
        address: str | None = None,
    ) -> list[EventLog]:
        """Fetch logs matching `topics` within an inclusive block range."""
        params = {
            **filter_params(topics, address),
            "fromBlock": to_hex_block(from_block),
            "toBlock": to_hex_block(to_block),
        }
        result = await self.request("eth_getLogs", [params])
        return [log_from_rpc(rl) for rl in result or []]

    async def call(self, to: str, data: str, block: int | str = "latest") -> bytes:
        """Execute a read-only eth_call and return the raw return data."""
        result = await self.request("eth_call", [{"to": to, "data": data}, to_hex_block(block)])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise TransportError(f"eth_call returned {result!r}")
        return bytes.fromhex(result[2:])

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
