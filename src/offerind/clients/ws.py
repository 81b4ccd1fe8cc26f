"""`eth_subscribe("logs")` streams over websockets."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

import websockets
from websockets.exceptions import WebSocketException

from offerind.clients.rpc import log_from_rpc
from offerind.core.errors import TransportError
from offerind.core.models import EventLog

logger = logging.getLogger(__name__)


class WebsocketLogStream:
    """Open one websocket connection per log subscription.

    Parameters
    ----------
    url : str
        Websocket endpoint of the node (ws:// or wss://).
    timeout_s : int
        Timeout for connecting and for the subscription acknowledgement.
    """

    def __init__(self, url: str, *, timeout_s: int = 20) -> None:
        self.url = url
        self.timeout_s = timeout_s

    async def stream(
        self,
        params: dict[str, Any],
        *,
        on_subscribed: Callable[[str], None] | None = None,
    ) -> AsyncIterator[EventLog]:
        """Yield every log pushed for the filter `params`.

        Logs retracted by a reorganization arrive again with `removed=True`.
        """
        try:
            async with websockets.connect(
                self.url,
                open_timeout=self.timeout_s,
                max_size=10 * 1024 * 1024,
            ) as ws:
                await ws.send(
                    json.dumps({"jsonrpc": "2.0", "id": 1, "method": "eth_subscribe", "params": ["logs", params]})
                )
                response = json.loads(await asyncio.wait_for(ws.recv(), timeout=self.timeout_s))
                if not isinstance(response, dict) or "error" in response or "result" not in response:
                    raise TransportError(f"eth_subscribe rejected: {response}")
                sub_id = response["result"]
                logger.debug("Subscription %s open on %s", sub_id, self.url)
                if on_subscribed is not None:
                    on_subscribed(sub_id)

                async for raw in ws:
                    message = json.loads(raw)
                    if not isinstance(message, dict) or message.get("method") != "eth_subscription":
                        continue
                    notification = message.get("params")
                    if not isinstance(notification, dict) or notification.get("subscription") != sub_id:
                        continue
                    if "result" not in notification:
                        raise TransportError(f"subscription {sub_id} pushed a notification without a log")
                    yield log_from_rpc(notification["result"])
                # a live subscription never ends on its own
                raise TransportError("subscription closed by node")
        except (OSError, asyncio.TimeoutError, json.JSONDecodeError, WebSocketException) as e:
            raise TransportError(f"log subscription failed: {e}") from e
