import json
from collections.abc import Sequence

import pytest
import websockets

from offerind.clients.ws import WebsocketLogStream
from offerind.core.errors import TransportError

LOG = {
    "address": "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed",
    "topics": ["0xabc"],
    "data": "0x",
    "blockNumber": "0x5",
    "transactionHash": "0xfeed",
    "logIndex": "0x0",
}


def notification(**params) -> str:
    return json.dumps({"jsonrpc": "2.0", "method": "eth_subscription", "params": {"subscription": "0xsub", **params}})


async def _serve_and_collect(frames: Sequence[str]) -> tuple[list, list[str]]:
    """Node that acks the subscription, pushes `frames`, then closes cleanly."""

    async def handler(ws) -> None:
        request = json.loads(await ws.recv())
        await ws.send(json.dumps({"jsonrpc": "2.0", "id": request["id"], "result": "0xsub"}))
        for frame in frames:
            await ws.send(frame)

    received: list = []
    subscribed: list[str] = []
    async with websockets.serve(handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        stream = WebsocketLogStream(f"ws://127.0.0.1:{port}", timeout_s=5)
        try:
            async for log in stream.stream({"topics": ["0xabc"]}, on_subscribed=subscribed.append):
                received.append(log)
        except TransportError as e:
            received.append(e)
    return received, subscribed


@pytest.mark.asyncio
async def test_clean_close_is_a_transport_error():
    received, subscribed = await _serve_and_collect(
        [
            "[1, 2]",  # not a notification
            notification(result=LOG),
        ]
    )

    assert subscribed == ["0xsub"]
    assert received[0].block_number == 5
    assert isinstance(received[1], TransportError)
    assert "closed by node" in str(received[1])


@pytest.mark.asyncio
async def test_notification_without_log():
    received, _ = await _serve_and_collect([notification()])

    assert len(received) == 1
    assert isinstance(received[0], TransportError)
    assert "without a log" in str(received[0])
