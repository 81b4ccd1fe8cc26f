import asyncio
from collections.abc import Callable

import pytest

from offerind.decoding.codec import AbiEventCodec

from tests.factories import REGISTRY
from tests.mocks import FakeLogSource


@pytest.fixture
def codec() -> AbiEventCodec:
    return AbiEventCodec(REGISTRY)


@pytest.fixture
def source() -> FakeLogSource:
    return FakeLogSource(head=100)


async def eventually(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the loop until `predicate()` holds."""

    async def wait() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(wait(), timeout)
