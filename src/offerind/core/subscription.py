"""Cancellable handles over live event streams.

Two variants share the one-operation `EventSubscription` protocol:
- `SimpleEventSubscription` owns the task delivering one stream.
- `CombinedEventSubscription` owns a fixed list of child handles.

`unsubscribe()` never awaits and is idempotent on both.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class EventSubscription(Protocol):
    def unsubscribe(self) -> None:
        """Stop delivery and release the underlying stream(s)."""
        ...

    @property
    def active(self) -> bool:
        ...


class SimpleEventSubscription:
    """Handle over a single delivery task."""

    def __init__(self, task: asyncio.Task[None] | None) -> None:
        self._task = task

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def unsubscribe(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None


class CombinedEventSubscription:
    """Handle over several subscriptions, released together."""

    def __init__(self, subscriptions: Sequence[EventSubscription]) -> None:
        self._subscriptions = list(subscriptions)

    @property
    def active(self) -> bool:
        return any(s.active for s in self._subscriptions)

    def unsubscribe(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        errors: list[Exception] = []
        for subs in subscriptions:
            try:
                subs.unsubscribe()
            except Exception as e:
                errors.append(e)
        # every child is released before the first failure surfaces
        if errors:
            raise errors[0]
