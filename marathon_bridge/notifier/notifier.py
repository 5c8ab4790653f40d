"""Notifier implementation for outward notifications."""

import asyncio
from typing import Any, Awaitable, Callable, Protocol

from ..logging_config import get_logger
from ..models import OutwardEvent, OutwardKind, now_ms

logger = get_logger(__name__)


NotificationHandler = Callable[[OutwardEvent], Awaitable[None]]


class INotifier(Protocol):
    """Observer registry keyed by notification kind."""

    def subscribe(self, kind: OutwardKind, handler: NotificationHandler) -> None:
        """Subscribe a handler to a notification kind."""
        ...

    async def publish(self, event: OutwardEvent) -> None:
        """Publish an OutwardEvent to the handlers of its kind."""
        ...


class Notifier:
    """In-memory observer registry."""

    def __init__(self) -> None:
        self._subscribers: dict[OutwardKind, list[NotificationHandler]] = {
            kind: [] for kind in OutwardKind
        }

    def subscribe(self, kind: OutwardKind, handler: NotificationHandler) -> None:
        """Subscribe a handler to a notification kind."""
        self._subscribers[OutwardKind(kind)].append(handler)

    def subscribe_all(self, handler: NotificationHandler) -> None:
        """Subscribe a handler to every notification kind."""
        for kind in OutwardKind:
            self.subscribe(kind, handler)

    async def publish(self, event: OutwardEvent) -> None:
        """Publish an OutwardEvent to the handlers of its kind."""
        handlers = self._subscribers.get(event.kind, [])
        if not handlers:
            return

        results = await asyncio.gather(
            *[handler(event) for handler in handlers],
            return_exceptions=True,
        )

        for i, result in enumerate(results):
            if isinstance(result, Exception):
                logger.error(
                    "Error in %s handler %s: %s", event.kind.value, i, result
                )

    async def emit(
        self,
        kind: OutwardKind,
        message: Any = None,
        timestamp: int | None = None,
    ) -> None:
        """Stamp and publish a notification in one call."""
        await self.publish(
            OutwardEvent(
                kind=kind,
                timestamp=now_ms() if timestamp is None else timestamp,
                message=message,
            )
        )
