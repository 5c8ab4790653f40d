"""Marathon event bus client reading the /v2/events SSE stream."""

import asyncio
import json
from typing import Awaitable, Callable, Mapping, Protocol

import httpx

from ..logging_config import get_logger
from ..models import OutwardKind
from ..notifier import NotificationHandler, Notifier

logger = get_logger(__name__)


EventHandler = Callable[[str, dict], Awaitable[None]]


class IMarathonEventBusClient(Protocol):
    """Subscription to the Marathon event bus."""

    def on(self, kind: OutwardKind, handler: NotificationHandler) -> None:
        """Listen for subscribed / unsubscribed / error notifications."""
        ...

    async def subscribe(self) -> None:
        """Open the event stream in the background."""
        ...

    async def unsubscribe(self) -> None:
        """Close the event stream."""
        ...


class MarathonEventBusClient:
    """Streams Marathon events and dispatches them to per-type handlers."""

    def __init__(
        self,
        host: str,
        port: int,
        protocol: str = "http",
        event_types: tuple[str, ...] = (),
        handlers: Mapping[str, EventHandler] | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._url = f"{protocol}://{host}:{port}/v2/events"
        self._event_types = tuple(event_types)
        self._handlers = dict(handlers or {})
        self._client = client
        self._owns_client = client is None
        self._notifier = Notifier()
        self._task: asyncio.Task | None = None
        self._subscribed = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_subscribed(self) -> bool:
        return self._subscribed

    def on(self, kind: OutwardKind, handler: NotificationHandler) -> None:
        """Listen for subscribed / unsubscribed / error notifications."""
        self._notifier.subscribe(kind, handler)

    async def subscribe(self) -> None:
        """Open the event stream in the background."""
        if self._task and not self._task.done():
            return

        if self._client is None:
            self._client = httpx.AsyncClient()

        self._task = asyncio.create_task(self._listen())

    async def unsubscribe(self) -> None:
        """Close the event stream."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _listen(self) -> None:
        """Hold the stream open until it ends or the task is cancelled."""
        params = [("event_type", event_type) for event_type in self._event_types]
        try:
            async with self._client.stream(
                "GET",
                self._url,
                params=params,
                headers={"Accept": "text/event-stream"},
                timeout=httpx.Timeout(10.0, read=None),
            ) as response:
                if response.status_code != 200:
                    await self._emit_error(
                        f"Marathon event bus responded with HTTP {response.status_code}"
                    )
                    return

                self._subscribed = True
                logger.info("Subscribed to %s", self._url)
                await self._notifier.emit(OutwardKind.SUBSCRIBED)

                await self._consume(response)

        except httpx.HTTPError as e:
            await self._emit_error(f"Marathon event bus connection failed: {e}")
        finally:
            if self._subscribed:
                self._subscribed = False
                logger.info("Unsubscribed from %s", self._url)
                await self._notifier.emit(OutwardKind.UNSUBSCRIBED)

    async def _consume(self, response: httpx.Response) -> None:
        """Split the SSE stream into frames and dispatch each one."""
        event_name: str | None = None
        data_lines: list[str] = []

        async for line in response.aiter_lines():
            if not line:
                if data_lines:
                    await self._dispatch(event_name, "\n".join(data_lines))
                event_name = None
                data_lines = []
                continue

            if line.startswith(":"):
                continue  # keep-alive comment

            name, _, value = line.partition(":")
            if value.startswith(" "):
                value = value[1:]

            if name == "event":
                event_name = value
            elif name == "data":
                data_lines.append(value)

        if data_lines:
            await self._dispatch(event_name, "\n".join(data_lines))

    async def _dispatch(self, event_name: str | None, raw_data: str) -> None:
        """Decode one frame and invoke the handler registered for its type."""
        try:
            data = json.loads(raw_data)
        except json.JSONDecodeError as e:
            await self._emit_error(f"Could not decode Marathon event: {e}")
            return

        if not isinstance(data, dict):
            await self._emit_error("Marathon event payload is not an object")
            return

        event_type = event_name or data.get("eventType")
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.debug("Ignoring unhandled event type %s", event_type)
            return

        try:
            await handler(event_type, data)
        except Exception as e:
            logger.exception("Handler for %s failed", event_type)
            await self._emit_error(f"Handler for {event_type} failed: {e}")

    async def _emit_error(self, error: str) -> None:
        logger.error(error)
        await self._notifier.emit(OutwardKind.ERROR, message=error)
