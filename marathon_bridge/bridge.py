"""Bridge between the Marathon event bus and Slack."""

import asyncio
import sys
from typing import Callable, Mapping, Protocol

from .config import BridgeSettings
from .filters import FilterConfig, compile_app_id_patterns, passes_gate
from .health import HealthState
from .logging_config import get_logger
from .marathon import EventHandler, IMarathonEventBusClient, MarathonEventBusClient
from .models import BusEvent, HealthStatus, OutwardEvent, OutwardKind, now_ms
from .notifier import NotificationHandler, Notifier
from .slack import ISlackHandler, SlackHandler

logger = get_logger(__name__)


EventBusClientFactory = Callable[..., IMarathonEventBusClient]


class IBridge(Protocol):
    """Lifecycle and observability surface of the bridge."""

    def on(self, kind: OutwardKind, handler: NotificationHandler) -> None:
        """Subscribe to outward notifications of one kind."""
        ...

    async def start(self) -> None:
        """Subscribe to the Marathon event bus."""
        ...

    async def stop(self) -> None:
        """Unsubscribe, drain and terminate."""
        ...

    def get_health_status(self) -> HealthStatus:
        """Current subscription health code."""
        ...


class MarathonSlackBridge:
    """Forwards filtered Marathon events to Slack."""

    def __init__(
        self,
        settings: BridgeSettings,
        slack_handler: ISlackHandler | None = None,
        event_bus_client_factory: EventBusClientFactory = MarathonEventBusClient,
        terminate: Callable[[int], None] | None = sys.exit,
    ):
        self._settings = settings
        self._terminate = terminate
        self._health = HealthState()
        self._notifier = Notifier()

        self._filter_config = FilterConfig(
            app_id_patterns=compile_app_id_patterns(settings.app_id_regexes),
            task_statuses=tuple(settings.task_statuses),
        )

        self._slack = slack_handler or SlackHandler(
            webhook_url=settings.slack_webhook_url,
            channel=settings.slack_channel,
            bot_name=settings.slack_bot_name,
            bot_image=settings.slack_bot_image,
        )
        self._slack.on(OutwardKind.ERROR, self._on_delivery_error)
        self._slack.on(OutwardKind.SENT_MESSAGE, self._on_sent_message)
        self._slack.on(OutwardKind.RECEIVED_REPLY, self._on_received_reply)

        self._mebc = event_bus_client_factory(
            host=settings.marathon_host,
            port=settings.marathon_port,
            protocol=settings.marathon_protocol,
            event_types=tuple(settings.event_types),
            handlers=self._build_handlers(),
        )
        self._mebc.on(OutwardKind.SUBSCRIBED, self._on_subscribed)
        self._mebc.on(OutwardKind.UNSUBSCRIBED, self._on_unsubscribed)
        self._mebc.on(OutwardKind.ERROR, self._on_bus_error)

    @property
    def event_types(self) -> tuple[str, ...]:
        return tuple(self._settings.event_types)

    @property
    def filter_config(self) -> FilterConfig:
        return self._filter_config

    def on(self, kind: OutwardKind, handler: NotificationHandler) -> None:
        """Subscribe to outward notifications of one kind."""
        self._notifier.subscribe(kind, handler)

    def on_all(self, handler: NotificationHandler) -> None:
        """Subscribe to every outward notification."""
        self._notifier.subscribe_all(handler)

    async def start(self) -> None:
        """Subscribe to the Marathon event bus."""
        logger.info("Subscribing to Marathon at %s", self._settings.marathon_base_url)
        await self._mebc.subscribe()

    async def stop(self) -> None:
        """Unsubscribe, drain and terminate."""
        logger.info("Stopping bridge")
        await self._mebc.unsubscribe()
        await asyncio.sleep(self._settings.stop_grace_seconds)
        await self._slack.aclose()
        if self._terminate is not None:
            self._terminate(0)

    def get_health_status(self) -> HealthStatus:
        """Current subscription health code."""
        return self._health.status

    async def handle_event(self, event_type: str, data: dict) -> None:
        """Publish, filter and forward one Marathon event."""
        await self._notifier.publish(
            OutwardEvent(
                kind=OutwardKind.MARATHON_EVENT,
                timestamp=now_ms(),
                event_type=event_type,
                data=data,
            )
        )

        if not passes_gate(self._filter_config, event_type, data):
            logger.debug("Dropped %s event", event_type)
            return

        message = self._slack.render_message(BusEvent(type=event_type, data=data))
        self._slack.send_message(message)

    def _build_handlers(self) -> Mapping[str, EventHandler]:
        return {event_type: self.handle_event for event_type in self._settings.event_types}

    # Event bus notifications

    async def _on_subscribed(self, event: OutwardEvent) -> None:
        self._health.mark_subscribed()
        await self._notifier.emit(
            OutwardKind.SUBSCRIBED, message="Subscribed to the Marathon Event Bus"
        )

    async def _on_unsubscribed(self, event: OutwardEvent) -> None:
        self._health.mark_unsubscribed()
        await self._notifier.emit(
            OutwardKind.UNSUBSCRIBED, message="Unsubscribed from the Marathon Event Bus"
        )

    async def _on_bus_error(self, event: OutwardEvent) -> None:
        await self._notifier.emit(
            OutwardKind.ERROR, message=event.message, timestamp=event.timestamp
        )

    # Slack notifications

    async def _on_delivery_error(self, event: OutwardEvent) -> None:
        await self._notifier.emit(
            OutwardKind.ERROR, message=f"Error from SlackHandler: {event.message}"
        )

    async def _on_sent_message(self, event: OutwardEvent) -> None:
        await self._notifier.emit(OutwardKind.SENT_MESSAGE, message=event.message)

    async def _on_received_reply(self, event: OutwardEvent) -> None:
        await self._notifier.emit(OutwardKind.RECEIVED_REPLY, message=event.message)
