"""Application bootstrap and lifecycle management."""

import logging
from typing import Callable, Protocol

from .bridge import MarathonSlackBridge
from .config import BridgeSettings
from .logging_config import get_logger
from .models import HealthStatus, OutwardEvent, OutwardKind

logger = get_logger(__name__)


NOTIFICATION_LOG_LEVELS = {
    OutwardKind.ERROR: logging.ERROR,
    OutwardKind.MARATHON_EVENT: logging.DEBUG,
}


class IApplication(Protocol):
    """Bootstrap and lifecycle."""

    async def start(self) -> None:
        """Create the bridge and subscribe to Marathon."""
        ...

    async def stop(self) -> None:
        """Unsubscribe and shut down."""
        ...

    @property
    def settings(self) -> BridgeSettings:
        ...

    def get_health_status(self) -> HealthStatus:
        ...


class Application:
    """Main application bootstrap."""

    def __init__(
        self,
        settings: BridgeSettings | None = None,
        terminate: Callable[[int], None] | None = None,
    ):
        self._settings = settings
        self._terminate = terminate
        self._bridge: MarathonSlackBridge | None = None

    async def start(self) -> None:
        """Create the bridge and subscribe to Marathon."""
        logger.info("Starting application")

        if self._settings is None:
            self._settings = BridgeSettings.from_env()

        self._bridge = MarathonSlackBridge(self._settings, terminate=self._terminate)
        self._bridge.on_all(self._log_notification)
        logger.info(
            "Bridge configured",
            extra={
                "context": {
                    "event_types": list(self._settings.event_types),
                    "task_statuses": list(self._settings.task_statuses),
                    "app_id_regexes": list(self._settings.app_id_regexes),
                }
            },
        )

        await self._bridge.start()

    async def stop(self) -> None:
        """Unsubscribe and shut down."""
        if self._bridge:
            await self._bridge.stop()
            logger.info("Bridge stopped")

    def get_health_status(self) -> HealthStatus:
        """Health of the bus subscription (unavailable before start)."""
        if not self._bridge:
            return HealthStatus.UNAVAILABLE
        return self._bridge.get_health_status()

    @property
    def settings(self) -> BridgeSettings:
        """Get resolved settings."""
        if not self._settings:
            raise RuntimeError("Application not started")
        return self._settings

    @property
    def bridge(self) -> MarathonSlackBridge:
        """Get bridge instance."""
        if not self._bridge:
            raise RuntimeError("Application not started")
        return self._bridge

    async def _log_notification(self, event: OutwardEvent) -> None:
        level = NOTIFICATION_LOG_LEVELS.get(event.kind, logging.INFO)
        logger.log(
            level,
            event.kind.value,
            extra={"context": event.to_dict()},
        )
