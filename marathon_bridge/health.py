"""Subscription health flag read by liveness probes."""

from .models import HealthStatus


class HealthState:
    """Tracks whether the bridge is subscribed to the event bus."""

    def __init__(self) -> None:
        self._status = HealthStatus.UNAVAILABLE

    @property
    def status(self) -> HealthStatus:
        return self._status

    @property
    def is_available(self) -> bool:
        return self._status is HealthStatus.AVAILABLE

    def mark_subscribed(self) -> None:
        self._status = HealthStatus.AVAILABLE

    def mark_unsubscribed(self) -> None:
        self._status = HealthStatus.UNAVAILABLE
