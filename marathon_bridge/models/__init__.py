"""Core data models for the Marathon Slack bridge."""

from .events import BusEvent, OutwardEvent, OutwardKind, now_ms
from .health import HealthStatus

__all__ = [
    # Events
    "BusEvent",
    "OutwardEvent",
    "OutwardKind",
    "now_ms",
    # Health
    "HealthStatus",
]
