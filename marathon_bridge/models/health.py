"""Health-related data models."""

from enum import IntEnum


class HealthStatus(IntEnum):
    """Liveness status codes exposed to health probes."""

    AVAILABLE = 200
    UNAVAILABLE = 503
