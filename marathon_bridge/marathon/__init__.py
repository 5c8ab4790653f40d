"""Marathon event bus module."""

from .client import EventHandler, IMarathonEventBusClient, MarathonEventBusClient

__all__ = ["EventHandler", "IMarathonEventBusClient", "MarathonEventBusClient"]
