"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from marathon_bridge.config import BridgeSettings
from marathon_bridge.models import OutwardEvent, OutwardKind
from marathon_bridge.notifier import Notifier


WEBHOOK_URL = "https://hooks.slack.test/services/T000/B000/XXXX"


class FakeEventBusClient:
    """Stands in for MarathonEventBusClient; signals are fired by tests."""

    def __init__(self, host, port, protocol, event_types, handlers):
        self.host = host
        self.port = port
        self.protocol = protocol
        self.event_types = event_types
        self.handlers = handlers
        self.subscribe = AsyncMock()
        self.unsubscribe = AsyncMock()
        self._notifier = Notifier()

    def on(self, kind, handler):
        self._notifier.subscribe(kind, handler)

    async def signal(self, kind, message=None, timestamp=None):
        await self._notifier.emit(kind, message=message, timestamp=timestamp)


class FakeSlackHandler:
    """Stands in for SlackHandler; records render/send calls."""

    def __init__(self):
        self.render_message = Mock(side_effect=lambda event: {"text": event.type})
        self.send_message = Mock()
        self.aclose = AsyncMock()
        self._notifier = Notifier()

    def on(self, kind, handler):
        self._notifier.subscribe(kind, handler)

    async def signal(self, kind, message=None):
        await self._notifier.emit(kind, message=message)


class NotificationRecorder:
    """Collects outward notifications by kind."""

    def __init__(self):
        self.events: list[OutwardEvent] = []

    async def __call__(self, event: OutwardEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: OutwardKind) -> list[OutwardEvent]:
        return [e for e in self.events if e.kind is kind]


@pytest.fixture
def settings():
    """Bridge settings with defaults and no stop delay."""
    return BridgeSettings(slack_webhook_url=WEBHOOK_URL, stop_grace_seconds=0)


@pytest.fixture
def fake_slack():
    return FakeSlackHandler()


@pytest.fixture
def bus_clients():
    """Event bus clients created by the bridge under test."""
    return []


@pytest.fixture
def make_bridge(fake_slack, bus_clients):
    """Build a MarathonSlackBridge wired to fakes."""
    from marathon_bridge.bridge import MarathonSlackBridge

    def factory(**kwargs):
        client = FakeEventBusClient(**kwargs)
        bus_clients.append(client)
        return client

    def _make(settings, terminate=None):
        return MarathonSlackBridge(
            settings,
            slack_handler=fake_slack,
            event_bus_client_factory=factory,
            terminate=terminate,
        )

    return _make


@pytest.fixture
def bridge(make_bridge, settings):
    return make_bridge(settings, terminate=Mock())


@pytest.fixture
def bus_client(bridge, bus_clients):
    """The fake event bus client owned by ``bridge``."""
    return bus_clients[0]


@pytest.fixture
def recorder(bridge):
    """Recorder subscribed to every bridge notification."""
    rec = NotificationRecorder()
    bridge.on_all(rec)
    return rec
