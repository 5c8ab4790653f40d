"""Tests for MarathonSlackBridge."""

from dataclasses import replace
from unittest.mock import Mock

import pytest

from marathon_bridge.config import DEFAULT_EVENT_TYPES
from marathon_bridge.models import BusEvent, HealthStatus, OutwardKind

from conftest import NotificationRecorder


class TestBridgeInit:
    """Tests for bridge construction."""

    def test_registers_one_handler_per_event_type(self, bridge, bus_client):
        """Test that every configured event type gets a handler."""
        assert set(bus_client.handlers) == set(DEFAULT_EVENT_TYPES)
        assert bus_client.event_types == DEFAULT_EVENT_TYPES

    def test_passes_marathon_connection(self, bridge, bus_client):
        """Test that the bus client gets host, port and protocol."""
        assert bus_client.host == "master.mesos"
        assert bus_client.port == 8080
        assert bus_client.protocol == "http"

    def test_custom_event_types(self, make_bridge, settings, bus_clients):
        """Test that only configured types are registered."""
        make_bridge(replace(settings, event_types=("deployment_success",)))
        assert list(bus_clients[0].handlers) == ["deployment_success"]

    def test_invalid_patterns_do_not_abort(self, make_bridge, settings):
        """Test that invalid app id patterns are dropped at startup."""
        bridge = make_bridge(replace(settings, app_id_regexes=("teamA", "(")))
        assert [p.pattern for p in bridge.filter_config.app_id_patterns] == ["teamA"]

    def test_initial_health(self, bridge):
        """Test that health is unavailable before subscribing."""
        assert bridge.get_health_status() is HealthStatus.UNAVAILABLE


class TestBridgeRouting:
    """Tests for event handling and the forwarding gate."""

    @pytest.mark.asyncio
    async def test_matching_status_update_is_delivered(
        self, make_bridge, settings, bus_clients, fake_slack
    ):
        """Test delivery of a matching status update."""
        make_bridge(replace(settings, app_id_regexes=("teamA",)))
        data = {"appId": "/teamA/service1", "taskStatus": "TASK_RUNNING"}

        await bus_clients[0].handlers["status_update_event"]("status_update_event", data)

        fake_slack.render_message.assert_called_once_with(
            BusEvent(type="status_update_event", data=data)
        )
        fake_slack.send_message.assert_called_once_with({"text": "status_update_event"})

    @pytest.mark.asyncio
    async def test_non_matching_app_is_dropped(
        self, make_bridge, settings, bus_clients, fake_slack
    ):
        """Test that a non-matching app is not delivered."""
        make_bridge(replace(settings, app_id_regexes=("teamA",)))
        data = {"appId": "/teamB/service1", "taskStatus": "TASK_RUNNING"}

        await bus_clients[0].handlers["status_update_event"]("status_update_event", data)

        fake_slack.render_message.assert_not_called()
        fake_slack.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_disallowed_status_is_dropped(
        self, make_bridge, settings, bus_clients, fake_slack
    ):
        """Test that a status outside the allow-list is not delivered."""
        make_bridge(replace(settings, task_statuses=("TASK_FAILED",)))
        data = {"appId": "/teamA/service1", "taskStatus": "TASK_RUNNING"}

        await bus_clients[0].handlers["status_update_event"]("status_update_event", data)

        fake_slack.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_other_events_bypass_status_gate(
        self, make_bridge, settings, bus_clients, fake_slack
    ):
        """Test that deployment events ignore an empty status allow-list."""
        make_bridge(replace(settings, task_statuses=()))

        await bus_clients[0].handlers["deployment_success"](
            "deployment_success", {"id": "deploy-1"}
        )

        fake_slack.send_message.assert_called_once()

    @pytest.mark.asyncio
    async def test_raw_event_published_even_when_dropped(
        self, make_bridge, settings, bus_clients, fake_slack
    ):
        """Test that marathon_event is published regardless of the gate."""
        bridge = make_bridge(replace(settings, app_id_regexes=("teamA",)))
        recorder = NotificationRecorder()
        bridge.on(OutwardKind.MARATHON_EVENT, recorder)
        data = {"appId": "/teamB/service1", "taskStatus": "TASK_RUNNING"}

        await bus_clients[0].handlers["status_update_event"]("status_update_event", data)

        assert len(recorder.events) == 1
        event = recorder.events[0]
        assert event.event_type == "status_update_event"
        assert event.data == data
        assert event.timestamp > 0
        fake_slack.send_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_delivery_is_not_awaited(self, bridge, bus_client, fake_slack):
        """Test that the handler hands off to send_message and returns."""
        fake_slack.send_message = Mock(return_value=None)

        await bus_client.handlers["deployment_info"]("deployment_info", {})

        fake_slack.send_message.assert_called_once()


class TestBridgeHealth:
    """Tests for subscription health tracking."""

    @pytest.mark.asyncio
    async def test_subscribed_signal(self, bridge, bus_client, recorder):
        """Test transition to available on subscribe."""
        await bus_client.signal(OutwardKind.SUBSCRIBED)

        assert bridge.get_health_status() == 200
        subscribed = recorder.of_kind(OutwardKind.SUBSCRIBED)
        assert len(subscribed) == 1
        assert subscribed[0].message == "Subscribed to the Marathon Event Bus"

    @pytest.mark.asyncio
    async def test_unsubscribed_signal(self, bridge, bus_client, recorder):
        """Test transition back to unavailable on unsubscribe."""
        await bus_client.signal(OutwardKind.SUBSCRIBED)
        await bus_client.signal(OutwardKind.UNSUBSCRIBED)

        assert bridge.get_health_status() == 503
        unsubscribed = recorder.of_kind(OutwardKind.UNSUBSCRIBED)
        assert unsubscribed[0].message == "Unsubscribed from the Marathon Event Bus"

    @pytest.mark.asyncio
    async def test_resubscribe(self, bridge, bus_client):
        """Test that the flag follows the latest signal."""
        await bus_client.signal(OutwardKind.UNSUBSCRIBED)
        await bus_client.signal(OutwardKind.SUBSCRIBED)
        await bus_client.signal(OutwardKind.UNSUBSCRIBED)
        await bus_client.signal(OutwardKind.SUBSCRIBED)

        assert bridge.get_health_status() is HealthStatus.AVAILABLE


class TestBridgeForwarding:
    """Tests for forwarding collaborator notifications."""

    @pytest.mark.asyncio
    async def test_bus_error_keeps_timestamp(self, bridge, bus_client, recorder):
        """Test that bus errors keep the collaborator's timestamp."""
        await bus_client.signal(OutwardKind.ERROR, message="connection refused", timestamp=1234)

        errors = recorder.of_kind(OutwardKind.ERROR)
        assert len(errors) == 1
        assert errors[0].timestamp == 1234
        assert errors[0].message == "connection refused"

    @pytest.mark.asyncio
    async def test_delivery_error_is_prefixed(self, bridge, fake_slack, recorder):
        """Test that Slack errors are labelled with their source."""
        await fake_slack.signal(OutwardKind.ERROR, message="HTTP 500")

        errors = recorder.of_kind(OutwardKind.ERROR)
        assert errors[0].message == "Error from SlackHandler: HTTP 500"

    @pytest.mark.asyncio
    async def test_sent_and_received_forwarded(self, bridge, fake_slack, recorder):
        """Test that sent_message and received_reply are forwarded."""
        await fake_slack.signal(OutwardKind.SENT_MESSAGE, message={"text": "hi"})
        await fake_slack.signal(OutwardKind.RECEIVED_REPLY, message="ok")

        assert recorder.of_kind(OutwardKind.SENT_MESSAGE)[0].message == {"text": "hi"}
        assert recorder.of_kind(OutwardKind.RECEIVED_REPLY)[0].message == "ok"


class TestBridgeLifecycle:
    """Tests for start() and stop()."""

    @pytest.mark.asyncio
    async def test_start_subscribes(self, bridge, bus_client):
        """Test that start() only issues the subscribe request."""
        await bridge.start()

        bus_client.subscribe.assert_awaited_once()
        assert bridge.get_health_status() is HealthStatus.UNAVAILABLE

    @pytest.mark.asyncio
    async def test_stop_unsubscribes_and_terminates(self, bridge, bus_client, fake_slack):
        """Test that stop() unsubscribes, drains and exits."""
        await bridge.stop()

        bus_client.unsubscribe.assert_awaited_once()
        fake_slack.aclose.assert_awaited_once()
        bridge._terminate.assert_called_once_with(0)

    @pytest.mark.asyncio
    async def test_stop_without_terminator(self, make_bridge, settings, bus_clients):
        """Test that stop() can leave process exit to the host."""
        bridge = make_bridge(settings, terminate=None)

        await bridge.stop()

        bus_clients[0].unsubscribe.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stop_default_exits_process(self, settings, fake_slack):
        """Test that the default terminator exits the process."""
        from marathon_bridge.bridge import MarathonSlackBridge

        from conftest import FakeEventBusClient

        bridge = MarathonSlackBridge(
            settings,
            slack_handler=fake_slack,
            event_bus_client_factory=FakeEventBusClient,
        )

        with pytest.raises(SystemExit) as exc_info:
            await bridge.stop()

        assert exc_info.value.code == 0
