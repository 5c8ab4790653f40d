"""Slack incoming-webhook delivery for Marathon events."""

import asyncio
import json
from typing import Protocol

import httpx

from ..logging_config import get_logger
from ..models import BusEvent, OutwardKind, now_ms
from ..notifier import NotificationHandler, Notifier

logger = get_logger(__name__)


COLOR_GOOD = "good"
COLOR_WARNING = "warning"
COLOR_DANGER = "danger"

GOOD_STATUSES = {"TASK_RUNNING", "TASK_FINISHED"}
BAD_STATUSES = {"TASK_FAILED", "TASK_KILLED", "TASK_LOST", "TASK_ERROR", "TASK_DROPPED"}

EVENT_TITLES = {
    "deployment_info": "Deployment started",
    "deployment_success": "Deployment succeeded",
    "deployment_failed": "Deployment failed",
    "deployment_step_success": "Deployment step succeeded",
    "deployment_step_failure": "Deployment step failed",
    "group_change_success": "Group change succeeded",
    "group_change_failed": "Group change failed",
    "failed_health_check_event": "Health check failed",
    "health_status_changed_event": "Health status changed",
    "unhealthy_task_kill_event": "Unhealthy task killed",
    "status_update_event": "Task status update",
}

MAX_TEXT_LENGTH = 500


class ISlackHandler(Protocol):
    """Rendering and delivery of chat messages."""

    def on(self, kind: OutwardKind, handler: NotificationHandler) -> None:
        """Listen for sent_message / received_reply / error notifications."""
        ...

    def render_message(self, event: BusEvent) -> dict:
        """Build a webhook payload for an event."""
        ...

    def send_message(self, message: dict) -> asyncio.Task:
        """Post a payload without waiting for delivery."""
        ...

    async def aclose(self) -> None:
        """Wait for in-flight sends and release the HTTP client."""
        ...


def _affected_apps(data: dict) -> list[str]:
    apps: list[str] = []
    current_step = data.get("currentStep") or {}
    steps = [current_step] if current_step else (data.get("plan") or {}).get("steps") or []
    for step in steps:
        for action in step.get("actions") or []:
            app = action.get("app")
            if app and app not in apps:
                apps.append(app)
    return apps


def _event_color(event: BusEvent) -> str:
    data = event.data
    if event.is_status_update:
        status = data.get("taskStatus")
        if status in GOOD_STATUSES:
            return COLOR_GOOD
        if status in BAD_STATUSES:
            return COLOR_DANGER
        return COLOR_WARNING

    if event.type == "health_status_changed_event":
        return COLOR_GOOD if data.get("alive") else COLOR_DANGER

    if event.type.endswith("_success"):
        return COLOR_GOOD
    if event.type.endswith(("_failed", "_failure")) or event.type in (
        "failed_health_check_event",
        "unhealthy_task_kill_event",
    ):
        return COLOR_DANGER
    return COLOR_WARNING


def _event_fields(event: BusEvent) -> list[dict]:
    data = event.data
    fields: list[dict] = []

    def add(title: str, value, short: bool = True) -> None:
        if value is None or value == "":
            return
        fields.append({"title": title, "value": str(value), "short": short})

    add("App", data.get("appId"))
    add("Group", data.get("groupId"))

    if event.is_status_update:
        add("Status", data.get("taskStatus"))
        add("Host", data.get("host"))
        add("Task", data.get("taskId"), short=False)
    elif event.type == "health_status_changed_event":
        add("Alive", "yes" if data.get("alive") else "no")
        add("Instance", data.get("instanceId") or data.get("taskId"), short=False)
    elif event.type in ("failed_health_check_event", "unhealthy_task_kill_event"):
        add("Host", data.get("host"))
        add("Task", data.get("taskId") or data.get("instanceId"), short=False)

    if event.type.startswith("deployment_"):
        plan = data.get("plan") or {}
        add("Deployment", data.get("id") or plan.get("id"), short=False)
        apps = _affected_apps(data)
        if apps:
            add("Apps", ", ".join(apps), short=False)

    add("Version", data.get("version"))
    return fields


def _event_text(event: BusEvent) -> str:
    data = event.data
    text = data.get("message") or data.get("reason") or ""
    if not text and event.type not in EVENT_TITLES:
        text = json.dumps(data, default=str)
    return text[:MAX_TEXT_LENGTH]


class SlackHandler:
    """Posts rendered Marathon events to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        channel: str | None = None,
        bot_name: str | None = None,
        bot_image: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._webhook_url = webhook_url
        self._channel = channel
        self._bot_name = bot_name
        self._bot_image = bot_image
        self._client = client
        self._owns_client = client is None
        self._notifier = Notifier()
        self._pending: set[asyncio.Task] = set()

    def on(self, kind: OutwardKind, handler: NotificationHandler) -> None:
        """Listen for sent_message / received_reply / error notifications."""
        self._notifier.subscribe(kind, handler)

    def render_message(self, event: BusEvent) -> dict:
        """Build a webhook payload for an event."""
        title = EVENT_TITLES.get(event.type, event.type.replace("_", " ").capitalize())
        if event.is_status_update and event.data.get("taskStatus"):
            title = f"Task status update: {event.data['taskStatus']}"

        attachment = {
            "fallback": f"{title}: {event.data.get('appId') or ', '.join(_affected_apps(event.data))}",
            "color": _event_color(event),
            "title": title,
            "text": _event_text(event),
            "fields": _event_fields(event),
            "ts": now_ms() // 1000,
        }

        message: dict = {"attachments": [attachment]}
        if self._channel:
            message["channel"] = self._channel
        if self._bot_name:
            message["username"] = self._bot_name
        if self._bot_image:
            message["icon_url"] = self._bot_image
        return message

    def send_message(self, message: dict) -> asyncio.Task:
        """Post a payload without waiting for delivery."""
        if self._client is None:
            self._client = httpx.AsyncClient()

        task = asyncio.create_task(self._post(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def aclose(self) -> None:
        """Wait for in-flight sends and release the HTTP client."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _post(self, message: dict) -> None:
        try:
            response = await self._client.post(
                self._webhook_url,
                json=message,
                timeout=10.0,
            )
        except httpx.HTTPError as e:
            logger.error("Slack webhook request failed: %s", e)
            await self._notifier.emit(OutwardKind.ERROR, message=str(e))
            return

        if not response.is_success:
            error = f"Slack webhook responded with HTTP {response.status_code}: {response.text}"
            logger.error(error)
            await self._notifier.emit(OutwardKind.ERROR, message=error)
            return

        await self._notifier.emit(OutwardKind.SENT_MESSAGE, message=message)
        await self._notifier.emit(OutwardKind.RECEIVED_REPLY, message=response.text)
