"""Bridge configuration resolved from the environment."""

import os
from dataclasses import dataclass, field
from typing import Mapping

DEFAULT_EVENT_TYPES: tuple[str, ...] = (
    "deployment_info",
    "deployment_success",
    "deployment_failed",
    "deployment_step_success",
    "deployment_step_failure",
    "group_change_success",
    "group_change_failed",
    "failed_health_check_event",
    "health_status_changed_event",
    "unhealthy_task_kill_event",
    "status_update_event",
)

DEFAULT_TASK_STATUSES: tuple[str, ...] = (
    "TASK_STAGING",
    "TASK_STARTING",
    "TASK_RUNNING",
    "TASK_FINISHED",
    "TASK_FAILED",
    "TASK_KILLING",
    "TASK_KILLED",
    "TASK_LOST",
)

DEFAULT_MARATHON_HOST = "master.mesos"
DEFAULT_MARATHON_PORT = 8080
DEFAULT_MARATHON_PROTOCOL = "http"
DEFAULT_SLACK_CHANNEL = "#marathon"
DEFAULT_SLACK_BOT_NAME = "Marathon Event Notifier"
DEFAULT_SLACK_BOT_IMAGE = "https://mesosphere.github.io/marathon/img/marathon-logo.png"

# Grace delay between unsubscribe and process exit (seconds)
STOP_GRACE_SECONDS = 0.25


def resolve_list_option(
    value: str | None, default: tuple[str, ...] = ()
) -> list[str]:
    """Resolve a list-valued option.

    A comma-containing string is split on commas, any other non-empty value
    becomes a one-element list, and a missing value falls back to ``default``.
    """
    if not value:
        return list(default)

    if "," in value:
        return [item.strip() for item in value.split(",") if item.strip()]

    return [value.strip()]


@dataclass(frozen=True)
class BridgeSettings:
    """Process-wide settings, fixed at startup."""

    slack_webhook_url: str
    marathon_host: str = DEFAULT_MARATHON_HOST
    marathon_port: int = DEFAULT_MARATHON_PORT
    marathon_protocol: str = DEFAULT_MARATHON_PROTOCOL
    event_types: tuple[str, ...] = DEFAULT_EVENT_TYPES
    task_statuses: tuple[str, ...] = DEFAULT_TASK_STATUSES
    app_id_regexes: tuple[str, ...] = field(default_factory=tuple)
    slack_channel: str = DEFAULT_SLACK_CHANNEL
    slack_bot_name: str = DEFAULT_SLACK_BOT_NAME
    slack_bot_image: str = DEFAULT_SLACK_BOT_IMAGE
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    stop_grace_seconds: float = STOP_GRACE_SECONDS

    @property
    def marathon_base_url(self) -> str:
        return f"{self.marathon_protocol}://{self.marathon_host}:{self.marathon_port}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BridgeSettings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        webhook_url = env.get("SLACK_WEBHOOK_URL")
        if not webhook_url:
            raise ValueError("SLACK_WEBHOOK_URL environment variable not set")

        return cls(
            slack_webhook_url=webhook_url,
            marathon_host=env.get("MARATHON_HOST", DEFAULT_MARATHON_HOST),
            marathon_port=int(env.get("MARATHON_PORT", DEFAULT_MARATHON_PORT)),
            marathon_protocol=env.get("MARATHON_PROTOCOL", DEFAULT_MARATHON_PROTOCOL),
            event_types=tuple(
                resolve_list_option(env.get("EVENT_TYPES"), DEFAULT_EVENT_TYPES)
            ),
            task_statuses=tuple(
                resolve_list_option(env.get("TASK_STATUSES"), DEFAULT_TASK_STATUSES)
            ),
            app_id_regexes=tuple(resolve_list_option(env.get("APP_ID_REGEXES"))),
            slack_channel=env.get("SLACK_CHANNEL", DEFAULT_SLACK_CHANNEL),
            slack_bot_name=env.get("SLACK_BOT_NAME", DEFAULT_SLACK_BOT_NAME),
            slack_bot_image=env.get("SLACK_BOT_IMAGE", DEFAULT_SLACK_BOT_IMAGE),
            api_host=env.get("API_HOST", "0.0.0.0"),
            api_port=int(env.get("API_PORT", "3000")),
        )
