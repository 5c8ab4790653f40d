"""Marathon Slack bridge."""

from .app import Application, IApplication
from .bridge import IBridge, MarathonSlackBridge
from .config import (
    DEFAULT_EVENT_TYPES,
    DEFAULT_TASK_STATUSES,
    BridgeSettings,
    resolve_list_option,
)
from .filters import (
    FilterConfig,
    compile_app_id_patterns,
    matches_app_id,
    matches_status,
    passes_gate,
)
from .health import HealthState
from .marathon import IMarathonEventBusClient, MarathonEventBusClient
from .models import BusEvent, HealthStatus, OutwardEvent, OutwardKind
from .notifier import INotifier, Notifier
from .slack import ISlackHandler, SlackHandler

__all__ = [
    # Application
    "Application",
    "IApplication",
    # Bridge
    "IBridge",
    "MarathonSlackBridge",
    # Config
    "BridgeSettings",
    "DEFAULT_EVENT_TYPES",
    "DEFAULT_TASK_STATUSES",
    "resolve_list_option",
    # Filtering
    "FilterConfig",
    "compile_app_id_patterns",
    "matches_app_id",
    "matches_status",
    "passes_gate",
    "HealthState",
    # Models
    "BusEvent",
    "HealthStatus",
    "OutwardEvent",
    "OutwardKind",
    # Components
    "INotifier",
    "Notifier",
    "IMarathonEventBusClient",
    "MarathonEventBusClient",
    "ISlackHandler",
    "SlackHandler",
]
