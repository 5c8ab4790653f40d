"""Event data models."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


STATUS_UPDATE_EVENT = "status_update_event"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class OutwardKind(str, Enum):
    """Kinds of notifications the bridge publishes."""

    ERROR = "error"
    SENT_MESSAGE = "sent_message"
    RECEIVED_REPLY = "received_reply"
    MARATHON_EVENT = "marathon_event"
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"


@dataclass
class BusEvent:
    """A lifecycle event received from the Marathon event bus."""

    type: str
    data: dict = field(default_factory=dict)  # shape varies by type

    @property
    def is_status_update(self) -> bool:
        return self.type == STATUS_UPDATE_EVENT


@dataclass
class OutwardEvent:
    """A notification published for external observers."""

    kind: OutwardKind
    timestamp: int  # epoch ms
    message: Any = None
    event_type: str | None = None  # marathon_event only
    data: dict | None = None  # marathon_event only

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"timestamp": self.timestamp}
        if self.kind is OutwardKind.MARATHON_EVENT:
            payload["eventType"] = self.event_type
            payload["data"] = self.data
        else:
            payload["message"] = self.message
        return payload
