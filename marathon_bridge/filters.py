"""Event filtering: app-id patterns and task-status allow-list."""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from .logging_config import get_logger
from .models.events import STATUS_UPDATE_EVENT

logger = get_logger(__name__)


@dataclass(frozen=True)
class FilterConfig:
    """Immutable filter criteria applied to every incoming event."""

    app_id_patterns: tuple[re.Pattern, ...] = ()
    task_statuses: tuple[str, ...] = ()


def compile_app_id_patterns(raw_patterns: Iterable[str]) -> tuple[re.Pattern, ...]:
    """Compile user-supplied patterns case-insensitively.

    Invalid expressions are logged and left out of the active set.
    """
    compiled = []
    for raw in raw_patterns:
        try:
            compiled.append(re.compile(str(raw), re.IGNORECASE))
        except re.error as e:
            logger.warning(
                "The provided RegExp %s isn't a valid regular expression: %s",
                raw,
                e,
            )
    return tuple(compiled)


def _strip_separator(app_id: str) -> str:
    return app_id.replace("/", "", 1)


def _iter_app_ids(data: dict) -> Iterator[str]:
    """Yield every app identifier present in an event payload."""
    app_id = data.get("appId")
    if isinstance(app_id, str):
        yield _strip_separator(app_id)

    current_step = data.get("currentStep") or {}
    for action in current_step.get("actions") or []:
        app = action.get("app")
        if isinstance(app, str):
            yield _strip_separator(app)

    plan = data.get("plan") or {}
    for step in plan.get("steps") or []:
        for action in step.get("actions") or []:
            app = action.get("app")
            if isinstance(app, str):
                yield _strip_separator(app)


def matches_app_id(patterns: tuple[re.Pattern, ...], data: dict) -> bool:
    """Check whether any pattern matches any app identifier in the payload."""
    if not patterns:
        return True

    app_ids = list(_iter_app_ids(data))
    return any(
        any(pattern.search(app_id) for app_id in app_ids) for pattern in patterns
    )


def matches_status(allowed_statuses: tuple[str, ...], data: dict) -> bool:
    """Check the task status against the allow-list (empty list rejects all)."""
    if not allowed_statuses:
        return False
    return data.get("taskStatus") in allowed_statuses


def passes_gate(config: FilterConfig, event_type: str, data: dict) -> bool:
    """Combined forwarding decision for one event."""
    if not matches_app_id(config.app_id_patterns, data):
        return False
    if event_type == STATUS_UPDATE_EVENT:
        return matches_status(config.task_statuses, data)
    return True
