"""Notification Emitter — post-commit, best-effort event delivery.

Invariants:
    - emit_safely never raises: failures are logged and swallowed
    - Called only after the unit of work committed; nothing here can roll back

Design Decisions:
    - Default emitter writes a structured log line; a socket/queue emitter only
      needs to satisfy core.repository_protocols.NotificationEmitter
    - At-most-once: no retry, no outbox
"""

import logging
from typing import Any

from pydantic_core import to_jsonable_python

from propertyhub.core.domain_types import ActorContext, NotificationEvent
from propertyhub.core.repository_protocols import NotificationEmitter

logger = logging.getLogger(__name__)


class LoggingNotificationEmitter:
    """Emits events as structured log records."""

    async def emit(
        self, event: NotificationEvent, payload: dict[str, Any],
    ) -> None:
        logger.info(
            f"Notification {event.value}",
            extra={"event": event.value, "payload": to_jsonable_python(payload)},
        )


def event_payload(
    property_id: Any, actor: ActorContext, **extra: Any,
) -> dict[str, Any]:
    """Every event carries the property id and actor metadata."""
    payload = {
        "propertyId": str(property_id),
        "actor": {
            "userId": str(actor.user_id),
            "role": actor.primary_role,
            "ipAddress": actor.ip_address,
        },
    }
    payload.update(extra)
    return payload


async def emit_safely(
    emitter: NotificationEmitter | None,
    event: NotificationEvent,
    payload: dict[str, Any],
) -> bool:
    """Deliver one event; report success instead of raising."""
    if emitter is None:
        return False
    try:
        await emitter.emit(event, payload)
        return True
    except Exception as e:
        logger.warning(
            f"Notification {event.value} failed: {e}",
            extra={"event": event.value, "property_id": payload.get("propertyId")},
        )
        return False
