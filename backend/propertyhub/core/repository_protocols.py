"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Outbound side effects (notifications) accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - emit is async because implementations do IO; callers invoke it only
      after the unit of work has committed
"""

from typing import Any, Protocol

from propertyhub.core.domain_types import NotificationEvent


class NotificationEmitter(Protocol):
    """Fire-and-forget event sink — implemented by shell."""
    async def emit(
        self, event: NotificationEvent, payload: dict[str, Any],
    ) -> None: ...
