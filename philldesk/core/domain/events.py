"""
Base Domain Event Classes

Domain events are immutable records of something that happened. Observers
build them from state changes and hand them to subscribed handlers.
"""

from abc import ABC
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Example:
        ```python
        @dataclass(frozen=True)
        class PrescriptionDeleted(DomainEvent):
            prescription_id: str = ""
        ```
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    version: int = field(default=1)

    @property
    def event_type(self) -> str:
        """Get the event type name (class name)."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization."""
        result: dict[str, Any] = {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
        }
        for item in fields(self):
            if item.name in result:
                continue
            value = getattr(self, item.name)
            if isinstance(value, datetime):
                result[item.name] = value.isoformat()
            elif isinstance(value, UUID):
                result[item.name] = str(value)
            elif isinstance(value, Enum):
                result[item.name] = value.value
            else:
                result[item.name] = value
        return result


# Handlers may be plain callables or coroutine functions
EventHandler = Callable[[DomainEvent], None | Awaitable[None]]
