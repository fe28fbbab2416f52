"""
Domain Layer - shared building blocks

- Events: immutable records handed to observers
- Exceptions: domain-specific error handling
"""

from philldesk.core.domain.events import DomainEvent, EventHandler
from philldesk.core.domain.exceptions import (
    DomainException,
    IntegrationException,
    ValidationException,
)

__all__ = [
    "DomainEvent",
    "EventHandler",
    "DomainException",
    "IntegrationException",
    "ValidationException",
]
