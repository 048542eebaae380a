"""
Job Board Domain Events

Events published by the client infrastructure for the application layer
to react to.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class SessionInvalidatedEvent(DomainEvent):
    """
    Fired after the server rejected a request as unauthorized and the
    stored session has been cleared.
    """
    method: str = ""
    path: str = ""
    status_code: int = 401
    detail: Optional[str] = None
