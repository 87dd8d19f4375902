"""Domain events for decoupled side effects and integrations."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for all domain events."""
    event_id: str
    timestamp: datetime
    aggregate_id: str

    def __post_init__(self):
        if not hasattr(self, 'event_id') or not self.event_id:
            object.__setattr__(self, 'event_id', str(uuid4()))
        if not hasattr(self, 'timestamp') or not self.timestamp:
            object.__setattr__(self, 'timestamp', datetime.now())


@dataclass
class ExperimentModified(DomainEvent):
    """Raised when a graph mutation has been persisted."""
    workspace_id: str
    operation: str
    items_changed: int
    saved_as: Optional[str]


@dataclass
class ExperimentSaved(DomainEvent):
    """Raised when an experiment is saved or saved under a new name."""
    workspace_id: str
    saved_as: Optional[str]


@dataclass
class ExperimentRunSubmitted(DomainEvent):
    """Raised when the service accepted a run request for an experiment."""
    workspace_id: str


@dataclass
class ExperimentDeleted(DomainEvent):
    """Raised when an experiment is removed from a workspace."""
    workspace_id: str


@dataclass
class ExperimentImported(DomainEvent):
    """Raised when an experiment is imported from a local file."""
    workspace_id: str
    source_file: str


@dataclass
class ExperimentCopied(DomainEvent):
    """Raised when a cross-workspace copy reaches DONE."""
    source_workspace_id: str
    destination_workspace_id: str


@dataclass
class ExperimentCopyFailed(DomainEvent):
    """Raised when a cross-workspace copy stops before DONE."""
    source_workspace_id: str
    destination_workspace_id: str
    state: str
    reason: str


@dataclass
class ResourceUploaded(DomainEvent):
    """Raised when a resource upload finishes successfully."""
    workspace_id: str
    file_path: str
    file_format: str


class DomainEventPublisher:
    """Singleton publisher for domain events."""

    _instance: DomainEventPublisher | None = None
    _subscribers: Dict[type, List[Callable[[DomainEvent], None]]]

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._subscribers = {}
        return cls._instance

    def subscribe(self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], None]) -> None:
        """Subscribe a handler to an event type."""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        event_type = type(event)
        if event_type in self._subscribers:
            for handler in self._subscribers[event_type]:
                try:
                    handler(event)
                except Exception:
                    # Log error but don't fail the main operation
                    logger.exception(f"Event handler error for {event_type.__name__}")

    def clear_subscribers(self) -> None:
        """Clear all subscribers (useful for testing)."""
        self._subscribers = {}


# Singleton instance
event_publisher = DomainEventPublisher()
