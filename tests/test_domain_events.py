"""Tests for domain events and event handling."""
from __future__ import annotations

import logging
from datetime import datetime
from unittest.mock import Mock

from studiokit.application.event_handlers import AuditLogHandler, register_event_handlers
from studiokit.domain.events import (
    DomainEvent,
    DomainEventPublisher,
    ExperimentCopied,
    ExperimentCopyFailed,
    ExperimentModified,
    ExperimentRunSubmitted,
    event_publisher,
)


def _modified(saved_as=None):
    return ExperimentModified(
        event_id="",
        timestamp=None,
        aggregate_id="exp-1",
        workspace_id="ws-1",
        operation="set_parameter",
        items_changed=2,
        saved_as=saved_as,
    )


class TestDomainEvent:
    """Test base domain event functionality."""

    def test_domain_event_defaults(self):
        """Test empty id and timestamp are filled in."""
        event = DomainEvent(event_id="", timestamp=None, aggregate_id="exp-1")

        assert event.event_id
        assert isinstance(event.timestamp, datetime)
        assert event.aggregate_id == "exp-1"

    def test_domain_event_with_custom_values(self):
        custom_timestamp = datetime(2024, 1, 1, 12, 0, 0)

        event = DomainEvent(event_id="custom-id", timestamp=custom_timestamp, aggregate_id="exp-1")

        assert event.event_id == "custom-id"
        assert event.timestamp == custom_timestamp

    def test_experiment_modified_fields(self):
        event = _modified("[Modified Parameter] v2")

        assert event.operation == "set_parameter"
        assert event.items_changed == 2
        assert event.saved_as == "[Modified Parameter] v2"


class TestDomainEventPublisher:
    """Test domain event publisher functionality."""

    def test_publisher_is_singleton(self):
        assert DomainEventPublisher() is event_publisher

    def test_publish_to_subscribed_handler(self):
        handler = Mock()
        event_publisher.subscribe(ExperimentModified, handler)
        event = _modified()

        event_publisher.publish(event)

        handler.assert_called_once_with(event)

    def test_publish_only_to_matching_type(self):
        modified_handler = Mock()
        copied_handler = Mock()
        event_publisher.subscribe(ExperimentModified, modified_handler)
        event_publisher.subscribe(ExperimentCopied, copied_handler)

        event_publisher.publish(_modified())

        modified_handler.assert_called_once()
        copied_handler.assert_not_called()

    def test_publish_without_handlers(self):
        # Should not raise
        event_publisher.publish(_modified())

    def test_handler_error_does_not_propagate(self, caplog):
        failing = Mock(side_effect=RuntimeError("boom"))
        following = Mock()
        event_publisher.subscribe(ExperimentModified, failing)
        event_publisher.subscribe(ExperimentModified, following)

        with caplog.at_level(logging.ERROR):
            event_publisher.publish(_modified())

        following.assert_called_once()
        assert "Event handler error for ExperimentModified" in caplog.text


class TestAuditLogHandler:
    """Test audit logging of domain events."""

    def test_modified_in_place(self, caplog):
        with caplog.at_level(logging.INFO):
            AuditLogHandler().handle_experiment_modified(_modified())

        assert "[AUDIT] Experiment exp-1 modified (set_parameter, 2 changed)" in caplog.text
        assert "saved in place" in caplog.text

    def test_copy_failure_is_warning(self, caplog):
        event = ExperimentCopyFailed(
            event_id="",
            timestamp=None,
            aggregate_id="exp-1",
            source_workspace_id="ws-1",
            destination_workspace_id="ws-2",
            state="POLLING_PACK",
            reason="timed out",
        )

        with caplog.at_level(logging.INFO):
            AuditLogHandler().handle_experiment_copy_failed(event)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "POLLING_PACK" in record.getMessage()

    def test_run_submitted(self, caplog):
        event = ExperimentRunSubmitted(event_id="", timestamp=None, aggregate_id="exp-1", workspace_id="ws-1")

        with caplog.at_level(logging.INFO):
            AuditLogHandler().handle_experiment_run_submitted(event)

        assert "[AUDIT] Experiment run submitted: exp-1 in workspace ws-1" in caplog.text

    def test_register_event_handlers(self, caplog):
        register_event_handlers()

        with caplog.at_level(logging.INFO):
            event_publisher.publish(_modified("v2"))

        assert "[AUDIT] Experiment exp-1 modified" in caplog.text
        assert "as 'v2'" in caplog.text
