"""Event handlers for domain events."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from studiokit.domain.events import (
        ExperimentModified,
        ExperimentSaved,
        ExperimentRunSubmitted,
        ExperimentDeleted,
        ExperimentImported,
        ExperimentCopied,
        ExperimentCopyFailed,
        ResourceUploaded,
    )

logger = logging.getLogger(__name__)


class AuditLogHandler:
    """Logs all domain events for audit trail."""

    def handle_experiment_modified(self, event: ExperimentModified) -> None:
        target = f"as '{event.saved_as}'" if event.saved_as else "in place"
        logger.info(
            f"[AUDIT] Experiment {event.aggregate_id} modified ({event.operation}, "
            f"{event.items_changed} changed) in workspace {event.workspace_id}, saved {target}"
        )

    def handle_experiment_saved(self, event: ExperimentSaved) -> None:
        target = f"as '{event.saved_as}'" if event.saved_as else "in place"
        logger.info(f"[AUDIT] Experiment {event.aggregate_id} saved {target} in workspace {event.workspace_id}")

    def handle_experiment_run_submitted(self, event: ExperimentRunSubmitted) -> None:
        logger.info(f"[AUDIT] Experiment run submitted: {event.aggregate_id} in workspace {event.workspace_id}")

    def handle_experiment_deleted(self, event: ExperimentDeleted) -> None:
        logger.info(f"[AUDIT] Experiment deleted: {event.aggregate_id} from workspace {event.workspace_id}")

    def handle_experiment_imported(self, event: ExperimentImported) -> None:
        logger.info(f"[AUDIT] Experiment imported: {event.aggregate_id} from {event.source_file}")

    def handle_experiment_copied(self, event: ExperimentCopied) -> None:
        logger.info(
            f"[AUDIT] Experiment copied: {event.aggregate_id} "
            f"{event.source_workspace_id} -> {event.destination_workspace_id}"
        )

    def handle_experiment_copy_failed(self, event: ExperimentCopyFailed) -> None:
        logger.warning(
            f"[AUDIT] Experiment copy failed in {event.state}: {event.aggregate_id} "
            f"{event.source_workspace_id} -> {event.destination_workspace_id}: {event.reason}"
        )

    def handle_resource_uploaded(self, event: ResourceUploaded) -> None:
        logger.info(f"[AUDIT] Resource uploaded: {event.file_path} ({event.file_format}) to {event.workspace_id}")


def register_event_handlers():
    """Register all event handlers with the publisher."""
    from studiokit.domain.events import (
        event_publisher,
        ExperimentModified,
        ExperimentSaved,
        ExperimentRunSubmitted,
        ExperimentDeleted,
        ExperimentImported,
        ExperimentCopied,
        ExperimentCopyFailed,
        ResourceUploaded,
    )

    audit = AuditLogHandler()

    event_publisher.subscribe(ExperimentModified, audit.handle_experiment_modified)
    event_publisher.subscribe(ExperimentSaved, audit.handle_experiment_saved)
    event_publisher.subscribe(ExperimentRunSubmitted, audit.handle_experiment_run_submitted)
    event_publisher.subscribe(ExperimentDeleted, audit.handle_experiment_deleted)
    event_publisher.subscribe(ExperimentImported, audit.handle_experiment_imported)
    event_publisher.subscribe(ExperimentCopied, audit.handle_experiment_copied)
    event_publisher.subscribe(ExperimentCopyFailed, audit.handle_experiment_copy_failed)
    event_publisher.subscribe(ResourceUploaded, audit.handle_resource_uploaded)
