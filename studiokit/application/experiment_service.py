"""Thin experiment operations: lookup, save, run, delete, export and import."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError as SummaryValidationError

from studiokit.domain.errors import MalformedDocumentError
from studiokit.domain.events import (
    event_publisher,
    ExperimentDeleted,
    ExperimentImported,
    ExperimentRunSubmitted,
    ExperimentSaved,
)
from studiokit.domain.ports import StudioGatewayPort
from studiokit.graph.codec import parse_experiment
from studiokit.schemas.studio_schemas import (
    ExperimentRef,
    ExperimentSummary,
    WorkspaceSettings,
    experiment_id_of,
)

logger = logging.getLogger(__name__)


class ExperimentService:
    """Pass-through experiment operations built on the gateway port."""

    def __init__(self, gateway: StudioGatewayPort) -> None:
        self._gateway = gateway

    def get_experiment(self, workspace: WorkspaceSettings, experiment: ExperimentRef) -> ExperimentSummary:
        summary, _ = self._gateway.get_experiment_by_id(workspace, experiment_id_of(experiment))
        return summary

    def get_experiments(
        self, workspace: WorkspaceSettings, experiments: Iterable[ExperimentRef]
    ) -> List[ExperimentSummary]:
        return [self.get_experiment(workspace, experiment) for experiment in experiments]

    def get_all_experiments(self, workspace: WorkspaceSettings) -> List[ExperimentSummary]:
        return self._gateway.list_experiments(workspace)

    def save_experiment(self, workspace: WorkspaceSettings, experiment: ExperimentRef) -> None:
        """Re-save the stored version of an experiment unchanged."""
        experiment_id = experiment_id_of(experiment)
        summary, raw_document = self._gateway.get_experiment_by_id(workspace, experiment_id)
        self._gateway.save_experiment(workspace, summary, raw_document)
        self._publish_saved(workspace, experiment_id, None)

    def save_experiment_as(
        self, workspace: WorkspaceSettings, experiment: ExperimentRef, new_name: str
    ) -> None:
        experiment_id = experiment_id_of(experiment)
        summary, raw_document = self._gateway.get_experiment_by_id(workspace, experiment_id)
        self._gateway.save_experiment_as(workspace, summary, raw_document, new_name)
        self._publish_saved(workspace, experiment_id, new_name)

    def save_experiments(
        self, workspace: WorkspaceSettings, experiments: Iterable[ExperimentRef]
    ) -> Dict[str, Exception]:
        """Re-save each experiment; return the failures keyed by experiment id."""
        return self._for_each(workspace, experiments, self.save_experiment, "Save")

    def save_all_experiments(self, workspace: WorkspaceSettings) -> Dict[str, Exception]:
        return self.save_experiments(workspace, self._gateway.list_experiments(workspace))

    def run_experiment(self, workspace: WorkspaceSettings, experiment: ExperimentRef) -> None:
        """Submit the stored version of an experiment for a run."""
        experiment_id = experiment_id_of(experiment)
        summary, raw_document = self._gateway.get_experiment_by_id(workspace, experiment_id)
        logger.info(f"Running experiment {experiment_id} in workspace {workspace.workspace_id}")
        self._gateway.run_experiment(workspace, summary, raw_document)
        event_publisher.publish(ExperimentRunSubmitted(
            event_id="",
            timestamp=None,
            aggregate_id=experiment_id,
            workspace_id=workspace.workspace_id,
        ))

    def run_experiments(
        self, workspace: WorkspaceSettings, experiments: Iterable[ExperimentRef]
    ) -> Dict[str, Exception]:
        """Run each experiment; return the failures keyed by experiment id."""
        return self._for_each(workspace, experiments, self.run_experiment, "Run")

    def run_all_experiments(self, workspace: WorkspaceSettings) -> Dict[str, Exception]:
        return self.run_experiments(workspace, self._gateway.list_experiments(workspace))

    def delete_experiment(self, workspace: WorkspaceSettings, experiment: ExperimentRef) -> None:
        experiment_id = experiment_id_of(experiment)
        logger.info(f"Deleting experiment {experiment_id} from workspace {workspace.workspace_id}")
        self._gateway.remove_experiment_by_id(workspace, experiment_id)
        event_publisher.publish(ExperimentDeleted(
            event_id="",
            timestamp=None,
            aggregate_id=experiment_id,
            workspace_id=workspace.workspace_id,
        ))

    def delete_experiments(
        self, workspace: WorkspaceSettings, experiments: Iterable[ExperimentRef]
    ) -> Dict[str, Exception]:
        """Delete each experiment; return the failures keyed by experiment id."""
        return self._for_each(workspace, experiments, self.delete_experiment, "Delete")

    def delete_all_experiments(self, workspace: WorkspaceSettings) -> Dict[str, Exception]:
        return self.delete_experiments(workspace, self._gateway.list_experiments(workspace))

    def export_experiment(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        output_file: Optional[Union[str, Path]] = None,
    ) -> Path:
        """Write the raw experiment document to ``output_file`` (default: the experiment id)."""
        experiment_id = experiment_id_of(experiment)
        summary, raw_document = self._gateway.get_experiment_by_id(workspace, experiment_id)
        target = Path(output_file) if output_file else Path(summary.experiment_id)
        with target.open('w', encoding='utf-8') as f:
            f.write(raw_document)
        logger.info(f"Exported experiment {experiment_id} to {target}")
        return target

    def export_experiments(
        self,
        workspace: WorkspaceSettings,
        experiments: Iterable[ExperimentRef],
        output_dir: Union[str, Path] = ".",
    ) -> List[Path]:
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        return [
            self.export_experiment(workspace, experiment, directory / experiment_id_of(experiment))
            for experiment in experiments
        ]

    def export_all_experiments(
        self, workspace: WorkspaceSettings, output_dir: Union[str, Path] = "."
    ) -> List[Path]:
        return self.export_experiments(workspace, self._gateway.list_experiments(workspace), output_dir)

    def import_experiment(
        self, workspace: WorkspaceSettings, input_file: Union[str, Path], new_name: str = ""
    ) -> ExperimentSummary:
        """Save a previously exported document into ``workspace``.

        The document must carry a valid graph section and an ExperimentId.
        """
        source = Path(input_file)
        with source.open('r', encoding='utf-8') as f:
            raw_document = f.read()

        document = parse_experiment(raw_document)
        try:
            summary = ExperimentSummary.model_validate(document.root)
        except SummaryValidationError as exc:
            raise MalformedDocumentError(f"Exported experiment in {source} has no valid summary") from exc

        if new_name:
            self._gateway.save_experiment_as(workspace, summary, raw_document, new_name)
        else:
            self._gateway.save_experiment(workspace, summary, raw_document)

        event_publisher.publish(ExperimentImported(
            event_id="",
            timestamp=None,
            aggregate_id=summary.experiment_id,
            workspace_id=workspace.workspace_id,
            source_file=str(source),
        ))
        return summary

    def import_experiment_to_workspaces(
        self,
        workspaces: Iterable[WorkspaceSettings],
        input_file: Union[str, Path],
        new_name: str = "",
    ) -> Dict[str, Exception]:
        """Import one exported document into each workspace.

        Returns the failures keyed by workspace id.
        """
        failures: Dict[str, Exception] = {}
        for workspace in workspaces:
            try:
                self.import_experiment(workspace, input_file, new_name)
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"Import of {input_file} into workspace {workspace.workspace_id} failed: {exc}")
                failures[workspace.workspace_id] = exc
        return failures

    def _publish_saved(self, workspace: WorkspaceSettings, experiment_id: str, new_name: Optional[str]) -> None:
        event_publisher.publish(ExperimentSaved(
            event_id="",
            timestamp=None,
            aggregate_id=experiment_id,
            workspace_id=workspace.workspace_id,
            saved_as=new_name,
        ))

    def _for_each(
        self,
        workspace: WorkspaceSettings,
        experiments: Iterable[ExperimentRef],
        action: Callable[[WorkspaceSettings, str], None],
        verb: str,
    ) -> Dict[str, Exception]:
        failures: Dict[str, Exception] = {}
        for experiment in experiments:
            experiment_id = experiment_id_of(experiment)
            try:
                action(workspace, experiment_id)
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"{verb} of experiment {experiment_id} failed: {exc}")
                failures[experiment_id] = exc
        return failures
