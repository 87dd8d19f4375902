"""
StudioClient: one object exposing every SDK operation.

Wires the HTTP gateway into the graph mutation, copy, experiment and
asset services, and runs resource uploads on a small thread pool.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from studiokit import dependencies
from studiokit.application.experiment_copy_service import BatchCopyResult, CopyOutcome
from studiokit.application.polling import CancellationToken
from studiokit.config import settings
from studiokit.domain.events import event_publisher, ResourceUploaded
from studiokit.domain.ports import StudioGatewayPort
from studiokit.graph.model import DEFAULT_MODULE_COMMENT
from studiokit.graph.mutations import MutationResult
from studiokit.schemas.studio_schemas import (
    ExperimentRef,
    ExperimentSummary,
    ResourceFileFormat,
    UserAsset,
    WorkspaceSettings,
)

logger = logging.getLogger(__name__)


class StudioClient:
    """Façade delegating to the application services."""

    def __init__(
        self,
        gateway: Optional[StudioGatewayPort] = None,
        upload_workers: Optional[int] = None,
    ) -> None:
        self._owns_gateway = gateway is None
        self.gateway = gateway if gateway is not None else dependencies.get_gateway()

        self._mutations = dependencies.get_graph_mutation_service(self.gateway)
        self._copies = dependencies.get_copy_service(self.gateway)
        self._experiments = dependencies.get_experiment_service(self.gateway)
        self._assets = dependencies.get_asset_service(self.gateway)
        self._executor = ThreadPoolExecutor(
            max_workers=upload_workers or settings.UPLOAD_WORKERS,
            thread_name_prefix="studiokit-upload",
        )

    def __enter__(self) -> StudioClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Wait for pending uploads, then release the HTTP client we created."""
        self._executor.shutdown(wait=True)
        if self._owns_gateway:
            self.gateway.close()

    # --------------- Graph mutations ---------------
    def modify_node_parameter(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        node_comment: str,
        parameter_name: str,
        value: str,
        save_as: str = "",
    ) -> MutationResult:
        return self._mutations.modify_node_parameter(
            workspace, experiment, node_comment, parameter_name, value, save_as
        )

    def modify_node_edge(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        source_node_comment: str,
        destination_node_comment: str,
        save_as: str = "",
    ) -> MutationResult:
        return self._mutations.modify_node_edge(
            workspace, experiment, source_node_comment, destination_node_comment, save_as
        )

    def add_module(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        node_id: str,
        save_as: str = "",
        comment: str = DEFAULT_MODULE_COMMENT,
    ) -> MutationResult:
        return self._mutations.add_module(workspace, experiment, node_id, save_as, comment)

    # --------------- Cross-workspace copy ---------------
    def copy_experiment(
        self,
        source: WorkspaceSettings,
        experiment: ExperimentRef,
        destination: WorkspaceSettings,
        cancel_token: Optional[CancellationToken] = None,
    ) -> CopyOutcome:
        return self._copies.copy_experiment(source, experiment, destination, cancel_token)

    def copy_experiments(
        self,
        source: WorkspaceSettings,
        experiments: Iterable[ExperimentRef],
        destination: WorkspaceSettings,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BatchCopyResult:
        return self._copies.copy_experiments(source, experiments, destination, cancel_token)

    def copy_all_experiments(
        self,
        source: WorkspaceSettings,
        destination: WorkspaceSettings,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BatchCopyResult:
        return self._copies.copy_all_experiments(source, destination, cancel_token)

    # --------------- Experiments ---------------
    def get_experiment(self, workspace: WorkspaceSettings, experiment: ExperimentRef) -> ExperimentSummary:
        return self._experiments.get_experiment(workspace, experiment)

    def get_experiments(
        self, workspace: WorkspaceSettings, experiments: Iterable[ExperimentRef]
    ) -> List[ExperimentSummary]:
        return self._experiments.get_experiments(workspace, experiments)

    def get_all_experiments(self, workspace: WorkspaceSettings) -> List[ExperimentSummary]:
        return self._experiments.get_all_experiments(workspace)

    def save_experiment(self, workspace: WorkspaceSettings, experiment: ExperimentRef) -> None:
        self._experiments.save_experiment(workspace, experiment)

    def save_experiment_as(self, workspace: WorkspaceSettings, experiment: ExperimentRef, new_name: str) -> None:
        self._experiments.save_experiment_as(workspace, experiment, new_name)

    def save_experiments(
        self, workspace: WorkspaceSettings, experiments: Iterable[ExperimentRef]
    ) -> Dict[str, Exception]:
        return self._experiments.save_experiments(workspace, experiments)

    def save_all_experiments(self, workspace: WorkspaceSettings) -> Dict[str, Exception]:
        return self._experiments.save_all_experiments(workspace)

    def run_experiment(self, workspace: WorkspaceSettings, experiment: ExperimentRef) -> None:
        self._experiments.run_experiment(workspace, experiment)

    def run_experiments(
        self, workspace: WorkspaceSettings, experiments: Iterable[ExperimentRef]
    ) -> Dict[str, Exception]:
        return self._experiments.run_experiments(workspace, experiments)

    def run_all_experiments(self, workspace: WorkspaceSettings) -> Dict[str, Exception]:
        return self._experiments.run_all_experiments(workspace)

    def delete_experiment(self, workspace: WorkspaceSettings, experiment: ExperimentRef) -> None:
        self._experiments.delete_experiment(workspace, experiment)

    def delete_experiments(
        self, workspace: WorkspaceSettings, experiments: Iterable[ExperimentRef]
    ) -> Dict[str, Exception]:
        return self._experiments.delete_experiments(workspace, experiments)

    def delete_all_experiments(self, workspace: WorkspaceSettings) -> Dict[str, Exception]:
        return self._experiments.delete_all_experiments(workspace)

    def export_experiment(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        output_file: Optional[Union[str, Path]] = None,
    ) -> Path:
        return self._experiments.export_experiment(workspace, experiment, output_file)

    def export_experiments(
        self,
        workspace: WorkspaceSettings,
        experiments: Iterable[ExperimentRef],
        output_dir: Union[str, Path] = ".",
    ) -> List[Path]:
        return self._experiments.export_experiments(workspace, experiments, output_dir)

    def export_all_experiments(self, workspace: WorkspaceSettings, output_dir: Union[str, Path] = ".") -> List[Path]:
        return self._experiments.export_all_experiments(workspace, output_dir)

    def import_experiment(
        self, workspace: WorkspaceSettings, input_file: Union[str, Path], new_name: str = ""
    ) -> ExperimentSummary:
        return self._experiments.import_experiment(workspace, input_file, new_name)

    def import_experiment_to_workspaces(
        self,
        workspaces: Iterable[WorkspaceSettings],
        input_file: Union[str, Path],
        new_name: str = "",
    ) -> Dict[str, Exception]:
        return self._experiments.import_experiment_to_workspaces(workspaces, input_file, new_name)

    # --------------- Trained models and transforms ---------------
    def get_trained_models(self, workspace: WorkspaceSettings) -> List[UserAsset]:
        return self._assets.get_trained_models(workspace)

    def get_trained_model(self, workspace: WorkspaceSettings, asset_id: str) -> UserAsset:
        return self._assets.get_trained_model(workspace, asset_id)

    def get_trained_models_by_workspace(
        self, workspaces: Iterable[WorkspaceSettings]
    ) -> Dict[str, List[UserAsset]]:
        return self._assets.get_trained_models_by_workspace(workspaces)

    def get_transforms(self, workspace: WorkspaceSettings) -> List[UserAsset]:
        return self._assets.get_transforms(workspace)

    def get_transform(self, workspace: WorkspaceSettings, asset_id: str) -> UserAsset:
        return self._assets.get_transform(workspace, asset_id)

    def get_transforms_by_workspace(
        self, workspaces: Iterable[WorkspaceSettings]
    ) -> Dict[str, List[UserAsset]]:
        return self._assets.get_transforms_by_workspace(workspaces)

    # --------------- Resources ---------------
    def upload_resource(
        self,
        workspace: WorkspaceSettings,
        file_format: Union[ResourceFileFormat, str],
        file_path: Union[str, Path],
    ) -> Future:
        """Start an upload in the background.

        The returned future resolves to the service response, or raises the
        upload's error from ``result()``.
        """
        resource_format = ResourceFileFormat(file_format)
        logger.info(f"Queueing upload of {file_path} ({resource_format.value}) to {workspace.workspace_id}")
        return self._executor.submit(self._upload, workspace, resource_format, Path(file_path))

    def upload_resources(
        self,
        workspace: WorkspaceSettings,
        files: Mapping[Union[str, Path], Union[ResourceFileFormat, str]],
    ) -> List[Future]:
        return [
            self.upload_resource(workspace, file_format, file_path)
            for file_path, file_format in files.items()
        ]

    def _upload(
        self, workspace: WorkspaceSettings, file_format: ResourceFileFormat, file_path: Path
    ) -> Dict[str, Any]:
        response = self.gateway.upload_resource(workspace, file_format, file_path)
        event_publisher.publish(ResourceUploaded(
            event_id="",
            timestamp=None,
            aggregate_id=file_path.name,
            workspace_id=workspace.workspace_id,
            file_path=str(file_path),
            file_format=file_format.value,
        ))
        return response
