"""Ports the application layer depends on; adapters live in infrastructure."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Protocol, Tuple, Union

from studiokit.schemas.studio_schemas import (
    Activity,
    ExperimentSummary,
    ResourceFileFormat,
    UserAsset,
    WorkspaceSettings,
)


class StudioGatewayPort(Protocol):
    """Remote experiment operations of the Studio management API.

    Contract for implementations:
    - ``get_experiment_by_id`` raises ExperimentNotFoundError for unknown ids.
    - ``save_experiment`` / ``save_experiment_as`` raise PersistenceError when
      the service refuses the write.
    - ``unpack_experiment`` raises UnpackError when the destination rejects
      the transfer handle.
    - ``run_experiment`` raises ExperimentRunError when the service refuses
      to start the run.
    - Transport and authorization failures propagate unchanged.
    """

    def get_experiment_by_id(
        self, workspace: WorkspaceSettings, experiment_id: str
    ) -> Tuple[ExperimentSummary, str]:
        """Return the typed summary and the raw document text."""
        ...

    def list_experiments(self, workspace: WorkspaceSettings) -> List[ExperimentSummary]:
        ...

    def save_experiment(
        self, workspace: WorkspaceSettings, experiment: ExperimentSummary, raw_document: str
    ) -> None:
        ...

    def save_experiment_as(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentSummary,
        raw_document: str,
        new_name: str,
    ) -> None:
        ...

    def run_experiment(
        self, workspace: WorkspaceSettings, experiment: ExperimentSummary, raw_document: str
    ) -> None:
        ...

    def remove_experiment_by_id(self, workspace: WorkspaceSettings, experiment_id: str) -> None:
        ...

    def list_trained_models(self, workspace: WorkspaceSettings) -> List[UserAsset]:
        ...

    def list_transforms(self, workspace: WorkspaceSettings) -> List[UserAsset]:
        ...

    def pack_experiment(self, workspace: WorkspaceSettings, experiment_id: str) -> Activity:
        ...

    def unpack_experiment(
        self, workspace: WorkspaceSettings, transfer_handle: str, target_region: str
    ) -> Activity:
        ...

    def get_activity_status(
        self, workspace: WorkspaceSettings, activity_id: str, is_source_side: bool
    ) -> Activity:
        ...

    def upload_resource(
        self,
        workspace: WorkspaceSettings,
        file_format: ResourceFileFormat,
        file_path: Union[str, Path],
    ) -> Dict[str, Any]:
        ...
