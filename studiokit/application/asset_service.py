"""Lookups of trained models and transforms stored in a workspace."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List

from studiokit.domain.errors import AssetNotFoundError
from studiokit.domain.ports import StudioGatewayPort
from studiokit.schemas.studio_schemas import UserAsset, WorkspaceSettings

logger = logging.getLogger(__name__)


class AssetService:
    """Read-only access to the trained models and transforms of a workspace."""

    def __init__(self, gateway: StudioGatewayPort) -> None:
        self._gateway = gateway

    def get_trained_models(self, workspace: WorkspaceSettings) -> List[UserAsset]:
        return self._gateway.list_trained_models(workspace)

    def get_trained_model(self, workspace: WorkspaceSettings, asset_id: str) -> UserAsset:
        return self._find(self.get_trained_models(workspace), asset_id, "Trained model", workspace)

    def get_trained_models_by_workspace(
        self, workspaces: Iterable[WorkspaceSettings]
    ) -> Dict[str, List[UserAsset]]:
        """Trained models of each workspace, keyed by workspace id."""
        return self._by_workspace(workspaces, self.get_trained_models)

    def get_transforms(self, workspace: WorkspaceSettings) -> List[UserAsset]:
        return self._gateway.list_transforms(workspace)

    def get_transform(self, workspace: WorkspaceSettings, asset_id: str) -> UserAsset:
        return self._find(self.get_transforms(workspace), asset_id, "Transform", workspace)

    def get_transforms_by_workspace(
        self, workspaces: Iterable[WorkspaceSettings]
    ) -> Dict[str, List[UserAsset]]:
        return self._by_workspace(workspaces, self.get_transforms)

    @staticmethod
    def _find(
        assets: List[UserAsset], asset_id: str, kind: str, workspace: WorkspaceSettings
    ) -> UserAsset:
        for asset in assets:
            if asset.id == asset_id:
                return asset
        raise AssetNotFoundError(f"{kind} not found: {asset_id} in workspace {workspace.workspace_id}")

    @staticmethod
    def _by_workspace(
        workspaces: Iterable[WorkspaceSettings],
        lookup: Callable[[WorkspaceSettings], List[UserAsset]],
    ) -> Dict[str, List[UserAsset]]:
        result: Dict[str, List[UserAsset]] = {}
        for workspace in workspaces:
            assets = lookup(workspace)
            logger.debug(f"Found {len(assets)} assets in workspace {workspace.workspace_id}")
            result[workspace.workspace_id] = assets
        return result
