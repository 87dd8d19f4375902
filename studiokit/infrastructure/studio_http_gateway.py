from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx

from studiokit.config import settings
from studiokit.domain.errors import (
    ExperimentNotFoundError,
    ExperimentRunError,
    PersistenceError,
    UnpackError,
    ValidationError,
)
from studiokit.graph.codec import decode_json, encode_json
from studiokit.schemas.studio_schemas import (
    Activity,
    ExperimentSummary,
    ResourceFileFormat,
    UserAsset,
    WorkspaceSettings,
)

logger = logging.getLogger(__name__)

AUTH_HEADER = "x-ms-metaanalytics-authorizationtoken"
PACKAGE_API_VERSION = "2.0"

# Region name (lower case) -> host prefix of the regional Studio API
REGION_PREFIXES: Dict[str, str] = {
    "south central us": "",
    "west europe": "europewest.",
    "southeast asia": "asiasoutheast.",
    "japan east": "japaneast.",
    "germany central": "germanycentral.",
    "west central us": "uswestcentral.",
}


def region_prefix(location: str) -> str:
    key = " ".join(location.lower().split())
    if key not in REGION_PREFIXES:
        raise ValidationError(f"Unsupported Studio region: {location}")
    return REGION_PREFIXES[key]


def region_code(location: str) -> str:
    """'South Central US' -> 'southcentralus', the form the package API expects."""
    return "".join(location.lower().split())


class StudioHttpGateway:
    """Encapsulate all HTTP interactions with the Studio management API."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        url_template: Optional[str] = None,
    ) -> None:
        self._client = client or httpx.Client(timeout=settings.HTTP_TIMEOUT_SECONDS)
        self._url_template = url_template or settings.STUDIO_API_URL_TEMPLATE

    def close(self) -> None:
        self._client.close()

    # --------------- Internal helpers ---------------
    def _workspace_url(self, workspace: WorkspaceSettings) -> str:
        base = self._url_template.format(prefix=region_prefix(workspace.location))
        return f"{base.rstrip('/')}/workspaces/{workspace.workspace_id}"

    def _request(
        self, workspace: WorkspaceSettings, method: str, path: str, **kwargs: Any
    ) -> httpx.Response:
        url = f"{self._workspace_url(workspace)}/{path}"
        headers = {AUTH_HEADER: workspace.authorization_token}
        headers.update(kwargs.pop("headers", {}))
        logger.debug(f"{method} {url}")
        return self._client.request(method, url, headers=headers, **kwargs)

    @staticmethod
    def _activity(response: httpx.Response) -> Activity:
        response.raise_for_status()
        return Activity.model_validate(response.json())

    # --------------- Experiments ---------------
    def get_experiment_by_id(
        self, workspace: WorkspaceSettings, experiment_id: str
    ) -> Tuple[ExperimentSummary, str]:
        response = self._request(workspace, "GET", f"experiments/{experiment_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ExperimentNotFoundError(
                f"Experiment not found: {experiment_id} in workspace {workspace.workspace_id}"
            )
        response.raise_for_status()
        raw_document = response.text
        return ExperimentSummary.model_validate_json(raw_document), raw_document

    def list_experiments(self, workspace: WorkspaceSettings) -> List[ExperimentSummary]:
        response = self._request(workspace, "GET", "experiments")
        response.raise_for_status()
        return [ExperimentSummary.model_validate(item) for item in response.json()]

    def save_experiment(
        self, workspace: WorkspaceSettings, experiment: ExperimentSummary, raw_document: str
    ) -> None:
        response = self._request(
            workspace,
            "PUT",
            f"experiments/{experiment.experiment_id}",
            content=raw_document.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        if response.is_error:
            raise PersistenceError(
                f"Saving experiment {experiment.experiment_id} failed: "
                f"{response.status_code} {response.text}"
            )

    def save_experiment_as(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentSummary,
        raw_document: str,
        new_name: str,
    ) -> None:
        body = decode_json(raw_document)
        body.pop("ExperimentId", None)
        body.pop("Etag", None)
        body["Description"] = new_name
        body["ParentExperimentId"] = experiment.experiment_id
        response = self._request(
            workspace,
            "POST",
            "experiments",
            content=encode_json(body).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        if response.is_error:
            raise PersistenceError(
                f"Saving experiment {experiment.experiment_id} as '{new_name}' failed: "
                f"{response.status_code} {response.text}"
            )

    def run_experiment(
        self, workspace: WorkspaceSettings, experiment: ExperimentSummary, raw_document: str
    ) -> None:
        body = decode_json(raw_document)
        body["IsDraft"] = False
        response = self._request(
            workspace,
            "POST",
            f"experiments/{experiment.experiment_id}",
            content=encode_json(body).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        if response.is_error:
            raise ExperimentRunError(
                f"Running experiment {experiment.experiment_id} failed: "
                f"{response.status_code} {response.text}"
            )

    def remove_experiment_by_id(self, workspace: WorkspaceSettings, experiment_id: str) -> None:
        response = self._request(
            workspace, "DELETE", f"experiments/{experiment_id}", params={"deleteAncestors": "true"}
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ExperimentNotFoundError(f"Experiment not found: {experiment_id}")
        response.raise_for_status()

    # --------------- Trained models and transforms ---------------
    def list_trained_models(self, workspace: WorkspaceSettings) -> List[UserAsset]:
        return self._list_assets(workspace, "trainedmodels")

    def list_transforms(self, workspace: WorkspaceSettings) -> List[UserAsset]:
        return self._list_assets(workspace, "transformmodules")

    def _list_assets(self, workspace: WorkspaceSettings, path: str) -> List[UserAsset]:
        response = self._request(workspace, "GET", path)
        response.raise_for_status()
        return [UserAsset.model_validate(item) for item in response.json()]

    # --------------- Packages (cross-workspace copy) ---------------
    def pack_experiment(self, workspace: WorkspaceSettings, experiment_id: str) -> Activity:
        response = self._request(
            workspace,
            "POST",
            "packages",
            params={
                "api-version": PACKAGE_API_VERSION,
                "experimentid": experiment_id,
                "clearCredentials": "true",
                "includeAuthorId": "false",
            },
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ExperimentNotFoundError(f"Experiment not found: {experiment_id}")
        return self._activity(response)

    def unpack_experiment(
        self, workspace: WorkspaceSettings, transfer_handle: str, target_region: str
    ) -> Activity:
        response = self._request(
            workspace,
            "PUT",
            "packages",
            params={
                "api-version": PACKAGE_API_VERSION,
                "packageUri": transfer_handle,
                "region": region_code(target_region),
                "clearCredentials": "true",
            },
        )
        if response.is_error:
            raise UnpackError(
                f"Workspace {workspace.workspace_id} rejected the transfer handle: "
                f"{response.status_code} {response.text}"
            )
        return Activity.model_validate(response.json())

    def get_activity_status(
        self, workspace: WorkspaceSettings, activity_id: str, is_source_side: bool
    ) -> Activity:
        key = "packageActivityId" if is_source_side else "unpackActivityId"
        response = self._request(
            workspace,
            "GET",
            "packages",
            params={"api-version": PACKAGE_API_VERSION, key: activity_id},
        )
        return self._activity(response)

    # --------------- Resources ---------------
    def upload_resource(
        self,
        workspace: WorkspaceSettings,
        file_format: ResourceFileFormat,
        file_path: Union[str, Path],
    ) -> Dict[str, Any]:
        path = Path(file_path)
        with path.open("rb") as handle:
            content = handle.read()
        response = self._request(
            workspace,
            "POST",
            "resourceuploads",
            params={"userStorage": "true", "dataTypeId": ResourceFileFormat(file_format).value},
            content=content,
            headers={"Content-Type": "application/octet-stream"},
        )
        response.raise_for_status()
        return response.json()
