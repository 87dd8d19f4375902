"""
Test configuration and fixtures for studiokit tests.
"""
import copy
import json
from typing import Any, Dict, List

import pytest

from studiokit.config import settings
from studiokit.application.polling import PollPolicy
from studiokit.domain.errors import (
    ExperimentNotFoundError,
    ExperimentRunError,
    PersistenceError,
    UnpackError,
)
from studiokit.domain.events import event_publisher
from studiokit.schemas.studio_schemas import Activity, ExperimentSummary, UserAsset, WorkspaceSettings

SAMPLE_EXPERIMENT: Dict[str, Any] = {
    "ExperimentId": "exp-1",
    "Description": "Sample experiment",
    "Etag": "etag-1",
    "Creator": "alice",
    "Status": {"StatusCode": "Finished"},
    "Graph": {
        "ModuleNodes": [
            {
                "Id": "node-a",
                "Comment": "A",
                "ModuleId": "module-reader",
                "ModuleParameters": [
                    {"Name": "Data source", "Value": "Web URL"},
                    {"Name": "URL", "Value": "http://example.com/data.csv"},
                ],
                "InputPortsInternal": [],
                "OutputPortsInternal": [{"Name": "Results dataset", "NodeId": "node-a"}],
            },
            {
                "Id": "node-b",
                "Comment": "B",
                "ModuleId": "module-split",
                "ModuleParameters": [
                    {"Name": "Fraction", "Value": "0.5"},
                    {"Name": "Random seed", "Value": "0"},
                ],
                "InputPortsInternal": [{"Name": "Dataset", "NodeId": "node-b"}],
                "OutputPortsInternal": [{"Name": "Results dataset1", "NodeId": "node-b"}],
            },
            {
                "Id": "node-c",
                "Comment": "C",
                "ModuleId": "module-score",
                "ModuleParameters": [{"Name": "Fraction", "Value": "0.7"}],
                "InputPortsInternal": [{"Name": "Dataset", "NodeId": "node-c"}],
                "OutputPortsInternal": [{"Name": "Scored dataset", "NodeId": "node-c"}],
            },
        ],
        "EdgesInternal": [
            {
                "SourceOutputPortId": "node-a:Results dataset",
                "DestinationInputPortId": "node-b:Dataset",
            },
            {
                "SourceOutputPortId": "node-b:Results dataset1",
                "DestinationInputPortId": "node-c:Dataset",
            },
        ],
        "SerializedClientData": "<Layout x=\"1\" />",
    },
    "WebService": {"Inputs": [], "Outputs": []},
}


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Override settings for testing."""
    monkeypatch.setattr(settings, "POLL_INTERVAL_SECONDS", 0.0)
    monkeypatch.setattr(settings, "POLL_MAX_ATTEMPTS", 5)
    monkeypatch.setattr(settings, "STRICT_LOOKUPS", False)
    monkeypatch.setattr(settings, "REQUIRE_UNIQUE_NODE_IDS", False)
    yield settings


@pytest.fixture(autouse=True)
def clean_event_publisher():
    """Keep subscribers from leaking between tests."""
    event_publisher.clear_subscribers()
    yield event_publisher
    event_publisher.clear_subscribers()


@pytest.fixture
def sample_experiment() -> Dict[str, Any]:
    """A fresh copy of the three-node sample document (A -> B -> C)."""
    return copy.deepcopy(SAMPLE_EXPERIMENT)


@pytest.fixture
def sample_experiment_json(sample_experiment) -> str:
    return json.dumps(sample_experiment)


@pytest.fixture
def workspace() -> WorkspaceSettings:
    return WorkspaceSettings(
        workspace_id="ws-source",
        authorization_token="token-source",
        location="South Central US",
    )


@pytest.fixture
def destination_workspace() -> WorkspaceSettings:
    return WorkspaceSettings(
        workspace_id="ws-destination",
        authorization_token="token-destination",
        location="West Europe",
    )


@pytest.fixture
def fast_policy() -> PollPolicy:
    return PollPolicy(interval_seconds=0.0, max_attempts=5)


class FakeStudioGateway:
    """In-memory gateway recording every call."""

    def __init__(self, experiments: Dict[str, str] = None):
        self.experiments: Dict[str, str] = dict(experiments or {})
        self.calls: List[tuple] = []
        self.saved: List[tuple] = []
        self.saved_as: List[tuple] = []
        self.removed: List[str] = []
        self.uploads: List[tuple] = []
        self.runs: List[tuple] = []
        self.trained_models = [
            UserAsset(Id="model-1", Name="Income model", DataTypeId="ILearnerDotNet"),
            UserAsset(Id="model-2", Name="Churn model", DataTypeId="ILearnerDotNet"),
        ]
        self.transforms = [UserAsset(Id="transform-1", Name="Normalize", DataTypeId="ITransformDotNet")]

        # Statuses reported by pack/unpack: the first by the request, the rest by polls
        self.pack_statuses = ["InProgress", "InProgress", "Complete"]
        self.unpack_statuses = ["InProgress", "InProgress", "Complete"]
        self.transfer_handle = "https://packages.example/exp-1.zip"
        self.reject_save = False
        self.reject_unpack = False
        self.reject_run = False
        self._pending: Dict[str, List[str]] = {}

    def get_experiment_by_id(self, workspace, experiment_id):
        self.calls.append(("get_experiment_by_id", workspace.workspace_id, experiment_id))
        if experiment_id not in self.experiments:
            raise ExperimentNotFoundError(f"Experiment not found: {experiment_id}")
        raw = self.experiments[experiment_id]
        return ExperimentSummary.model_validate_json(raw), raw

    def list_experiments(self, workspace):
        self.calls.append(("list_experiments", workspace.workspace_id))
        return [ExperimentSummary.model_validate_json(raw) for raw in self.experiments.values()]

    def save_experiment(self, workspace, experiment, raw_document):
        self.calls.append(("save_experiment", workspace.workspace_id, experiment.experiment_id))
        if self.reject_save:
            raise PersistenceError("write refused")
        self.saved.append((experiment, raw_document))

    def save_experiment_as(self, workspace, experiment, raw_document, new_name):
        self.calls.append(("save_experiment_as", workspace.workspace_id, experiment.experiment_id))
        if self.reject_save:
            raise PersistenceError("write refused")
        self.saved_as.append((experiment, raw_document, new_name))

    def run_experiment(self, workspace, experiment, raw_document):
        self.calls.append(("run_experiment", workspace.workspace_id, experiment.experiment_id))
        if self.reject_run:
            raise ExperimentRunError("run refused")
        self.runs.append((experiment, raw_document))

    def list_trained_models(self, workspace):
        self.calls.append(("list_trained_models", workspace.workspace_id))
        return list(self.trained_models)

    def list_transforms(self, workspace):
        self.calls.append(("list_transforms", workspace.workspace_id))
        return list(self.transforms)

    def remove_experiment_by_id(self, workspace, experiment_id):
        self.calls.append(("remove_experiment_by_id", workspace.workspace_id, experiment_id))
        if experiment_id not in self.experiments:
            raise ExperimentNotFoundError(f"Experiment not found: {experiment_id}")
        del self.experiments[experiment_id]
        self.removed.append(experiment_id)

    def pack_experiment(self, workspace, experiment_id):
        self.calls.append(("pack_experiment", workspace.workspace_id, experiment_id))
        return self._start(f"pack-{experiment_id}", self.pack_statuses)

    def unpack_experiment(self, workspace, transfer_handle, target_region):
        self.calls.append(("unpack_experiment", workspace.workspace_id, transfer_handle, target_region))
        if self.reject_unpack:
            raise UnpackError("transfer handle rejected")
        return self._start(f"unpack-{transfer_handle}", self.unpack_statuses)

    def get_activity_status(self, workspace, activity_id, is_source_side):
        self.calls.append(("get_activity_status", workspace.workspace_id, activity_id, is_source_side))
        statuses = self._pending[activity_id]
        status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
        return self._activity(activity_id, status)

    def upload_resource(self, workspace, file_format, file_path):
        self.calls.append(("upload_resource", workspace.workspace_id, str(file_path)))
        self.uploads.append((file_format, str(file_path)))
        return {"Id": f"resource-{len(self.uploads)}", "DataTypeId": file_format.value}

    def poll_count(self, is_source_side: bool) -> int:
        return sum(
            1 for call in self.calls
            if call[0] == "get_activity_status" and call[3] is is_source_side
        )

    def _start(self, activity_id: str, statuses: List[str]) -> Activity:
        remaining = list(statuses)
        first = remaining.pop(0)
        self._pending[activity_id] = remaining or [first]
        return self._activity(activity_id, first)

    def _activity(self, activity_id: str, status: str) -> Activity:
        location = self.transfer_handle if activity_id.startswith("pack-") else None
        return Activity(ActivityId=activity_id, Status=status, Location=location)


@pytest.fixture
def fake_gateway(sample_experiment_json) -> FakeStudioGateway:
    return FakeStudioGateway({"exp-1": sample_experiment_json})
