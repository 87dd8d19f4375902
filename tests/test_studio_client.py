"""Tests for the StudioClient façade."""
from __future__ import annotations

import json
from unittest.mock import Mock

import httpx
import pytest

from studiokit import StudioClient
from studiokit.dependencies import get_asset_service, get_gateway
from studiokit.domain.errors import AssetNotFoundError
from studiokit.domain.events import event_publisher, ResourceUploaded
from studiokit.schemas.studio_schemas import ResourceFileFormat


class TestStudioClient:
    """Test delegation and resource uploads."""

    def test_modify_node_parameter(self, fake_gateway, workspace):
        with StudioClient(fake_gateway) as client:
            result = client.modify_node_parameter(workspace, "exp-1", "B", "Fraction", "0.25", save_as="quarter")

        assert result.items_changed == 1
        assert fake_gateway.saved_as[0][2] == "[Modified Parameter] quarter"

    def test_modify_node_edge_and_add_module(self, fake_gateway, workspace):
        with StudioClient(fake_gateway) as client:
            client.modify_node_edge(workspace, "exp-1", "C", "B")
            client.add_module(workspace, "exp-1", "node-d", comment="D")

        added = json.loads(fake_gateway.saved[1][1])["Graph"]["ModuleNodes"][-1]
        assert added["Comment"] == "D"

    def test_copy_experiment(self, fake_gateway, workspace, destination_workspace):
        with StudioClient(fake_gateway) as client:
            outcome = client.copy_experiment(workspace, "exp-1", destination_workspace)

        assert outcome.pack_polls == 2
        assert outcome.unpack_polls == 2

    def test_copy_all_experiments(self, fake_gateway, workspace, destination_workspace):
        with StudioClient(fake_gateway) as client:
            result = client.copy_all_experiments(workspace, destination_workspace)

        assert result.all_succeeded

    def test_export_and_import(self, fake_gateway, workspace, tmp_path):
        with StudioClient(fake_gateway) as client:
            path = client.export_experiment(workspace, "exp-1", tmp_path / "exp-1.json")
            client.import_experiment(workspace, path, new_name="Restored")

        assert fake_gateway.saved_as[0][2] == "Restored"

    def test_save_and_run_batches(self, fake_gateway, workspace):
        with StudioClient(fake_gateway) as client:
            save_failures = client.save_experiments(workspace, ["exp-1", "missing"])
            run_failures = client.run_all_experiments(workspace)
            client.run_experiment(workspace, "exp-1")
            client.save_all_experiments(workspace)
            client.run_experiments(workspace, ["exp-1"])

        assert list(save_failures) == ["missing"]
        assert run_failures == {}
        assert len(fake_gateway.runs) == 3
        assert len(fake_gateway.saved) == 2

    def test_import_experiment_to_workspaces(self, fake_gateway, workspace, destination_workspace, tmp_path):
        with StudioClient(fake_gateway) as client:
            path = client.export_experiment(workspace, "exp-1", tmp_path / "exp-1.json")
            failures = client.import_experiment_to_workspaces([workspace, destination_workspace], path)

        assert failures == {}
        saved_to = [call[1] for call in fake_gateway.calls if call[0] == "save_experiment"]
        assert saved_to == ["ws-source", "ws-destination"]

    def test_trained_models_and_transforms(self, fake_gateway, workspace, destination_workspace):
        with StudioClient(fake_gateway) as client:
            models = client.get_trained_models(workspace)
            model = client.get_trained_model(workspace, "model-1")
            models_by_workspace = client.get_trained_models_by_workspace([workspace, destination_workspace])
            transforms = client.get_transforms(workspace)
            transform = client.get_transform(workspace, "transform-1")
            transforms_by_workspace = client.get_transforms_by_workspace([destination_workspace])

        assert len(models) == 2
        assert model.name == "Income model"
        assert set(models_by_workspace) == {"ws-source", "ws-destination"}
        assert [t.id for t in transforms] == ["transform-1"]
        assert transform.data_type_id == "ITransformDotNet"
        assert list(transforms_by_workspace) == ["ws-destination"]

    def test_missing_transform(self, fake_gateway, workspace):
        with StudioClient(fake_gateway) as client:
            with pytest.raises(AssetNotFoundError):
                client.get_transform(workspace, "transform-9")

    def test_upload_resource_returns_future(self, fake_gateway, workspace, tmp_path):
        data_file = tmp_path / "data.tsv"
        data_file.write_text("a\tb\n")
        handler = Mock()
        event_publisher.subscribe(ResourceUploaded, handler)

        with StudioClient(fake_gateway) as client:
            future = client.upload_resource(workspace, "GenericTSV", data_file)
            response = future.result(timeout=5)

        assert response["DataTypeId"] == "GenericTSV"
        assert fake_gateway.uploads == [(ResourceFileFormat.GENERIC_TSV, str(data_file))]
        assert handler.call_args[0][0].file_format == "GenericTSV"

    def test_upload_error_surfaces_through_future(self, workspace, tmp_path):
        gateway = Mock()
        gateway.upload_resource.side_effect = httpx.ConnectError("no route")

        with StudioClient(gateway) as client:
            future = client.upload_resource(workspace, ResourceFileFormat.ZIP, tmp_path / "a.zip")
            with pytest.raises(httpx.ConnectError):
                future.result(timeout=5)

    def test_upload_rejects_unknown_format(self, fake_gateway, workspace):
        with StudioClient(fake_gateway) as client:
            with pytest.raises(ValueError):
                client.upload_resource(workspace, "Parquet", "data.parquet")

    def test_upload_resources(self, fake_gateway, workspace, tmp_path):
        files = {tmp_path / "a.csv": ResourceFileFormat.GENERIC_CSV, tmp_path / "b.txt": "PlainText"}
        for path in files:
            path.write_text("x")

        with StudioClient(fake_gateway) as client:
            futures = client.upload_resources(workspace, files)
            results = [future.result(timeout=5) for future in futures]

        assert len(results) == 2
        assert {fmt for fmt, _ in fake_gateway.uploads} == {
            ResourceFileFormat.GENERIC_CSV,
            ResourceFileFormat.PLAIN_TEXT,
        }

    def test_close_leaves_supplied_gateway_open(self):
        gateway = Mock()

        StudioClient(gateway).close()

        gateway.close.assert_not_called()

    def test_owned_gateway_closed(self, monkeypatch):
        gateway = Mock()
        monkeypatch.setattr("studiokit.dependencies.get_gateway", lambda: gateway)

        with StudioClient():
            pass

        gateway.close.assert_called_once()


class TestDependencies:

    def test_get_gateway_with_transport(self, workspace):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
        gateway = get_gateway(transport)

        assert gateway.list_experiments(workspace) == []
        gateway.close()

    def test_get_asset_service(self, fake_gateway, workspace):
        service = get_asset_service(fake_gateway)

        assert [model.id for model in service.get_trained_models(workspace)] == ["model-1", "model-2"]
