"""Application service: fetch an experiment, mutate its graph, persist it."""
from __future__ import annotations

import logging
from typing import Callable

from studiokit.domain.events import event_publisher, ExperimentModified
from studiokit.domain.ports import StudioGatewayPort
from studiokit.graph import codec, mutations
from studiokit.graph.model import DEFAULT_MODULE_COMMENT, GraphDocument
from studiokit.graph.mutations import MutationResult
from studiokit.schemas.studio_schemas import ExperimentRef, WorkspaceSettings, experiment_id_of

logger = logging.getLogger(__name__)

# Name prefixes for save-as; kept verbatim for compatibility with existing workspaces.
MODIFIED_PARAMETER_PREFIX = "[Modified Parameter] "
MODIFIED_EDGE_PREFIX = "[Modified Edge] "
ADDED_MODULE_PREFIX = "[Added Module] "


class GraphMutationService:
    """Label-based edits of experiment graphs.

    Every call fetches a fresh copy of the experiment, computes the whole
    mutation in memory and then issues exactly one write: ``save_experiment``
    when ``save_as`` is empty, otherwise ``save_experiment_as`` under the
    operation's prefix plus ``save_as``.
    """

    def __init__(
        self,
        gateway: StudioGatewayPort,
        strict: bool = False,
        require_unique_node_ids: bool = False,
    ) -> None:
        self._gateway = gateway
        self._strict = strict
        self._require_unique_node_ids = require_unique_node_ids

    def modify_node_parameter(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        node_comment: str,
        parameter_name: str,
        value: str,
        save_as: str = "",
    ) -> MutationResult:
        return self._apply(
            workspace,
            experiment,
            lambda document: mutations.set_parameter(
                document, node_comment, parameter_name, value, strict=self._strict
            ),
            MODIFIED_PARAMETER_PREFIX,
            save_as,
        )

    def modify_node_edge(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        source_node_comment: str,
        destination_node_comment: str,
        save_as: str = "",
    ) -> MutationResult:
        return self._apply(
            workspace,
            experiment,
            lambda document: mutations.rewire_edge(
                document, source_node_comment, destination_node_comment, strict=self._strict
            ),
            MODIFIED_EDGE_PREFIX,
            save_as,
        )

    def add_module(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        node_id: str,
        save_as: str = "",
        comment: str = DEFAULT_MODULE_COMMENT,
    ) -> MutationResult:
        return self._apply(
            workspace,
            experiment,
            lambda document: mutations.add_module(
                document, node_id, comment, require_unique_id=self._require_unique_node_ids
            ),
            ADDED_MODULE_PREFIX,
            save_as,
        )

    def _apply(
        self,
        workspace: WorkspaceSettings,
        experiment: ExperimentRef,
        mutate: Callable[[GraphDocument], MutationResult],
        save_as_prefix: str,
        save_as: str,
    ) -> MutationResult:
        experiment_id = experiment_id_of(experiment)
        summary, raw_document = self._gateway.get_experiment_by_id(workspace, experiment_id)

        document = codec.parse_experiment(raw_document)
        result = mutate(document)
        modified = codec.serialize_experiment(document)

        if save_as:
            new_name = save_as_prefix + save_as
            logger.info(f"Saving {result.operation} of experiment {experiment_id} as '{new_name}'")
            self._gateway.save_experiment_as(workspace, summary, modified, new_name)
        else:
            new_name = None
            logger.info(f"Saving {result.operation} of experiment {experiment_id} in place")
            self._gateway.save_experiment(workspace, summary, modified)

        event_publisher.publish(ExperimentModified(
            event_id="",
            timestamp=None,
            aggregate_id=experiment_id,
            workspace_id=workspace.workspace_id,
            operation=result.operation,
            items_changed=result.items_changed,
            saved_as=new_name,
        ))
        return result
