"""Cross-workspace experiment copy: pack, poll, unpack, poll."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from studiokit.application.polling import ActivityPoller, CancellationToken, PollPolicy
from studiokit.domain.errors import UnpackError
from studiokit.domain.events import event_publisher, ExperimentCopied, ExperimentCopyFailed
from studiokit.domain.ports import StudioGatewayPort
from studiokit.schemas.studio_schemas import ExperimentRef, WorkspaceSettings, experiment_id_of

logger = logging.getLogger(__name__)


class CopyState(str, Enum):
    REQUESTED_PACK = "REQUESTED_PACK"
    POLLING_PACK = "POLLING_PACK"
    PACKED = "PACKED"
    REQUESTED_UNPACK = "REQUESTED_UNPACK"
    POLLING_UNPACK = "POLLING_UNPACK"
    DONE = "DONE"


@dataclass
class CopyOutcome:
    experiment_id: str
    state: CopyState
    pack_polls: int = 0
    unpack_polls: int = 0
    transfer_handle: Optional[str] = None


@dataclass
class BatchCopyResult:
    succeeded: List[CopyOutcome] = field(default_factory=list)
    failed: Dict[str, Exception] = field(default_factory=dict)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


class ExperimentCopyService:
    """Drives the two-phase copy protocol to completion, one experiment at a time."""

    def __init__(self, gateway: StudioGatewayPort, policy: PollPolicy | None = None) -> None:
        self._gateway = gateway
        self._poller = ActivityPoller(gateway, policy or PollPolicy.from_settings())

    def copy_experiment(
        self,
        source: WorkspaceSettings,
        experiment: ExperimentRef,
        destination: WorkspaceSettings,
        cancel_token: CancellationToken | None = None,
    ) -> CopyOutcome:
        """Copy one experiment into ``destination``; raise on failure."""
        token = cancel_token or CancellationToken()
        experiment_id = experiment_id_of(experiment)
        outcome = CopyOutcome(experiment_id=experiment_id, state=CopyState.REQUESTED_PACK)
        try:
            self._run(source, destination, outcome, token)
        except Exception as exc:
            event_publisher.publish(ExperimentCopyFailed(
                event_id="",
                timestamp=None,
                aggregate_id=experiment_id,
                source_workspace_id=source.workspace_id,
                destination_workspace_id=destination.workspace_id,
                state=outcome.state.value,
                reason=str(exc),
            ))
            raise

        event_publisher.publish(ExperimentCopied(
            event_id="",
            timestamp=None,
            aggregate_id=experiment_id,
            source_workspace_id=source.workspace_id,
            destination_workspace_id=destination.workspace_id,
        ))
        return outcome

    def _run(
        self,
        source: WorkspaceSettings,
        destination: WorkspaceSettings,
        outcome: CopyOutcome,
        token: CancellationToken,
    ) -> None:
        experiment_id = outcome.experiment_id
        token.raise_if_cancelled()

        # Fails with ExperimentNotFoundError before anything is packed
        self._gateway.get_experiment_by_id(source, experiment_id)

        logger.info(f"Packing experiment {experiment_id} in workspace {source.workspace_id}")
        activity = self._gateway.pack_experiment(source, experiment_id)

        outcome.state = CopyState.POLLING_PACK
        activity, outcome.pack_polls = self._poller.wait_for_completion(
            source, activity, is_source_side=True, cancel_token=token
        )
        outcome.state = CopyState.PACKED
        if not activity.location:
            raise UnpackError(f"Pack activity {activity.activity_id} completed without a transfer handle")
        outcome.transfer_handle = activity.location

        outcome.state = CopyState.REQUESTED_UNPACK
        logger.info(f"Unpacking experiment {experiment_id} into workspace {destination.workspace_id}")
        activity = self._gateway.unpack_experiment(destination, activity.location, destination.location)

        outcome.state = CopyState.POLLING_UNPACK
        activity, outcome.unpack_polls = self._poller.wait_for_completion(
            destination, activity, is_source_side=False, cancel_token=token
        )
        outcome.state = CopyState.DONE
        logger.info(
            f"Copied experiment {experiment_id} from {source.workspace_id} to {destination.workspace_id}"
        )

    def copy_experiments(
        self,
        source: WorkspaceSettings,
        experiments: Iterable[ExperimentRef],
        destination: WorkspaceSettings,
        cancel_token: CancellationToken | None = None,
    ) -> BatchCopyResult:
        """Copy each experiment in turn; failures are collected, not raised."""
        result = BatchCopyResult()
        for experiment in experiments:
            experiment_id = experiment_id_of(experiment)
            try:
                result.succeeded.append(
                    self.copy_experiment(source, experiment_id, destination, cancel_token)
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"Copy of experiment {experiment_id} failed: {exc}")
                result.failed[experiment_id] = exc
        return result

    def copy_all_experiments(
        self,
        source: WorkspaceSettings,
        destination: WorkspaceSettings,
        cancel_token: CancellationToken | None = None,
    ) -> BatchCopyResult:
        experiments = self._gateway.list_experiments(source)
        return self.copy_experiments(source, experiments, destination, cancel_token)
