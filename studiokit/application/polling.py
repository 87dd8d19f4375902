"""Bounded, cancellable polling of remote pack/unpack activities."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from studiokit.config import settings
from studiokit.domain.errors import CopyCancelledError, CopyTimeoutError
from studiokit.domain.ports import StudioGatewayPort
from studiokit.schemas.studio_schemas import Activity, WorkspaceSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollPolicy:
    """How often to poll and how many polls one phase may spend."""
    interval_seconds: float = 2.0
    max_attempts: int = 300

    def __post_init__(self):
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_settings(cls) -> PollPolicy:
        return cls(
            interval_seconds=settings.POLL_INTERVAL_SECONDS,
            max_attempts=settings.POLL_MAX_ATTEMPTS,
        )


class CancellationToken:
    """Cooperative cancellation signal shared with a running copy."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True early if cancelled."""
        return self._event.wait(seconds)

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise CopyCancelledError("Copy cancelled")


class ActivityPoller:
    """Re-polls an activity until its status is 'Complete'."""

    def __init__(self, gateway: StudioGatewayPort, policy: PollPolicy) -> None:
        self._gateway = gateway
        self._policy = policy

    def wait_for_completion(
        self,
        workspace: WorkspaceSettings,
        activity: Activity,
        is_source_side: bool,
        cancel_token: Optional[CancellationToken] = None,
    ) -> tuple[Activity, int]:
        """Return the completed activity and the number of polls issued.

        Raises:
            CopyTimeoutError: after ``max_attempts`` polls without completion.
            CopyCancelledError: when ``cancel_token`` is cancelled.
        """
        token = cancel_token or CancellationToken()
        side = "source" if is_source_side else "destination"
        polls = 0
        while not activity.is_complete:
            token.raise_if_cancelled()
            if polls >= self._policy.max_attempts:
                raise CopyTimeoutError(
                    f"Activity {activity.activity_id} on {side} side still '{activity.status}' "
                    f"after {polls} polls"
                )
            if self._policy.interval_seconds and token.wait(self._policy.interval_seconds):
                token.raise_if_cancelled()
            activity = self._gateway.get_activity_status(workspace, activity.activity_id, is_source_side)
            polls += 1
            logger.debug(f"Activity {activity.activity_id} ({side}) poll {polls}: {activity.status}")
        return activity, polls
