"""Domain error hierarchy for clean exception handling."""
from __future__ import annotations


class DomainError(Exception):
    """Base for all domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ExperimentNotFoundError(NotFoundError):
    """The experiment does not exist in the workspace."""


class NodeNotFoundError(NotFoundError):
    """No module node carries the requested comment."""


class PortNotFoundError(NotFoundError):
    """A module node has no port in the required direction."""


class NoMatchError(NotFoundError):
    """A strict-mode mutation matched nothing."""


class AssetNotFoundError(NotFoundError):
    """No trained model or transform with the requested id."""


class ValidationError(DomainError):
    """Invalid input or state."""


class MalformedDocumentError(ValidationError):
    """Experiment document lacks the expected graph sections."""


class ConflictError(DomainError):
    """Resource conflict (e.g., duplicate name)."""


class DuplicateNodeIdError(ConflictError):
    """A module node with the same id already exists."""


class PersistenceError(DomainError):
    """The remote service refused to store the experiment."""


class ExperimentRunError(DomainError):
    """The remote service refused to start an experiment run."""


class CopyError(DomainError):
    """Cross-workspace copy failed."""


class UnpackError(CopyError):
    """The destination workspace rejected the transfer handle."""


class CopyTimeoutError(CopyError):
    """An activity did not complete within the poll budget."""


class CopyCancelledError(CopyError):
    """The copy was cancelled while polling."""
