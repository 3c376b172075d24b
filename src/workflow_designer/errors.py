"""Exception types shared across the designer.

Validation and precondition errors are raised locally and never reach the
network layer. Engine errors wrap every transport failure on a remote call.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from workflow_designer.graph.document import GraphViolation


class DesignerError(Exception):
    """Base class for errors surfaced to the operator as one message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class GraphValidationError(DesignerError, ValueError):
    """A graph mutation or document failed local validation."""

    def __init__(self, message: str, violations: list[GraphViolation] | None = None) -> None:
        super().__init__(message)
        self.violations = list(violations or [])


class PreconditionError(DesignerError):
    """An operation was refused locally before any remote call."""


class OperationInProgressError(PreconditionError):
    """The same (or a conflicting) operation is already in flight."""


class EngineError(DesignerError):
    """A remote engine call failed (network, non-2xx, or malformed body)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
