"""Client for the remote workflow engine and its response types."""

from workflow_designer.engine.client import WorkflowEngineClient
from workflow_designer.engine.models import (
    DefinitionSummary,
    InstanceStatus,
    RunStarted,
    StepResult,
    WorkflowDefinition,
    WorkflowInstance,
)

__all__ = [
    "DefinitionSummary",
    "InstanceStatus",
    "RunStarted",
    "StepResult",
    "WorkflowDefinition",
    "WorkflowEngineClient",
    "WorkflowInstance",
]
