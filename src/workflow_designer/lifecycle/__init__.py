"""Workflow lifecycle: edit, save, run and poll against the remote engine."""

from workflow_designer.lifecycle.background import run_in_background
from workflow_designer.lifecycle.controller import (
    UNTITLED,
    LifecycleSnapshot,
    WorkflowLifecycleController,
)
from workflow_designer.lifecycle.state_machine import (
    ALLOWED_TRANSITIONS,
    BusyFlags,
    IllegalTransitionError,
    LifecycleState,
    state_for_instance,
    transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "BusyFlags",
    "IllegalTransitionError",
    "LifecycleSnapshot",
    "LifecycleState",
    "UNTITLED",
    "WorkflowLifecycleController",
    "run_in_background",
    "state_for_instance",
    "transition",
]
