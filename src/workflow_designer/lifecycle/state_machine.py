from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from workflow_designer.engine.models import InstanceStatus


class LifecycleState(str, Enum):
    UNSAVED = "unsaved"
    SAVED = "saved"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# new_definition() and load() reset the state directly and are not listed here.
ALLOWED_TRANSITIONS: dict[LifecycleState, set[LifecycleState]] = {
    LifecycleState.UNSAVED: {LifecycleState.SAVED},
    LifecycleState.SAVED: {LifecycleState.SAVED, LifecycleState.RUNNING},
    LifecycleState.RUNNING: {
        LifecycleState.RUNNING,
        LifecycleState.COMPLETED,
        LifecycleState.FAILED,
        LifecycleState.SAVED,
    },
    LifecycleState.COMPLETED: {LifecycleState.SAVED, LifecycleState.RUNNING},
    LifecycleState.FAILED: {LifecycleState.SAVED, LifecycleState.RUNNING},
}


class IllegalTransitionError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class BusyFlags:
    """Operations currently in flight; a UI disables the matching affordances."""

    loading: bool = False
    saving: bool = False
    running: bool = False
    generating: bool = False

    @property
    def any(self) -> bool:
        return self.loading or self.saving or self.running or self.generating


def transition(*, current: LifecycleState, to: LifecycleState) -> LifecycleState:
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.value} -> {to.value}")
    return to


def state_for_instance(status: InstanceStatus) -> LifecycleState:
    if status is InstanceStatus.SUCCEEDED:
        return LifecycleState.COMPLETED
    if status is InstanceStatus.FAILED:
        return LifecycleState.FAILED
    return LifecycleState.RUNNING
