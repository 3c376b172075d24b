"""Unit tests for the lifecycle state machine."""

from __future__ import annotations

import pytest

from workflow_designer.engine.models import InstanceStatus
from workflow_designer.lifecycle.state_machine import (
    BusyFlags,
    IllegalTransitionError,
    LifecycleState,
    state_for_instance,
    transition,
)


def test_unsaved_workflow_cannot_run() -> None:
    with pytest.raises(IllegalTransitionError):
        transition(current=LifecycleState.UNSAVED, to=LifecycleState.RUNNING)


@pytest.mark.parametrize(
    ("current", "to"),
    [
        (LifecycleState.UNSAVED, LifecycleState.SAVED),
        (LifecycleState.SAVED, LifecycleState.RUNNING),
        (LifecycleState.RUNNING, LifecycleState.COMPLETED),
        (LifecycleState.RUNNING, LifecycleState.FAILED),
        (LifecycleState.FAILED, LifecycleState.RUNNING),
        (LifecycleState.COMPLETED, LifecycleState.SAVED),
    ],
)
def test_allowed_transitions(current: LifecycleState, to: LifecycleState) -> None:
    assert transition(current=current, to=to) is to


def test_terminal_states_do_not_flip() -> None:
    with pytest.raises(IllegalTransitionError):
        transition(current=LifecycleState.COMPLETED, to=LifecycleState.FAILED)


@pytest.mark.parametrize(
    ("status", "state"),
    [
        (InstanceStatus.PENDING, LifecycleState.RUNNING),
        (InstanceStatus.RUNNING, LifecycleState.RUNNING),
        (InstanceStatus.SUCCEEDED, LifecycleState.COMPLETED),
        (InstanceStatus.FAILED, LifecycleState.FAILED),
    ],
)
def test_state_for_instance(status: InstanceStatus, state: LifecycleState) -> None:
    assert state_for_instance(status) is state


def test_busy_flags_any() -> None:
    assert not BusyFlags().any
    assert BusyFlags(generating=True).any
