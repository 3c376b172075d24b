"""Typed projections of the workflow engine's responses."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from workflow_designer.errors import EngineError
from workflow_designer.graph.document import GraphDocument

logger = logging.getLogger(__name__)


class InstanceStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (InstanceStatus.SUCCEEDED, InstanceStatus.FAILED)

    @classmethod
    def from_wire(cls, value: object) -> InstanceStatus:
        raw = str(value or "").strip().lower()
        if raw in _STATUS_ALIASES:
            return _STATUS_ALIASES[raw]
        logger.warning("Unrecognised instance status; treating as pending", extra={"status": raw})
        return cls.PENDING


_STATUS_ALIASES: dict[str, InstanceStatus] = {
    "pending": InstanceStatus.PENDING,
    "queued": InstanceStatus.PENDING,
    "running": InstanceStatus.RUNNING,
    "succeeded": InstanceStatus.SUCCEEDED,
    "success": InstanceStatus.SUCCEEDED,
    "completed": InstanceStatus.SUCCEEDED,
    "failed": InstanceStatus.FAILED,
    "failure": InstanceStatus.FAILED,
    "error": InstanceStatus.FAILED,
}


def _int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _opt_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def _require_object(data: object, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise EngineError(f"Unexpected {what} response: expected an object")
    return data


def _require_id(data: dict[str, Any], key: str, what: str) -> int:
    value = _int(data.get(key))
    if value is None:
        raise EngineError(f"Unexpected {what} response: missing {key}")
    return value


@dataclass(frozen=True, slots=True)
class DefinitionSummary:
    id: int
    name: str
    description: str | None = None

    @staticmethod
    def from_json(obj: object) -> DefinitionSummary:
        data = _require_object(obj, "definition list")
        return DefinitionSummary(
            id=_require_id(data, "id", "definition list"),
            name=str(data.get("name") or ""),
            description=_opt_str(data.get("description")),
        )


@dataclass(frozen=True, slots=True)
class WorkflowDefinition:
    """A persisted workflow: identity, name, description and graph."""

    id: int | None
    name: str
    description: str | None
    graph: GraphDocument

    @staticmethod
    def from_json(obj: object) -> WorkflowDefinition:
        data = _require_object(obj, "definition")
        try:
            graph = GraphDocument.from_wire(data.get("lf_json"))
        except ValueError as e:
            raise EngineError(f"Unexpected definition response: {e}") from e
        return WorkflowDefinition(
            id=_require_id(data, "id", "definition"),
            name=str(data.get("name") or ""),
            description=_opt_str(data.get("description")),
            graph=graph,
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "lf_json": self.graph.to_wire(),
        }


@dataclass(frozen=True, slots=True)
class RunStarted:
    instance_id: int
    status: str

    @staticmethod
    def from_json(obj: object) -> RunStarted:
        data = _require_object(obj, "run")
        return RunStarted(
            instance_id=_require_id(data, "instance_id", "run"),
            status=str(data.get("status") or ""),
        )


@dataclass(frozen=True, slots=True)
class StepResult:
    node_id: str
    node_type: str
    status: str
    message: str | None = None

    @staticmethod
    def from_json(obj: dict[str, Any]) -> StepResult:
        return StepResult(
            node_id=str(obj.get("node_id") or ""),
            node_type=str(obj.get("node_type") or ""),
            status=str(obj.get("status") or ""),
            message=_opt_str(obj.get("message")),
        )


@dataclass(frozen=True, slots=True)
class WorkflowInstance:
    """One remote execution of a definition. Read-only on the client."""

    id: int
    workflow_id: int | None
    status: InstanceStatus
    started_at: str | None = None
    finished_at: str | None = None
    error: str | None = None
    steps: list[StepResult] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @staticmethod
    def from_json(obj: object) -> WorkflowInstance:
        data = _require_object(obj, "instance")
        raw_steps = data.get("steps")
        if not isinstance(raw_steps, list):
            if raw_steps is not None:
                logger.warning(
                    "Instance steps is not a list; using an empty list",
                    extra={"steps_type": type(raw_steps).__name__},
                )
            raw_steps = []
        steps = [StepResult.from_json(s) for s in raw_steps if isinstance(s, dict)]
        return WorkflowInstance(
            id=_require_id(data, "id", "instance"),
            workflow_id=_int(data.get("workflow_id")),
            status=InstanceStatus.from_wire(data.get("status")),
            started_at=_opt_str(data.get("started_at")),
            finished_at=_opt_str(data.get("finished_at")),
            error=_opt_str(data.get("error")),
            steps=steps,
        )
