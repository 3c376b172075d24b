"""Workflow lifecycle controller.

Owns the editing session for one workflow definition (identity, name,
description, graph, latest execution instance) and drives it through
edit -> save -> run -> poll against the remote engine, with AI generation as
an alternate graph producer.

Operations may be called from worker threads (see
:mod:`workflow_designer.lifecycle.background`). Each remote call runs outside
the lock and captures the request generation it was issued under; a result
that comes back after the identity changed (``new_definition`` or a newer
``load``) is discarded instead of overwriting the current session.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from workflow_designer.canvas.controller import CanvasController
from workflow_designer.config import RunPollPolicy
from workflow_designer.engine.client import WorkflowEngineClient
from workflow_designer.engine.models import WorkflowInstance
from workflow_designer.errors import (
    EngineError,
    GraphValidationError,
    OperationInProgressError,
    PreconditionError,
)
from workflow_designer.events import Subscription
from workflow_designer.graph.document import (
    GraphDocument,
    apply_defaults,
    empty_document,
    errors_only,
    validate,
)
from workflow_designer.lifecycle.state_machine import (
    BusyFlags,
    LifecycleState,
    state_for_instance,
    transition,
)
from workflow_designer.nodes.registry import NodeTypeRegistry

logger = logging.getLogger(__name__)

UNTITLED = "untitled"


@dataclass(frozen=True, slots=True)
class LifecycleSnapshot:
    definition_id: int | None
    name: str
    description: str
    graph: GraphDocument
    instance: WorkflowInstance | None
    state: LifecycleState
    busy: BusyFlags
    last_error: str | None


class WorkflowLifecycleController:
    def __init__(
        self,
        *,
        client: WorkflowEngineClient,
        registry: NodeTypeRegistry,
        poll_policy: RunPollPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._registry = registry
        self._poll_policy = poll_policy or RunPollPolicy()
        self._sleep = sleep
        self._clock = clock

        self._lock = threading.RLock()
        self._generation = 0
        self._load_sequence = 0

        self._definition_id: int | None = None
        self._name = UNTITLED
        self._description = ""
        self._graph = empty_document()
        self._instance: WorkflowInstance | None = None
        self._instance_id: int | None = None
        self._state = LifecycleState.UNSAVED
        self._busy = BusyFlags()
        self._last_error: str | None = None

        self._canvas: CanvasController | None = None
        self._canvas_subscription: Subscription | None = None

    # -- read access ---------------------------------------------------------

    @property
    def definition_id(self) -> int | None:
        return self._definition_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def graph(self) -> GraphDocument:
        return self._graph

    @property
    def instance(self) -> WorkflowInstance | None:
        return self._instance

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def busy(self) -> BusyFlags:
        return self._busy

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def poll_policy(self) -> RunPollPolicy:
        return self._poll_policy

    def snapshot(self) -> LifecycleSnapshot:
        with self._lock:
            return LifecycleSnapshot(
                definition_id=self._definition_id,
                name=self._name,
                description=self._description,
                graph=self._graph,
                instance=self._instance,
                state=self._state,
                busy=self._busy,
                last_error=self._last_error,
            )

    # -- local edits ---------------------------------------------------------

    def set_name(self, name: str) -> None:
        with self._lock:
            self._name = name

    def set_description(self, description: str) -> None:
        with self._lock:
            self._description = description

    def update_graph(self, document: GraphDocument) -> None:
        """Adopt a document produced by the canvas as the new source of truth."""

        with self._lock:
            self._graph = document

    # -- canvas wiring -------------------------------------------------------

    def attach_canvas(self, canvas: CanvasController) -> Subscription:
        self.detach_canvas()
        with self._lock:
            canvas.set_document(self._graph)
            self._canvas = canvas
            self._canvas_subscription = canvas.on_change(self.update_graph)
            return self._canvas_subscription

    def detach_canvas(self) -> None:
        if self._canvas_subscription is not None:
            self._canvas_subscription.unsubscribe()
        self._canvas_subscription = None
        self._canvas = None

    def close(self) -> None:
        self.detach_canvas()

    def _push_to_canvas(self, document: GraphDocument) -> None:
        # Called with the lock held so a later identity switch pushes last.
        canvas = self._canvas
        if canvas is not None and not canvas.closed:
            canvas.set_document(document)

    # -- identity ------------------------------------------------------------

    def new_definition(self) -> None:
        with self._lock:
            self._generation += 1
            self._definition_id = None
            self._name = UNTITLED
            self._description = ""
            self._graph = empty_document()
            self._instance = None
            self._instance_id = None
            self._state = LifecycleState.UNSAVED
            self._last_error = None
            self._push_to_canvas(self._graph)
        logger.info("New workflow definition", extra={"generation": self._generation})

    def load(self, definition_id: int) -> bool:
        """Replace the session with a stored definition.

        Returns False when a newer identity switch made this response stale.
        """

        with self._lock:
            self._load_sequence += 1
            sequence = self._load_sequence
            generation = self._generation
            self._set_busy(loading=True)

        try:
            definition = self._client.get_definition(definition_id)
        except EngineError as e:
            self._record_failure("load", e, generation)
            raise
        finally:
            with self._lock:
                if sequence == self._load_sequence:
                    self._set_busy(loading=False)

        document = apply_defaults(definition.graph, self._registry)
        with self._lock:
            if sequence != self._load_sequence or generation != self._generation:
                self._discard("load", generation, definition_id=definition_id)
                return False
            self._generation += 1
            self._definition_id = definition.id if definition.id is not None else definition_id
            self._name = definition.name
            self._description = definition.description or ""
            self._graph = document
            self._instance = None
            self._instance_id = None
            self._state = LifecycleState.SAVED
            self._last_error = None
            self._push_to_canvas(document)

        logger.info(
            "Workflow definition loaded",
            extra={"definition_id": self._definition_id, "nodes": len(document.nodes)},
        )
        return True

    # -- remote operations ---------------------------------------------------

    def save(self) -> int | None:
        """Create or update the definition; return its id, or None if skipped."""

        with self._lock:
            if self._busy.saving or self._busy.running:
                raise self._refuse(OperationInProgressError("A save or run is already in progress"))
            if self._graph.is_empty:
                logger.info("Nothing to save: graph is empty")
                return None
            violations = errors_only(validate(self._graph, self._registry))
            if violations:
                message = "Graph is invalid: " + "; ".join(v.message for v in violations)
                self._last_error = message
                raise GraphValidationError(message, violations)

            generation = self._generation
            definition_id = self._definition_id
            name = self._name.strip() or UNTITLED
            description = self._description.strip() or None
            graph = self._graph
            self._set_busy(saving=True)

        try:
            saved_id = self._client.save_definition(
                definition_id=definition_id,
                name=name,
                description=description,
                graph=graph,
            )
        except EngineError as e:
            self._record_failure("save", e, generation)
            raise
        finally:
            with self._lock:
                self._set_busy(saving=False)

        with self._lock:
            if generation != self._generation:
                self._discard("save", generation, definition_id=saved_id)
                return None
            if definition_id is not None and saved_id != definition_id:
                logger.warning(
                    "Engine returned a different id on update",
                    extra={"sent_id": definition_id, "saved_id": saved_id},
                )
            self._change_state(LifecycleState.SAVED)
            self._definition_id = saved_id
            self._last_error = None
        return saved_id

    def run(self) -> WorkflowInstance | None:
        """Start a remote run of the saved definition and fetch its instance."""

        with self._lock:
            if self._definition_id is None:
                raise self._refuse(PreconditionError("Save the workflow before running it"))
            if self._busy.running or self._busy.saving:
                raise self._refuse(OperationInProgressError("A save or run is already in progress"))
            generation = self._generation
            workflow_id = self._definition_id
            self._set_busy(running=True)

        try:
            started = self._client.run_workflow(workflow_id)
            with self._lock:
                if generation != self._generation:
                    self._discard("run", generation, instance_id=started.instance_id)
                    return None
                self._change_state(LifecycleState.RUNNING)
                self._instance_id = started.instance_id
            return self._follow_up(started.instance_id, generation)
        except EngineError as e:
            self._record_failure("run", e, generation)
            raise
        finally:
            with self._lock:
                self._set_busy(running=False)

    def poll(self) -> WorkflowInstance | None:
        """Fetch the running instance once more."""

        with self._lock:
            if self._instance_id is None or self._state is not LifecycleState.RUNNING:
                raise self._refuse(PreconditionError("There is no running instance to poll"))
            if self._busy.running:
                raise self._refuse(OperationInProgressError("A run is already in progress"))
            generation = self._generation
            instance_id = self._instance_id
            self._set_busy(running=True)

        try:
            instance = self._client.get_instance(instance_id)
        except EngineError as e:
            self._record_failure("poll", e, generation)
            raise
        finally:
            with self._lock:
                self._set_busy(running=False)

        return instance if self._apply_instance(instance, generation) else None

    def generate_from_prompt(self, prompt: str) -> GraphDocument | None:
        """Replace the graph with one generated from ``prompt``.

        Identity, name and description are left as they are.
        """

        prompt = prompt.strip()
        with self._lock:
            if not prompt:
                raise self._refuse(PreconditionError("Describe the workflow to generate"))
            if self._busy.generating:
                raise self._refuse(OperationInProgressError("Generation is already in progress"))
            generation = self._generation
            self._set_busy(generating=True)

        try:
            generated = self._client.ai_generate(prompt)
        except EngineError as e:
            self._record_failure("generate", e, generation)
            raise
        finally:
            with self._lock:
                self._set_busy(generating=False)

        document = apply_defaults(generated, self._registry)
        with self._lock:
            if generation != self._generation:
                self._discard("generate", generation)
                return None
            self._graph = document
            self._last_error = None
            self._push_to_canvas(document)

        logger.info(
            "Graph generated from prompt",
            extra={"nodes": len(document.nodes), "edges": len(document.edges)},
        )
        return document

    # -- internals -----------------------------------------------------------

    def _follow_up(self, instance_id: int, generation: int) -> WorkflowInstance | None:
        policy = self._poll_policy
        started = self._clock()
        while True:
            instance = self._client.get_instance(instance_id)
            if not self._apply_instance(instance, generation):
                return None
            if not policy.until_terminal or instance.is_terminal:
                return instance
            if policy.timeout_seconds and (self._clock() - started) >= policy.timeout_seconds:
                logger.warning(
                    "Timed out waiting for instance to finish",
                    extra={"instance_id": instance_id, "timeout_seconds": policy.timeout_seconds},
                )
                return instance
            self._sleep(policy.interval_seconds)

    def _apply_instance(self, instance: WorkflowInstance, generation: int) -> bool:
        with self._lock:
            if generation != self._generation:
                self._discard("instance", generation, instance_id=instance.id)
                return False
            self._instance = instance
            self._change_state(state_for_instance(instance.status))
            self._last_error = None
        logger.info(
            "Instance status",
            extra={
                "instance_id": instance.id,
                "status": instance.status.value,
                "steps": len(instance.steps),
            },
        )
        return True

    def _change_state(self, to: LifecycleState) -> None:
        if to is self._state:
            return
        previous = self._state
        self._state = transition(current=previous, to=to)
        logger.info(
            "Lifecycle transition",
            extra={"from": previous.value, "to": to.value, "definition_id": self._definition_id},
        )

    def _set_busy(self, **flags: bool) -> None:
        self._busy = dataclasses.replace(self._busy, **flags)

    def _refuse(self, error: PreconditionError) -> PreconditionError:
        self._last_error = error.message
        logger.info("Operation refused", extra={"reason": error.message})
        return error

    def _record_failure(self, operation: str, error: EngineError, generation: int) -> None:
        logger.error(
            "Workflow engine call failed",
            extra={"operation": operation, "error": error.message},
        )
        with self._lock:
            if generation == self._generation:
                self._last_error = f"{operation.capitalize()} failed: {error.message}"

    def _discard(self, operation: str, generation: int, **context: object) -> None:
        logger.info(
            "Discarding stale response",
            extra={
                "operation": operation,
                "issued_generation": generation,
                "current_generation": self._generation,
                **context,
            },
        )
