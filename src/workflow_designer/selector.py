"""Definition list / selector.

A thin layer over the lifecycle controller: it keeps the list of stored
definitions and switches the controller's identity when one is picked.
"""

from __future__ import annotations

import logging

from workflow_designer.engine.client import WorkflowEngineClient
from workflow_designer.engine.models import DefinitionSummary
from workflow_designer.errors import EngineError
from workflow_designer.lifecycle.controller import WorkflowLifecycleController

logger = logging.getLogger(__name__)


class DefinitionSelector:
    def __init__(
        self, *, client: WorkflowEngineClient, controller: WorkflowLifecycleController
    ) -> None:
        self._client = client
        self._controller = controller
        self._definitions: list[DefinitionSummary] = []
        self._selected_id: int | None = None
        self._last_error: str | None = None

    @property
    def definitions(self) -> list[DefinitionSummary]:
        return list(self._definitions)

    @property
    def selected_id(self) -> int | None:
        return self._selected_id

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def refresh(self) -> list[DefinitionSummary]:
        """Reload the definition list; on failure the previous list is kept."""

        try:
            definitions = self._client.list_definitions()
        except EngineError as e:
            self._last_error = f"Could not refresh definitions: {e.message}"
            logger.error("Definition list refresh failed", extra={"error": e.message})
            return self.definitions

        self._definitions = definitions
        self._last_error = None
        logger.debug("Definition list refreshed", extra={"count": len(definitions)})
        return self.definitions

    def select(self, definition_id: int) -> bool:
        """Load ``definition_id`` into the controller.

        The selection moves immediately so a later pick supersedes this one
        even while its load is still in flight.
        """

        previous_id, self._selected_id = self._selected_id, definition_id
        try:
            loaded = self._controller.load(definition_id)
        except EngineError:
            # The controller still holds the previous definition.
            if self._selected_id == definition_id:
                self._selected_id = previous_id
            raise
        if not loaded:
            logger.info("Selection superseded", extra={"definition_id": definition_id})
        return loaded

    def new(self) -> None:
        self._selected_id = None
        self._controller.new_definition()

    def save(self) -> int | None:
        saved_id = self._controller.save()
        if saved_id is None:
            return None
        self._selected_id = saved_id
        self.refresh()
        return saved_id
