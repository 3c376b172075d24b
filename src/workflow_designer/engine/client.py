"""HTTP client for the remote workflow engine.

The engine stores definitions, executes graphs and generates graphs from
prompts; this wrapper keeps those calls out of the controllers and makes them
easy to mock in tests. Every failure is raised as :class:`EngineError`.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from workflow_designer.config import DEFAULT_API_PREFIX, DesignerSettings
from workflow_designer.engine.models import (
    DefinitionSummary,
    RunStarted,
    WorkflowDefinition,
    WorkflowInstance,
)
from workflow_designer.errors import EngineError
from workflow_designer.graph.document import GraphDocument

logger = logging.getLogger(__name__)

LIST_DEFINITIONS_PATH = "/workflow/definitions"
DEFINITIONS_PATH = "/definitions"
RUN_PATH = "/workflow/run"
INSTANCES_PATH = "/workflow/instances"
AI_GENERATE_PATH = "/workflow/ai-generate"


class WorkflowEngineClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_prefix: str = DEFAULT_API_PREFIX,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url.strip():
            raise ValueError("Workflow engine base URL is required")

        self._base_url = base_url.rstrip("/")
        self._api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": "workflow-designer",
            }
        )

    @classmethod
    def from_settings(cls, settings: DesignerSettings) -> WorkflowEngineClient:
        return cls(
            base_url=settings.engine_base_url,
            api_prefix=settings.engine_api_prefix,
            timeout=settings.request_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}{self._api_prefix}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, *, payload: dict[str, Any] | None = None) -> Any:
        url = self._url(path)
        logger.debug("Engine request", extra={"method": method, "url": url})
        try:
            resp = self._session.request(method, url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            logger.error(
                "Workflow engine unreachable",
                extra={"method": method, "url": url, "error": str(e)},
            )
            raise EngineError(f"Could not reach the workflow engine: {e}") from e

        if not resp.ok:
            logger.error(
                "Workflow engine returned an error status",
                extra={"method": method, "url": url, "status_code": resp.status_code},
            )
            raise EngineError(
                f"Workflow engine returned HTTP {resp.status_code} for {method} {path}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            logger.error("Workflow engine returned invalid JSON", extra={"url": url})
            raise EngineError(f"Workflow engine returned invalid JSON for {method} {path}") from e

    def list_definitions(self) -> list[DefinitionSummary]:
        data = self._request("GET", LIST_DEFINITIONS_PATH)
        if not isinstance(data, list):
            raise EngineError("Unexpected definition list response: expected a list")
        return [DefinitionSummary.from_json(item) for item in data]

    def get_definition(self, definition_id: int) -> WorkflowDefinition:
        data = self._request("GET", f"{DEFINITIONS_PATH}/{definition_id}")
        return WorkflowDefinition.from_json(data)

    def save_definition(
        self,
        *,
        definition_id: int | None,
        name: str,
        description: str | None,
        graph: GraphDocument,
    ) -> int:
        """Create (``definition_id=None``) or update a definition; return its id."""

        payload = WorkflowDefinition(
            id=definition_id, name=name, description=description, graph=graph
        ).to_json()
        data = self._request("POST", DEFINITIONS_PATH, payload=payload)
        if not isinstance(data, dict):
            raise EngineError("Unexpected save response: expected an object")
        saved_id = data.get("id")
        if isinstance(saved_id, bool) or not isinstance(saved_id, int):
            raise EngineError("Unexpected save response: missing id")
        logger.info("Definition saved", extra={"definition_id": saved_id})
        return saved_id

    def run_workflow(self, workflow_id: int) -> RunStarted:
        data = self._request("POST", RUN_PATH, payload={"workflow_id": workflow_id})
        started = RunStarted.from_json(data)
        logger.info(
            "Workflow run started",
            extra={"workflow_id": workflow_id, "instance_id": started.instance_id},
        )
        return started

    def get_instance(self, instance_id: int) -> WorkflowInstance:
        data = self._request("GET", f"{INSTANCES_PATH}/{instance_id}")
        return WorkflowInstance.from_json(data)

    def ai_generate(self, prompt: str) -> GraphDocument:
        data = self._request("POST", AI_GENERATE_PATH, payload={"prompt": prompt})
        if not isinstance(data, dict) or "lf_json" not in data:
            raise EngineError("Unexpected ai-generate response: missing lf_json")
        try:
            return GraphDocument.from_wire(data["lf_json"])
        except ValueError as e:
            raise EngineError(f"Unexpected ai-generate response: {e}") from e

    def close(self) -> None:
        self._session.close()
        logger.debug("Workflow engine client closed")

    def __enter__(self) -> WorkflowEngineClient:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()
