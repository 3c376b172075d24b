"""Test configuration and fixtures."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from workflow_designer.config import RunPollPolicy
from workflow_designer.engine.client import WorkflowEngineClient
from workflow_designer.graph.document import GraphDocument
from workflow_designer.lifecycle.controller import WorkflowLifecycleController
from workflow_designer.nodes.builtin import create_default_registry
from workflow_designer.nodes.registry import NodeTypeRegistry


@pytest.fixture
def registry() -> NodeTypeRegistry:
    """Provide a registry holding the built-in node types."""
    return create_default_registry()


@pytest.fixture
def mock_client() -> Mock:
    """Provide a mocked workflow engine client."""
    return Mock(spec=WorkflowEngineClient)


@pytest.fixture
def controller(mock_client: Mock, registry: NodeTypeRegistry) -> WorkflowLifecycleController:
    """Provide a lifecycle controller with the default (single-shot) run policy."""
    return WorkflowLifecycleController(
        client=mock_client, registry=registry, poll_policy=RunPollPolicy()
    )


@pytest.fixture
def login_graph() -> GraphDocument:
    """A start node connected to an API node, as the engine stores it."""
    return GraphDocument.from_wire(
        {
            "nodes": [
                {"id": "node_1", "type": "wf-start", "x": 0, "y": 0, "properties": {}},
                {
                    "id": "node_2",
                    "type": "wf-api",
                    "x": 200,
                    "y": 0,
                    "properties": {"method": "POST", "url": "/login"},
                },
            ],
            "edges": [{"id": "edge_1", "sourceNodeId": "node_1", "targetNodeId": "node_2"}],
        }
    )
