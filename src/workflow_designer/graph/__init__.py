"""Graph document model and its pure operations."""

from workflow_designer.graph.document import (
    GraphDocument,
    GraphEdge,
    GraphNode,
    GraphViolation,
    NodeText,
    add_edge,
    add_node,
    apply_defaults,
    deserialize,
    empty_document,
    errors_only,
    fresh_id,
    move_node,
    remove_edge,
    remove_node,
    serialize,
    set_node_property,
    validate,
)

__all__ = [
    "GraphDocument",
    "GraphEdge",
    "GraphNode",
    "GraphViolation",
    "NodeText",
    "add_edge",
    "add_node",
    "apply_defaults",
    "deserialize",
    "empty_document",
    "errors_only",
    "fresh_id",
    "move_node",
    "remove_edge",
    "remove_node",
    "serialize",
    "set_node_property",
    "validate",
]
