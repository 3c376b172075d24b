"""Graph document model: the node/edge container shared by canvas and engine.

All operations are pure: they return a new document and leave the input
untouched. Failed operations raise :class:`GraphValidationError`.

Wire shape::

    {"nodes": [{"id", "type", "x", "y", "width"?, "height"?, "properties"?, "text"?}],
     "edges": [{"id", "sourceNodeId", "targetNodeId", "text"?}]}

Unknown keys on nodes, edges and text objects are carried through verbatim.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from workflow_designer.errors import GraphValidationError
from workflow_designer.nodes.registry import NodeTypeRegistry

Number = int | float


class NodeText(BaseModel):
    """Explicit label overriding a node type's computed label."""

    model_config = ConfigDict(extra="allow", frozen=True)

    value: str = ""

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {"value": self.value}
        for key, value in (self.model_extra or {}).items():
            out.setdefault(key, copy.deepcopy(value))
        return out


class GraphNode(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: str
    type_tag: str = Field(alias="type")
    x: Number = 0
    y: Number = 0
    width: Number | None = None
    height: Number | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    text: NodeText | None = None

    @field_validator("text", mode="before")
    @classmethod
    def _text_from_string(cls, value: object) -> object:
        if isinstance(value, str):
            return {"value": value}
        return value

    @field_validator("properties", mode="before")
    @classmethod
    def _properties_default(cls, value: object) -> object:
        # The engine may send `null` for a node without properties.
        return {} if value is None else value

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "type": self.type_tag, "x": self.x, "y": self.y}
        if self.width is not None:
            out["width"] = self.width
        if self.height is not None:
            out["height"] = self.height
        out["properties"] = copy.deepcopy(self.properties)
        if self.text is not None:
            out["text"] = self.text.to_wire()
        for key, value in (self.model_extra or {}).items():
            out.setdefault(key, copy.deepcopy(value))
        return out


class GraphEdge(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: str
    source_node_id: str = Field(alias="sourceNodeId")
    target_node_id: str = Field(alias="targetNodeId")
    text: NodeText | None = None

    @field_validator("text", mode="before")
    @classmethod
    def _text_from_string(cls, value: object) -> object:
        if isinstance(value, str):
            return {"value": value}
        return value

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "sourceNodeId": self.source_node_id,
            "targetNodeId": self.target_node_id,
        }
        if self.text is not None:
            out["text"] = self.text.to_wire()
        for key, value in (self.model_extra or {}).items():
            out.setdefault(key, copy.deepcopy(value))
        return out


class GraphDocument(BaseModel):
    """Ordered nodes (creation order, later draws on top) and ordered edges."""

    model_config = ConfigDict(frozen=True)

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> GraphEdge | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def edges_of(self, node_id: str) -> list[GraphEdge]:
        return [e for e in self.edges if node_id in (e.source_node_id, e.target_node_id)]

    def to_wire(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_wire() for n in self.nodes],
            "edges": [e.to_wire() for e in self.edges],
        }

    @classmethod
    def from_wire(cls, obj: object) -> GraphDocument:
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise GraphValidationError("Graph document must be a JSON object")
        payload = {"nodes": obj.get("nodes") or [], "edges": obj.get("edges") or []}
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise GraphValidationError(f"Malformed graph document: {e}") from e


@dataclass(frozen=True, slots=True)
class GraphViolation:
    code: str
    message: str
    severity: Literal["error", "warning"] = "error"
    subject: str | None = None


def empty_document() -> GraphDocument:
    return GraphDocument()


def fresh_id(prefix: str, taken: Iterable[str]) -> str:
    taken_set = set(taken)
    n = len(taken_set) + 1
    while f"{prefix}_{n}" in taken_set:
        n += 1
    return f"{prefix}_{n}"


def validate(doc: GraphDocument, registry: NodeTypeRegistry | None = None) -> list[GraphViolation]:
    """Check id uniqueness, edge endpoints and (with a registry) node types.

    Unresolved types and blank required properties are warnings: such nodes
    still render through the fallback descriptor.
    """

    violations: list[GraphViolation] = []

    seen_nodes: set[str] = set()
    for node in doc.nodes:
        if node.id in seen_nodes:
            violations.append(
                GraphViolation(
                    code="duplicate_node_id",
                    message=f"Duplicate node id: {node.id}",
                    subject=node.id,
                )
            )
        seen_nodes.add(node.id)

    seen_edges: set[str] = set()
    for edge in doc.edges:
        if edge.id in seen_edges:
            violations.append(
                GraphViolation(
                    code="duplicate_edge_id",
                    message=f"Duplicate edge id: {edge.id}",
                    subject=edge.id,
                )
            )
        seen_edges.add(edge.id)

        for end, node_id in (("source", edge.source_node_id), ("target", edge.target_node_id)):
            if node_id not in seen_nodes:
                violations.append(
                    GraphViolation(
                        code="dangling_edge",
                        message=f"Edge {edge.id} references unknown {end} node: {node_id}",
                        subject=edge.id,
                    )
                )

    if registry is not None:
        for node in doc.nodes:
            if not registry.is_registered(node.type_tag):
                violations.append(
                    GraphViolation(
                        code="unknown_node_type",
                        message=f"Node {node.id} has unregistered type: {node.type_tag}",
                        severity="warning",
                        subject=node.id,
                    )
                )
                continue
            descriptor = registry.resolve(node.type_tag)
            props = descriptor.merged_properties(node.properties)
            for name, spec in descriptor.property_schema.items():
                if spec.required and props.get(name) in (None, ""):
                    violations.append(
                        GraphViolation(
                            code="missing_property",
                            message=f"Node {node.id} is missing required property: {name}",
                            severity="warning",
                            subject=node.id,
                        )
                    )

    return violations


def errors_only(violations: Iterable[GraphViolation]) -> list[GraphViolation]:
    return [v for v in violations if v.severity == "error"]


def _require_node(doc: GraphDocument, node_id: str) -> GraphNode:
    node = doc.get_node(node_id)
    if node is None:
        raise GraphValidationError(f"Unknown node: {node_id}")
    return node


def add_node(
    doc: GraphDocument,
    type_tag: str,
    position: tuple[float, float],
    registry: NodeTypeRegistry,
    *,
    properties: dict[str, Any] | None = None,
) -> tuple[GraphDocument, str]:
    if not registry.is_registered(type_tag):
        raise GraphValidationError(f"Cannot add node of unregistered type: {type_tag}")

    descriptor = registry.resolve(type_tag)
    node_id = fresh_id("node", doc.node_ids())
    x, y = position
    node = GraphNode(
        id=node_id,
        type_tag=descriptor.type_tag,
        x=x,
        y=y,
        width=descriptor.default_width,
        height=descriptor.default_height,
        properties=descriptor.merged_properties(properties),
    )
    return doc.model_copy(update={"nodes": [*doc.nodes, node]}), node_id


def remove_node(doc: GraphDocument, node_id: str) -> GraphDocument:
    _require_node(doc, node_id)
    return doc.model_copy(
        update={
            "nodes": [n for n in doc.nodes if n.id != node_id],
            "edges": [
                e
                for e in doc.edges
                if e.source_node_id != node_id and e.target_node_id != node_id
            ],
        }
    )


def move_node(doc: GraphDocument, node_id: str, position: tuple[float, float]) -> GraphDocument:
    _require_node(doc, node_id)
    x, y = position
    nodes = [n.model_copy(update={"x": x, "y": y}) if n.id == node_id else n for n in doc.nodes]
    return doc.model_copy(update={"nodes": nodes})


def add_edge(
    doc: GraphDocument,
    source_id: str,
    target_id: str,
    registry: NodeTypeRegistry | None = None,
) -> tuple[GraphDocument, str]:
    source = doc.get_node(source_id)
    target = doc.get_node(target_id)
    if source is None or target is None:
        missing = source_id if source is None else target_id
        raise GraphValidationError(f"Cannot connect: unknown node {missing}")

    if source_id == target_id and registry is not None:
        if not registry.resolve(source.type_tag).allow_self_loops:
            raise GraphValidationError(f"Node type {source.type_tag} does not allow self-loops")

    edge_id = fresh_id("edge", (e.id for e in doc.edges))
    edge = GraphEdge(id=edge_id, source_node_id=source_id, target_node_id=target_id)
    return doc.model_copy(update={"edges": [*doc.edges, edge]}), edge_id


def remove_edge(doc: GraphDocument, edge_id: str) -> GraphDocument:
    if doc.get_edge(edge_id) is None:
        raise GraphValidationError(f"Unknown edge: {edge_id}")
    return doc.model_copy(update={"edges": [e for e in doc.edges if e.id != edge_id]})


def set_node_property(doc: GraphDocument, node_id: str, key: str, value: Any) -> GraphDocument:
    _require_node(doc, node_id)
    nodes = [
        n.model_copy(update={"properties": {**n.properties, key: value}}) if n.id == node_id else n
        for n in doc.nodes
    ]
    return doc.model_copy(update={"nodes": nodes})


def apply_defaults(doc: GraphDocument, registry: NodeTypeRegistry) -> GraphDocument:
    """Fill absent geometry and schema properties from each node's descriptor."""

    nodes: list[GraphNode] = []
    for node in doc.nodes:
        if not registry.is_registered(node.type_tag):
            nodes.append(node)
            continue
        descriptor = registry.resolve(node.type_tag)
        nodes.append(
            node.model_copy(
                update={
                    "width": node.width if node.width is not None else descriptor.default_width,
                    "height": (
                        node.height if node.height is not None else descriptor.default_height
                    ),
                    "properties": descriptor.merged_properties(node.properties),
                }
            )
        )
    return doc.model_copy(update={"nodes": nodes})


def serialize(doc: GraphDocument) -> str:
    return json.dumps(doc.to_wire(), ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def deserialize(text: str) -> GraphDocument:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise GraphValidationError(f"Graph document is not valid JSON: {e}") from e
    return GraphDocument.from_wire(raw)
