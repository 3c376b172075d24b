"""Built-in workflow step kinds: start, API call, condition and end."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from workflow_designer.nodes.drawing import Drawable, Geometry, Polygon, Rect, TextLayer
from workflow_designer.nodes.registry import NodeTypeDescriptor, NodeTypeRegistry, PropertySpec

START_NODE_TYPE = "wf-start"
API_NODE_TYPE = "wf-api"
CONDITION_NODE_TYPE = "wf-condition"
END_NODE_TYPE = "wf-end"

START_COLOR = "#4caf50"
API_COLOR = "#1976d2"
CONDITION_COLOR = "#ff9800"
END_COLOR = "#e53935"
TEXT_ON_COLOR = "#ffffff"


def _pill(geometry: Geometry, fill: str, label: str) -> list[Drawable]:
    return [
        Rect(
            x=geometry.left,
            y=geometry.top,
            width=geometry.width,
            height=geometry.height,
            fill=fill,
            stroke=fill,
            radius=geometry.height / 2,
        ),
        TextLayer(x=geometry.x, y=geometry.y, value=label, color=TEXT_ON_COLOR),
    ]


def _start_label(_properties: Mapping[str, Any]) -> str:
    return "Start"


def _start_render(geometry: Geometry, properties: Mapping[str, Any]) -> list[Drawable]:
    return _pill(geometry, START_COLOR, _start_label(properties))


def _end_label(_properties: Mapping[str, Any]) -> str:
    return "End"


def _end_render(geometry: Geometry, properties: Mapping[str, Any]) -> list[Drawable]:
    return _pill(geometry, END_COLOR, _end_label(properties))


def _api_label(properties: Mapping[str, Any]) -> str:
    method = str(properties.get("method") or "GET").upper()
    url = str(properties.get("url") or "").strip()
    return f"{method} {url}".strip()


def _api_render(geometry: Geometry, properties: Mapping[str, Any]) -> list[Drawable]:
    return [
        Rect(
            x=geometry.left,
            y=geometry.top,
            width=geometry.width,
            height=geometry.height,
            fill=API_COLOR,
            stroke="#0d47a1",
            radius=6,
        ),
        TextLayer(x=geometry.x, y=geometry.y, value=_api_label(properties), color=TEXT_ON_COLOR),
    ]


def _condition_label(properties: Mapping[str, Any]) -> str:
    expression = str(properties.get("expression") or "").strip()
    return expression or "Condition"


def _condition_render(geometry: Geometry, properties: Mapping[str, Any]) -> list[Drawable]:
    diamond = (
        (geometry.x, geometry.top),
        (geometry.right, geometry.y),
        (geometry.x, geometry.bottom),
        (geometry.left, geometry.y),
    )
    return [
        Polygon(points=diamond, fill=CONDITION_COLOR, stroke="#e65100"),
        TextLayer(
            x=geometry.x,
            y=geometry.y,
            value=_condition_label(properties),
            color=TEXT_ON_COLOR,
        ),
    ]


BUILTIN_NODE_TYPES: tuple[NodeTypeDescriptor, ...] = (
    NodeTypeDescriptor(
        type_tag=START_NODE_TYPE,
        label="Start",
        default_width=80,
        default_height=32,
        label_rule=_start_label,
        render_rule=_start_render,
        order=10,
        aliases=("start-node",),
    ),
    NodeTypeDescriptor(
        type_tag=API_NODE_TYPE,
        label="API call",
        default_width=160,
        default_height=48,
        label_rule=_api_label,
        render_rule=_api_render,
        property_schema={
            "method": PropertySpec(default="GET", required=True, description="HTTP method"),
            "url": PropertySpec(default="", required=True, description="Request URL"),
            "timeout_ms": PropertySpec(default=3000, description="Request timeout (ms)"),
            "description": PropertySpec(default=""),
        },
        order=20,
        aliases=("api-node",),
    ),
    NodeTypeDescriptor(
        type_tag=CONDITION_NODE_TYPE,
        label="Condition",
        default_width=120,
        default_height=80,
        label_rule=_condition_label,
        render_rule=_condition_render,
        property_schema={
            "expression": PropertySpec(
                default="", required=True, description="Boolean expression"
            ),
            "description": PropertySpec(default=""),
        },
        order=30,
        aliases=("condition-node",),
    ),
    NodeTypeDescriptor(
        type_tag=END_NODE_TYPE,
        label="End",
        default_width=80,
        default_height=32,
        label_rule=_end_label,
        render_rule=_end_render,
        order=40,
        aliases=("end-node",),
    ),
)


def register_builtin_node_types(registry: NodeTypeRegistry) -> None:
    for descriptor in BUILTIN_NODE_TYPES:
        registry.register(descriptor)


def create_default_registry() -> NodeTypeRegistry:
    """Return a fresh registry holding the built-in step kinds."""

    registry = NodeTypeRegistry()
    register_builtin_node_types(registry)
    return registry
