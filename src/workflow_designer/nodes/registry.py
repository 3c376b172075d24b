"""Registry of node types.

Each step kind is a descriptor record: geometry defaults, a property schema,
a label rule and a render rule. New kinds are added by registering another
descriptor; neither the graph model nor the canvas knows about concrete kinds.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from workflow_designer.nodes.drawing import Drawable, Geometry, Rect, TextLayer

logger = logging.getLogger(__name__)

LabelRule = Callable[[Mapping[str, Any]], str]
RenderRule = Callable[[Geometry, Mapping[str, Any]], list[Drawable]]


@dataclass(frozen=True, slots=True)
class PropertySpec:
    """Schema entry for one node property."""

    default: Any
    required: bool = False
    description: str = ""

    @property
    def kind(self) -> str:
        # bool is an int subclass, check it first.
        if isinstance(self.default, bool):
            return "boolean"
        if isinstance(self.default, int | float):
            return "number"
        return "string"


@dataclass(frozen=True, slots=True)
class NodeTypeDescriptor:
    type_tag: str
    label: str
    default_width: float
    default_height: float
    label_rule: LabelRule
    render_rule: RenderRule
    property_schema: Mapping[str, PropertySpec] = field(default_factory=dict)
    order: int = 100
    aliases: tuple[str, ...] = ()
    allow_self_loops: bool = True

    def default_properties(self) -> dict[str, Any]:
        return {name: spec.default for name, spec in self.property_schema.items()}

    def merged_properties(self, properties: Mapping[str, Any] | None) -> dict[str, Any]:
        """Schema defaults overlaid with the supplied values; extra keys are kept."""

        merged = self.default_properties()
        if properties:
            merged.update(properties)
        return merged


@dataclass(frozen=True, slots=True)
class PaletteEntry:
    type_tag: str
    label: str


def _unknown_label(_properties: Mapping[str, Any]) -> str:
    return "Unknown node"


def _unknown_render(geometry: Geometry, properties: Mapping[str, Any]) -> list[Drawable]:
    return [
        Rect(
            x=geometry.left,
            y=geometry.top,
            width=geometry.width,
            height=geometry.height,
            fill="#f3f4f6",
            stroke="#9ca3af",
            radius=4,
            dashed=True,
        ),
        TextLayer(x=geometry.x, y=geometry.y, value="?", color="#6b7280"),
    ]


UNKNOWN_NODE_TYPE = NodeTypeDescriptor(
    type_tag="wf-unknown",
    label="Unknown",
    default_width=100,
    default_height=40,
    label_rule=_unknown_label,
    render_rule=_unknown_render,
    order=10_000,
)


class NodeTypeRegistry:
    """Maps type tags to descriptors.

    Construct one at process start and pass it to the graph operations, the
    canvas and the property editor. Registration is first-wins.
    """

    def __init__(self, fallback: NodeTypeDescriptor = UNKNOWN_NODE_TYPE) -> None:
        self._fallback = fallback
        self._descriptors: dict[str, NodeTypeDescriptor] = {}
        self._aliases: dict[str, str] = {}
        self._sequence: dict[str, int] = {}

    @property
    def fallback(self) -> NodeTypeDescriptor:
        return self._fallback

    def register(self, descriptor: NodeTypeDescriptor) -> bool:
        tags = (descriptor.type_tag, *descriptor.aliases)
        taken = [t for t in tags if t in self._descriptors or t in self._aliases]
        if taken:
            logger.warning(
                "Node type already registered; ignoring duplicate",
                extra={"type_tag": descriptor.type_tag, "conflicts": taken},
            )
            return False

        self._descriptors[descriptor.type_tag] = descriptor
        self._sequence[descriptor.type_tag] = len(self._sequence)
        for alias in descriptor.aliases:
            self._aliases[alias] = descriptor.type_tag
        logger.debug("Node type registered", extra={"type_tag": descriptor.type_tag})
        return True

    def is_registered(self, type_tag: str) -> bool:
        return type_tag in self._descriptors or type_tag in self._aliases

    def resolve(self, type_tag: str) -> NodeTypeDescriptor:
        descriptor = self._descriptors.get(type_tag)
        if descriptor is not None:
            return descriptor
        canonical = self._aliases.get(type_tag)
        if canonical is not None:
            return self._descriptors[canonical]
        logger.debug("Unknown node type; using fallback", extra={"type_tag": type_tag})
        return self._fallback

    def list_all(self) -> list[PaletteEntry]:
        ordered = sorted(
            self._descriptors.values(),
            key=lambda d: (d.order, self._sequence[d.type_tag]),
        )
        return [PaletteEntry(type_tag=d.type_tag, label=d.label) for d in ordered]

    def clear(self) -> None:
        self._descriptors.clear()
        self._aliases.clear()
        self._sequence.clear()

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, type_tag: object) -> bool:
        return isinstance(type_tag, str) and self.is_registered(type_tag)
