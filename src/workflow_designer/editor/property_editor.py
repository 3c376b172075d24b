"""Property editor: a form projection of the selected node's typed properties."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from workflow_designer.canvas.controller import CanvasController, Selection
from workflow_designer.errors import GraphValidationError
from workflow_designer.nodes.registry import NodeTypeRegistry, PropertySpec

logger = logging.getLogger(__name__)

EMPTY_STATE_MESSAGE = "Select a node to edit its properties"

_INPUT_KINDS = {"string": "text", "number": "number", "boolean": "checkbox"}


@dataclass(frozen=True, slots=True)
class PropertyField:
    name: str
    kind: str
    value: Any
    required: bool = False
    description: str = ""


@dataclass(frozen=True, slots=True)
class PropertyForm:
    node_id: str | None = None
    type_tag: str | None = None
    type_label: str = ""
    label: str = ""
    fields: list[PropertyField] = field(default_factory=list)
    empty_message: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.node_id is None


def coerce_value(spec: PropertySpec, raw: Any) -> Any:
    """Convert a raw input value to the schema's kind."""

    kind = spec.kind
    if kind == "number":
        if isinstance(raw, bool):
            raise GraphValidationError(f"Expected a number, got {raw!r}")
        if isinstance(raw, int | float):
            return raw
        text = str(raw).strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError as e:
            raise GraphValidationError(f"Expected a number, got {raw!r}") from e
    if kind == "boolean":
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in {"1", "true", "yes", "on"}
    return "" if raw is None else str(raw)


class PropertyEditor:
    """Follows the canvas selection and writes edits back through the canvas."""

    def __init__(self, registry: NodeTypeRegistry, canvas: CanvasController) -> None:
        self._registry = registry
        self._canvas = canvas
        self._node_id: str | None = None
        self._subscription = canvas.on_selection(self._on_selection)

    @property
    def node_id(self) -> str | None:
        return self._node_id

    def _on_selection(self, selection: Selection | None) -> None:
        if selection is not None and selection.kind == "node":
            self._node_id = selection.element_id
        else:
            self._node_id = None

    def form(self) -> PropertyForm:
        node = self._canvas.document.get_node(self._node_id) if self._node_id else None
        if node is None:
            return PropertyForm(empty_message=EMPTY_STATE_MESSAGE)

        descriptor = self._registry.resolve(node.type_tag)
        properties = descriptor.merged_properties(node.properties)
        fields = [
            PropertyField(
                name=name,
                kind=_INPUT_KINDS[spec.kind],
                value=properties.get(name),
                required=spec.required,
                description=spec.description,
            )
            for name, spec in descriptor.property_schema.items()
        ]
        return PropertyForm(
            node_id=node.id,
            type_tag=node.type_tag,
            type_label=descriptor.label,
            label=self._canvas.label_of(node),
            fields=fields,
        )

    def commit(self, name: str, raw_value: Any) -> str:
        """Write one field back to the node and return its refreshed label."""

        if self._node_id is None:
            raise GraphValidationError("No node selected")
        node = self._canvas.document.get_node(self._node_id)
        if node is None:
            raise GraphValidationError(f"Unknown node: {self._node_id}")

        descriptor = self._registry.resolve(node.type_tag)
        spec = descriptor.property_schema.get(name)
        if spec is None:
            raise GraphValidationError(f"{descriptor.label} has no property {name!r}")

        value = coerce_value(spec, raw_value)
        self._canvas.set_node_property(node.id, name, value)
        logger.debug("Property committed", extra={"node_id": node.id, "property": name})

        updated = self._canvas.document.get_node(node.id)
        if updated is None:
            raise GraphValidationError(f"Unknown node: {node.id}")
        return self._canvas.label_of(updated)

    def close(self) -> None:
        self._subscription.unsubscribe()
        self._node_id = None
