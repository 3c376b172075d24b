"""Unit tests for the property editor projection."""

from __future__ import annotations

import pytest

from workflow_designer.canvas.controller import CanvasController
from workflow_designer.editor.property_editor import (
    EMPTY_STATE_MESSAGE,
    PropertyEditor,
    PropertyField,
    coerce_value,
)
from workflow_designer.errors import GraphValidationError
from workflow_designer.nodes.registry import NodeTypeRegistry, PropertySpec


@pytest.fixture
def canvas(registry: NodeTypeRegistry) -> CanvasController:
    canvas = CanvasController(registry)
    canvas.add_node("wf-start", 0, 0)
    canvas.add_node("wf-api", 200, 0)
    return canvas


def _click(canvas: CanvasController, x: float, y: float) -> None:
    canvas.pointer_down(x, y)
    canvas.pointer_up(x, y)


def test_no_selection_shows_empty_state(registry: NodeTypeRegistry, canvas: CanvasController) -> None:
    editor = PropertyEditor(registry, canvas)

    form = editor.form()

    assert form.is_empty
    assert form.empty_message == EMPTY_STATE_MESSAGE
    assert form.fields == []


def test_selected_api_node_renders_one_field_per_schema_entry(
    registry: NodeTypeRegistry, canvas: CanvasController
) -> None:
    editor = PropertyEditor(registry, canvas)
    _click(canvas, 200, 0)

    form = editor.form()

    assert form.node_id == "node_2"
    assert form.type_label == "API call"
    assert form.label == "GET"
    assert form.fields == [
        PropertyField(name="method", kind="text", value="GET", required=True, description="HTTP method"),
        PropertyField(name="url", kind="text", value="", required=True, description="Request URL"),
        PropertyField(
            name="timeout_ms", kind="number", value=3000, description="Request timeout (ms)"
        ),
        PropertyField(name="description", kind="text", value=""),
    ]


def test_start_node_has_no_fields(registry: NodeTypeRegistry, canvas: CanvasController) -> None:
    editor = PropertyEditor(registry, canvas)
    _click(canvas, 0, 0)

    form = editor.form()

    assert not form.is_empty
    assert form.fields == []
    assert form.label == "Start"


def test_commit_updates_document_and_returns_label(
    registry: NodeTypeRegistry, canvas: CanvasController
) -> None:
    editor = PropertyEditor(registry, canvas)
    changes: list[object] = []
    canvas.on_change(changes.append)
    _click(canvas, 200, 0)

    assert editor.commit("method", "POST") == "POST"
    assert editor.commit("url", "/login") == "POST /login"
    assert editor.commit("timeout_ms", "1500") == "POST /login"

    node = canvas.document.get_node("node_2")
    assert node is not None
    assert node.properties["timeout_ms"] == 1500
    assert len(changes) == 3


def test_invalid_number_is_rejected_without_mutation(
    registry: NodeTypeRegistry, canvas: CanvasController
) -> None:
    editor = PropertyEditor(registry, canvas)
    _click(canvas, 200, 0)
    before = canvas.document

    with pytest.raises(GraphValidationError):
        editor.commit("timeout_ms", "soon")

    assert canvas.document is before


def test_commit_requires_selection_and_known_property(
    registry: NodeTypeRegistry, canvas: CanvasController
) -> None:
    editor = PropertyEditor(registry, canvas)
    with pytest.raises(GraphValidationError):
        editor.commit("url", "/x")

    _click(canvas, 200, 0)
    with pytest.raises(GraphValidationError):
        editor.commit("headers", "{}")


def test_selecting_edge_or_clearing_returns_to_empty_state(
    registry: NodeTypeRegistry, canvas: CanvasController
) -> None:
    editor = PropertyEditor(registry, canvas)
    _click(canvas, 200, 0)
    assert not editor.form().is_empty

    _click(canvas, 700, 700)

    assert editor.form().is_empty


def test_close_stops_following_selection(
    registry: NodeTypeRegistry, canvas: CanvasController
) -> None:
    editor = PropertyEditor(registry, canvas)
    editor.close()

    _click(canvas, 200, 0)

    assert editor.node_id is None
    assert editor.form().is_empty


@pytest.mark.parametrize(
    ("spec", "raw", "expected"),
    [
        (PropertySpec(default=0), "42", 42),
        (PropertySpec(default=0), " 2.5 ", 2.5),
        (PropertySpec(default=0), 7, 7),
        (PropertySpec(default=False), "on", True),
        (PropertySpec(default=False), "no", False),
        (PropertySpec(default=""), 12, "12"),
        (PropertySpec(default=""), None, ""),
    ],
)
def test_coerce_value(spec: PropertySpec, raw: object, expected: object) -> None:
    assert coerce_value(spec, raw) == expected


def test_coerce_value_rejects_bool_for_number() -> None:
    with pytest.raises(GraphValidationError):
        coerce_value(PropertySpec(default=0), True)


def test_commit_reports_node_removed_by_a_change_listener(
    registry: NodeTypeRegistry, canvas: CanvasController
) -> None:
    editor = PropertyEditor(registry, canvas)
    _click(canvas, 200, 0)

    def remove_api_node(document: object) -> None:
        if canvas.document.get_node("node_2") is not None:
            canvas.delete_node("node_2")

    canvas.on_change(remove_api_node)

    with pytest.raises(GraphValidationError, match="Unknown node: node_2"):
        editor.commit("url", "/login")
