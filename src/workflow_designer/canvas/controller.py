"""Headless canvas controller.

Owns one live graph document and turns pointer gestures into graph
operations. Gestures arrive as method calls in screen coordinates; the
controller translates them by the current pan offset.

Every committed mutation emits a change notification carrying the whole
document. Clicks emit selection notifications. After :meth:`teardown` no
listener fires and further gestures raise :class:`PreconditionError`.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from workflow_designer.canvas.geometry import (
    Point,
    connector_between,
    distance,
    distance_to_segment,
)
from workflow_designer.errors import GraphValidationError, PreconditionError
from workflow_designer.events import ListenerSet, Subscription
from workflow_designer.graph import document as graph
from workflow_designer.graph.document import GraphDocument, GraphNode
from workflow_designer.nodes.drawing import Connector, Geometry, NodeLayer, TextLayer
from workflow_designer.nodes.registry import NodeTypeRegistry

logger = logging.getLogger(__name__)

ANCHOR_RADIUS = 8.0
EDGE_HIT_TOLERANCE = 6.0
CLICK_TOLERANCE = 3.0


class CanvasMode(str, Enum):
    IDLE = "idle"
    DRAGGING_NODE = "dragging_node"
    DRAWING_EDGE = "drawing_edge"
    PANNING = "panning"


@dataclass(frozen=True, slots=True)
class Selection:
    kind: Literal["node", "edge"]
    element_id: str
    type_tag: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Scene:
    nodes: list[NodeLayer]
    edges: list[Connector]
    pan: Point = (0.0, 0.0)
    edge_preview: tuple[Point, Point] | None = None


@dataclass(slots=True)
class _Gesture:
    mode: CanvasMode
    origin: Point
    node_id: str | None = None
    start_position: Point = (0.0, 0.0)
    moved: bool = False
    pointer: Point = (0.0, 0.0)


class CanvasController:
    def __init__(
        self,
        registry: NodeTypeRegistry,
        document: GraphDocument | None = None,
    ) -> None:
        self._registry = registry
        self._document = document if document is not None else graph.empty_document()
        self._mode = CanvasMode.IDLE
        self._gesture: _Gesture | None = None
        self._committed: GraphDocument = self._document
        self._selection: Selection | None = None
        self._drop_type: str | None = None
        self._pan: Point = (0.0, 0.0)
        self._closed = False
        self._change_listeners: ListenerSet[GraphDocument] = ListenerSet("canvas.change")
        self._selection_listeners: ListenerSet[Selection | None] = ListenerSet("canvas.selection")

    # -- state ---------------------------------------------------------------

    @property
    def document(self) -> GraphDocument:
        return self._document

    @property
    def mode(self) -> CanvasMode:
        return self._mode

    @property
    def selection(self) -> Selection | None:
        return self._selection

    @property
    def drop_type(self) -> str | None:
        return self._drop_type

    @property
    def pan(self) -> Point:
        return self._pan

    @property
    def closed(self) -> bool:
        return self._closed

    # -- subscriptions -------------------------------------------------------

    def on_change(self, callback: Callable[[GraphDocument], None]) -> Subscription:
        self._ensure_open()
        return self._change_listeners.subscribe(callback)

    def on_selection(self, callback: Callable[[Selection | None], None]) -> Subscription:
        self._ensure_open()
        return self._selection_listeners.subscribe(callback)

    def teardown(self) -> None:
        if self._closed:
            return
        self._change_listeners.clear()
        self._selection_listeners.clear()
        self._gesture = None
        self._mode = CanvasMode.IDLE
        self._closed = True
        logger.debug("Canvas torn down")

    def __enter__(self) -> CanvasController:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.teardown()

    # -- wholesale replacement -----------------------------------------------

    def set_document(self, document: GraphDocument) -> None:
        """Replace the document without emitting a change notification."""

        self._ensure_open()
        self._document = document
        self._committed = document
        self._gesture = None
        self._mode = CanvasMode.IDLE
        if self._selection is not None:
            self._select(None)

    # -- programmatic actions ------------------------------------------------

    def set_drop_type(self, type_tag: str | None) -> None:
        self._ensure_open()
        if type_tag is not None and not self._registry.is_registered(type_tag):
            raise GraphValidationError(f"Unknown node type: {type_tag}")
        self._drop_type = type_tag

    def add_node(
        self,
        type_tag: str,
        x: float,
        y: float,
        properties: dict[str, Any] | None = None,
    ) -> str:
        self._ensure_open()
        doc, node_id = graph.add_node(
            self._document, type_tag, (x, y), self._registry, properties=properties
        )
        self._commit(doc, "node:add", node_id)
        return node_id

    def move_node(self, node_id: str, x: float, y: float) -> None:
        self._ensure_open()
        self._commit(graph.move_node(self._document, node_id, (x, y)), "node:move", node_id)

    def connect(self, source_id: str, target_id: str) -> str:
        self._ensure_open()
        doc, edge_id = graph.add_edge(self._document, source_id, target_id, self._registry)
        self._commit(doc, "edge:add", edge_id)
        return edge_id

    def delete_node(self, node_id: str) -> None:
        self._ensure_open()
        self._commit(graph.remove_node(self._document, node_id), "node:delete", node_id)
        self._drop_stale_selection()

    def delete_edge(self, edge_id: str) -> None:
        self._ensure_open()
        self._commit(graph.remove_edge(self._document, edge_id), "edge:delete", edge_id)
        self._drop_stale_selection()

    def delete_selection(self) -> bool:
        self._ensure_open()
        selection = self._selection
        if selection is None:
            return False
        if selection.kind == "node":
            self.delete_node(selection.element_id)
        else:
            self.delete_edge(selection.element_id)
        return True

    def press_delete(self) -> bool:
        return self.delete_selection()

    def set_node_property(self, node_id: str, key: str, value: Any) -> None:
        self._ensure_open()
        doc = graph.set_node_property(self._document, node_id, key, value)
        self._commit(doc, "node:property", node_id)

    # -- gestures ------------------------------------------------------------

    def pointer_down(self, x: float, y: float) -> None:
        self._ensure_open()
        if self._gesture is not None:
            self.cancel_gesture()

        point = self._to_canvas(x, y)

        anchor_node = self._hit_anchor(point)
        if anchor_node is not None:
            self._start(CanvasMode.DRAWING_EDGE, (x, y), node=anchor_node)
            return

        node = self._hit_node(point)
        if node is not None:
            self._start(CanvasMode.DRAGGING_NODE, (x, y), node=node)
            return

        if self._drop_type is not None:
            type_tag, self._drop_type = self._drop_type, None
            self.add_node(type_tag, point[0], point[1])
            return

        edge_id = self._hit_edge(point)
        if edge_id is not None:
            self._select(Selection(kind="edge", element_id=edge_id))
            return

        self._start(CanvasMode.PANNING, (x, y))

    def pointer_move(self, x: float, y: float) -> None:
        self._ensure_open()
        gesture = self._gesture
        if gesture is None:
            return

        gesture.pointer = (x, y)
        if not gesture.moved and distance(gesture.origin, (x, y)) > CLICK_TOLERANCE:
            gesture.moved = True
        dx = x - gesture.origin[0]
        dy = y - gesture.origin[1]

        if (
            gesture.mode is CanvasMode.DRAGGING_NODE
            and gesture.moved
            and gesture.node_id is not None
        ):
            new_pos = (gesture.start_position[0] + dx, gesture.start_position[1] + dy)
            # Live update; committed on release.
            self._document = graph.move_node(self._document, gesture.node_id, new_pos)
        elif gesture.mode is CanvasMode.PANNING and gesture.moved:
            self._pan = (gesture.start_position[0] + dx, gesture.start_position[1] + dy)

    def pointer_up(self, x: float, y: float) -> None:
        self._ensure_open()
        gesture = self._gesture
        if gesture is None:
            return
        self.pointer_move(x, y)
        self._gesture = None
        self._mode = CanvasMode.IDLE

        if gesture.node_id is not None and not gesture.moved and gesture.mode in (
            CanvasMode.DRAGGING_NODE,
            CanvasMode.DRAWING_EDGE,
        ):
            # A click, including one on a connection anchor, only selects.
            node = self._document.get_node(gesture.node_id)
            if node is not None:
                self._select(self._node_selection(node))
            return

        if gesture.mode is CanvasMode.DRAGGING_NODE and gesture.node_id is not None:
            self._commit(self._document, "node:move", gesture.node_id)
            return

        if gesture.mode is CanvasMode.DRAWING_EDGE and gesture.node_id is not None:
            target = self._hit_node(self._to_canvas(x, y))
            if target is None:
                logger.debug("Edge drawing aborted: no target", extra={"source": gesture.node_id})
                return
            try:
                self.connect(gesture.node_id, target.id)
            except GraphValidationError as e:
                logger.debug("Edge drawing aborted", extra={"reason": str(e)})
            return

        if gesture.mode is CanvasMode.PANNING and not gesture.moved:
            self._select(None)

    def cancel_gesture(self) -> None:
        """Abort the current gesture, restoring the last committed document."""

        if self._gesture is None:
            return
        if self._gesture.mode is CanvasMode.DRAGGING_NODE:
            self._document = self._committed
        elif self._gesture.mode is CanvasMode.PANNING:
            self._pan = self._gesture.start_position
        self._gesture = None
        self._mode = CanvasMode.IDLE

    # -- rendering -----------------------------------------------------------

    def geometry_of(self, node: GraphNode) -> Geometry:
        descriptor = self._registry.resolve(node.type_tag)
        return Geometry(
            x=node.x,
            y=node.y,
            width=node.width if node.width is not None else descriptor.default_width,
            height=node.height if node.height is not None else descriptor.default_height,
        )

    def label_of(self, node: GraphNode) -> str:
        if node.text is not None and node.text.value:
            return node.text.value
        descriptor = self._registry.resolve(node.type_tag)
        properties = descriptor.merged_properties(node.properties)
        try:
            return descriptor.label_rule(properties)
        except Exception:
            logger.exception(
                "Label rule failed; using fallback",
                extra={"node_id": node.id, "type_tag": node.type_tag},
            )
            return self._registry.fallback.label_rule(properties)

    def connectors(self) -> list[Connector]:
        """Edges as straight segments clipped to the node boundaries."""

        geometries = {node.id: self.geometry_of(node) for node in self._document.nodes}
        connectors: list[Connector] = []
        for edge in self._document.edges:
            source = geometries.get(edge.source_node_id)
            target = geometries.get(edge.target_node_id)
            if source is None or target is None:
                logger.warning("Skipping dangling edge", extra={"edge_id": edge.id})
                continue
            start, end = connector_between(source, target)
            label = edge.text.value if edge.text is not None else None
            connectors.append(Connector(edge_id=edge.id, start=start, end=end, label=label))
        return connectors

    def render(self) -> Scene:
        layers = [self._render_node(node) for node in self._document.nodes]
        connectors = self.connectors()

        preview = None
        gesture = self._gesture
        if (
            gesture is not None
            and gesture.mode is CanvasMode.DRAWING_EDGE
            and gesture.node_id is not None
        ):
            node = self._document.get_node(gesture.node_id)
            if node is not None:
                preview = ((float(node.x), float(node.y)), self._to_canvas(*gesture.pointer))

        return Scene(nodes=layers, edges=connectors, pan=self._pan, edge_preview=preview)

    def _render_node(self, node: GraphNode) -> NodeLayer:
        descriptor = self._registry.resolve(node.type_tag)
        geometry = self.geometry_of(node)
        properties = descriptor.merged_properties(node.properties)
        label = self.label_of(node)

        try:
            drawables = descriptor.render_rule(geometry, properties)
        except Exception:
            logger.exception(
                "Render rule failed; using fallback",
                extra={"node_id": node.id, "type_tag": node.type_tag},
            )
            drawables = self._registry.fallback.render_rule(geometry, properties)

        if node.text is not None and node.text.value:
            drawables = [
                dataclasses.replace(d, value=label) if isinstance(d, TextLayer) else d
                for d in drawables
            ]

        selected = (
            self._selection is not None
            and self._selection.kind == "node"
            and self._selection.element_id == node.id
        )
        return NodeLayer(
            node_id=node.id,
            type_tag=node.type_tag,
            geometry=geometry,
            label=label,
            drawables=list(drawables),
            selected=selected,
        )

    # -- internals -----------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise PreconditionError("Canvas has been torn down")

    def _to_canvas(self, x: float, y: float) -> Point:
        return (x - self._pan[0], y - self._pan[1])

    def _start(self, mode: CanvasMode, origin: Point, node: GraphNode | None = None) -> None:
        if node is not None:
            start = (float(node.x), float(node.y))
        elif mode is CanvasMode.PANNING:
            start = self._pan
        else:
            start = (0.0, 0.0)
        self._gesture = _Gesture(
            mode=mode,
            origin=origin,
            node_id=node.id if node is not None else None,
            start_position=start,
            pointer=origin,
        )
        self._mode = mode

    def _hit_node(self, point: Point) -> GraphNode | None:
        for node in reversed(self._document.nodes):
            if self.geometry_of(node).contains(*point):
                return node
        return None

    def _hit_anchor(self, point: Point) -> GraphNode | None:
        for node in reversed(self._document.nodes):
            for anchor in self.geometry_of(node).anchors():
                if distance(anchor, point) <= ANCHOR_RADIUS:
                    return node
        return None

    def _hit_edge(self, point: Point) -> str | None:
        for connector in reversed(self.connectors()):
            if distance_to_segment(point, connector.start, connector.end) <= EDGE_HIT_TOLERANCE:
                return connector.edge_id
        return None

    def _node_selection(self, node: GraphNode) -> Selection:
        return Selection(
            kind="node",
            element_id=node.id,
            type_tag=node.type_tag,
            properties=dict(node.properties),
        )

    def _drop_stale_selection(self) -> None:
        selection = self._selection
        if selection is None:
            return
        if selection.kind == "node":
            present = self._document.get_node(selection.element_id) is not None
        else:
            present = self._document.get_edge(selection.element_id) is not None
        if not present:
            self._select(None)

    def _select(self, selection: Selection | None) -> None:
        self._selection = selection
        self._selection_listeners.emit(selection)

    def _commit(self, document: GraphDocument, action: str, subject: str) -> None:
        self._document = document
        self._committed = document
        logger.debug("Canvas mutation", extra={"action": action, "subject": subject})
        self._change_listeners.emit(document)
