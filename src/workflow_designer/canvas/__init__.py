"""Headless canvas: gestures in, graph mutations and notifications out."""

from workflow_designer.canvas.controller import CanvasController, CanvasMode, Scene, Selection

__all__ = ["CanvasController", "CanvasMode", "Scene", "Selection"]
