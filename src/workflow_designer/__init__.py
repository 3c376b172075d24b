"""Workflow Designer.

Typed node-graph model and client-side lifecycle for composing workflows and
running them on a remote workflow engine:
- a node type registry with per-kind schema, geometry and rendering
- a pure graph document model with validation and JSON serialization
- a headless canvas controller and property editor
- a lifecycle controller driving save/run/poll/AI-generate
"""

__version__ = "0.1.0"

from workflow_designer.config import DesignerSettings, RunPollPolicy

__all__ = ["__version__", "DesignerSettings", "RunPollPolicy"]
