#!/usr/bin/env python3
"""Programmatic workflow composition example.

This demonstrates using the designer components directly:

* load settings from `.env`
* compose a start -> API call graph through the headless canvas
* edit the API node through the property editor
* save the definition and run it on the workflow engine

The workflow name is passed as an argument.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from workflow_designer.canvas.controller import CanvasController
from workflow_designer.config import DesignerSettings
from workflow_designer.editor.property_editor import PropertyEditor
from workflow_designer.engine.client import WorkflowEngineClient
from workflow_designer.errors import DesignerError
from workflow_designer.lifecycle.controller import WorkflowLifecycleController
from workflow_designer.logging import configure_logging
from workflow_designer.nodes.builtin import create_default_registry


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compose, save and run a workflow (example).")
    parser.add_argument("--name", required=True, help="Workflow name")
    parser.add_argument("--url", default="/login", help="URL called by the API step")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = DesignerSettings()
    configure_logging(settings.log_level, settings.log_format)

    registry = create_default_registry()
    with WorkflowEngineClient.from_settings(settings) as client, CanvasController(registry) as canvas:
        controller = WorkflowLifecycleController(
            client=client, registry=registry, poll_policy=settings.run_poll_policy()
        )
        controller.attach_canvas(canvas)
        editor = PropertyEditor(registry, canvas)

        controller.set_name(args.name)
        start = canvas.add_node("wf-start", 0, 0)
        api = canvas.add_node("wf-api", 200, 0)
        canvas.connect(start, api)

        # Select the API node with a click, then edit it.
        canvas.pointer_down(200, 0)
        canvas.pointer_up(200, 0)
        editor.commit("method", "POST")
        print(f"API step: {editor.commit('url', args.url)}")

        try:
            definition_id = controller.save()
            print(f"Saved definition #{definition_id}")
            instance = controller.run()
        except DesignerError as exc:
            print(str(exc))
            return 1
        finally:
            editor.close()
            controller.close()

    if instance is not None:
        print(f"Instance #{instance.id}: {instance.status.value}")
        for step in instance.steps:
            print(f"  {step.node_id} {step.node_type} {step.status}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
