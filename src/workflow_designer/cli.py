"""CLI entrypoint for the workflow designer.

Drives the same registry, graph and lifecycle layers a visual front end uses,
against the remote workflow engine configured in the environment.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from workflow_designer import __version__
from workflow_designer.config import DesignerSettings
from workflow_designer.engine.client import WorkflowEngineClient
from workflow_designer.engine.models import InstanceStatus, WorkflowInstance
from workflow_designer.errors import DesignerError
from workflow_designer.graph.document import deserialize, serialize, validate
from workflow_designer.lifecycle.controller import WorkflowLifecycleController
from workflow_designer.logging import configure_logging
from workflow_designer.nodes.builtin import create_default_registry

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-designer",
        description="Compose, save, run and generate workflows on a remote workflow engine",
    )
    parser.add_argument("--version", action="version", version=f"workflow-designer {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("node-types", help="List the node types available in the palette")
    subparsers.add_parser("list", help="List workflow definitions stored on the engine")

    show = subparsers.add_parser("show", help="Print the graph of a stored definition as JSON")
    show.add_argument("definition_id", type=int, help="Definition id")

    validate_cmd = subparsers.add_parser("validate", help="Validate a local graph JSON file")
    validate_cmd.add_argument("file", help="Path to a graph JSON file")

    save = subparsers.add_parser("save", help="Save a local graph JSON file as a definition")
    save.add_argument("file", help="Path to a graph JSON file")
    save.add_argument(
        "--id",
        dest="definition_id",
        type=int,
        default=None,
        help="Update this existing definition instead of creating a new one",
    )
    save.add_argument("--name", default=None, help="Definition name")
    save.add_argument("--description", default=None, help="Definition description")

    run = subparsers.add_parser("run", help="Run a stored definition and print its steps")
    run.add_argument("definition_id", type=int, help="Definition id")
    run.add_argument(
        "--wait",
        action="store_true",
        help="Poll until the instance succeeds or fails (overrides WORKFLOW_RUN_POLL_UNTIL_TERMINAL)",
    )

    generate = subparsers.add_parser("generate", help="Generate a graph from a natural-language prompt")
    generate.add_argument(
        "prompt",
        nargs="?",
        default=None,
        help="Workflow description (defaults to WORKFLOW_DEFAULT_AI_PROMPT)",
    )
    generate.add_argument("--out", default=None, help="Write the graph JSON to this file")

    return parser


def _print_instance(instance: WorkflowInstance) -> None:
    print(f"Instance #{instance.id}: {instance.status.value}")
    for step in instance.steps:
        line = f"  {step.node_id}\t{step.node_type}\t{step.status}"
        if step.message:
            line += f"\t{step.message}"
        print(line)
    if instance.error:
        print(f"Error: {instance.error}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = DesignerSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level, settings.log_format)
    registry = create_default_registry()

    try:
        if args.command == "node-types":
            for entry in registry.list_all():
                print(f"{entry.type_tag}\t{entry.label}")
            return 0

        if args.command == "validate":
            document = deserialize(Path(args.file).read_text(encoding="utf-8"))
            violations = validate(document, registry)
            for violation in violations:
                print(f"{violation.severity}\t{violation.code}\t{violation.message}")
            if any(v.severity == "error" for v in violations):
                return 1
            print(f"OK: {len(document.nodes)} nodes, {len(document.edges)} edges")
            return 0

        with WorkflowEngineClient.from_settings(settings) as client:
            if args.command == "list":
                for summary in client.list_definitions():
                    print(f"{summary.id}\t{summary.name}\t{summary.description or ''}")
                return 0

            if args.command == "show":
                definition = client.get_definition(args.definition_id)
                sys.stdout.write(serialize(definition.graph))
                return 0

            policy = settings.run_poll_policy()
            if getattr(args, "wait", False):
                policy = dataclasses.replace(policy, until_terminal=True)
            controller = WorkflowLifecycleController(
                client=client, registry=registry, poll_policy=policy
            )

            if args.command == "save":
                document = deserialize(Path(args.file).read_text(encoding="utf-8"))
                if args.definition_id is not None:
                    controller.load(args.definition_id)
                controller.update_graph(document)
                if args.name is not None:
                    controller.set_name(args.name)
                if args.description is not None:
                    controller.set_description(args.description)

                saved_id = controller.save()
                if saved_id is None:
                    print("Nothing to save: the graph is empty")
                    return 1
                print(f"Saved definition #{saved_id}: {controller.name}")
                return 0

            if args.command == "run":
                controller.load(args.definition_id)
                instance = controller.run()
                if instance is None:
                    return 1
                _print_instance(instance)
                return 1 if instance.status is InstanceStatus.FAILED else 0

            if args.command == "generate":
                prompt = args.prompt or settings.default_ai_prompt
                document = controller.generate_from_prompt(prompt)
                if document is None:
                    return 1
                text = serialize(document)
                if args.out:
                    Path(args.out).write_text(text, encoding="utf-8")
                    print(f"Wrote {len(document.nodes)} nodes, {len(document.edges)} edges to {args.out}")
                else:
                    sys.stdout.write(text)
                return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except DesignerError as e:
        logger.error("Command failed", extra={"command": args.command, "error": e.message})
        print(e.message, file=sys.stderr)
        return 1

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
