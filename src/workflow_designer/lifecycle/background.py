"""Run lifecycle operations on a worker thread so the caller stays responsive."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from workflow_designer.errors import DesignerError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_background(
    operation: Callable[..., T],
    *args: Any,
    on_success: Callable[[T], None] | None = None,
    on_error: Callable[[DesignerError], None] | None = None,
    name: str | None = None,
) -> threading.Thread:
    """Start ``operation(*args)`` on a daemon thread and return the thread.

    ``on_success`` receives the result; ``on_error`` receives the failure as a
    :class:`DesignerError`. Both run on the worker thread.
    """

    thread = threading.Thread(
        target=_run_operation,
        name=name or f"designer-{getattr(operation, '__name__', 'operation')}",
        daemon=True,
        kwargs={
            "operation": operation,
            "args": args,
            "on_success": on_success,
            "on_error": on_error,
        },
    )
    thread.start()
    return thread


def _run_operation(
    *,
    operation: Callable[..., T],
    args: tuple[Any, ...],
    on_success: Callable[[T], None] | None,
    on_error: Callable[[DesignerError], None] | None,
) -> None:
    op_name = getattr(operation, "__name__", repr(operation))
    try:
        result = operation(*args)
    except DesignerError as e:
        logger.warning("Background operation failed", extra={"operation": op_name, "error": e.message})
        if on_error is not None:
            on_error(e)
        return
    except Exception as e:
        logger.exception("Background operation crashed", extra={"operation": op_name})
        if on_error is not None:
            on_error(DesignerError(f"Unexpected error: {e}"))
        return

    if on_success is not None:
        on_success(result)
