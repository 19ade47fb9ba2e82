"""
Background execution of deferred command work.

The dispatcher must answer Discord before the slow work finishes, so the
work is handed off and never awaited on the request path:

- in Lambda, the function re-invokes itself asynchronously
  (``InvocationType="Event"``); the second invocation runs the task to
  completion in its own execution context;
- elsewhere, the task goes to an in-process thread pool and the caller gets
  the ``Future``. The host process must stay alive until it settles.
"""

from __future__ import annotations

import importlib
import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

from .config import Settings
from .interactions import Interaction
from .logutil import log_event

logger = logging.getLogger(__name__)

DEFERRED_TASK_KEY = "deferred_task"

_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="deferred")


def _boto3():
    # Allow tests to monkeypatch module-level `boto3` symbol.
    return globals().get("boto3") or importlib.import_module("boto3")


def task_event(task: str, interaction: Interaction) -> dict[str, Any]:
    return {DEFERRED_TASK_KEY: task, "interaction": interaction.raw}


def is_task_event(event: dict[str, Any]) -> bool:
    return DEFERRED_TASK_KEY in event and "body" not in event


def _invoke_async(function_name: str, event: dict[str, Any]) -> dict[str, Any]:
    client = _boto3().client("lambda")
    return client.invoke(
        FunctionName=function_name,
        InvocationType="Event",
        Payload=json.dumps(event, ensure_ascii=False).encode("utf-8"),
    )


def spawn_deferred(
    task: str,
    interaction: Interaction,
    settings: Settings,
    run_local: Callable[[str, Interaction], None],
) -> Any:
    """Start ``task`` for ``interaction`` without waiting for it.

    Returns the Lambda invoke response or a ``Future``.
    """
    if settings.deferred_function_name:
        resp = _invoke_async(settings.deferred_function_name, task_event(task, interaction))
        log_event(
            logger,
            "deferred_spawned",
            mode="lambda",
            task=task,
            interactionId=interaction.id,
            status=resp.get("StatusCode"),
        )
        return resp

    fut: Future = _executor.submit(run_local, task, interaction)
    log_event(logger, "deferred_spawned", mode="thread", task=task, interactionId=interaction.id)
    return fut
