"""Time-limited execution of a single check task.

Every check implementation runs inside ``run_timed``.  The task executes on
its own daemon thread and the caller waits at most ``timeout_seconds`` for
it.  When the task times out, raises, exhausts the call stack or returns
something that is not a category mapping, the partial output is discarded
and replaced by one synthetic category, named after the task, holding one
*failed* check of the same name.

This is the only place in the package where a fault is turned into report
data instead of being propagated.

Cancellation is cooperative: ``run_timed`` sets ``task.cancel_event`` when
it stops waiting, and long-running work should poll ``task.cancelled``.
Work that never looks at the event keeps running in the background until
it returns on its own; only the caller is released on time.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from flint_checker.domain.models.check import CheckCategory, CheckCheck

logger = logging.getLogger(__name__)

WorkFn = Callable[[Path], Mapping[str, CheckCategory]]


@dataclass
class TimedTask:
    """A named unit of check work with a timeout in whole seconds."""

    name: str
    timeout_seconds: int
    work: WorkFn
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("A timed task needs a non-empty name")
        if isinstance(self.timeout_seconds, bool) or not isinstance(self.timeout_seconds, int):
            raise ValueError(
                f"Timeout of task {self.name!r} must be an integer number of seconds"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"Timeout of task {self.name!r} must be > 0, got {self.timeout_seconds}"
            )

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()


class _Outcome:
    """Slot the worker thread fills in before it exits."""

    def __init__(self) -> None:
        self.categories: dict[str, CheckCategory] | None = None
        self.error: BaseException | None = None


def failure_category(task_name: str) -> dict[str, CheckCategory]:
    """The synthetic mapping reported for a task that could not complete."""
    cc = CheckCategory(task_name)
    cc.add(CheckCheck(task_name, False))
    return {task_name: cc}


def _execute(task: TimedTask, content_file: Path, outcome: _Outcome) -> None:
    try:
        produced: Any = task.work(content_file)
        outcome.categories = dict(produced)
    except Exception as exc:  # noqa: BLE001
        outcome.error = exc


def run_timed(task: TimedTask, content_file: Path) -> dict[str, CheckCategory]:
    """Run *task* against *content_file*, never letting its failure escape.

    Args:
        task: The task descriptor; its ``cancel_event`` is set once the
            caller stops waiting.
        content_file: The file handed to ``task.work``.

    Returns:
        The mapping produced by the task, or the synthetic failure mapping
        from ``failure_category`` on timeout or error.
    """
    outcome = _Outcome()
    worker = threading.Thread(
        target=_execute,
        args=(task, content_file, outcome),
        name=f"flint-task-{task.name}",
        daemon=True,
    )
    logger.info(
        "calling time-limited validation task %s, timeout: %d seconds",
        task.name,
        task.timeout_seconds,
    )
    worker.start()
    worker.join(task.timeout_seconds)

    if worker.is_alive():
        logger.error(
            "Validation task %s timed out after %d seconds", task.name, task.timeout_seconds
        )
    elif outcome.error is not None:
        logger.error(
            "Exception during validation task %s: %s: %s",
            task.name,
            type(outcome.error).__name__,
            outcome.error,
        )
    elif outcome.categories is None:
        logger.error("Validation task %s exited without a result", task.name)
    else:
        return outcome.categories

    task.cancel_event.set()
    logger.warning("Added validation error category '%s'", task.name)
    return failure_category(task.name)
