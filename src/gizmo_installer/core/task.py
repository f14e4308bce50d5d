"""
Gizmo Installer background task bridge.

Runs one blocking operation on a worker thread and lets the render
thread ask, without ever blocking, whether it has finished and with
what result.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, TypeVar

from gizmo_installer.core.errors import (
    TaskAlreadyRunningError,
    TaskFaultError,
    TaskProtocolError,
)
from gizmo_installer.core.logging import get_logger

T = TypeVar("T")
logger = get_logger(__name__)

DEFAULT_RECEIVE_TIMEOUT = 1.0


class TaskState(Enum):
    """Observable state of a task slot."""

    EMPTY = auto()
    PENDING = auto()
    READY = auto()
    FAILED = auto()


@dataclass(frozen=True)
class TaskPoll(Generic[T]):
    """Answer to a single non-blocking poll."""

    state: TaskState
    value: T | None = None
    error: Exception | None = None

    @property
    def is_finished(self) -> bool:
        return self.state in (TaskState.READY, TaskState.FAILED)


@dataclass(frozen=True)
class _Outcome(Generic[T]):
    """Message sent by a worker through its one-shot channel."""

    value: T | None = None
    error: Exception | None = None


class _TaskWorker(threading.Thread, Generic[T]):
    """Thread that runs one operation and sends exactly one outcome."""

    def __init__(
        self,
        name: str,
        operation: Callable[[], T],
        channel: queue.Queue[_Outcome[T]],
    ) -> None:
        super().__init__(name=name, daemon=True)
        self._operation = operation
        self._channel = channel
        self.fault: BaseException | None = None

    def run(self) -> None:
        try:
            try:
                outcome: _Outcome[T] = _Outcome(value=self._operation())
            except Exception as e:
                outcome = _Outcome(error=e)
            self.send(outcome)
        except BaseException as e:
            # Anything escaping here is an abnormal termination; poll() reports it.
            self.fault = e
            logger.error("Task worker terminated abnormally", task=self.name, fault=repr(e))

    def send(self, outcome: _Outcome[T]) -> None:
        self._channel.put_nowait(outcome)


class TaskSlot(Generic[T]):
    """Holds at most one outstanding background task.

    ``start`` spawns a worker; ``poll`` never blocks the caller on a
    running worker. A finished task's result is handed out exactly once,
    after which the slot is empty again.
    """

    def __init__(
        self,
        name: str,
        receive_timeout: float = DEFAULT_RECEIVE_TIMEOUT,
    ) -> None:
        self.name = name
        self.receive_timeout = receive_timeout
        self._worker: _TaskWorker[T] | None = None
        self._channel: queue.Queue[_Outcome[T]] | None = None
        self._started_count = 0

    @property
    def is_empty(self) -> bool:
        return self._worker is None

    @property
    def is_pending(self) -> bool:
        return self._worker is not None

    @property
    def started_count(self) -> int:
        """Number of tasks this slot has started over its lifetime."""
        return self._started_count

    def start(self, operation: Callable[[], T]) -> None:
        """Run ``operation`` on a new worker thread.

        The operation must capture private copies of its inputs; it
        communicates back only through its return value or exception.
        """
        if self._worker is not None:
            raise TaskAlreadyRunningError(
                f"Cannot start '{self.name}': a task is already running in this slot."
            )

        channel: queue.Queue[_Outcome[T]] = queue.Queue(maxsize=1)
        number = self._started_count + 1
        worker = _TaskWorker(f"task-{self.name}-{number}", operation, channel)
        worker.start()

        self._worker = worker
        self._channel = channel
        self._started_count = number
        logger.info("Task started", task=self.name, thread=worker.name)

    def poll(self) -> TaskPoll[T]:
        """Check the task without blocking on a running worker."""
        worker = self._worker
        if worker is None:
            return TaskPoll(TaskState.EMPTY)

        # Join only once the worker has terminated, otherwise join() would block.
        if worker.is_alive():
            return TaskPoll(TaskState.PENDING)

        channel = self._channel
        self._worker = None
        self._channel = None
        worker.join()

        if worker.fault is not None:
            error: Exception = TaskFaultError(
                f"Background thread failed: {worker.fault!r}"
            )
            logger.error("Task failed", task=self.name, error=str(error))
            return TaskPoll(TaskState.FAILED, error=error)

        try:
            outcome = channel.get(timeout=self.receive_timeout)  # type: ignore[union-attr]
        except queue.Empty:
            error = TaskProtocolError(
                f"Background task '{self.name}' finished without reporting a result."
            )
            logger.error("Task failed", task=self.name, error=str(error))
            return TaskPoll(TaskState.FAILED, error=error)

        if outcome.error is not None:
            logger.error(
                "Task failed",
                task=self.name,
                error_type=type(outcome.error).__name__,
                error=str(outcome.error),
            )
            return TaskPoll(TaskState.FAILED, error=outcome.error)

        logger.info("Task finished", task=self.name)
        return TaskPoll(TaskState.READY, value=outcome.value)
