"""Scheduler exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from twiddle_scheduler.models.build import LeasedBuild, TaskDescriptor
    from twiddle_scheduler.models.pipeline import PipelineState


class SchedulerError(Exception):
    """Base exception for all scheduler errors."""


class QueueError(SchedulerError):
    """Build queue operation failed."""


class MalformedMessageError(QueueError):
    """Leased message body is not a valid build request."""

    def __init__(self, message_id: str, message: str) -> None:
        self.message_id = message_id
        super().__init__(f"Message {message_id} is malformed: {message}")


class CredentialError(SchedulerError):
    """Scoped credentials could not be issued."""


class TaskLaunchError(SchedulerError):
    """Build task could not be started."""

    def __init__(self, message: str, failures: list[dict[str, Any]] | None = None) -> None:
        self.failures = failures or []
        super().__init__(message)


class AcknowledgeError(SchedulerError):
    """Queue message could not be deleted after its task started."""

    def __init__(self, message: str, task: TaskDescriptor | None = None) -> None:
        self.task = task
        super().__init__(message)


class PipelineError(SchedulerError):
    """Error during pipeline execution."""


class PipelineAbortedError(PipelineError):
    """A pipeline step failed and the remaining steps were skipped."""

    def __init__(
        self,
        step: str,
        state: PipelineState,
        build: LeasedBuild | None,
        cause: BaseException,
    ) -> None:
        self.step = step
        self.state = state
        self.build = build
        self.cause = cause
        super().__init__(f"Step {step} failed after {state}: {cause}")
