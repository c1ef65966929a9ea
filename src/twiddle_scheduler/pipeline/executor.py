"""Dispatch pipeline: enqueue -> lease -> scope credentials -> launch -> acknowledge."""

from __future__ import annotations

import logging
from typing import Any

from twiddle_scheduler.core.config import AppSettings
from twiddle_scheduler.core.exceptions import AcknowledgeError, PipelineAbortedError
from twiddle_scheduler.core.protocols import (
    IBuildQueue,
    ICredentialIssuer,
    IDeadLetterSink,
    ITaskRunner,
)
from twiddle_scheduler.models.pipeline import DispatchResult, PipelineState
from twiddle_scheduler.pipeline import steps

logger = logging.getLogger(__name__)


class DispatchPipeline:
    """Runs one dispatch pass per activation.

    Collaborators are injected at construction time. Steps run strictly in
    order and any failure skips the rest; ``run`` is the only place errors
    are caught, logged and turned into ``PipelineAbortedError``.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        queue: IBuildQueue,
        issuer: ICredentialIssuer,
        runner: ITaskRunner,
        dead_letter: IDeadLetterSink | None = None,
    ) -> None:
        self._settings = settings
        self._queue = queue
        self._issuer = issuer
        self._runner = runner
        self._dead_letter = dead_letter

    async def run(self, event: Any) -> DispatchResult:
        result = DispatchResult()
        step = "enqueue"
        try:
            result.enqueued = await steps.enqueue(event, self._queue)
            if result.enqueued is not None:
                result.state = PipelineState.ENQUEUED

            step = "lease"
            message = await steps.lease(self._queue, self._settings.sqs)
            if message is None:
                result.state = PipelineState.EMPTY
                return result

            if steps.exceeds_receive_limit(message, self._settings.sqs):
                step = "dead_letter"
                await steps.dead_letter(message, self._queue, self._dead_letter)
                result.state = PipelineState.DEAD_LETTERED
                return result

            result.build = steps.to_leased_build(message)
            result.state = PipelineState.LEASED

            step = "scope_credentials"
            await steps.scope_credentials(
                result.build, self._issuer, self._settings.sts, self._settings.policy,
            )
            result.state = PipelineState.CREDENTIALS_ISSUED

            step = "launch_task"
            await steps.launch_task(result.build, self._runner, self._settings.ecs)
            result.state = PipelineState.TASK_LAUNCHED

            step = "acknowledge"
            await steps.acknowledge(result.build, self._queue)
            result.state = PipelineState.ACKNOWLEDGED
        except Exception as exc:
            reached = result.state
            result.state = PipelineState.ABORTED
            result.error = str(exc)
            if isinstance(exc, AcknowledgeError) and exc.task is not None:
                logger.error("Build task %s is running but its message was not acknowledged",
                             exc.task.task_arn)
            logger.error("Dispatch aborted at %s after %s: %s", step, reached, exc)
            raise PipelineAbortedError(step, reached, result.build, exc) from exc

        logger.info("Build started: %s", result.build.task.task_arn)
        return result
