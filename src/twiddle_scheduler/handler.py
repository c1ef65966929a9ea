"""Activation entry point for the build scheduler."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from twiddle_scheduler.core.config import AppSettings
from twiddle_scheduler.core.logger import configure_logging
from twiddle_scheduler.persistence import create_collaborators
from twiddle_scheduler.pipeline.executor import DispatchPipeline

logger = logging.getLogger(__name__)


def lambda_handler(event: dict[str, Any] | None, context: Any = None) -> dict[str, Any]:
    """Schedule one build per activation.

    The event may carry ``addon``, ``addon_version`` and ``ember_version`` to
    enqueue a new request; the next queued request is dispatched either way.
    Failures propagate so the trigger sees the invocation as failed.
    """
    settings = AppSettings()
    configure_logging(settings.log_level)
    logger.info("Running in env: %s", settings.environment)
    logger.info("Starting based on event: %s", json.dumps(event, default=str))

    queue, dead_letter, issuer, runner = create_collaborators(settings)
    pipeline = DispatchPipeline(
        settings=settings,
        queue=queue,
        issuer=issuer,
        runner=runner,
        dead_letter=dead_letter,
    )
    result = asyncio.run(pipeline.run(event or {}))
    summary = result.summary()
    logger.info("Dispatch finished: %s", summary)
    return summary
