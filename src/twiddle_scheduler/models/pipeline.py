"""Dispatch pipeline state models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel

from twiddle_scheduler.models.build import BuildRequest, LeasedBuild


class PipelineState(StrEnum):
    IDLE = "IDLE"
    ENQUEUED = "ENQUEUED"
    LEASED = "LEASED"
    CREDENTIALS_ISSUED = "CREDENTIALS_ISSUED"
    TASK_LAUNCHED = "TASK_LAUNCHED"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    EMPTY = "EMPTY"
    DEAD_LETTERED = "DEAD_LETTERED"
    ABORTED = "ABORTED"


class DispatchResult(BaseModel):
    """Outcome of one pipeline invocation."""

    state: PipelineState = PipelineState.IDLE
    enqueued: Optional[BuildRequest] = None
    build: Optional[LeasedBuild] = None
    error: str = ""

    def summary(self) -> dict[str, Any]:
        """Log-safe view of the result. Never includes credentials."""
        out: dict[str, Any] = {"state": str(self.state), "enqueued": self.enqueued is not None}
        if self.build is not None:
            out["build"] = self.build.request.model_dump()
            out["message_id"] = self.build.message_id
            if self.build.task is not None:
                out["task_arn"] = self.build.task.task_arn
        if self.error:
            out["error"] = self.error
        return out
