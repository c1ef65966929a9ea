"""Re-export orchestration protocols from core."""

from __future__ import annotations

from twiddle_scheduler.core.protocols import ITaskRunner

__all__ = ["ITaskRunner"]
