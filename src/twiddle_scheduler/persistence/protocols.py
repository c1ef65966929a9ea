"""Re-export queue protocols from core for convenience."""

from __future__ import annotations

from twiddle_scheduler.core.protocols import IBuildQueue, IDeadLetterSink

__all__ = ["IBuildQueue", "IDeadLetterSink"]
