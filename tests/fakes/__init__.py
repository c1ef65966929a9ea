"""Shared test doubles: re-exported memory backends."""

from __future__ import annotations

from twiddle_scheduler.persistence.memory_backend import (
    MemoryBuildQueue,
    MemoryCredentialIssuer,
    MemoryTaskRunner,
)

__all__ = ["MemoryBuildQueue", "MemoryCredentialIssuer", "MemoryTaskRunner"]
