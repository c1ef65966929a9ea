"""Re-export credential protocols from core for convenience."""

from __future__ import annotations

from twiddle_scheduler.core.protocols import ICredentialIssuer

__all__ = ["ICredentialIssuer"]
