"""Protocol interfaces for the scheduler's external collaborators.

The dispatch pipeline only talks to these Protocols. Structural typing,
no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from twiddle_scheduler.models.build import QueueMessage, ScopedCredentials, TaskDescriptor


# ---------------------------------------------------------------------------
# Durable queue
# ---------------------------------------------------------------------------

@runtime_checkable
class IBuildQueue(Protocol):
    """Durable at-least-once queue with leased (invisible) receives."""

    def send(self, body: str) -> str: ...

    def lease(self, visibility_timeout: int, wait_seconds: int = 0) -> QueueMessage | None: ...

    def delete(self, receipt: str) -> None: ...


@runtime_checkable
class IDeadLetterSink(Protocol):
    """Destination for messages that exceeded their delivery budget."""

    def send(self, body: str) -> str: ...


# ---------------------------------------------------------------------------
# Identity issuer
# ---------------------------------------------------------------------------

@runtime_checkable
class ICredentialIssuer(Protocol):
    """Issues time-boxed credentials for a role, narrowed by a session policy."""

    def assume_role(
        self, role_arn: str, session_name: str, duration_seconds: int, policy: str
    ) -> ScopedCredentials: ...


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

@runtime_checkable
class ITaskRunner(Protocol):
    """Starts a single containerized task from a named template."""

    def run_task(
        self,
        task_definition: str,
        environment: list[dict[str, Any]],
        client_token: str | None = None,
    ) -> TaskDescriptor: ...
