"""In-memory collaborators for unit tests and local runs."""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from twiddle_scheduler.core.exceptions import CredentialError, QueueError, TaskLaunchError
from twiddle_scheduler.models.build import QueueMessage, ScopedCredentials, TaskDescriptor


class MemoryBuildQueue:
    """List-backed IBuildQueue with SQS-like visibility timeouts.

    Set ``send_error`` / ``lease_error`` / ``delete_error`` to make the
    corresponding call raise.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._messages: list[dict[str, Any]] = []
        self.deleted: list[str] = []
        self.send_error: Exception | None = None
        self.lease_error: Exception | None = None
        self.delete_error: Exception | None = None

    def send(self, body: str) -> str:
        if self.send_error is not None:
            raise QueueError(str(self.send_error)) from self.send_error
        message_id = str(uuid.uuid4())
        self._messages.append({
            "message_id": message_id,
            "body": body,
            "receipt": None,
            "invisible_until": 0.0,
            "receive_count": 0,
        })
        return message_id

    def lease(self, visibility_timeout: int, wait_seconds: int = 0) -> QueueMessage | None:
        if self.lease_error is not None:
            raise QueueError(str(self.lease_error)) from self.lease_error
        now = self._clock()
        for msg in self._messages:
            if msg["invisible_until"] <= now:
                msg["receipt"] = f"{msg['message_id']}#{uuid.uuid4().hex}"
                msg["invisible_until"] = now + visibility_timeout
                msg["receive_count"] += 1
                return QueueMessage(
                    message_id=msg["message_id"],
                    receipt=msg["receipt"],
                    body=msg["body"],
                    receive_count=msg["receive_count"],
                )
        return None

    def delete(self, receipt: str) -> None:
        if self.delete_error is not None:
            raise QueueError(str(self.delete_error)) from self.delete_error
        for i, msg in enumerate(self._messages):
            if msg["receipt"] == receipt:
                del self._messages[i]
                self.deleted.append(msg["message_id"])
                return
        raise QueueError(f"Receipt {receipt!r} is not current")

    @property
    def bodies(self) -> list[str]:
        return [m["body"] for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)


class MemoryCredentialIssuer:
    """Canned-response ICredentialIssuer that records every request."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.error: Exception | None = None

    def assume_role(
        self, role_arn: str, session_name: str, duration_seconds: int, policy: str
    ) -> ScopedCredentials:
        self.calls.append({
            "role_arn": role_arn,
            "session_name": session_name,
            "duration_seconds": duration_seconds,
            "policy": policy,
        })
        if self.error is not None:
            raise CredentialError(str(self.error)) from self.error
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)
        suffix = uuid.uuid4().hex[:12].upper()
        return ScopedCredentials(
            access_key_id=f"ASIA{suffix}",
            secret_access_key=f"secret-{suffix}",
            session_token=f"token-{suffix}",
            issued_at=issued_at,
            expiration=issued_at + timedelta(seconds=duration_seconds),
        )


class MemoryTaskRunner:
    """ITaskRunner fake that records launches.

    Set ``failures`` to simulate the orchestrator refusing to place the task.
    """

    def __init__(self, cluster: str = "memory-cluster") -> None:
        self._cluster = cluster
        self.launches: list[dict[str, Any]] = []
        self.failures: list[dict[str, Any]] = []
        self.error: Exception | None = None

    def run_task(
        self,
        task_definition: str,
        environment: list[dict[str, Any]],
        client_token: str | None = None,
    ) -> TaskDescriptor:
        self.launches.append({
            "task_definition": task_definition,
            "environment": environment,
            "client_token": client_token,
        })
        if self.error is not None:
            raise TaskLaunchError(str(self.error)) from self.error
        if self.failures:
            raise TaskLaunchError(f"Starting task failed: {self.failures[0]}", failures=self.failures)
        task_id = uuid.uuid4().hex
        return TaskDescriptor(
            task_arn=f"arn:aws:ecs:us-east-1:000000000000:task/{self._cluster}/{task_id}",
            cluster_arn=f"arn:aws:ecs:us-east-1:000000000000:cluster/{self._cluster}",
            task_definition_arn=f"arn:aws:ecs:us-east-1:000000000000:task-definition/{task_definition}:1",
            last_status="PROVISIONING",
        )
