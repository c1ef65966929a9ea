"""The five dispatch steps.

Each step takes the current state plus the collaborators it needs and
returns the next state, or raises. Collaborator calls block on the network,
so they are awaited off the event loop.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from twiddle_scheduler.core.config import ECSConfig, PolicyConfig, SQSConfig, STSConfig
from twiddle_scheduler.core.exceptions import (
    AcknowledgeError,
    MalformedMessageError,
    QueueError,
)
from twiddle_scheduler.core.protocols import (
    IBuildQueue,
    ICredentialIssuer,
    IDeadLetterSink,
    ITaskRunner,
)
from twiddle_scheduler.credentials.policy import build_access_policy
from twiddle_scheduler.credentials.sts_issuer import SESSION_DURATION_SECONDS
from twiddle_scheduler.models.build import REQUEST_FIELDS, BuildRequest, LeasedBuild, QueueMessage
from twiddle_scheduler.orchestration.ecs_runner import task_definition_name

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enqueuer
# ---------------------------------------------------------------------------

def request_from_event(event: Any) -> BuildRequest | None:
    """Extract a build request from an activation event, if it carries one."""
    if not isinstance(event, Mapping):
        return None
    present = [f for f in REQUEST_FIELDS if event.get(f) is not None]
    if not present:
        return None
    if len(present) != len(REQUEST_FIELDS):
        missing = sorted(set(REQUEST_FIELDS) - set(present))
        logger.warning("Event has partial build request, missing %s; nothing to enqueue", missing)
        return None
    try:
        return BuildRequest(**{f: event[f] for f in REQUEST_FIELDS})
    except ValidationError as exc:
        logger.warning("Ignoring invalid build request in event; nothing to enqueue: %s", exc)
        return None


async def enqueue(event: Any, queue: IBuildQueue) -> BuildRequest | None:
    request = request_from_event(event)
    if request is None:
        return None
    logger.info("Pushing build to queue: %s", request.model_dump())
    message_id = await asyncio.to_thread(queue.send, request.to_message_body())
    logger.info("Enqueued build as message %s", message_id)
    return request


# ---------------------------------------------------------------------------
# Dequeuer
# ---------------------------------------------------------------------------

async def lease(queue: IBuildQueue, sqs: SQSConfig) -> QueueMessage | None:
    """Lease at most one message. None means the queue had nothing pending."""
    logger.info("Loading build from queue")
    message = await asyncio.to_thread(queue.lease, sqs.visibility_timeout, sqs.wait_seconds)
    if message is None:
        logger.info("Queue is empty; nothing to dispatch")
    return message


def to_leased_build(message: QueueMessage) -> LeasedBuild:
    try:
        request = BuildRequest.from_message_body(message.body)
    except ValidationError as exc:
        raise MalformedMessageError(message.message_id, str(exc)) from exc
    return LeasedBuild(
        request=request,
        receipt=message.receipt,
        message_id=message.message_id,
        receive_count=message.receive_count,
    )


def exceeds_receive_limit(message: QueueMessage, sqs: SQSConfig) -> bool:
    return sqs.max_receive_count > 0 and message.receive_count > sqs.max_receive_count


async def dead_letter(
    message: QueueMessage, queue: IBuildQueue, sink: IDeadLetterSink | None
) -> None:
    """Divert a message that keeps failing out of the build queue."""
    if sink is not None:
        await asyncio.to_thread(sink.send, message.body)
        logger.warning("Moved message %s to dead-letter queue after %d receives",
                       message.message_id, message.receive_count)
    else:
        logger.error("Dropping message %s after %d receives, no dead-letter queue: %s",
                     message.message_id, message.receive_count, message.body)
    await asyncio.to_thread(queue.delete, message.receipt)


# ---------------------------------------------------------------------------
# Credential scoper
# ---------------------------------------------------------------------------

async def scope_credentials(
    build: LeasedBuild, issuer: ICredentialIssuer, sts: STSConfig, policy: PolicyConfig
) -> LeasedBuild:
    logger.info("Creating scoped credentials for %s@%s (ember %s)",
                build.request.addon, build.request.addon_version, build.request.ember_version)
    document = build_access_policy(
        build.request, bucket=policy.addon_bucket, function_arn=policy.processor_function_arn,
    )
    credentials = await asyncio.to_thread(
        issuer.assume_role,
        sts.builder_role_arn,
        sts.session_name,
        SESSION_DURATION_SECONDS,
        document.to_json(),
    )
    build.credentials = credentials
    return build


# ---------------------------------------------------------------------------
# Task launcher
# ---------------------------------------------------------------------------

def build_environment(build: LeasedBuild) -> list[dict[str, str]]:
    """Container environment for a build task: credentials plus addon coordinates."""
    creds = build.credentials
    if creds is None:
        raise ValueError("Build has no credentials attached")
    return [
        {"name": "AWS_ACCESS_KEY_ID", "value": creds.access_key_id},
        {"name": "AWS_SECRET_ACCESS_KEY", "value": creds.secret_access_key.get_secret_value()},
        {"name": "AWS_SESSION_TOKEN", "value": creds.session_token.get_secret_value()},
        {"name": "ADDON_NAME", "value": build.request.addon},
        {"name": "ADDON_VERSION", "value": build.request.addon_version},
    ]


def launch_token(build: LeasedBuild) -> str:
    """Idempotency key for one queue message; the same on every redelivery."""
    r = build.request
    key = "\n".join([r.addon, r.addon_version, r.ember_version, build.message_id])
    # 64 hex chars, the ECS clientToken limit.
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


async def launch_task(build: LeasedBuild, runner: ITaskRunner, ecs: ECSConfig) -> LeasedBuild:
    task_definition = task_definition_name(ecs.task_definition_prefix, build.request.ember_version)
    logger.info("Running build %s", task_definition)
    token = launch_token(build) if ecs.idempotent_launch else None
    task = await asyncio.to_thread(runner.run_task, task_definition, build_environment(build), token)
    build.task = task
    logger.info("Build task started: %s", task.task_arn)
    return build


# ---------------------------------------------------------------------------
# Acknowledger
# ---------------------------------------------------------------------------

async def acknowledge(build: LeasedBuild, queue: IBuildQueue) -> LeasedBuild:
    if build.task is None:
        raise ValueError("Refusing to acknowledge a build without a started task")
    logger.info("Deleting message %s from queue", build.message_id)
    try:
        await asyncio.to_thread(queue.delete, build.receipt)
    except QueueError as exc:
        raise AcknowledgeError(
            f"Task {build.task.task_arn} started but message {build.message_id} "
            f"was not deleted and will be redelivered: {exc}",
            task=build.task,
        ) from exc
    return build
