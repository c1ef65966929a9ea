"""Collaborator backends behind Protocol interfaces."""

from __future__ import annotations

from twiddle_scheduler.core.config import AppSettings
from twiddle_scheduler.credentials.sts_issuer import STSCredentialIssuer
from twiddle_scheduler.orchestration.ecs_runner import ECSTaskRunner
from twiddle_scheduler.persistence.sqs_queue import SQSBuildQueue


def create_collaborators(settings: AppSettings | None = None):
    """Create wired-up collaborators from application settings.

    Called once per activation, so every invocation gets its own clients.

    Returns:
        Tuple of (queue, dead_letter_sink, credential_issuer, task_runner).
        ``dead_letter_sink`` is None when no dead-letter queue is configured.
    """
    if settings is None:
        settings = AppSettings()

    queue = SQSBuildQueue(
        queue_url=settings.sqs.queue_url,
        region=settings.sqs.region,
        endpoint_url=settings.sqs.endpoint_url,
    )

    dead_letter = None
    if settings.sqs.dead_letter_queue_url:
        dead_letter = SQSBuildQueue(
            queue_url=settings.sqs.dead_letter_queue_url,
            region=settings.sqs.region,
            endpoint_url=settings.sqs.endpoint_url,
        )

    issuer = STSCredentialIssuer(
        region=settings.sts.region,
        endpoint_url=settings.sts.endpoint_url,
    )

    runner = ECSTaskRunner(
        cluster=settings.ecs.cluster,
        container_name=settings.ecs.container_name,
        started_by=settings.ecs.started_by,
        launch_type=settings.ecs.launch_type,
        subnets=settings.ecs.subnets,
        security_groups=settings.ecs.security_groups,
        assign_public_ip=settings.ecs.assign_public_ip,
        region=settings.ecs.region,
        endpoint_url=settings.ecs.endpoint_url,
    )

    return queue, dead_letter, issuer, runner
