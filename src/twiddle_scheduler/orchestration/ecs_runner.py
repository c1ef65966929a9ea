"""ECS task runner implementing ITaskRunner."""

from __future__ import annotations

import json
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from twiddle_scheduler.core.exceptions import TaskLaunchError
from twiddle_scheduler.models.build import TaskDescriptor


def task_definition_name(prefix: str, ember_version: str) -> str:
    """Task template for an ember version: ``3.2.0`` -> ``<prefix>-3-2-0``.

    One registered task definition must exist per supported ember version.
    """
    return f"{prefix}-{ember_version.replace('.', '-')}"


class ECSTaskRunner:
    """Production ITaskRunner that starts one task per call on a fixed cluster."""

    def __init__(
        self,
        cluster: str,
        container_name: str,
        started_by: str,
        *,
        launch_type: str | None = None,
        subnets: list[str] | None = None,
        security_groups: list[str] | None = None,
        assign_public_ip: bool = False,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
    ) -> None:
        self._cluster = cluster
        self._container_name = container_name
        self._started_by = started_by
        self._launch_type = launch_type
        self._subnets = subnets or []
        self._security_groups = security_groups or []
        self._assign_public_ip = assign_public_ip
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("ecs", **kwargs)

    def _run_task_params(
        self, task_definition: str, environment: list[dict[str, Any]], client_token: str | None
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "cluster": self._cluster,
            "taskDefinition": task_definition,
            "count": 1,
            "overrides": {
                "containerOverrides": [
                    {"name": self._container_name, "environment": environment},
                ],
            },
            "startedBy": self._started_by,
        }
        if self._launch_type:
            params["launchType"] = self._launch_type
        if self._subnets:
            params["networkConfiguration"] = {
                "awsvpcConfiguration": {
                    "subnets": self._subnets,
                    "securityGroups": self._security_groups,
                    "assignPublicIp": "ENABLED" if self._assign_public_ip else "DISABLED",
                },
            }
        if client_token:
            params["clientToken"] = client_token
        return params

    def run_task(
        self,
        task_definition: str,
        environment: list[dict[str, Any]],
        client_token: str | None = None,
    ) -> TaskDescriptor:
        params = self._run_task_params(task_definition, environment, client_token)
        try:
            resp = self._client.run_task(**params)
        except (ClientError, BotoCoreError) as exc:
            raise TaskLaunchError(f"ECS RunTask {task_definition!r} failed: {exc}") from exc

        tasks = resp.get("tasks", [])
        failures = resp.get("failures", [])
        if failures or not tasks:
            detail = json.dumps(failures[0], default=str) if failures else "no task returned"
            raise TaskLaunchError(f"Starting task failed: {detail}", failures=failures)
        return TaskDescriptor.from_ecs(tasks[0])
