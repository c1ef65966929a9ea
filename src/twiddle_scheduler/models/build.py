"""Build request, lease, credential and task models."""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

# Characters with meaning inside an IAM resource ARN.
_POLICY_UNSAFE = re.compile(r"[*?$]")
_EMBER_VERSION = re.compile(r"^[0-9A-Za-z][0-9A-Za-z.-]*$")
# npm package name, optionally scoped: "name" or "@scope/name".
_ADDON_NAME = re.compile(r"^(@[^/@]+/)?[^/@][^/]*$")

REQUEST_FIELDS = ("addon", "addon_version", "ember_version")


class BuildRequest(BaseModel):
    """Request to build one addon version against one ember version.

    Serialized verbatim into the queue body using the same keys the
    activation event carries.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    addon: str = Field(min_length=1)
    addon_version: str = Field(min_length=1)
    ember_version: str = Field(min_length=1)

    @field_validator("addon", "addon_version", "ember_version")
    @classmethod
    def _safe_path_segment(cls, value: str) -> str:
        if _POLICY_UNSAFE.search(value):
            raise ValueError("must not contain '*', '?' or '$'")
        segments = value.split("/")
        if "" in segments or ".." in segments:
            raise ValueError("must not contain empty or '..' path segments")
        return value

    @field_validator("addon")
    @classmethod
    def _npm_name(cls, value: str) -> str:
        if not _ADDON_NAME.match(value):
            raise ValueError("must be a package name, optionally scoped as '@scope/name'")
        return value

    @field_validator("addon_version")
    @classmethod
    def _single_segment(cls, value: str) -> str:
        if "/" in value:
            raise ValueError("must not contain '/'")
        return value

    @field_validator("ember_version")
    @classmethod
    def _template_safe(cls, value: str) -> str:
        if not _EMBER_VERSION.match(value):
            raise ValueError("must contain only letters, digits, '.' and '-'")
        return value

    def to_message_body(self) -> str:
        return json.dumps(self.model_dump(), separators=(",", ":"))

    @classmethod
    def from_message_body(cls, body: str) -> BuildRequest:
        return cls.model_validate_json(body)


class QueueMessage(BaseModel):
    """A single leased delivery of a queue message."""

    message_id: str
    receipt: str
    body: str
    receive_count: int = 1


class ScopedCredentials(BaseModel):
    """Temporary credentials limited to one build's resource path."""

    model_config = ConfigDict(frozen=True)

    access_key_id: str
    secret_access_key: SecretStr
    session_token: SecretStr
    issued_at: datetime
    expiration: datetime

    @property
    def lifetime_seconds(self) -> float:
        return (self.expiration - self.issued_at).total_seconds()


class TaskDescriptor(BaseModel):
    """Orchestrator description of a started build task."""

    task_arn: str
    cluster_arn: str = ""
    task_definition_arn: str = ""
    last_status: str = ""
    started_by: str = ""
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_ecs(cls, task: dict[str, Any]) -> TaskDescriptor:
        return cls(
            task_arn=task.get("taskArn", ""),
            cluster_arn=task.get("clusterArn", ""),
            task_definition_arn=task.get("taskDefinitionArn", ""),
            last_status=task.get("lastStatus", ""),
            started_by=task.get("startedBy", ""),
            raw=task,
        )


class LeasedBuild(BaseModel):
    """A build request together with the lease that delivered it.

    Filled in step by step as the pipeline progresses: the credential
    scoper sets ``credentials`` and the task launcher sets ``task``.
    """

    request: BuildRequest
    receipt: str = Field(repr=False)
    message_id: str = ""
    receive_count: int = 1
    credentials: Optional[ScopedCredentials] = None
    task: Optional[TaskDescriptor] = None
