"""Least-privilege IAM session policy for a single addon build."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from twiddle_scheduler.models.build import BuildRequest

POLICY_VERSION = "2012-10-17"

INVOKE_ACTIONS = (
    "lambda:InvokeAsync",
    "lambda:InvokeFunction",
)

BUCKET_READ_ACTIONS = (
    "s3:GetBucketCORS",
    "s3:GetBucketLocation",
    "s3:GetBucketLogging",
    "s3:GetBucketNotification",
    "s3:GetBucketPolicy",
    "s3:GetBucketRequestPayment",
    "s3:GetBucketTagging",
    "s3:GetBucketVersioning",
    "s3:GetBucketWebsite",
    "s3:GetLifecycleConfiguration",
    "s3:ListBucket",
)

OBJECT_ACTIONS = (
    "s3:PutObject",
    "s3:PutObjectAcl",
    "s3:GetObject",
    "s3:GetObjectAcl",
    "s3:GetObjectTorrent",
    "s3:GetObjectVersion",
    "s3:GetObjectVersionAcl",
    "s3:GetObjectVersionTorrent",
)


def artifact_prefix(request: BuildRequest) -> str:
    """Object key prefix that holds one build's artifacts."""
    return f"ember-{request.ember_version}/{request.addon}/{request.addon_version}/"


class PolicyStatement(BaseModel):
    """One Allow statement in an IAM policy document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    effect: str = Field(default="Allow", alias="Effect")
    action: list[str] = Field(alias="Action")
    resource: list[str] = Field(alias="Resource")


class AccessPolicy(BaseModel):
    """Session policy scoped to one addon/version/ember-version triple."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str = Field(default=POLICY_VERSION, alias="Version")
    statement: list[PolicyStatement] = Field(alias="Statement")

    def document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        return json.dumps(self.document(), separators=(",", ":"))


def build_access_policy(request: BuildRequest, bucket: str, function_arn: str) -> AccessPolicy:
    """Generate the policy that bounds a build's temporary credentials.

    Grants invoking the downstream processing function, read-only metadata
    on the addon bucket, and object read/write under
    ``ember-<ember_version>/<addon>/<addon_version>/*`` only.
    """
    bucket_arn = f"arn:aws:s3:::{bucket}"
    return AccessPolicy(
        statement=[
            PolicyStatement(action=list(INVOKE_ACTIONS), resource=[function_arn]),
            PolicyStatement(action=list(BUCKET_READ_ACTIONS), resource=[bucket_arn]),
            PolicyStatement(
                action=list(OBJECT_ACTIONS),
                resource=[f"{bucket_arn}/{artifact_prefix(request)}*"],
            ),
        ],
    )
