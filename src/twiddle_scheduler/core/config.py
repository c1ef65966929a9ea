"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class SQSConfig(BaseSettings):
    """Build queue configuration."""

    model_config = {"env_prefix": "TWIDDLE_SQS_"}

    queue_url: str = ""
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    visibility_timeout: int = 5
    wait_seconds: int = 0
    max_receive_count: int = 0  # 0 disables dead-lettering
    dead_letter_queue_url: str = ""


class STSConfig(BaseSettings):
    """Temporary credential issuer configuration."""

    model_config = {"env_prefix": "TWIDDLE_STS_"}

    builder_role_arn: str = ""
    session_name: str = "build-addon"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class ECSConfig(BaseSettings):
    """Build task orchestration configuration."""

    model_config = {"env_prefix": "TWIDDLE_ECS_"}

    cluster: str = "ember-twiddle"
    task_definition_prefix: str = "addon-builder"
    container_name: str = "addon-builder"
    started_by: str = "ember-twiddle-scheduler"
    launch_type: Literal["EC2", "FARGATE", "EXTERNAL"] | None = None
    subnets: list[str] = []
    security_groups: list[str] = []
    assign_public_ip: bool = False
    idempotent_launch: bool = True
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class PolicyConfig(BaseSettings):
    """Resources granted to a build through its scoped credentials."""

    model_config = {"env_prefix": "TWIDDLE_POLICY_"}

    addon_bucket: str = "ember-twiddle-addons"
    processor_function_arn: str = ""


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "TWIDDLE_"}

    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: str = "INFO"

    # Factories, so each AppSettings() re-reads the environment.
    sqs: SQSConfig = Field(default_factory=SQSConfig)
    sts: STSConfig = Field(default_factory=STSConfig)
    ecs: ECSConfig = Field(default_factory=ECSConfig)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
