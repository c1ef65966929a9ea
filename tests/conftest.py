"""Shared fixtures: fake AWS credentials, settings, and a clean package logger."""

from __future__ import annotations

import logging

import pytest

from twiddle_scheduler.core.config import AppSettings, PolicyConfig, SQSConfig, STSConfig
from twiddle_scheduler.core.logger import LOGGER_NAME

BUILDER_ROLE = "arn:aws:iam::123456789012:role/addon-builder"
PROCESSOR_FN = "arn:aws:lambda:us-east-1:123456789012:function:process-addon"
BUCKET = "test-addon-builds"


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Keep boto3 away from any real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def settings():
    return AppSettings(
        sqs=SQSConfig(queue_url="memory://builds"),
        sts=STSConfig(builder_role_arn=BUILDER_ROLE),
        policy=PolicyConfig(addon_bucket=BUCKET, processor_function_arn=PROCESSOR_FN),
    )
