"""Integration test fixtures for LocalStack SQS."""

from __future__ import annotations

import os

import boto3
import pytest

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("sqs", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)
        client.list_queues()
        return True
    except Exception:
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def localstack_sqs():
    """SQS client pointing at LocalStack."""
    return boto3.client("sqs", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)


@pytest.fixture
def build_queue_url(localstack_sqs):
    """A fresh queue per test, removed afterwards."""
    url = localstack_sqs.create_queue(QueueName=f"addon-builds-inttest-{os.getpid()}")["QueueUrl"]
    localstack_sqs.purge_queue(QueueUrl=url)
    yield url
    localstack_sqs.delete_queue(QueueUrl=url)
