"""SQS build queue implementing IBuildQueue."""

from __future__ import annotations

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from twiddle_scheduler.core.exceptions import QueueError
from twiddle_scheduler.models.build import QueueMessage


class SQSBuildQueue:
    """Production IBuildQueue backed by a standard SQS queue."""

    def __init__(self, queue_url: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._queue_url = queue_url
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("sqs", **kwargs)

    @property
    def queue_url(self) -> str:
        return self._queue_url

    def send(self, body: str) -> str:
        try:
            resp = self._client.send_message(QueueUrl=self._queue_url, MessageBody=body)
            return resp["MessageId"]
        except (ClientError, BotoCoreError) as exc:
            raise QueueError(f"SQS send to {self._queue_url!r} failed: {exc}") from exc

    def lease(self, visibility_timeout: int, wait_seconds: int = 0) -> QueueMessage | None:
        """Receive at most one message, hidden from other consumers for the timeout."""
        try:
            resp = self._client.receive_message(
                QueueUrl=self._queue_url,
                MaxNumberOfMessages=1,
                VisibilityTimeout=visibility_timeout,
                WaitTimeSeconds=wait_seconds,
                AttributeNames=["ApproximateReceiveCount"],
            )
        except (ClientError, BotoCoreError) as exc:
            raise QueueError(f"SQS receive from {self._queue_url!r} failed: {exc}") from exc

        messages = resp.get("Messages", [])
        if not messages:
            return None
        msg = messages[0]
        return QueueMessage(
            message_id=msg["MessageId"],
            receipt=msg["ReceiptHandle"],
            body=msg["Body"],
            receive_count=int(msg.get("Attributes", {}).get("ApproximateReceiveCount", 1)),
        )

    def delete(self, receipt: str) -> None:
        try:
            self._client.delete_message(QueueUrl=self._queue_url, ReceiptHandle=receipt)
        except (ClientError, BotoCoreError) as exc:
            raise QueueError(f"SQS delete from {self._queue_url!r} failed: {exc}") from exc
