"""Push a build request onto the scheduler queue by hand.

Usage:
    python scripts/enqueue_build.py --queue-url URL ember-foo 1.0.0 3.2.0
    python scripts/enqueue_build.py --create-queue addon-builds \\
        --endpoint-url http://localhost:4566 ember-foo 1.0.0 3.2.0
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3

from twiddle_scheduler.models.build import BuildRequest
from twiddle_scheduler.persistence.sqs_queue import SQSBuildQueue


def ensure_queue(client: Any, name: str) -> str:
    """Create the queue if it does not exist yet and return its URL."""
    return client.create_queue(QueueName=name)["QueueUrl"]


def enqueue_build(queue: SQSBuildQueue, addon: str, addon_version: str, ember_version: str) -> str:
    request = BuildRequest(addon=addon, addon_version=addon_version, ember_version=ember_version)
    return queue.send(request.to_message_body())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Enqueue an addon build request")
    parser.add_argument("addon")
    parser.add_argument("addon_version")
    parser.add_argument("ember_version")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--queue-url", help="Existing queue URL")
    target.add_argument("--create-queue", metavar="NAME", help="Create (or reuse) a queue by name")
    parser.add_argument("--region", default="us-east-1")
    parser.add_argument("--endpoint-url", default=None, help="e.g. http://localhost:4566")
    args = parser.parse_args(argv)

    queue_url = args.queue_url
    if args.create_queue:
        kwargs: dict = {"region_name": args.region}
        if args.endpoint_url:
            kwargs["endpoint_url"] = args.endpoint_url
        queue_url = ensure_queue(boto3.client("sqs", **kwargs), args.create_queue)
        print(f"  Using queue {queue_url}")

    queue = SQSBuildQueue(queue_url=queue_url, region=args.region, endpoint_url=args.endpoint_url)
    message_id = enqueue_build(queue, args.addon, args.addon_version, args.ember_version)
    print(f"  Enqueued {args.addon}@{args.addon_version} (ember {args.ember_version}) as {message_id}")


if __name__ == "__main__":
    main()
