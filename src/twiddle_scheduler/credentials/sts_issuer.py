"""STS credential issuer implementing ICredentialIssuer."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from twiddle_scheduler.core.exceptions import CredentialError
from twiddle_scheduler.models.build import ScopedCredentials

SESSION_DURATION_SECONDS = 900  # 15 minutes, the STS minimum


class STSCredentialIssuer:
    """Production ICredentialIssuer backed by STS AssumeRole."""

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("sts", **kwargs)

    def assume_role(
        self, role_arn: str, session_name: str, duration_seconds: int, policy: str
    ) -> ScopedCredentials:
        # Truncated so the lifetime is measured from no later than the real request.
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)
        try:
            resp = self._client.assume_role(
                RoleArn=role_arn,
                RoleSessionName=session_name,
                DurationSeconds=duration_seconds,
                Policy=policy,
            )
        except (ClientError, BotoCoreError) as exc:
            raise CredentialError(f"AssumeRole failed for {role_arn!r}: {exc}") from exc

        creds = resp["Credentials"]
        expiration = creds["Expiration"]
        if expiration.tzinfo is None:
            expiration = expiration.replace(tzinfo=timezone.utc)
        # Never hand out a lifetime longer than requested, whatever the issuer says.
        expiration = min(expiration, issued_at + timedelta(seconds=duration_seconds))

        return ScopedCredentials(
            access_key_id=creds["AccessKeyId"],
            secret_access_key=creds["SecretAccessKey"],
            session_token=creds["SessionToken"],
            issued_at=issued_at,
            expiration=expiration,
        )
