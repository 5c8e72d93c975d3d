"""
Infrastructure adapter: AWS STS GetCallerIdentity → IIdentityResolver.
"""

import os
from typing import Any

import boto3

from secretpack.domain.ports.identity_port import IIdentityResolver


class StsIdentityResolver(IIdentityResolver):
    """Attributes writes to the ARN of the credentials in use."""

    def __init__(self, client: Any = None, region: str | None = None) -> None:
        self._client = client or boto3.client(
            "sts",
            region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
        )

    def current_principal(self) -> str:
        return self._client.get_caller_identity()["Arn"]
