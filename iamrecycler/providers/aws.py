"""
AWS IAM access-key client built on boto3.

The IAM client is created once by the caller and injected, so tests can pass
a stubbed client and the operator does not build a session per reconcile.
botocore failures are translated into ProviderError with the AWS error code.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from iamrecycler.errors import ProviderError
from iamrecycler.models import CredentialKey, NewCredential, as_utc
from iamrecycler.providers.base import IdentityProvider

if TYPE_CHECKING:
    from iamrecycler.config import AwsConfig

logger = logging.getLogger(__name__)


def build_iam_client(config: AwsConfig) -> Any:
    """Create a boto3 IAM client from the configured session parameters."""
    import boto3

    session = boto3.session.Session(**config.session_kwargs)
    kwargs: dict[str, str] = {}
    if config.endpoint_url:
        kwargs["endpoint_url"] = config.endpoint_url
    return session.client("iam", **kwargs)


@contextmanager
def _translate(operation: str, identity_name: str) -> Iterator[None]:
    try:
        yield
    except ClientError as e:
        error = e.response.get("Error", {})
        code = error.get("Code", "")
        message = error.get("Message", str(e))
        logger.error("IAM %s failed for %s: %s (%s)", operation, identity_name, message, code)
        raise ProviderError(
            f"IAM {operation} failed for {identity_name}: {code}: {message}",
            operation=operation,
            code=code,
        ) from e
    except BotoCoreError as e:
        logger.error("IAM %s failed for %s: %s", operation, identity_name, e)
        raise ProviderError(
            f"IAM {operation} failed for {identity_name}: {e}",
            operation=operation,
        ) from e


class AwsIamProvider(IdentityProvider):
    """Manages access keys of IAM users."""

    def __init__(self, client: Any) -> None:
        self.client = client

    @classmethod
    def from_config(cls, config: AwsConfig) -> AwsIamProvider:
        return cls(build_iam_client(config))

    def list_credentials(self, identity_name: str) -> list[CredentialKey]:
        keys: list[CredentialKey] = []
        with _translate("ListAccessKeys", identity_name):
            paginator = self.client.get_paginator("list_access_keys")
            for page in paginator.paginate(UserName=identity_name):
                for meta in page.get("AccessKeyMetadata", []):
                    keys.append(
                        CredentialKey(
                            id=meta["AccessKeyId"],
                            created_at=as_utc(meta["CreateDate"]),
                            status=meta.get("Status", ""),
                        )
                    )
        return keys

    def delete_credential(self, identity_name: str, credential_id: str) -> None:
        with _translate("DeleteAccessKey", identity_name):
            self.client.delete_access_key(UserName=identity_name, AccessKeyId=credential_id)

    def create_credential(self, identity_name: str) -> NewCredential:
        with _translate("CreateAccessKey", identity_name):
            response = self.client.create_access_key(UserName=identity_name)
        key = response["AccessKey"]
        return NewCredential(id=key["AccessKeyId"], secret_material=key["SecretAccessKey"])
