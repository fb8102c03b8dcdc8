"""
Kubernetes Secret store.

Values are exposed as decoded strings. Keys whose data is not valid UTF-8 are
left out of the record and are never written back. Updates are one strategic
merge patch carrying only the changed keys as stringData, pinned to the
resourceVersion that was read, so a concurrent edit fails with a conflict
instead of being overwritten.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from kubernetes.client.exceptions import ApiException

from iamrecycler.errors import SecretNotFoundError, StoreError
from iamrecycler.models import SecretRecord
from iamrecycler.stores.base import SecretStore

logger = logging.getLogger(__name__)


def _decode_data(name: str, data: dict[str, str] | None) -> dict[str, str]:
    fields: dict[str, str] = {}
    for key, encoded in (data or {}).items():
        try:
            fields[key] = base64.b64decode(encoded).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.debug("Secret %s key %s is not UTF-8 text; leaving it untouched", name, key)
    return fields


class KubernetesSecretStore(SecretStore):
    """Reads and patches core/v1 Secrets through a CoreV1Api."""

    def __init__(self, api: Any, *, field_manager: str = "iamrecycler") -> None:
        self.api = api
        self.field_manager = field_manager

    def get(self, name: str, *, namespace: str) -> SecretRecord:
        try:
            secret = self.api.read_namespaced_secret(name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                logger.error("Failed to get Secret %s/%s: not found", namespace, name)
                raise SecretNotFoundError(name, namespace) from e
            logger.error("Failed to get Secret %s/%s: %s", namespace, name, e.reason)
            raise StoreError(
                f"Failed to read Secret {namespace}/{name}: {e.status} {e.reason}",
                status=e.status,
            ) from e

        return SecretRecord(
            name=name,
            namespace=namespace,
            fields=_decode_data(name, secret.data),
            writable=not bool(secret.immutable),
            resource_version=secret.metadata.resource_version if secret.metadata else None,
        )

    def update(self, record: SecretRecord, fields: dict[str, str]) -> None:
        changed = {k: v for k, v in fields.items() if record.fields.get(k) != v}
        if not changed:
            logger.debug("Secret %s/%s already up to date", record.namespace, record.name)
            return

        body: dict[str, Any] = {"stringData": changed}
        if record.resource_version:
            body["metadata"] = {"resourceVersion": record.resource_version}

        try:
            self.api.patch_namespaced_secret(
                name=record.name,
                namespace=record.namespace,
                body=body,
                field_manager=self.field_manager,
            )
        except ApiException as e:
            logger.error(
                "Failed to update Secret %s/%s: %s %s",
                record.namespace,
                record.name,
                e.status,
                e.reason,
            )
            raise StoreError(
                f"Failed to update Secret {record.namespace}/{record.name}: {e.status} {e.reason}",
                status=e.status,
            ) from e
