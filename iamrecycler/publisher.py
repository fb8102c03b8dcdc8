"""
Secret publishing — writes a newly issued credential into the target secret.

The secret is replaced with a single update call; a write-protected secret is
rejected before anything is changed.
"""

from __future__ import annotations

import logging

from iamrecycler.errors import SecretImmutableError
from iamrecycler.models import NewCredential, SecretRecord
from iamrecycler.stores.base import SecretStore

logger = logging.getLogger(__name__)


def ensure_writable(record: SecretRecord) -> None:
    """Raise SecretImmutableError if the record may not be mutated."""
    if not record.writable:
        raise SecretImmutableError(record.name, record.namespace)


class SecretPublisher:
    def __init__(self, store: SecretStore) -> None:
        self.store = store

    def publish(
        self,
        secret_name: str,
        access_key_field: str,
        secret_key_field: str,
        credential: NewCredential,
        *,
        namespace: str = "default",
        record: SecretRecord | None = None,
    ) -> None:
        """Set both credential fields on the secret and persist it.

        Pass ``record`` to reuse a secret already fetched in this reconcile;
        otherwise it is read from the store.
        """
        if record is None:
            record = self.store.get(secret_name, namespace=namespace)
        ensure_writable(record)

        fields = dict(record.fields)
        fields[access_key_field] = credential.access_id
        fields[secret_key_field] = credential.secret_material

        self.store.update(record, fields)
        logger.info(
            "Published access key %s to secret %s/%s",
            credential.id,
            record.namespace,
            record.name,
        )
