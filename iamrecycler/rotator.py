"""
Credential rotation — list, prune the oldest key at the ceiling, issue a new one.

IAM caps an identity at two access keys. When both slots are taken the oldest
key is deleted before the replacement is created, so the identity ends with
the newest old key plus the new one. Any provider failure aborts the sequence
as-is; nothing already done is undone.
"""

from __future__ import annotations

import logging

from iamrecycler.models import MAX_KEYS_PER_IDENTITY, CredentialKey, NewCredential
from iamrecycler.providers.base import IdentityProvider

logger = logging.getLogger(__name__)


def oldest_first(keys: list[CredentialKey]) -> list[CredentialKey]:
    """Sort keys by creation time; equal timestamps keep listing order."""
    return sorted(keys, key=lambda k: k.created_at)


class CredentialRotator:
    """Executes the list → prune → create sequence against a provider."""

    def __init__(self, provider: IdentityProvider) -> None:
        self.provider = provider

    def rotate(self, identity_name: str) -> NewCredential:
        keys = oldest_first(self.provider.list_credentials(identity_name))
        logger.info("Identity %s holds %d access key(s)", identity_name, len(keys))

        if len(keys) == MAX_KEYS_PER_IDENTITY:
            victim = keys[0]
            logger.info("Deleting oldest access key %s of %s", victim.id, identity_name)
            self.provider.delete_credential(identity_name, victim.id)
        elif len(keys) > MAX_KEYS_PER_IDENTITY:
            logger.warning(
                "Identity %s holds %d access keys (expected at most %d); not pruning",
                identity_name,
                len(keys),
                MAX_KEYS_PER_IDENTITY,
            )

        credential = self.provider.create_credential(identity_name)
        logger.info("Issued access key %s for %s", credential.id, identity_name)
        return credential
