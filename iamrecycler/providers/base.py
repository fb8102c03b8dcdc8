"""Interface every identity provider client implements."""

from __future__ import annotations

from abc import ABC, abstractmethod

from iamrecycler.models import CredentialKey, NewCredential


class IdentityProvider(ABC):
    """Lists, creates and deletes access keys for a named identity.

    Implementations raise ProviderError on any failed call.
    """

    @abstractmethod
    def list_credentials(self, identity_name: str) -> list[CredentialKey]:
        """Return the identity's access keys in provider listing order."""

    @abstractmethod
    def delete_credential(self, identity_name: str, credential_id: str) -> None:
        """Delete one access key."""

    @abstractmethod
    def create_credential(self, identity_name: str) -> NewCredential:
        """Issue a new access key and return it with its secret material."""
