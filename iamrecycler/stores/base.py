"""Interface every secret store client implements."""

from __future__ import annotations

from abc import ABC, abstractmethod

from iamrecycler.models import SecretRecord


class SecretStore(ABC):
    """Reads and updates key-value secret records."""

    @abstractmethod
    def get(self, name: str, *, namespace: str) -> SecretRecord:
        """Fetch a record. Raises SecretNotFoundError if it does not exist."""

    @abstractmethod
    def update(self, record: SecretRecord, fields: dict[str, str]) -> None:
        """Replace the record's fields in one atomic call.

        ``record`` is the version previously returned by get(); ``fields`` is
        the complete new mapping. Raises StoreError on failure.
        """
