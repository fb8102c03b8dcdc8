"""Secret store clients (get / update a named key-value record)."""

from __future__ import annotations

from iamrecycler.stores.base import SecretStore

__all__ = ["SecretStore"]
