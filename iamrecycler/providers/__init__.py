"""Identity provider clients (list / create / delete access keys)."""

from __future__ import annotations

from iamrecycler.providers.base import IdentityProvider

__all__ = ["IdentityProvider"]
