"""Exception types raised by the rotation core and its adapters."""

from __future__ import annotations


class RecyclerError(Exception):
    """Base class for all iamrecycler errors."""


class InvalidPolicyError(RecyclerError, ValueError):
    """A rotation policy field is missing or out of range."""


class SecretNotFoundError(RecyclerError):
    """The secret referenced by a policy does not exist."""

    def __init__(self, name: str, namespace: str = "") -> None:
        self.name = name
        self.namespace = namespace
        where = f"{namespace}/{name}" if namespace else name
        super().__init__(f"Secret {where} not found")


class SecretImmutableError(RecyclerError):
    """The secret is write-protected; no field was changed."""

    def __init__(self, name: str, namespace: str = "") -> None:
        self.name = name
        self.namespace = namespace
        where = f"{namespace}/{name}" if namespace else name
        super().__init__(f"Secret {where} is immutable")


class ProviderError(RecyclerError):
    """An identity provider call failed.

    Attributes:
        operation: Provider API operation name (e.g. "CreateAccessKey")
        code: Provider error code when one was returned (e.g. "LimitExceeded")
    """

    def __init__(self, message: str, *, operation: str = "", code: str = "") -> None:
        self.operation = operation
        self.code = code
        super().__init__(message)


class StoreError(RecyclerError):
    """A secret store or status write failed.

    ``status`` carries the HTTP status returned by the store, if any.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class InvalidStatusError(RecyclerError, ValueError):
    """A persisted rotation status cannot be parsed."""
