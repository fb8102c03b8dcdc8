"""
Data models for credential rotation.

All models are plain dataclasses. Policies and states are frozen; the core
returns new instances instead of mutating them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from iamrecycler.errors import InvalidPolicyError, InvalidStatusError

# IAM allows at most this many access keys per user
MAX_KEYS_PER_IDENTITY = 2

STATUS_LAST_RECYCLE_TIME = "lastRecycleTime"


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """RFC 3339 with second precision, the way Kubernetes serializes metav1.Time."""
    return as_utc(value).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value))


@dataclass(frozen=True)
class RotationPolicy:
    """Declared rotation policy for one IAM user and one target secret."""

    secret_name: str
    access_key_field: str
    secret_key_field: str
    identity_name: str
    recycle_interval_minutes: int
    namespace: str = "default"

    def __post_init__(self) -> None:
        for name in ("secret_name", "access_key_field", "secret_key_field", "identity_name"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise InvalidPolicyError(f"{name} must be a non-empty string")
        minutes = self.recycle_interval_minutes
        if isinstance(minutes, bool) or not isinstance(minutes, int):
            raise InvalidPolicyError(
                f"recycle_interval_minutes must be an integer, got {minutes!r}"
            )
        if minutes < 1:
            raise InvalidPolicyError(f"recycle_interval_minutes must be >= 1, got {minutes}")

    @property
    def interval(self) -> timedelta:
        return timedelta(minutes=self.recycle_interval_minutes)

    @classmethod
    def from_resource_spec(cls, spec: dict[str, Any], *, namespace: str = "default") -> RotationPolicy:
        """Build a policy from an IAMRecycler resource spec.

        Spec keys: secret, datakeyaccesskey, datakeysecretkey, iamuser, recycle.
        """
        missing = [
            key
            for key in ("secret", "datakeyaccesskey", "datakeysecretkey", "iamuser", "recycle")
            if spec.get(key) in (None, "")
        ]
        if missing:
            raise InvalidPolicyError(f"Missing spec fields: {', '.join(missing)}")
        return cls(
            secret_name=spec["secret"],
            access_key_field=spec["datakeyaccesskey"],
            secret_key_field=spec["datakeysecretkey"],
            identity_name=spec["iamuser"],
            recycle_interval_minutes=spec["recycle"],
            namespace=namespace,
        )


@dataclass(frozen=True)
class RotationState:
    """Mutable-by-replacement rotation state, persisted by the caller."""

    last_rotation_time: datetime | None = None

    def to_status(self) -> dict[str, str | None]:
        if self.last_rotation_time is None:
            return {STATUS_LAST_RECYCLE_TIME: None}
        return {STATUS_LAST_RECYCLE_TIME: format_timestamp(self.last_rotation_time)}

    @classmethod
    def from_status(cls, status: dict[str, Any] | None) -> RotationState:
        raw = (status or {}).get(STATUS_LAST_RECYCLE_TIME)
        if not raw:
            return cls()
        if isinstance(raw, datetime):
            return cls(last_rotation_time=as_utc(raw))
        try:
            return cls(last_rotation_time=parse_timestamp(str(raw)))
        except ValueError as e:
            raise InvalidStatusError(
                f"Invalid {STATUS_LAST_RECYCLE_TIME} in status: {raw!r}"
            ) from e


@dataclass(frozen=True)
class CredentialKey:
    """An access key as listed by the provider (no secret material)."""

    id: str
    created_at: datetime
    status: str = ""


@dataclass(frozen=True)
class NewCredential:
    """A freshly issued access key, including its secret material."""

    id: str
    secret_material: str

    @property
    def access_id(self) -> str:
        return self.id

    def __repr__(self) -> str:
        return f"NewCredential(id={self.id!r}, secret_material='***')"


@dataclass
class SecretRecord:
    """A key-value secret as read from the store.

    ``resource_version`` is the store's opaque concurrency token; updates
    built from this record fail if the secret changed in between.
    """

    name: str
    namespace: str = "default"
    fields: dict[str, str] = field(default_factory=dict)
    writable: bool = True
    resource_version: str | None = None


@dataclass(frozen=True)
class DueCheck:
    """Outcome of a due check: rotate now, or wait the given duration."""

    due: bool
    wait: timedelta = timedelta(0)

    @classmethod
    def now(cls) -> DueCheck:
        return cls(due=True)

    @classmethod
    def after(cls, wait: timedelta) -> DueCheck:
        return cls(due=False, wait=wait)


@dataclass(frozen=True)
class ReconcileResult:
    """What a single reconcile call produced."""

    state: RotationState
    requeue_after: timedelta
    credential_id: str | None = None

    @property
    def rotated(self) -> bool:
        return self.credential_id is not None
