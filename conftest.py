"""
Root-level shared test fixtures.

In-memory identity provider and secret store doubles record every call so
tests can assert on exactly which provider/store operations happened.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from iamrecycler.clock import FrozenClock
from iamrecycler.errors import SecretNotFoundError
from iamrecycler.models import CredentialKey, NewCredential, RotationPolicy, SecretRecord
from iamrecycler.providers.base import IdentityProvider
from iamrecycler.stores.base import SecretStore

T0 = datetime(2021, 7, 1, 12, 0, 0, tzinfo=UTC)


class FakeProvider(IdentityProvider):
    """Identity provider holding keys in a list.

    ``errors`` maps an operation name ("list", "delete", "create") to the
    exception that operation raises.
    """

    def __init__(
        self,
        keys: list[CredentialKey] | None = None,
        *,
        next_ids: list[str] | None = None,
        issued_at: datetime = T0,
    ) -> None:
        self.keys = list(keys or [])
        self.next_ids = list(next_ids or [])
        self.issued_at = issued_at
        self.calls: list[tuple] = []
        self.errors: dict[str, Exception] = {}
        self._counter = 0

    def _check(self, operation: str) -> None:
        if operation in self.errors:
            raise self.errors[operation]

    def list_credentials(self, identity_name: str) -> list[CredentialKey]:
        self.calls.append(("list", identity_name))
        self._check("list")
        return list(self.keys)

    def delete_credential(self, identity_name: str, credential_id: str) -> None:
        self.calls.append(("delete", identity_name, credential_id))
        self._check("delete")
        self.keys = [k for k in self.keys if k.id != credential_id]

    def create_credential(self, identity_name: str) -> NewCredential:
        self.calls.append(("create", identity_name))
        self._check("create")
        self._counter += 1
        key_id = self.next_ids.pop(0) if self.next_ids else f"AKIANEW{self._counter:04d}"
        self.keys.append(
            CredentialKey(
                id=key_id,
                created_at=self.issued_at + timedelta(seconds=self._counter),
                status="Active",
            )
        )
        return NewCredential(id=key_id, secret_material=f"secret-{key_id}")

    @property
    def operations(self) -> list[str]:
        return [c[0] for c in self.calls]


class FakeStore(SecretStore):
    """Secret store keyed by (namespace, name)."""

    def __init__(self) -> None:
        self.records: dict[tuple[str, str], SecretRecord] = {}
        self.calls: list[tuple] = []
        self.update_error: Exception | None = None

    def add(
        self,
        name: str,
        *,
        namespace: str = "default",
        fields: dict[str, str] | None = None,
        writable: bool = True,
    ) -> SecretRecord:
        record = SecretRecord(
            name=name,
            namespace=namespace,
            fields=dict(fields or {}),
            writable=writable,
            resource_version="1",
        )
        self.records[(namespace, name)] = record
        return record

    def get(self, name: str, *, namespace: str) -> SecretRecord:
        self.calls.append(("get", namespace, name))
        stored = self.records.get((namespace, name))
        if stored is None:
            raise SecretNotFoundError(name, namespace)
        return SecretRecord(
            name=stored.name,
            namespace=stored.namespace,
            fields=dict(stored.fields),
            writable=stored.writable,
            resource_version=stored.resource_version,
        )

    def update(self, record: SecretRecord, fields: dict[str, str]) -> None:
        self.calls.append(("update", record.namespace, record.name, dict(fields)))
        if self.update_error is not None:
            raise self.update_error
        stored = self.records[(record.namespace, record.name)]
        stored.fields = dict(fields)
        stored.resource_version = str(int(stored.resource_version or "0") + 1)

    @property
    def updates(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "update"]


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(T0)


@pytest.fixture
def policy() -> RotationPolicy:
    return RotationPolicy(
        secret_name="s1",
        access_key_field="AK",
        secret_key_field="SK",
        identity_name="svc-a",
        recycle_interval_minutes=60,
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def store() -> FakeStore:
    s = FakeStore()
    s.add("s1", fields={"AK": "old-ak", "SK": "old-sk", "region": "eu-west-1"})
    return s


@pytest.fixture
def clean_env(monkeypatch):
    """Remove env vars that leak between tests."""
    for key in [
        "AWS_REGION",
        "IAMRECYCLER_AWS_REGION",
        "IAMRECYCLER_AWS_PROFILE",
        "IAMRECYCLER_AWS_ENDPOINT_URL",
        "IAMRECYCLER_KUBE_IN_CLUSTER",
        "IAMRECYCLER_KUBE_CONTEXT",
        "IAMRECYCLER_WATCH_NAMESPACE",
        "IAMRECYCLER_ERROR_REQUEUE_SECONDS",
        "IAMRECYCLER_LOG_LEVEL",
        "IAMRECYCLER_FIELD_MANAGER",
    ]:
        monkeypatch.delenv(key, raising=False)
