"""
iamrecycler — rotates an IAM user's access keys and publishes them into a Kubernetes Secret.

Public API:
    Reconciler(provider, store, clock).reconcile(policy, state)  → ReconcileResult
    due_check(state, policy, now)                                → DueCheck
    CredentialRotator(provider).rotate(identity_name)            → NewCredential
    SecretPublisher(store).publish(...)                          → None
"""

from __future__ import annotations

__version__ = "0.1.0"

from iamrecycler.clock import Clock, FrozenClock, SystemClock
from iamrecycler.errors import (
    InvalidPolicyError,
    InvalidStatusError,
    ProviderError,
    RecyclerError,
    SecretImmutableError,
    SecretNotFoundError,
    StoreError,
)
from iamrecycler.models import (
    CredentialKey,
    DueCheck,
    NewCredential,
    ReconcileResult,
    RotationPolicy,
    RotationState,
    SecretRecord,
)
from iamrecycler.publisher import SecretPublisher
from iamrecycler.reconciler import Reconciler
from iamrecycler.rotator import CredentialRotator
from iamrecycler.scheduler import due_check, next_run

__all__ = [
    "__version__",
    "Clock",
    "FrozenClock",
    "SystemClock",
    "InvalidPolicyError",
    "InvalidStatusError",
    "ProviderError",
    "RecyclerError",
    "SecretImmutableError",
    "SecretNotFoundError",
    "StoreError",
    "CredentialKey",
    "DueCheck",
    "NewCredential",
    "ReconcileResult",
    "RotationPolicy",
    "RotationState",
    "SecretRecord",
    "SecretPublisher",
    "Reconciler",
    "CredentialRotator",
    "due_check",
    "next_run",
]
