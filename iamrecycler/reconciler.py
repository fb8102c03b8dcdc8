"""
Reconciler — one rotation decision per trigger.

    Waiting  --not due-->               Waiting  (return remaining wait)
    Due      --rotate ok-->             Waiting  (last_rotation_time := now,
                                                  wait = interval)
    Due      --any error-->             Due      (state unchanged, error raised)

The invoker owns the timer and must not run two reconciles for the same
policy at once; nothing here locks the identity's key set.
"""

from __future__ import annotations

import logging

from iamrecycler.clock import Clock, SystemClock
from iamrecycler.models import (
    ReconcileResult,
    RotationPolicy,
    RotationState,
)
from iamrecycler.providers.base import IdentityProvider
from iamrecycler.publisher import SecretPublisher, ensure_writable
from iamrecycler.rotator import CredentialRotator
from iamrecycler.scheduler import due_check
from iamrecycler.stores.base import SecretStore

logger = logging.getLogger(__name__)


class Reconciler:
    """Orchestrates due check → rotation → publish → state update."""

    def __init__(
        self,
        provider: IdentityProvider,
        store: SecretStore,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.rotator = CredentialRotator(provider)
        self.publisher = SecretPublisher(store)

    def reconcile(self, policy: RotationPolicy, state: RotationState) -> ReconcileResult:
        """Rotate if due and return the new state plus the delay until the next call.

        Errors propagate unchanged; the caller keeps its previous state.
        """
        now = self.clock.now()
        check = due_check(state, policy, now)
        if not check.due:
            logger.debug(
                "Rotation for %s not due, waiting %s", policy.identity_name, check.wait
            )
            return ReconcileResult(state=state, requeue_after=check.wait)

        logger.info(
            "Rotation due for %s (secret %s/%s)",
            policy.identity_name,
            policy.namespace,
            policy.secret_name,
        )

        record = self.store.get(policy.secret_name, namespace=policy.namespace)
        ensure_writable(record)

        credential = self.rotator.rotate(policy.identity_name)
        self.publisher.publish(
            policy.secret_name,
            policy.access_key_field,
            policy.secret_key_field,
            credential,
            namespace=policy.namespace,
            record=record,
        )

        new_state = RotationState(last_rotation_time=now)
        logger.info(
            "Rotated %s, next rotation in %d minute(s)",
            policy.identity_name,
            policy.recycle_interval_minutes,
        )
        return ReconcileResult(
            state=new_state,
            requeue_after=policy.interval,
            credential_id=credential.id,
        )
