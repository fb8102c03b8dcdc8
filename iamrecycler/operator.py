"""
Operator — kopf handlers driving the Reconciler for every IAMRecycler.

Runs as: iamrecycler run

One daemon per IAMRecycler resource acts as the invoker: it calls the
reconciler, persists the returned state into the resource status, and sleeps
for the returned delay. A single daemon per resource means reconciles for one
policy never overlap. Failures are retried after the configured error delay;
unexpected exceptions end the daemon and kopf restarts it with its own backoff.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import kopf

from iamrecycler.config import Config, get_config
from iamrecycler.errors import RecyclerError
from iamrecycler.k8s.client import core_api, custom_objects_api, load_kube_config
from iamrecycler.k8s.resource import GROUP, PLURAL, VERSION, ResourceStatusWriter
from iamrecycler.models import RotationPolicy, RotationState
from iamrecycler.providers.aws import AwsIamProvider
from iamrecycler.reconciler import Reconciler
from iamrecycler.stores.kube import KubernetesSecretStore

logger = logging.getLogger(__name__)


class RecyclerWorker:
    """Per-resource reconcile loop state.

    Keeps the last rotation state in memory so a status write that failed, or
    a status view that lags behind, never causes a second rotation. A state
    that could not be written is retried on the next step.
    """

    def __init__(
        self,
        reconciler: Reconciler,
        status_writer: ResourceStatusWriter,
        *,
        name: str,
        namespace: str,
        error_requeue_seconds: float,
        state: RotationState | None = None,
        status: Mapping[str, Any] | None = None,
    ) -> None:
        self.reconciler = reconciler
        self.status_writer = status_writer
        self.name = name
        self.namespace = namespace
        self.error_requeue_seconds = error_requeue_seconds
        # Parsed from ``status`` on the first step when not given
        self.state = state
        self.status = status
        self._unsaved = False

    def step(self, spec: Mapping[str, Any]) -> float:
        """Run one reconcile. Returns seconds until the next step."""
        try:
            if self.state is None:
                self.state = RotationState.from_status(dict(self.status or {}))
            if self._unsaved:
                self._save()

            policy = RotationPolicy.from_resource_spec(dict(spec), namespace=self.namespace)
            result = self.reconciler.reconcile(policy, self.state)
            if result.rotated:
                self.state = result.state
                self._unsaved = True
                self._save()
                logger.info(
                    "Updated Secret %s/%s and IAMRecycler %s",
                    self.namespace,
                    policy.secret_name,
                    self.name,
                )
            return result.requeue_after.total_seconds()
        except RecyclerError as e:
            logger.error(
                "Reconcile of IAMRecycler %s/%s failed: %s", self.namespace, self.name, e
            )
            return float(self.error_requeue_seconds)

    def _save(self) -> None:
        self.status_writer.save(self.name, self.namespace, self.state)
        self._unsaved = False


def configure_logging(config: Config) -> None:
    logging.basicConfig(
        level=config.log_level_value,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_reconciler(config: Config) -> Reconciler:
    return Reconciler(
        AwsIamProvider.from_config(config.aws),
        KubernetesSecretStore(core_api(), field_manager=config.field_manager),
    )


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    """Load clients once and share them with every daemon through the memo."""
    config = get_config()
    configure_logging(config)

    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(prefix=GROUP)
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(prefix=GROUP)
    settings.posting.level = logging.WARNING

    load_kube_config(config.kube)
    memo.config = config
    memo.reconciler = build_reconciler(config)
    memo.status_writer = ResourceStatusWriter(
        custom_objects_api(), field_manager=config.field_manager
    )
    logger.info("iamrecycler operator configured")


@kopf.daemon(GROUP, VERSION, PLURAL, id="recycle", cancellation_timeout=30.0)
async def recycle(
    spec: kopf.Spec,
    status: kopf.Status,
    name: str,
    namespace: str,
    memo: kopf.Memo,
    stopped: kopf.DaemonStopped,
    **_: Any,
) -> None:
    worker = RecyclerWorker(
        memo.reconciler,
        memo.status_writer,
        name=name,
        namespace=namespace,
        error_requeue_seconds=memo.config.error_requeue_seconds,
        status=status,
    )
    logger.info("IAMRecycler found: %s/%s", namespace, name)

    while not stopped:
        delay = await asyncio.to_thread(worker.step, spec)
        await stopped.wait(delay)
