"""
Kubernetes API client loading.

In-cluster service-account credentials are tried first, then the local
kubeconfig, unless the configuration pins one of them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kubernetes import client, config

if TYPE_CHECKING:
    from iamrecycler.config import KubeConfig

logger = logging.getLogger(__name__)


def load_kube_config(cfg: KubeConfig) -> None:
    """Load Kubernetes credentials into the default client configuration."""
    if cfg.in_cluster is True:
        config.load_incluster_config()
        return
    if cfg.in_cluster is False:
        config.load_kube_config(context=cfg.context)
        return
    try:
        config.load_incluster_config()
        logger.info("Using in-cluster Kubernetes configuration")
    except config.ConfigException:
        config.load_kube_config(context=cfg.context)
        logger.info("Using kubeconfig (context: %s)", cfg.context or "current")


def core_api() -> client.CoreV1Api:
    return client.CoreV1Api()


def custom_objects_api() -> client.CustomObjectsApi:
    return client.CustomObjectsApi()
