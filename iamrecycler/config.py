"""
Centralized configuration for iamrecycler.

All configuration is loaded from environment variables with sensible defaults.
AWS credentials themselves are never read here; boto3 resolves them through
its standard chain (env vars, profile, IRSA web identity, instance role).

Usage:
    from iamrecycler.config import get_config
    cfg = get_config()
    print(cfg.aws.region)              # "eu-west-1" or None
    print(cfg.error_requeue_seconds)   # 60
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class AwsConfig:
    """Parameters for the boto3 session used to reach IAM."""

    region: str | None = None
    profile: str | None = None
    endpoint_url: str | None = None

    @property
    def session_kwargs(self) -> dict[str, str]:
        """Return boto3.session.Session() kwargs."""
        d: dict[str, str] = {}
        if self.region:
            d["region_name"] = self.region
        if self.profile:
            d["profile_name"] = self.profile
        return d


@dataclass(frozen=True)
class KubeConfig:
    """How to reach the Kubernetes API server."""

    in_cluster: bool | None = None  # None = try in-cluster, fall back to kubeconfig
    context: str | None = None
    namespace: str = ""  # empty = watch all namespaces


@dataclass(frozen=True)
class Config:
    """Top-level iamrecycler configuration."""

    aws: AwsConfig = field(default_factory=AwsConfig)
    kube: KubeConfig = field(default_factory=KubeConfig)

    # Delay before the operator re-triggers a failed reconcile
    error_requeue_seconds: int = 60

    log_level: str = "INFO"
    field_manager: str = "iamrecycler"

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO


# Singleton
_config: Config | None = None


def get_config() -> Config:
    """Get or create the singleton config from environment variables."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def _parse_tristate(value: str | None) -> bool | None:
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    return None  # "auto" or anything unrecognized


def _load_from_env() -> Config:
    """Load configuration from environment variables."""
    aws = AwsConfig(
        region=os.environ.get("IAMRECYCLER_AWS_REGION") or os.environ.get("AWS_REGION") or None,
        profile=os.environ.get("IAMRECYCLER_AWS_PROFILE") or None,
        endpoint_url=os.environ.get("IAMRECYCLER_AWS_ENDPOINT_URL") or None,
    )

    kube = KubeConfig(
        in_cluster=_parse_tristate(os.environ.get("IAMRECYCLER_KUBE_IN_CLUSTER")),
        context=os.environ.get("IAMRECYCLER_KUBE_CONTEXT") or None,
        namespace=os.environ.get("IAMRECYCLER_WATCH_NAMESPACE", ""),
    )

    error_requeue = int(os.environ.get("IAMRECYCLER_ERROR_REQUEUE_SECONDS", "60"))
    if error_requeue < 1:
        raise ValueError(f"IAMRECYCLER_ERROR_REQUEUE_SECONDS must be >= 1, got {error_requeue}")

    return Config(
        aws=aws,
        kube=kube,
        error_requeue_seconds=error_requeue,
        log_level=os.environ.get("IAMRECYCLER_LOG_LEVEL", "INFO"),
        field_manager=os.environ.get("IAMRECYCLER_FIELD_MANAGER", "iamrecycler"),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
