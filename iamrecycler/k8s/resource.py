"""
The IAMRecycler custom resource.

spec:
    secret:            name of the Secret in the resource's namespace
    datakeyaccesskey:  Secret key receiving the access key id
    datakeysecretkey:  Secret key receiving the secret access key
    iamuser:           IAM user whose keys are rotated
    recycle:           minutes between rotations
status:
    lastRecycleTime:   RFC 3339 time of the last successful rotation
"""

from __future__ import annotations

import logging
from typing import Any

from kubernetes.client.exceptions import ApiException

from iamrecycler.errors import StoreError
from iamrecycler.models import STATUS_LAST_RECYCLE_TIME, RotationState

logger = logging.getLogger(__name__)

GROUP = "aws.furio.me"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP}/{VERSION}"
KIND = "IAMRecycler"
PLURAL = "iamrecyclers"
SINGULAR = "iamrecycler"


def _required_string() -> dict[str, Any]:
    return {"type": "string", "minLength": 1}


def build_crd_manifest() -> dict[str, Any]:
    """Return the CustomResourceDefinition for IAMRecycler."""
    schema = {
        "type": "object",
        "description": "IAMRecycler is the Schema for the iamrecyclers API",
        "properties": {
            "apiVersion": {"type": "string"},
            "kind": {"type": "string"},
            "metadata": {"type": "object"},
            "spec": {
                "type": "object",
                "description": "IAMRecyclerSpec defines the desired state of IAMRecycler",
                "required": ["secret", "datakeyaccesskey", "datakeysecretkey", "iamuser", "recycle"],
                "properties": {
                    "secret": _required_string(),
                    "datakeyaccesskey": _required_string(),
                    "datakeysecretkey": _required_string(),
                    "iamuser": _required_string(),
                    "recycle": {"type": "integer", "minimum": 1},
                },
            },
            "status": {
                "type": "object",
                "description": "IAMRecyclerStatus defines the observed state of IAMRecycler",
                "properties": {
                    STATUS_LAST_RECYCLE_TIME: {"type": "string", "format": "date-time"},
                },
            },
        },
    }
    return {
        "apiVersion": "apiextensions.k8s.io/v1",
        "kind": "CustomResourceDefinition",
        "metadata": {"name": f"{PLURAL}.{GROUP}"},
        "spec": {
            "group": GROUP,
            "names": {
                "kind": KIND,
                "listKind": f"{KIND}List",
                "plural": PLURAL,
                "singular": SINGULAR,
            },
            "scope": "Namespaced",
            "versions": [
                {
                    "name": VERSION,
                    "served": True,
                    "storage": True,
                    "schema": {"openAPIV3Schema": schema},
                    "subresources": {"status": {}},
                    "additionalPrinterColumns": [
                        {"name": "User", "type": "string", "jsonPath": ".spec.iamuser"},
                        {"name": "Secret", "type": "string", "jsonPath": ".spec.secret"},
                        {
                            "name": "Last Recycle",
                            "type": "date",
                            "jsonPath": f".status.{STATUS_LAST_RECYCLE_TIME}",
                        },
                    ],
                }
            ],
        },
    }


class ResourceStatusWriter:
    """Persists RotationState into an IAMRecycler's status subresource."""

    def __init__(self, api: Any, *, field_manager: str = "iamrecycler") -> None:
        self.api = api
        self.field_manager = field_manager

    def save(self, name: str, namespace: str, state: RotationState) -> None:
        body = {"status": state.to_status()}
        try:
            self.api.patch_namespaced_custom_object_status(
                group=GROUP,
                version=VERSION,
                namespace=namespace,
                plural=PLURAL,
                name=name,
                body=body,
                field_manager=self.field_manager,
            )
        except ApiException as e:
            logger.error("Unable to update %s %s/%s status: %s", KIND, namespace, name, e.reason)
            raise StoreError(
                f"Failed to update status of {KIND} {namespace}/{name}: {e.status} {e.reason}",
                status=e.status,
            ) from e
