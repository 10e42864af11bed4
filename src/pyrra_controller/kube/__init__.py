"""Kubernetes resource models."""

from pyrra_controller.kube.resources import (
    ObjectKey,
    ObjectMeta,
    OwnerReference,
    ServiceLevelObjective,
    ServiceLevelObjectiveStatus,
)

__all__ = [
    "ObjectKey",
    "ObjectMeta",
    "OwnerReference",
    "ServiceLevelObjective",
    "ServiceLevelObjectiveStatus",
]
