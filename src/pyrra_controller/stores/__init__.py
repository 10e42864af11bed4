"""Object stores the reconciler reads from and writes to."""

from pyrra_controller.stores.base import ArtifactStore, ServiceLevelObjectiveReader, StatusWriter
from pyrra_controller.stores.kubernetes import (
    ConfigMapStore,
    KubernetesClient,
    PrometheusRuleStore,
    ServiceLevelObjectiveStore,
)
from pyrra_controller.stores.mimir import MimirRuleGroupStore, MimirRulerClient

__all__ = [
    "ArtifactStore",
    "ConfigMapStore",
    "KubernetesClient",
    "MimirRuleGroupStore",
    "MimirRulerClient",
    "PrometheusRuleStore",
    "ServiceLevelObjectiveReader",
    "ServiceLevelObjectiveStore",
    "StatusWriter",
]
