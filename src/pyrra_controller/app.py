"""Assembly of a reconciler from settings."""

from __future__ import annotations

from typing import Any

from pyrra_controller.config import Backend, Settings
from pyrra_controller.logging import configure_logging
from pyrra_controller.reconcile.controller import ServiceLevelObjectiveReconciler
from pyrra_controller.slo.objective import ObjectiveFactory
from pyrra_controller.stores.base import ArtifactStore
from pyrra_controller.stores.kubernetes import (
    ConfigMapStore,
    KubernetesClient,
    PrometheusRuleStore,
    ServiceLevelObjectiveStore,
)
from pyrra_controller.stores.mimir import MimirRuleGroupStore, MimirRulerClient


def build_artifact_store(settings: Settings, kube: KubernetesClient) -> ArtifactStore[Any]:
    """Store for the backend selected in ``settings``."""
    if settings.backend is Backend.CONFIG_MAP:
        return ConfigMapStore(kube)
    if settings.backend is Backend.MIMIR_RULE:
        if not settings.mimir_url:
            raise ValueError("mimir_url is required when backend is mimir_rule")
        ruler = MimirRulerClient(
            settings.mimir_url,
            tenant_id=settings.mimir_tenant_id,
            api_key=settings.mimir_api_key,
            username=settings.mimir_username,
            password=settings.mimir_password,
            timeout=settings.mimir_timeout,
        )
        return MimirRuleGroupStore(ruler)
    return PrometheusRuleStore(kube)


def build_reconciler(
    settings: Settings,
    objective_factory: ObjectiveFactory,
    kube: KubernetesClient | None = None,
) -> ServiceLevelObjectiveReconciler:
    configure_logging(settings.log_level)
    kube = kube or KubernetesClient(kubeconfig=settings.kubeconfig, context=settings.kube_context)
    return ServiceLevelObjectiveReconciler(
        slos=ServiceLevelObjectiveStore(kube),
        artifacts=build_artifact_store(settings, kube),
        objective_factory=objective_factory,
        backend=settings.backend,
        generic_rules=settings.generic_rules,
        write_alerting_rules=settings.mimir_write_alerting_rules,
    )
