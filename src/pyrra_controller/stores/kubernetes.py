"""
Kubernetes-backed stores.

ServiceLevelObjectives and PrometheusRules are read and written through the
custom objects API, ConfigMaps through the core API. The kubernetes client is
blocking, so every call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from pyrra_controller.artifacts.models import (
    PROMETHEUS_RULE_GROUP,
    PROMETHEUS_RULE_PLURAL,
    PROMETHEUS_RULE_VERSION,
    ConfigMap,
    PrometheusRule,
)
from pyrra_controller.errors import ConflictError, NotFoundError, ReconcileError, StoreError
from pyrra_controller.kube.resources import (
    SLO_GROUP,
    SLO_PLURAL,
    SLO_VERSION,
    ObjectKey,
    ServiceLevelObjective,
)


def translate_api_exception(exc: ApiException, kind: str, key: ObjectKey, action: str) -> ReconcileError:
    """Map an API error onto the store error taxonomy."""
    if exc.status == 404:
        return NotFoundError(kind, str(key))
    if exc.status == 409:
        return ConflictError(f"failed to {action} {kind} {key}: conflict: {exc.reason}")
    return StoreError(f"failed to {action} {kind} {key}: {exc.status} {exc.reason}")


@dataclass
class KubernetesClient:
    """
    Lazily configured Kubernetes API client.

    Configuration:
        kubeconfig: Path to kubeconfig file (optional)
        context: Kubeconfig context to use (optional)
        timeout: API request timeout in seconds

    In-cluster configuration is tried first, then the kubeconfig.
    """

    kubeconfig: str | None = None
    context: str | None = None
    timeout: float = 30.0

    # Internal state
    _api_client: Any = field(default=None, repr=False, compare=False)

    def _ensure_initialized(self) -> None:
        if self._api_client is not None:
            return

        try:
            config.load_incluster_config()
        except config.ConfigException:
            try:
                config.load_kube_config(config_file=self.kubeconfig, context=self.context)
            except config.ConfigException as e:
                raise StoreError(f"Failed to load Kubernetes config: {e}") from e

        self._api_client = client.ApiClient()

    @property
    def api_client(self) -> Any:
        self._ensure_initialized()
        return self._api_client

    def custom_objects(self) -> Any:
        return client.CustomObjectsApi(self.api_client)

    def core(self) -> Any:
        return client.CoreV1Api(self.api_client)

    def sanitize(self, obj: Any) -> dict[str, Any]:
        """Convert a typed client model into its wire dict."""
        return self.api_client.sanitize_for_serialization(obj)

    async def call(
        self,
        func: Callable[..., Any],
        *args: Any,
        kind: str,
        key: ObjectKey,
        action: str,
        **kwargs: Any,
    ) -> Any:
        """Run a blocking API call in a thread, translating API errors."""
        kwargs.setdefault("_request_timeout", self.timeout)
        try:
            return await asyncio.to_thread(partial(func, *args, **kwargs))
        except ApiException as exc:
            raise translate_api_exception(exc, kind, key, action) from exc


@dataclass
class ServiceLevelObjectiveStore:
    """Reads ServiceLevelObjectives and writes their status subresource."""

    kube: KubernetesClient
    kind: str = "ServiceLevelObjective"

    async def get(self, key: ObjectKey) -> ServiceLevelObjective:
        api = self.kube.custom_objects()
        data = await self.kube.call(
            api.get_namespaced_custom_object,
            SLO_GROUP,
            SLO_VERSION,
            key.namespace,
            SLO_PLURAL,
            key.name,
            kind=self.kind,
            key=key,
            action="get",
        )
        return ServiceLevelObjective.from_dict(data)

    async def update_status(self, slo: ServiceLevelObjective) -> None:
        api = self.kube.custom_objects()
        data = await self.kube.call(
            api.replace_namespaced_custom_object_status,
            SLO_GROUP,
            SLO_VERSION,
            slo.namespace,
            SLO_PLURAL,
            slo.name,
            slo.to_dict(),
            kind=self.kind,
            key=slo.key,
            action="update status of",
        )
        # Later writes in the same pass need the token the status write produced.
        slo.metadata.resource_version = (data or {}).get("metadata", {}).get(
            "resourceVersion", slo.metadata.resource_version
        )


@dataclass
class PrometheusRuleStore:
    """PrometheusRule objects of the Prometheus Operator."""

    kube: KubernetesClient
    kind: str = "PrometheusRule"

    async def get(self, key: ObjectKey) -> PrometheusRule:
        api = self.kube.custom_objects()
        data = await self.kube.call(
            api.get_namespaced_custom_object,
            PROMETHEUS_RULE_GROUP,
            PROMETHEUS_RULE_VERSION,
            key.namespace,
            PROMETHEUS_RULE_PLURAL,
            key.name,
            kind=self.kind,
            key=key,
            action="get",
        )
        return PrometheusRule.from_dict(data)

    async def create(self, artifact: PrometheusRule) -> str:
        api = self.kube.custom_objects()
        data = await self.kube.call(
            api.create_namespaced_custom_object,
            PROMETHEUS_RULE_GROUP,
            PROMETHEUS_RULE_VERSION,
            artifact.metadata.namespace,
            PROMETHEUS_RULE_PLURAL,
            artifact.to_dict(),
            kind=self.kind,
            key=artifact.key,
            action="create",
        )
        return data["metadata"]["resourceVersion"]

    async def update(self, artifact: PrometheusRule) -> None:
        api = self.kube.custom_objects()
        await self.kube.call(
            api.replace_namespaced_custom_object,
            PROMETHEUS_RULE_GROUP,
            PROMETHEUS_RULE_VERSION,
            artifact.metadata.namespace,
            PROMETHEUS_RULE_PLURAL,
            artifact.metadata.name,
            artifact.to_dict(),
            kind=self.kind,
            key=artifact.key,
            action="update",
        )


@dataclass
class ConfigMapStore:
    """Core v1 ConfigMaps."""

    kube: KubernetesClient
    kind: str = "ConfigMap"

    async def get(self, key: ObjectKey) -> ConfigMap:
        api = self.kube.core()
        obj = await self.kube.call(
            api.read_namespaced_config_map,
            key.name,
            key.namespace,
            kind=self.kind,
            key=key,
            action="get",
        )
        return ConfigMap.from_dict(self.kube.sanitize(obj))

    async def create(self, artifact: ConfigMap) -> str:
        api = self.kube.core()
        obj = await self.kube.call(
            api.create_namespaced_config_map,
            artifact.metadata.namespace,
            artifact.to_dict(),
            kind=self.kind,
            key=artifact.key,
            action="create",
        )
        return obj.metadata.resource_version

    async def update(self, artifact: ConfigMap) -> None:
        api = self.kube.core()
        await self.kube.call(
            api.replace_namespaced_config_map,
            artifact.metadata.name,
            artifact.metadata.namespace,
            artifact.to_dict(),
            kind=self.kind,
            key=artifact.key,
            action="update",
        )
