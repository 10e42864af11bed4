"""Tests for the Kubernetes-backed stores."""

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.exceptions import ApiException
from pyrra_controller.artifacts.builder import build_config_map, build_prometheus_rule
from pyrra_controller.errors import ConflictError, NotFoundError, StoreError
from pyrra_controller.kube.resources import ObjectKey
from pyrra_controller.stores.kubernetes import (
    ConfigMapStore,
    KubernetesClient,
    PrometheusRuleStore,
    ServiceLevelObjectiveStore,
    translate_api_exception,
)

KEY = ObjectKey("team-a", "orders-availability")

SLO_OBJECT = {
    "apiVersion": "pyrra.dev/v1alpha1",
    "kind": "ServiceLevelObjective",
    "metadata": {
        "name": "orders-availability",
        "namespace": "team-a",
        "labels": {"prometheus": "k8s"},
        "uid": "uid-1",
        "resourceVersion": "7",
    },
    "spec": {"target": "99", "window": "4w"},
    "status": {"type": ""},
}


@pytest.fixture
def kube():
    return KubernetesClient(_api_client=MagicMock())


@pytest.fixture
def custom_api():
    api = MagicMock()
    with patch("pyrra_controller.stores.kubernetes.client.CustomObjectsApi", return_value=api):
        yield api


@pytest.fixture
def core_api():
    api = MagicMock()
    with patch("pyrra_controller.stores.kubernetes.client.CoreV1Api", return_value=api):
        yield api


class TestTranslateApiException:
    def test_not_found(self):
        err = translate_api_exception(ApiException(status=404, reason="Not Found"), "ConfigMap", KEY, "get")
        assert isinstance(err, NotFoundError)

    def test_conflict(self):
        err = translate_api_exception(ApiException(status=409, reason="Conflict"), "ConfigMap", KEY, "update")
        assert isinstance(err, ConflictError)

    def test_other(self):
        err = translate_api_exception(ApiException(status=500, reason="Internal"), "ConfigMap", KEY, "update")
        assert type(err) is StoreError
        assert "failed to update ConfigMap team-a/orders-availability" in str(err)


@pytest.mark.asyncio
class TestServiceLevelObjectiveStore:
    async def test_get(self, kube, custom_api):
        custom_api.get_namespaced_custom_object.return_value = SLO_OBJECT

        slo = await ServiceLevelObjectiveStore(kube).get(KEY)

        assert slo.name == "orders-availability"
        assert slo.metadata.uid == "uid-1"
        assert slo.spec == {"target": "99", "window": "4w"}
        args = custom_api.get_namespaced_custom_object.call_args
        assert args.args == ("pyrra.dev", "v1alpha1", "team-a", "servicelevelobjectives", "orders-availability")

    async def test_get_not_found(self, kube, custom_api):
        custom_api.get_namespaced_custom_object.side_effect = ApiException(status=404)

        with pytest.raises(NotFoundError):
            await ServiceLevelObjectiveStore(kube).get(KEY)

    async def test_update_status(self, kube, custom_api):
        store = ServiceLevelObjectiveStore(kube)
        custom_api.get_namespaced_custom_object.return_value = SLO_OBJECT
        custom_api.replace_namespaced_custom_object_status.return_value = {
            "metadata": {"resourceVersion": "8"}
        }
        slo = await store.get(KEY)
        slo.status.type = "PrometheusRule"

        await store.update_status(slo)

        body = custom_api.replace_namespaced_custom_object_status.call_args.args[-1]
        assert body["status"] == {"type": "PrometheusRule"}
        assert body["metadata"]["resourceVersion"] == "7"
        assert slo.metadata.resource_version == "8"


@pytest.mark.asyncio
class TestPrometheusRuleStore:
    async def test_create_returns_token(self, kube, custom_api, slo, objective):
        custom_api.create_namespaced_custom_object.return_value = {
            "metadata": {"resourceVersion": "11"}
        }
        rule = build_prometheus_rule(slo, objective)

        token = await PrometheusRuleStore(kube).create(rule)

        assert token == "11"
        args = custom_api.create_namespaced_custom_object.call_args.args
        assert args[:4] == ("monitoring.coreos.com", "v1", "team-a", "prometheusrules")
        assert args[4]["kind"] == "PrometheusRule"

    async def test_update_sends_token(self, kube, custom_api, slo, objective):
        rule = build_prometheus_rule(slo, objective)
        rule.resource_version = "11"

        await PrometheusRuleStore(kube).update(rule)

        body = custom_api.replace_namespaced_custom_object.call_args.args[-1]
        assert body["metadata"]["resourceVersion"] == "11"

    async def test_update_conflict(self, kube, custom_api, slo, objective):
        custom_api.replace_namespaced_custom_object.side_effect = ApiException(status=409)

        with pytest.raises(ConflictError):
            await PrometheusRuleStore(kube).update(build_prometheus_rule(slo, objective))

    async def test_get(self, kube, custom_api, slo, objective):
        stored = build_prometheus_rule(slo, objective)
        stored.resource_version = "12"
        custom_api.get_namespaced_custom_object.return_value = stored.to_dict()

        rule = await PrometheusRuleStore(kube).get(KEY)

        assert rule.resource_version == "12"
        assert rule.groups == stored.groups

    async def test_request_timeout_is_passed(self, slo, objective, custom_api):
        kube = KubernetesClient(timeout=5.0, _api_client=MagicMock())

        await PrometheusRuleStore(kube).update(build_prometheus_rule(slo, objective))

        assert custom_api.replace_namespaced_custom_object.call_args.kwargs == {"_request_timeout": 5.0}


@pytest.mark.asyncio
class TestConfigMapStore:
    async def test_get(self, kube, core_api, slo, objective):
        cm = build_config_map(slo, objective)
        cm.resource_version = "21"
        kube._api_client.sanitize_for_serialization.return_value = cm.to_dict()

        result = await ConfigMapStore(kube).get(cm.key)

        assert result.resource_version == "21"
        assert result.data == cm.data
        assert core_api.read_namespaced_config_map.call_args.args == (
            "pyrra-recording-rule-orders-availability",
            "team-a",
        )

    async def test_get_not_found(self, kube, core_api):
        core_api.read_namespaced_config_map.side_effect = ApiException(status=404)

        with pytest.raises(NotFoundError):
            await ConfigMapStore(kube).get(KEY)

    async def test_create(self, kube, core_api, slo, objective):
        created = MagicMock()
        created.metadata.resource_version = "22"
        core_api.create_namespaced_config_map.return_value = created

        token = await ConfigMapStore(kube).create(build_config_map(slo, objective))

        assert token == "22"
        namespace, body = core_api.create_namespaced_config_map.call_args.args
        assert namespace == "team-a"
        assert body["kind"] == "ConfigMap"

    async def test_update_failure(self, kube, core_api, slo, objective):
        core_api.replace_namespaced_config_map.side_effect = ApiException(status=500, reason="boom")

        with pytest.raises(StoreError, match="failed to update ConfigMap"):
            await ConfigMapStore(kube).update(build_config_map(slo, objective))
