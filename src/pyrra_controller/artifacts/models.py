"""The three materialized forms of an SLO's rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from pyrra_controller.kube.resources import ObjectKey, ObjectMeta
from pyrra_controller.rules.translate import RuleNode, dump_rule_yaml

PROMETHEUS_RULE_GROUP = "monitoring.coreos.com"
PROMETHEUS_RULE_VERSION = "v1"
PROMETHEUS_RULE_PLURAL = "prometheusrules"
PROMETHEUS_RULE_KIND = "PrometheusRule"

CONFIG_MAP_NAME_PREFIX = "pyrra-recording-rule-"
MIMIR_RULE_GROUP_INTERVAL = "30s"


class Artifact(Protocol):
    """What an upserter needs from an artifact."""

    @property
    def key(self) -> ObjectKey:
        ...

    resource_version: str

    def to_dict(self) -> dict[str, Any]:
        ...


@dataclass
class PrometheusRule:
    """Prometheus Operator PrometheusRule holding the translated rule groups."""

    metadata: ObjectMeta
    groups: list[dict[str, Any]] = field(default_factory=list)

    api_version = f"{PROMETHEUS_RULE_GROUP}/{PROMETHEUS_RULE_VERSION}"
    kind = PROMETHEUS_RULE_KIND

    @property
    def key(self) -> ObjectKey:
        return self.metadata.key

    @property
    def resource_version(self) -> str:
        return self.metadata.resource_version

    @resource_version.setter
    def resource_version(self, value: str) -> None:
        self.metadata.resource_version = value

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": {"groups": self.groups},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrometheusRule":
        spec = data.get("spec") or {}
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            groups=list(spec.get("groups") or []),
        )


@dataclass
class ConfigMap:
    """ConfigMap bundling the rule groups as a rules file."""

    metadata: ObjectMeta
    data: dict[str, str] = field(default_factory=dict)

    api_version = "v1"
    kind = "ConfigMap"

    @property
    def key(self) -> ObjectKey:
        return self.metadata.key

    @property
    def resource_version(self) -> str:
        return self.metadata.resource_version

    @resource_version.setter
    def resource_version(self, value: str) -> None:
        self.metadata.resource_version = value

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfigMap":
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            data=dict(data.get("data") or {}),
        )


@dataclass
class MimirRuleGroup:
    """
    Rule group pushed to the Mimir/Cortex ruler.

    The ruler keeps no revision token; ``resource_version`` only exists so the
    group goes through the same upsert sequence as Kubernetes objects.
    """

    namespace: str
    name: str
    rules: list[RuleNode] = field(default_factory=list)
    interval: str = MIMIR_RULE_GROUP_INTERVAL
    resource_version: str = ""

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.namespace, self.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "interval": self.interval,
            "rules": [rule.to_dict() for rule in self.rules],
        }

    def to_yaml(self) -> str:
        return dump_rule_yaml(self.to_dict())

    @classmethod
    def from_dict(cls, namespace: str, data: dict[str, Any]) -> "MimirRuleGroup":
        return cls(
            namespace=namespace,
            name=data["name"],
            rules=[RuleNode.from_dict(rule) for rule in data.get("rules") or []],
            interval=data.get("interval") or MIMIR_RULE_GROUP_INTERVAL,
        )


def config_map_name(slo_name: str) -> str:
    return f"{CONFIG_MAP_NAME_PREFIX}{slo_name}"


def config_map_key(name: str) -> str:
    return f"{name}.rules.yaml"
