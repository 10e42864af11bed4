"""
Rule translation into backend formats.

One canonical rule is rendered three ways:

- Prometheus Operator rule mappings for PrometheusRule and ConfigMap bundles
- Ruler rule nodes for groups pushed to Mimir/Cortex
- Grafana alert rules (alerting rules only)

Every format normalizes the ``for`` duration of alerting rules the same way,
see :func:`pyrra_controller.rules.duration.alert_for_duration`.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Iterable

import yaml

from pyrra_controller.rules.duration import alert_for_duration, format_duration
from pyrra_controller.rules.models import AlertingRule, Rule, RuleGroup

GRAFANA_DATASOURCE_UID = "prometheus"
GRAFANA_EXPRESSION_UID = "__expr__"


def to_prometheus_rule(rule: Rule) -> dict[str, Any]:
    """Convert a rule to the Prometheus Operator rule mapping."""
    if isinstance(rule, AlertingRule):
        result: dict[str, Any] = {
            "alert": rule.alert,
            "expr": rule.expr,
            "for": format_duration(alert_for_duration(rule.for_)),
        }
        if rule.labels:
            result["labels"] = dict(rule.labels)
        if rule.annotations:
            result["annotations"] = dict(rule.annotations)
        return result

    result = {"record": rule.record, "expr": rule.expr}
    if rule.labels:
        result["labels"] = dict(rule.labels)
    return result


def to_prometheus_rule_group(group: RuleGroup) -> dict[str, Any]:
    """Convert a rule group to the Prometheus Operator rule group mapping."""
    result: dict[str, Any] = {"name": group.name}
    if group.interval:
        result["interval"] = group.interval
    result["rules"] = [to_prometheus_rule(rule) for rule in group.rules]
    return result


@dataclass
class RuleNode:
    """A rule in the textual format accepted by the Mimir/Cortex ruler."""

    expr: str
    record: str = ""
    alert: str = ""
    for_: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    @property
    def is_alerting(self) -> bool:
        return bool(self.alert)

    def to_dict(self) -> dict[str, Any]:
        node: dict[str, Any] = {}
        if self.record:
            node["record"] = self.record
        if self.alert:
            node["alert"] = self.alert
        node["expr"] = self.expr
        if self.for_:
            node["for"] = self.for_
        if self.labels:
            node["labels"] = dict(self.labels)
        if self.annotations:
            node["annotations"] = dict(self.annotations)
        return node

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleNode":
        return cls(
            expr=str(data.get("expr", "")),
            record=data.get("record", ""),
            alert=data.get("alert", ""),
            for_=data.get("for", ""),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
        )


def to_rule_node(rule: Rule) -> RuleNode:
    """Convert a rule to a ruler rule node."""
    if isinstance(rule, AlertingRule):
        return RuleNode(
            expr=rule.expr,
            alert=rule.alert,
            for_=format_duration(alert_for_duration(rule.for_)),
            labels=dict(rule.labels),
            annotations=dict(rule.annotations),
        )
    return RuleNode(expr=rule.expr, record=rule.record, labels=dict(rule.labels))


def to_rule_nodes(rules: Iterable[Rule], write_alerting_rules: bool) -> list[RuleNode]:
    """
    Convert rules to ruler nodes, keeping their order.

    Alerting rules are dropped unless ``write_alerting_rules`` is set;
    recording rules are always kept.
    """
    nodes = []
    for rule in rules:
        if isinstance(rule, AlertingRule) and not write_alerting_rules:
            continue
        nodes.append(to_rule_node(rule))
    return nodes


class RuleNodeDumper(yaml.SafeDumper):
    """Dumper emitting plain scalars, or literal blocks for multi-line text."""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


RuleNodeDumper.add_representer(str, _represent_str)


def dump_rule_yaml(data: Any) -> str:
    """Serialize ruler data keeping the field order of the rule format."""
    return yaml.dump(
        data,
        Dumper=RuleNodeDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def grafana_alert_rule_uid(slo_name: str, alert: str) -> str:
    """Deterministic UID so repeated translations address the same Grafana rule."""
    return hashlib.sha1(f"{slo_name}-{alert}".encode()).hexdigest()


def to_grafana_alert_rule(slo_name: str, rule: AlertingRule) -> dict[str, Any]:
    """
    Convert an alerting rule to a Grafana alert rule.

    The rule evaluates the Prometheus expression as query ``A`` and fires on a
    threshold expression ``B`` over it.
    """
    query = {
        "datasource": {"type": "prometheus", "uid": GRAFANA_DATASOURCE_UID},
        "editorMode": "code",
        "expr": rule.expr,
        "instant": True,
        "intervalMs": 1000,
        "legendFormat": "__auto",
        "maxDataPoints": 43200,
        "range": False,
        "refId": "A",
    }
    threshold = {
        "conditions": [
            {
                "evaluator": {"params": [0], "type": "gt"},
                "operator": {"type": "and"},
                "query": {"params": ["A"]},
                "reducer": {"params": [], "type": "last"},
                "type": "query",
            }
        ],
        "datasource": {"type": GRAFANA_EXPRESSION_UID, "uid": GRAFANA_EXPRESSION_UID},
        "expression": "A",
        "intervalMs": 1000,
        "maxDataPoints": 43200,
        "refId": "B",
        "type": "threshold",
    }

    return {
        "uid": grafana_alert_rule_uid(slo_name, rule.alert),
        "title": rule.alert,
        "for": format_duration(alert_for_duration(rule.for_)),
        "labels": dict(rule.labels),
        "annotations": dict(rule.annotations),
        "condition": "B",
        "data": [
            {
                "refId": "A",
                "datasourceUid": GRAFANA_DATASOURCE_UID,
                "model": query,
            },
            {
                "refId": "B",
                "datasourceUid": GRAFANA_EXPRESSION_UID,
                "model": threshold,
            },
        ],
    }


def to_grafana_alert_rule_group(group: RuleGroup) -> dict[str, Any]:
    """Convert the alerting rules of a group; recording rules have no Grafana form."""
    rules = [to_grafana_alert_rule(group.name, rule) for rule in group.alerting_rules]
    result: dict[str, Any] = {"name": group.name, "rules": rules}
    if group.interval:
        result["interval"] = group.interval
    return result

