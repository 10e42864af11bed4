"""Artifact models and builders."""

from pyrra_controller.artifacts.builder import (
    build_config_map,
    build_mimir_rule_group,
    build_prometheus_rule,
)
from pyrra_controller.artifacts.models import ConfigMap, MimirRuleGroup, PrometheusRule

__all__ = [
    "ConfigMap",
    "MimirRuleGroup",
    "PrometheusRule",
    "build_config_map",
    "build_mimir_rule_group",
    "build_prometheus_rule",
]
