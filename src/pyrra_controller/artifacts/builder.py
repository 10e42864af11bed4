"""
Artifact assembly.

Builds the PrometheusRule, ConfigMap or Mimir rule group for one SLO from the
rule groups of its objective. A collaborator failure aborts the build; no
partial artifact is ever returned.
"""

from __future__ import annotations

from typing import Any

import structlog
import yaml

from pyrra_controller.artifacts.models import (
    ConfigMap,
    MimirRuleGroup,
    PrometheusRule,
    config_map_key,
    config_map_name,
)
from pyrra_controller.errors import ArtifactBuildError, GroupingUnsupportedError, MarshalError
from pyrra_controller.kube.resources import ObjectMeta, ServiceLevelObjective
from pyrra_controller.rules.models import RuleGroup
from pyrra_controller.rules.translate import to_prometheus_rule_group, to_rule_nodes
from pyrra_controller.slo.objective import Objective

logger = structlog.get_logger()


def collect_rule_groups(objective: Objective, generic_rules: bool) -> list[RuleGroup]:
    """
    Fetch increase, burn-rate and (optionally) generic rule groups in that order.

    Raises:
        ArtifactBuildError: If the objective fails to produce a group
    """
    try:
        increases = objective.increase_rules()
    except Exception as exc:
        raise ArtifactBuildError(f"failed to get increase rules: {exc}") from exc

    try:
        burnrates = objective.burnrates()
    except Exception as exc:
        raise ArtifactBuildError(f"failed to get burn rate rules: {exc}") from exc

    groups = [increases, burnrates]

    if generic_rules:
        try:
            groups.append(objective.generic_rules())
        except GroupingUnsupportedError:
            logger.debug("generic_rules_skipped", reason="grouping unsupported")
        except Exception as exc:
            raise ArtifactBuildError(f"failed to get generic rules: {exc}") from exc

    return groups


def _object_meta(slo: ServiceLevelObjective, name: str) -> ObjectMeta:
    return ObjectMeta(
        name=name,
        namespace=slo.namespace,
        labels=dict(slo.metadata.labels),
        owner_references=[slo.owner_reference()],
    )


def build_prometheus_rule(
    slo: ServiceLevelObjective,
    objective: Objective,
    generic_rules: bool = False,
) -> PrometheusRule:
    """Build the PrometheusRule named after the SLO."""
    groups = collect_rule_groups(objective, generic_rules)
    return PrometheusRule(
        metadata=_object_meta(slo, slo.name),
        groups=[to_prometheus_rule_group(group) for group in groups],
    )


def render_rules_file(groups: list[dict[str, Any]]) -> str:
    """
    Serialize rule groups as a Prometheus rules file.

    Raises:
        MarshalError: If the groups cannot be represented as YAML
    """
    try:
        return yaml.safe_dump({"groups": groups}, default_flow_style=False, sort_keys=True)
    except yaml.YAMLError as exc:
        raise MarshalError(f"failed to marshal recording rule: {exc}") from exc


def build_config_map(
    slo: ServiceLevelObjective,
    objective: Objective,
    generic_rules: bool = False,
) -> ConfigMap:
    """Build the ``pyrra-recording-rule-<slo>`` ConfigMap with a single rules file."""
    name = config_map_name(slo.name)
    groups = collect_rule_groups(objective, generic_rules)
    payload = render_rules_file([to_prometheus_rule_group(group) for group in groups])
    return ConfigMap(
        metadata=_object_meta(slo, name),
        data={config_map_key(name): payload},
    )


def build_mimir_rule_group(
    slo: ServiceLevelObjective,
    objective: Objective,
    write_alerting_rules: bool = False,
) -> MimirRuleGroup:
    """
    Build the ruler group for an SLO.

    Increase and burn-rate rules are flattened into one sequence, increase
    rules first. Generic rules are never pushed to the ruler.
    """
    groups = collect_rule_groups(objective, generic_rules=False)
    rules = []
    for group in groups:
        rules.extend(to_rule_nodes(group.rules, write_alerting_rules))

    return MimirRuleGroup(namespace=slo.name, name=slo.name, rules=rules)
