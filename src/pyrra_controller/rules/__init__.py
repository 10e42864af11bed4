"""Rule models, durations and backend translations."""

from pyrra_controller.rules.models import AlertingRule, RecordingRule, Rule, RuleGroup
from pyrra_controller.rules.translate import RuleNode, to_prometheus_rule, to_rule_node

__all__ = [
    "AlertingRule",
    "RecordingRule",
    "Rule",
    "RuleGroup",
    "RuleNode",
    "to_prometheus_rule",
    "to_rule_node",
]
