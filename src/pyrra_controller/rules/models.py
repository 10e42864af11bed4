"""Backend-agnostic rule models produced by the objective collaborator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass(frozen=True)
class RecordingRule:
    """A Prometheus recording rule.

    Recording rules precompute frequently needed or expensive expressions
    and save their result as a new time series.
    """

    record: str
    """The name of the time series to output to."""

    expr: str
    """The PromQL expression to evaluate."""

    labels: Dict[str, str] = field(default_factory=dict)
    """Labels to add or overwrite before storing the result."""


@dataclass(frozen=True)
class AlertingRule:
    """A Prometheus alerting rule."""

    alert: str
    """The name of the alert."""

    expr: str
    """The PromQL expression to evaluate."""

    for_: Optional[str] = None
    """How long the expression must hold before firing, as written by the source."""

    labels: Dict[str, str] = field(default_factory=dict)
    """Labels to attach to the alert."""

    annotations: Dict[str, str] = field(default_factory=dict)
    """Informational annotations such as description or runbook_url."""


Rule = Union[RecordingRule, AlertingRule]


@dataclass
class RuleGroup:
    """A named, ordered group of rules evaluated together."""

    name: str
    """The name of the rule group."""

    rules: List[Rule] = field(default_factory=list)
    """Rules in evaluation order."""

    interval: Optional[str] = None
    """How often rules in the group are evaluated; the engine default when None."""

    @property
    def alerting_rules(self) -> List[AlertingRule]:
        return [rule for rule in self.rules if isinstance(rule, AlertingRule)]
