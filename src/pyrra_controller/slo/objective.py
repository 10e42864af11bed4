"""
Objective collaborator contract.

The burn-rate mathematics live outside the controller. The reconciler is
handed an ``ObjectiveFactory`` that turns a ServiceLevelObjective resource
into an ``Objective`` able to produce the three logical rule groups.
"""

from __future__ import annotations

from typing import Callable, Protocol

from pyrra_controller.kube.resources import ServiceLevelObjective
from pyrra_controller.rules.models import RuleGroup


class Objective(Protocol):
    """Rule groups derived from one SLO.

    Implementations raise on failure. ``generic_rules`` raises
    :class:`pyrra_controller.errors.GroupingUnsupportedError` when the
    objective groups by labels and cannot produce generic rules.
    """

    def increase_rules(self) -> RuleGroup:
        ...

    def burnrates(self) -> RuleGroup:
        ...

    def generic_rules(self) -> RuleGroup:
        ...


ObjectiveFactory = Callable[[ServiceLevelObjective], Objective]
