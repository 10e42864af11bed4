"""Contract of the SLO objective collaborator."""

from pyrra_controller.slo.objective import Objective, ObjectiveFactory

__all__ = ["Objective", "ObjectiveFactory"]
