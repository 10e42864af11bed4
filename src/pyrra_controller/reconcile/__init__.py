"""Reconciliation of ServiceLevelObjectives into rule artifacts."""

from pyrra_controller.reconcile.controller import ServiceLevelObjectiveReconciler
from pyrra_controller.reconcile.upsert import ArtifactUpserter, StatusType, UpsertOutcome

__all__ = [
    "ArtifactUpserter",
    "ServiceLevelObjectiveReconciler",
    "StatusType",
    "UpsertOutcome",
]
