"""
Error hierarchy for the SLO rule reconciler.

NotFoundError and GroupingUnsupportedError are control-flow signals; every
other error aborts the current reconciliation and is left to the caller's
requeue/backoff.
"""

from __future__ import annotations


class ReconcileError(RuntimeError):
    """Base class for all reconciler errors."""


class NotFoundError(ReconcileError):
    """Raised when a store has no object for the requested key."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} {key} not found")
        self.kind = kind
        self.key = key


class StoreError(ReconcileError):
    """Raised when a store call fails for any reason other than not found."""


class ConflictError(StoreError):
    """Raised when an update is rejected because the revision token is stale."""


class MimirRulerError(StoreError):
    """Raised when the Mimir Ruler API encounters an error."""


class GroupingUnsupportedError(ReconcileError):
    """Raised by an objective that cannot produce generic (grouping) rules."""


class ArtifactBuildError(ReconcileError):
    """Raised when the objective collaborator fails to produce a rule group."""


class MarshalError(ReconcileError):
    """Raised when a rule payload cannot be serialized."""
