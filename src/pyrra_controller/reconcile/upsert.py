"""
Get-or-create-then-update of a single artifact.

The sequence is the same for every backend:

1. get the stored artifact
2. create it when the store reports not found
3. copy the revision token (fetched, or returned by create) onto the artifact
4. update unconditionally
5. record the backend in the SLO status

Nothing is retried here; errors propagate to the caller's requeue.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import structlog

from pyrra_controller.artifacts.models import Artifact
from pyrra_controller.errors import NotFoundError
from pyrra_controller.kube.resources import ServiceLevelObjective
from pyrra_controller.stores.base import ArtifactStore, StatusWriter

A = TypeVar("A", bound=Artifact)


class UpsertOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


class StatusType(str, Enum):
    """Value of ``status.type`` on the SLO, naming the backend that holds its rules."""

    PROMETHEUS_RULE = "PrometheusRule"
    CONFIG_MAP = "ConfigMap"
    MIMIR_RULE = "MimirRule"


@dataclass
class ArtifactUpserter(Generic[A]):
    store: ArtifactStore[A]
    status: StatusWriter
    status_type: StatusType

    async def upsert(
        self,
        slo: ServiceLevelObjective,
        artifact: A,
        logger: Any = None,
    ) -> UpsertOutcome:
        log = logger or structlog.get_logger()
        kind = self.status_type.value
        key = artifact.key

        try:
            existing = await self.store.get(key)
        except NotFoundError:
            log.info("creating_artifact", kind=kind, namespace=key.namespace, name=key.name)
            token = await self.store.create(artifact)
            outcome = UpsertOutcome.CREATED
        else:
            token = existing.resource_version
            outcome = UpsertOutcome.UPDATED

        artifact.resource_version = token

        log.info("updating_artifact", kind=kind, namespace=key.namespace, name=key.name)
        await self.store.update(artifact)

        slo.status.type = kind
        await self.status.update_status(slo)

        return outcome
