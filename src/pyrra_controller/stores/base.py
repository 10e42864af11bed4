from __future__ import annotations

from typing import Protocol, TypeVar

from pyrra_controller.artifacts.models import Artifact
from pyrra_controller.kube.resources import ObjectKey, ServiceLevelObjective

A = TypeVar("A", bound=Artifact)


class ArtifactStore(Protocol[A]):
    """Contract for stores holding one kind of artifact.

    ``get`` raises :class:`pyrra_controller.errors.NotFoundError` for a
    missing artifact and :class:`pyrra_controller.errors.StoreError` for
    anything else. ``create`` returns the revision token assigned by the store.
    """

    async def get(self, key: ObjectKey) -> A:
        ...

    async def create(self, artifact: A) -> str:
        ...

    async def update(self, artifact: A) -> None:
        ...


class StatusWriter(Protocol):
    """Writes the status subresource of a ServiceLevelObjective."""

    async def update_status(self, slo: ServiceLevelObjective) -> None:
        ...


class ServiceLevelObjectiveReader(StatusWriter, Protocol):
    async def get(self, key: ObjectKey) -> ServiceLevelObjective:
        ...
