"""Kubernetes object metadata and the ServiceLevelObjective custom resource."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SLO_GROUP = "pyrra.dev"
SLO_VERSION = "v1alpha1"
SLO_PLURAL = "servicelevelobjectives"
SLO_KIND = "ServiceLevelObjective"
SLO_API_VERSION = f"{SLO_GROUP}/{SLO_VERSION}"


@dataclass(frozen=True)
class ObjectKey:
    """Namespace/name pair identifying a namespaced object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class OwnerReference:
    """Link asserting that the owner controls the lifecycle of an object."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OwnerReference":
        return cls(
            api_version=data["apiVersion"],
            kind=data["kind"],
            name=data["name"],
            uid=data["uid"],
            controller=bool(data.get("controller", False)),
        )


@dataclass
class ObjectMeta:
    """Subset of Kubernetes ObjectMeta the controller reads and writes."""

    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)
    uid: str = ""
    resource_version: str = ""
    owner_references: list[OwnerReference] = field(default_factory=list)

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.namespace, self.name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the Kubernetes wire form, omitting empty fields."""
        meta: dict[str, Any] = {"name": self.name, "namespace": self.namespace}
        if self.labels:
            meta["labels"] = dict(self.labels)
        if self.uid:
            meta["uid"] = self.uid
        if self.resource_version:
            meta["resourceVersion"] = self.resource_version
        if self.owner_references:
            meta["ownerReferences"] = [ref.to_dict() for ref in self.owner_references]
        return meta

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectMeta":
        return cls(
            name=data["name"],
            namespace=data.get("namespace") or "",
            labels=dict(data.get("labels") or {}),
            uid=data.get("uid") or "",
            resource_version=data.get("resourceVersion") or "",
            owner_references=[
                OwnerReference.from_dict(ref) for ref in data.get("ownerReferences") or []
            ],
        )


@dataclass
class ServiceLevelObjectiveStatus:
    type: str = ""


@dataclass
class ServiceLevelObjective:
    """
    The pyrra.dev/v1alpha1 ServiceLevelObjective resource.

    The spec is kept as the raw mapping; turning it into rules is the job of
    the objective collaborator.
    """

    metadata: ObjectMeta
    spec: dict[str, Any] = field(default_factory=dict)
    status: ServiceLevelObjectiveStatus = field(default_factory=ServiceLevelObjectiveStatus)
    api_version: str = SLO_API_VERSION
    kind: str = SLO_KIND

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def key(self) -> ObjectKey:
        return self.metadata.key

    def owner_reference(self) -> OwnerReference:
        """Controller owner reference pointing at this exact resource."""
        return OwnerReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.metadata.name,
            uid=self.metadata.uid,
            controller=True,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": self.spec,
        }
        if self.status.type:
            data["status"] = {"type": self.status.type}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServiceLevelObjective":
        status = data.get("status") or {}
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            spec=dict(data.get("spec") or {}),
            status=ServiceLevelObjectiveStatus(type=status.get("type", "")),
            api_version=data.get("apiVersion", SLO_API_VERSION),
            kind=data.get("kind", SLO_KIND),
        )
