"""Root test configuration."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

import pytest
import structlog
from pyrra_controller.errors import ConflictError, NotFoundError
from pyrra_controller.kube.resources import ObjectKey, ObjectMeta, ServiceLevelObjective
from pyrra_controller.rules.models import AlertingRule, RecordingRule, RuleGroup


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _payload(artifact: Any) -> dict[str, Any]:
    data = artifact.to_dict()
    data.get("metadata", {}).pop("resourceVersion", None)
    return data


class InMemoryArtifactStore:
    """Artifact store enforcing the optimistic-concurrency token like the API server."""

    def __init__(self) -> None:
        self.objects: dict[ObjectKey, Any] = {}
        self.calls: list[tuple[str, ObjectKey]] = []
        self.update_tokens: list[str] = []
        self.written: list[dict[str, Any]] = []
        self.get_error: Exception | None = None
        self.create_error: Exception | None = None
        self.update_error: Exception | None = None
        self._version = 100

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    async def get(self, key: ObjectKey) -> Any:
        self.calls.append(("get", key))
        if self.get_error is not None:
            raise self.get_error
        if key not in self.objects:
            raise NotFoundError("artifact", str(key))
        return copy.deepcopy(self.objects[key])

    async def create(self, artifact: Any) -> str:
        self.calls.append(("create", artifact.key))
        if self.create_error is not None:
            raise self.create_error
        if artifact.key in self.objects:
            raise ConflictError(f"{artifact.key} already exists")
        stored = copy.deepcopy(artifact)
        stored.resource_version = self._next_version()
        self.objects[artifact.key] = stored
        return stored.resource_version

    async def update(self, artifact: Any) -> None:
        self.calls.append(("update", artifact.key))
        self.update_tokens.append(artifact.resource_version)
        if self.update_error is not None:
            raise self.update_error
        current = self.objects.get(artifact.key)
        if current is None:
            raise NotFoundError("artifact", str(artifact.key))
        if artifact.resource_version != current.resource_version:
            raise ConflictError(f"stale resource version {artifact.resource_version!r}")
        stored = copy.deepcopy(artifact)
        stored.resource_version = self._next_version()
        self.objects[artifact.key] = stored
        self.written.append(_payload(artifact))

    @property
    def actions(self) -> list[str]:
        return [action for action, _ in self.calls]


class InMemorySLOStore:
    def __init__(self, *slos: ServiceLevelObjective) -> None:
        self.objects = {slo.key: slo for slo in slos}
        self.status_writes: list[str] = []
        self.get_error: Exception | None = None
        self.status_error: Exception | None = None

    async def get(self, key: ObjectKey) -> ServiceLevelObjective:
        if self.get_error is not None:
            raise self.get_error
        if key not in self.objects:
            raise NotFoundError("ServiceLevelObjective", str(key))
        return copy.deepcopy(self.objects[key])

    async def update_status(self, slo: ServiceLevelObjective) -> None:
        if self.status_error is not None:
            raise self.status_error
        self.status_writes.append(slo.status.type)
        self.objects[slo.key] = copy.deepcopy(slo)


@dataclass
class FakeObjective:
    """Objective returning fixed rule groups, or raising the configured errors."""

    increases: RuleGroup
    burnrates_group: RuleGroup
    generic: RuleGroup | None = None
    errors: dict[str, Exception] = field(default_factory=dict)

    def increase_rules(self) -> RuleGroup:
        if "increase" in self.errors:
            raise self.errors["increase"]
        return self.increases

    def burnrates(self) -> RuleGroup:
        if "burnrates" in self.errors:
            raise self.errors["burnrates"]
        return self.burnrates_group

    def generic_rules(self) -> RuleGroup:
        if "generic" in self.errors:
            raise self.errors["generic"]
        assert self.generic is not None
        return self.generic


def increase_group(name: str = "orders-availability-increase") -> RuleGroup:
    return RuleGroup(
        name=name,
        interval="2m30s",
        rules=[
            RecordingRule(
                record="http_requests:increase4w",
                expr='sum by (code) (increase(http_requests_total{job="orders"}[4w]))',
                labels={"slo": "orders-availability"},
            ),
            AlertingRule(
                alert="SLOMetricAbsent",
                expr='absent(http_requests_total{job="orders"}) == 1',
                for_="10m",
                labels={"severity": "critical", "slo": "orders-availability"},
            ),
        ],
    )


def burnrate_group(name: str = "orders-availability") -> RuleGroup:
    return RuleGroup(
        name=name,
        interval="30s",
        rules=[
            RecordingRule(
                record="http_requests:burnrate5m",
                expr='sum(rate(http_requests_total{job="orders",code=~"5.."}[5m]))\n/\nsum(rate(http_requests_total{job="orders"}[5m]))',
                labels={"slo": "orders-availability"},
            ),
            AlertingRule(
                alert="ErrorBudgetBurn",
                expr="http_requests:burnrate5m{slo=\"orders-availability\"} > (14 * (1-0.99))",
                for_="2m",
                labels={"severity": "critical"},
                annotations={"description": "orders is burning its error budget"},
            ),
        ],
    )


def generic_group(name: str = "orders-availability-generic") -> RuleGroup:
    return RuleGroup(
        name=name,
        interval="30s",
        rules=[
            RecordingRule(
                record="pyrra_objective",
                expr="vector(0.99)",
                labels={"slo": "orders-availability"},
            ),
        ],
    )


@pytest.fixture
def slo() -> ServiceLevelObjective:
    return ServiceLevelObjective(
        metadata=ObjectMeta(
            name="orders-availability",
            namespace="team-a",
            labels={"prometheus": "k8s", "role": "alert-rules"},
            uid="5f0e2d1c-7a1b-4c3d-9e8f-0a1b2c3d4e5f",
            resource_version="42",
        ),
        spec={"target": "99", "window": "4w"},
    )


@pytest.fixture
def objective() -> FakeObjective:
    return FakeObjective(
        increases=increase_group(),
        burnrates_group=burnrate_group(),
        generic=generic_group(),
    )


@pytest.fixture
def artifact_store() -> InMemoryArtifactStore:
    return InMemoryArtifactStore()


@pytest.fixture
def slo_store(slo: ServiceLevelObjective) -> InMemorySLOStore:
    return InMemorySLOStore(slo)


@pytest.fixture
def make_objective():
    def _make(
        increases: RuleGroup,
        burnrates: RuleGroup,
        generic: RuleGroup | None = None,
    ) -> FakeObjective:
        return FakeObjective(increases=increases, burnrates_group=burnrates, generic=generic)

    return _make
