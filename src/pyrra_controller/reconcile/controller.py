from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pyrra_controller.artifacts.builder import (
    build_config_map,
    build_mimir_rule_group,
    build_prometheus_rule,
)
from pyrra_controller.config import Backend
from pyrra_controller.errors import ArtifactBuildError, NotFoundError
from pyrra_controller.kube.resources import ObjectKey, ServiceLevelObjective
from pyrra_controller.logging import bind_reconcile_context
from pyrra_controller.reconcile.upsert import ArtifactUpserter, StatusType, UpsertOutcome
from pyrra_controller.slo.objective import Objective, ObjectiveFactory
from pyrra_controller.stores.base import ArtifactStore, ServiceLevelObjectiveReader

STATUS_TYPES = {
    Backend.PROMETHEUS_RULE: StatusType.PROMETHEUS_RULE,
    Backend.CONFIG_MAP: StatusType.CONFIG_MAP,
    Backend.MIMIR_RULE: StatusType.MIMIR_RULE,
}


@dataclass
class ServiceLevelObjectiveReconciler:
    """
    Reconciles one ServiceLevelObjective into the rules of the configured backend.

    Each call is stateless and may be repeated any number of times; the
    caller guarantees at most one call in flight per key.
    """

    slos: ServiceLevelObjectiveReader
    artifacts: ArtifactStore[Any]
    objective_factory: ObjectiveFactory
    backend: Backend = Backend.PROMETHEUS_RULE
    generic_rules: bool = False
    write_alerting_rules: bool = False

    async def reconcile(self, key: ObjectKey) -> UpsertOutcome | None:
        """
        Bring the backend artifact of ``key`` in line with the SLO.

        Returns:
            The upsert outcome, or None when the SLO no longer exists
        """
        logger = bind_reconcile_context(key.namespace, key.name)
        logger.debug("reconciling", backend=self.backend.value)

        try:
            slo = await self.slos.get(key)
        except NotFoundError:
            logger.debug("slo_not_found")
            return None

        objective = self._objective(slo)

        if self.backend is Backend.CONFIG_MAP:
            artifact: Any = build_config_map(slo, objective, self.generic_rules)
        elif self.backend is Backend.MIMIR_RULE:
            artifact = build_mimir_rule_group(slo, objective, self.write_alerting_rules)
        else:
            artifact = build_prometheus_rule(slo, objective, self.generic_rules)

        upserter = ArtifactUpserter(self.artifacts, self.slos, STATUS_TYPES[self.backend])
        outcome = await upserter.upsert(slo, artifact, logger=logger)
        logger.info("reconciled", outcome=outcome.value)
        return outcome

    def _objective(self, slo: ServiceLevelObjective) -> Objective:
        try:
            return self.objective_factory(slo)
        except Exception as exc:
            raise ArtifactBuildError(f"failed to get objective: {exc}") from exc
