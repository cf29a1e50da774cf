"""
Artifact publisher.

Creates records as objects in a control-plane store.

Per-Record State Machine
------------------------
::

    PENDING --> ATTEMPTING --> CREATED
                          |--> SKIPPED_CONFLICT
                          +--> FAILED

- **ATTEMPTING**: create the object under its sensitivity class
  (ConfigMap for public records, Secret for private keys).
- **CREATED**: the store accepted it.
- **SKIPPED_CONFLICT**: the name exists and the record's policy is `skip`.
  Logged and counted apart from created records. Not an error.
- **FAILED**: the name exists and the policy is `fail`, or any other
  store error occurred.

Run Semantics
-------------
Records are independent, so all of them are attempted concurrently. The
run waits for every outcome before deciding, so one failed run reports
every conflicting record at once instead of the first one only.

Before any record is attempted, one bounded list call against each store
primitive checks connectivity and permissions. Without it, a missing RBAC
rule would surface as one identical failure per record.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from genesis_kit.store import ControlPlaneStore
from genesis_kit.types import (
    PermissionProbeError,
    PublishError,
    RecordConflictError,
    StoreError,
    StoreStatusError,
)

from .records import ArtifactRecord, ConflictPolicy, Sensitivity

logger = logging.getLogger(__name__)

PROBE_LIMIT = 1
"""Page size for the upfront permission probe."""


class RecordState(Enum):
    """Lifecycle of one record within a publish run."""

    PENDING = auto()
    ATTEMPTING = auto()
    CREATED = auto()
    SKIPPED_CONFLICT = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        """Whether the record has finished."""
        return self in {RecordState.CREATED, RecordState.SKIPPED_CONFLICT, RecordState.FAILED}


@dataclass(slots=True)
class RecordOutcome:
    """State of one record and, if it failed, why."""

    record: ArtifactRecord
    state: RecordState = RecordState.PENDING
    error: Exception | None = None


@dataclass(slots=True)
class PublishReport:
    """Aggregate result of a successful publish run."""

    namespace: str
    """Namespace the records were written to."""

    outcomes: list[RecordOutcome] = field(default_factory=list)
    """Outcome per record, in input order."""

    def _names(self, state: RecordState, sensitivity: Sensitivity | None = None) -> list[str]:
        return [
            outcome.record.name
            for outcome in self.outcomes
            if outcome.state is state
            and (sensitivity is None or outcome.record.sensitivity is sensitivity)
        ]

    @property
    def created(self) -> list[str]:
        """Names of records the store accepted."""
        return self._names(RecordState.CREATED)

    @property
    def skipped(self) -> list[str]:
        """Names of records left untouched because they already existed."""
        return self._names(RecordState.SKIPPED_CONFLICT)

    @property
    def created_config_maps(self) -> int:
        """Number of ConfigMaps created."""
        return len(self._names(RecordState.CREATED, Sensitivity.PUBLIC))

    @property
    def created_secrets(self) -> int:
        """Number of Secrets created."""
        return len(self._names(RecordState.CREATED, Sensitivity.SECRET))


class ArtifactPublisher:
    """Publishes records into one store namespace."""

    def __init__(self, store: ControlPlaneStore) -> None:
        self._store = store

    async def probe(self) -> None:
        """
        Check that both store primitives can be listed.

        Raises:
            PermissionProbeError: If either list call fails.
        """
        try:
            await asyncio.gather(
                self._store.list_config_maps(limit=PROBE_LIMIT),
                self._store.list_secrets(limit=PROBE_LIMIT),
            )
        except StoreError as e:
            raise PermissionProbeError(f"Kubernetes permissions check failed: {e}") from e
        logger.info("Permission probe passed for namespace %s", self._store.namespace)

    async def publish(self, records: Sequence[ArtifactRecord]) -> PublishReport:
        """
        Probe the store, then create every record concurrently.

        Returns:
            The report when every record was created or skipped.

        Raises:
            PermissionProbeError: If the probe fails. No record is attempted.
            PublishError: If any record failed; lists every failure.
        """
        await self.probe()

        public = sum(1 for r in records if r.sensitivity is Sensitivity.PUBLIC)
        logger.info(
            "Applying %d ConfigMap specs and %d Secret specs",
            public,
            len(records) - public,
        )

        outcomes = [RecordOutcome(record) for record in records]
        await asyncio.gather(*(self._attempt(outcome) for outcome in outcomes))

        failures = [o.error for o in outcomes if o.state is RecordState.FAILED and o.error]
        if failures:
            raise PublishError(failures)

        report = PublishReport(namespace=self._store.namespace, outcomes=outcomes)
        logger.info(
            "Applied %d ConfigMaps and %d Secrets in namespace %s (%d skipped)",
            report.created_config_maps,
            report.created_secrets,
            report.namespace,
            len(report.skipped),
        )
        return report

    async def _attempt(self, outcome: RecordOutcome) -> None:
        """Drive one record to a terminal state. Never raises."""
        record = outcome.record
        outcome.state = RecordState.ATTEMPTING
        logger.debug("%s -> %s", record.object_kind, record.name)

        try:
            if record.sensitivity is Sensitivity.SECRET:
                await self._store.create_secret(record.to_secret())
            else:
                await self._store.create_config_map(record.to_config_map())
        except StoreStatusError as e:
            if not e.is_conflict:
                outcome.state, outcome.error = RecordState.FAILED, e
            elif record.on_conflict is ConflictPolicy.SKIP:
                logger.info("%s %s already exists, skipping creation.", record.object_kind, record.name)
                outcome.state = RecordState.SKIPPED_CONFLICT
            else:
                outcome.state = RecordState.FAILED
                outcome.error = RecordConflictError(record.name, record.object_kind)
        except StoreError as e:
            outcome.state, outcome.error = RecordState.FAILED, e
        else:
            outcome.state = RecordState.CREATED

        if outcome.state is RecordState.FAILED:
            logger.error("Failed to create %s %s: %s", record.object_kind, record.name, outcome.error)
