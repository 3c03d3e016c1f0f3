"""
Ties tracked-entity mutations to revisions.

A unit of work wraps one database transaction. Model signals report every
create/update/delete of a tracked entity to the active unit, which notes the
entity and the state it had in the database before the unit first touched it.
Just before the transaction commits the unit re-reads each noted entity and
writes the revision row plus one snapshot per entity whose stored state
actually changed. Snapshots therefore hold what was persisted: changes undone
by a rolled-back savepoint and fields left out of ``update_fields`` never
reach the history tables. If anything fails the whole transaction rolls back,
so history rows only ever exist alongside the mutation that produced them.
"""
from __future__ import annotations

import enum
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterator

from django.db import DatabaseError, transaction

from core.audit.actors import ActorResolver, resolve_actor
from core.audit.clock import RevisionClock
from core.audit.context import ExecutionContext
from core.audit.errors import AuditError, StoreUnavailable, UnauditedWrite
from core.audit.history import TrackedEntity, tracked_entity
from core.audit.models import ChangeKind
from core.audit.store import RevisionStore, SnapshotStore

logger = logging.getLogger(__name__)


class UnitState(enum.Enum):
    IDLE = "idle"
    REVISION_ALLOCATED = "revision_allocated"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class TouchedEntity:
    entity_type: str
    entity_id: Any
    # stored state before the unit's first write; None if the row did not exist
    before: dict[str, Any] | None
    # stored state just before the latest delete
    last_seen: dict[str, Any] | None = None


@dataclass(frozen=True)
class PendingChange:
    entity_type: str
    entity_id: Any
    change_kind: str
    field_state: dict[str, Any]


def reconcile(touched: TouchedEntity, current: dict[str, Any] | None) -> PendingChange | None:
    """
    Turn what the unit saw of an entity plus its stored state at commit time
    into the snapshot to write. Returns None when nothing persisted changed.
    """
    if current is None:
        if touched.before is None:
            return None
        return PendingChange(
            touched.entity_type,
            touched.entity_id,
            ChangeKind.DELETED,
            touched.last_seen or touched.before,
        )

    if touched.before is None:
        return PendingChange(touched.entity_type, touched.entity_id, ChangeKind.CREATED, current)
    if current == touched.before:
        return None
    return PendingChange(touched.entity_type, touched.entity_id, ChangeKind.UPDATED, current)


@dataclass
class AuditUnit:
    tx_id: str
    context: ExecutionContext
    state: UnitState = UnitState.IDLE
    revision_id: int | None = None
    timestamp: datetime | None = None
    actor: str | None = None
    touched: dict[tuple[str, Any], TouchedEntity] = field(default_factory=dict)

    def checkpoint(self) -> dict[tuple[str, Any], TouchedEntity]:
        return dict(self.touched)

    def restore(self, saved: dict[tuple[str, Any], TouchedEntity]) -> None:
        self.touched = saved


_current_unit: ContextVar[AuditUnit | None] = ContextVar("audit_unit", default=None)


class AuditInterceptor:
    def __init__(
        self,
        *,
        clock: RevisionClock,
        actor_resolver: ActorResolver,
        revisions: RevisionStore,
        snapshots: SnapshotStore,
        fallback_actor: str = "system",
    ):
        self.clock = clock
        self.actor_resolver = actor_resolver
        self.revisions = revisions
        self.snapshots = snapshots
        self.fallback_actor = fallback_actor
        self.using = revisions.using

    @staticmethod
    def current_unit() -> AuditUnit | None:
        return _current_unit.get()

    @contextmanager
    def unit_of_work(self, context: ExecutionContext | None = None) -> Iterator[AuditUnit]:
        unit = _current_unit.get()
        if unit is not None:
            # nested: same revision, own savepoint
            saved = unit.checkpoint()
            try:
                with transaction.atomic(using=self.using):
                    yield unit
            except BaseException:
                unit.restore(saved)
                raise
            return

        unit = AuditUnit(tx_id=uuid.uuid4().hex, context=context or ExecutionContext.system())
        token = _current_unit.set(unit)
        try:
            with transaction.atomic(using=self.using):
                yield unit
                self._flush(unit)
        except BaseException:
            self._abort(unit)
            raise
        finally:
            _current_unit.reset(token)
            self.clock.release(unit.tx_id)

        unit.state = UnitState.COMMITTED

    def ensure_unit(self, model, using: str) -> AuditUnit:
        unit = _current_unit.get()
        if unit is None:
            raise UnauditedWrite(f"{model._meta.object_name} was written outside an audited unit of work")
        if using != self.using:
            raise UnauditedWrite(f"{model._meta.object_name} was written to {using!r}; audit runs on {self.using!r}")
        return unit

    def _writable_unit(self, model, using: str) -> AuditUnit:
        unit = self.ensure_unit(model, using)
        if unit.state is UnitState.COMMITTING:
            raise AuditError("tracked entity written while the unit of work was flushing")
        return unit

    def before_save(self, instance, *, using: str) -> None:
        """Remember the stored state of an existing row before its first write in this unit."""
        unit = self._writable_unit(type(instance), using)
        if instance.pk is None:
            return

        entity = tracked_entity(type(instance))
        key = (entity.entity_type, instance.pk)
        if key not in unit.touched:
            unit.touched[key] = TouchedEntity(
                entity.entity_type,
                instance.pk,
                before=self._stored_state(entity, instance.pk),
            )

    def before_delete(self, instance, *, using: str) -> None:
        unit = self._writable_unit(type(instance), using)
        entity = tracked_entity(type(instance))
        key = (entity.entity_type, instance.pk)

        state = self._stored_state(entity, instance.pk)
        touched = unit.touched.get(key) or TouchedEntity(entity.entity_type, instance.pk, before=state)
        unit.touched[key] = replace(touched, last_seen=state)

    def record(self, instance, change_kind: str, *, using: str) -> None:
        unit = self._writable_unit(type(instance), using)
        entity = tracked_entity(type(instance))
        if unit.state is UnitState.IDLE:
            self._allocate(unit)

        # existing rows were noted by before_save/before_delete
        key = (entity.entity_type, instance.pk)
        unit.touched.setdefault(key, TouchedEntity(entity.entity_type, instance.pk, before=None))
        logger.debug("%s %s#%s in unit %s", change_kind, entity.entity_type, instance.pk, unit.tx_id)

    def _stored_state(self, entity: TrackedEntity, entity_id) -> dict[str, Any] | None:
        try:
            return entity.persisted_state(entity_id, using=self.using)
        except DatabaseError as exc:
            raise StoreUnavailable(f"could not read {entity.entity_type}#{entity_id}") from exc

    def _allocate(self, unit: AuditUnit) -> None:
        unit.revision_id = self.clock.begin_or_join_transaction_revision(unit.tx_id)
        unit.timestamp = self.clock.allocation(unit.tx_id).timestamp
        unit.actor = resolve_actor(self.actor_resolver, unit.context, fallback=self.fallback_actor)
        unit.state = UnitState.REVISION_ALLOCATED

    def pending_changes(self, unit: AuditUnit) -> list[PendingChange]:
        changes = []
        for touched in unit.touched.values():
            entity = tracked_entity(touched.entity_type)
            change = reconcile(touched, self._stored_state(entity, touched.entity_id))
            if change is not None:
                changes.append(change)
        return changes

    def _flush(self, unit: AuditUnit) -> None:
        if unit.state is UnitState.IDLE:
            return

        unit.state = UnitState.COMMITTING
        changes = self.pending_changes(unit)
        if not changes:
            logger.debug("revision %s left unused: no stored state changed", unit.revision_id)
            return

        self.revisions.insert(unit.revision_id, unit.timestamp, unit.actor)
        for change in changes:
            self.snapshots.append(
                change.entity_type,
                change.entity_id,
                unit.revision_id,
                change.change_kind,
                change.field_state,
            )

        logger.info(
            "revision %s by %s: %d change(s) (request_id=%s)",
            unit.revision_id,
            unit.actor,
            len(changes),
            unit.context.request_id,
        )

    def _abort(self, unit: AuditUnit) -> None:
        discarded = len(unit.touched)
        unit.touched.clear()
        unit.state = UnitState.ABORTED
        if unit.revision_id is not None:
            logger.info(
                "unit %s aborted; revision %s discarded with %d touched row(s)",
                unit.tx_id,
                unit.revision_id,
                discarded,
            )
