from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterator

from django.db import DEFAULT_DB_ALIAS, DatabaseError, IntegrityError, transaction

from core.audit.errors import DuplicateRevision, DuplicateSnapshot, NotFound, StoreUnavailable
from core.audit.history import TrackedEntity, tracked_entities, tracked_entity
from core.audit.models import ChangeKind, Revision
from core.audit.types import RevisionRecord, Snapshot

logger = logging.getLogger(__name__)


class RevisionStore:
    def __init__(self, *, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def insert(self, revision_id: int, timestamp: datetime, actor: str) -> RevisionRecord:
        try:
            with transaction.atomic(using=self.using):
                row = Revision.objects.using(self.using).create(
                    revision_id=revision_id,
                    timestamp=timestamp,
                    actor=actor,
                )
        except IntegrityError as exc:
            logger.error("revision %s already exists", revision_id)
            raise DuplicateRevision(revision_id) from exc
        except DatabaseError as exc:
            raise StoreUnavailable(f"could not write revision {revision_id}") from exc
        return RevisionRecord.from_model(row)

    def get(self, revision_id: int) -> RevisionRecord:
        try:
            row = Revision.objects.using(self.using).filter(revision_id=revision_id).first()
        except DatabaseError as exc:
            raise StoreUnavailable(f"could not read revision {revision_id}") from exc
        if row is None:
            raise NotFound(f"revision {revision_id} not found")
        return RevisionRecord.from_model(row)

    def revision_at(self, when: datetime) -> RevisionRecord:
        """Latest revision allocated at or before ``when``."""
        try:
            row = (
                Revision.objects.using(self.using)
                .filter(timestamp__lte=when)
                .order_by("-revision_id")
                .first()
            )
        except DatabaseError as exc:
            raise StoreUnavailable("could not read revisions") from exc
        if row is None:
            raise NotFound(f"no revision at or before {when.isoformat()}")
        return RevisionRecord.from_model(row)

    def recent(self, *, limit: int = 50, offset: int = 0) -> list[RevisionRecord]:
        try:
            rows = list(Revision.objects.using(self.using).order_by("-revision_id")[offset: offset + limit])
        except DatabaseError as exc:
            raise StoreUnavailable("could not read revisions") from exc
        return [RevisionRecord.from_model(r) for r in rows]

    def count(self) -> int:
        try:
            return Revision.objects.using(self.using).count()
        except DatabaseError as exc:
            raise StoreUnavailable("could not count revisions") from exc


class SnapshotHistory:
    """
    Snapshots of one entity in ascending revision order.

    Nothing is fetched until iteration; each iteration runs a fresh query.
    """

    def __init__(self, entity: TrackedEntity, queryset):
        self._entity = entity
        self._queryset = queryset

    def __iter__(self) -> Iterator[Snapshot]:
        try:
            for row in self._queryset.iterator():
                yield self._entity.snapshot(row)
        except DatabaseError as exc:
            raise StoreUnavailable(f"could not read {self._entity.entity_type} history") from exc

    def count(self) -> int:
        try:
            return self._queryset.count()
        except DatabaseError as exc:
            raise StoreUnavailable(f"could not count {self._entity.entity_type} history") from exc

    def exists(self) -> bool:
        try:
            return self._queryset.exists()
        except DatabaseError as exc:
            raise StoreUnavailable(f"could not read {self._entity.entity_type} history") from exc


class SnapshotStore:
    def __init__(self, *, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def _rows(self, entity: TrackedEntity):
        return entity.history_model.objects.using(self.using).select_related("revision")

    def append(
        self,
        entity_type: str,
        entity_id: Any,
        revision_id: int,
        change_kind: str,
        field_state: dict[str, Any],
    ) -> None:
        entity = tracked_entity(entity_type)
        if change_kind not in ChangeKind.values:
            raise ValueError(f"unknown change kind {change_kind!r}")

        try:
            with transaction.atomic(using=self.using):
                entity.history_model.objects.using(self.using).create(
                    entity_id=entity_id,
                    revision_id=revision_id,
                    change_kind=change_kind,
                    **entity.row_values(field_state),
                )
        except IntegrityError as exc:
            logger.error("%s#%s already has a snapshot at revision %s", entity_type, entity_id, revision_id)
            raise DuplicateSnapshot(entity_type, entity_id, revision_id) from exc
        except DatabaseError as exc:
            raise StoreUnavailable(f"could not write {entity_type}#{entity_id} at revision {revision_id}") from exc

    def history_of(self, entity_type: str, entity_id: Any) -> SnapshotHistory:
        entity = tracked_entity(entity_type)
        qs = self._rows(entity).filter(entity_id=entity_id).order_by("revision_id")
        return SnapshotHistory(entity, qs)

    def revisions_of(self, entity_type: str, entity_id: Any) -> list[int]:
        entity = tracked_entity(entity_type)
        try:
            return list(
                entity.history_model.objects.using(self.using)
                .filter(entity_id=entity_id)
                .order_by("revision_id")
                .values_list("revision_id", flat=True)
            )
        except DatabaseError as exc:
            raise StoreUnavailable(f"could not read {entity_type} revisions") from exc

    def as_of(self, entity_type: str, entity_id: Any, revision_id: int) -> Snapshot:
        """Latest snapshot with a revision number <= ``revision_id``."""
        entity = tracked_entity(entity_type)
        qs = self._rows(entity).filter(entity_id=entity_id, revision_id__lte=revision_id)
        return self._latest(entity, qs, f"{entity_type}#{entity_id} has no snapshot at or before revision {revision_id}")

    def as_of_time(self, entity_type: str, entity_id: Any, when: datetime) -> Snapshot:
        entity = tracked_entity(entity_type)
        qs = self._rows(entity).filter(entity_id=entity_id, revision__timestamp__lte=when)
        return self._latest(entity, qs, f"{entity_type}#{entity_id} has no snapshot at or before {when.isoformat()}")

    def changes_in(self, revision_id: int) -> list[Snapshot]:
        """Every snapshot written by one revision, across all tracked types."""
        out = []
        for entity in tracked_entities():
            try:
                rows = list(self._rows(entity).filter(revision_id=revision_id).order_by("entity_id"))
            except DatabaseError as exc:
                raise StoreUnavailable(f"could not read changes of revision {revision_id}") from exc
            out.extend(entity.snapshot(r) for r in rows)
        return out

    def _latest(self, entity: TrackedEntity, qs, message: str) -> Snapshot:
        try:
            row = qs.order_by("-revision_id").first()
        except DatabaseError as exc:
            raise StoreUnavailable(message) from exc
        if row is None:
            raise NotFound(message)
        return entity.snapshot(row)
