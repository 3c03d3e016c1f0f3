"""
Shadow history tables for tracked models.

``track(Company)`` builds ``CompanyHistory`` (table ``companies_aud``): one row
per (entity_id, revision_id) with a change kind and a copy of every concrete
field of the entity. Call it in the tracked model's ``models.py`` so the
history model belongs to the same app and gets its migrations there.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.core.exceptions import ImproperlyConfigured
from django.db import models

from core.audit.errors import UnknownEntityType
from core.audit.models import AppendOnlyModel, ChangeKind
from core.audit.types import Snapshot

RESERVED_NAMES = ("pk", "entity_id", "revision", "revision_id", "change_kind")

_PLAIN_PK_TYPES = {
    models.AutoField: models.IntegerField,
    models.BigAutoField: models.BigIntegerField,
    models.SmallAutoField: models.SmallIntegerField,
}

# mirrored columns are copies; constraints belong to the live table only
_DROPPED_OPTIONS = ("primary_key", "unique", "db_index", "auto_now", "auto_now_add")


@dataclass(frozen=True)
class TrackedEntity:
    model: type[models.Model]
    history_model: type[models.Model]
    entity_type: str
    fields: tuple[models.Field, ...]

    def capture(self, instance) -> dict[str, Any]:
        return {f.name: f.value_from_object(instance) for f in self.fields}

    def persisted_state(self, entity_id, *, using: str) -> dict[str, Any] | None:
        """Field values as stored in the live table right now, or None if the row is gone."""
        row = self.model._base_manager.using(using).filter(pk=entity_id).first()
        return None if row is None else self.capture(row)

    def row_values(self, field_state: dict[str, Any]) -> dict[str, Any]:
        return {f.attname: field_state.get(f.name) for f in self.fields}

    def snapshot(self, row) -> Snapshot:
        # callers select_related("revision")
        return Snapshot(
            entity_type=self.entity_type,
            entity_id=row.entity_id,
            revision_id=row.revision_id,
            change_kind=row.change_kind,
            field_state={f.name: getattr(row, f.attname) for f in self.fields},
            timestamp=row.revision.timestamp,
            actor=row.revision.actor,
        )


_registry: dict[str, TrackedEntity] = {}


def _entity_id_field(pk: models.Field) -> models.Field:
    for auto_type, plain_type in _PLAIN_PK_TYPES.items():
        if type(pk) is auto_type:
            return plain_type()

    _, _, args, kwargs = pk.deconstruct()
    for option in _DROPPED_OPTIONS + ("default",):
        kwargs.pop(option, None)
    return pk.__class__(*args, **kwargs)


def _mirror(field: models.Field) -> models.Field:
    if isinstance(field, models.ForeignKey):
        return models.ForeignKey(
            field.remote_field.model,
            on_delete=models.DO_NOTHING,
            db_constraint=False,
            related_name="+",
            null=True,
            blank=True,
        )

    _, _, args, kwargs = field.deconstruct()
    for option in _DROPPED_OPTIONS:
        kwargs.pop(option, None)
    return field.__class__(*args, **kwargs)


def track(model: type[models.Model], *, db_table: str | None = None, exclude: tuple[str, ...] = ()) -> type[models.Model]:
    """
    Opt ``model`` into history recording and return its history model.
    """
    opts = model._meta
    entity_type = opts.object_name

    if entity_type in _registry:
        raise ImproperlyConfigured(f"{entity_type} is already tracked")

    mirrored = tuple(
        f for f in opts.concrete_fields
        if not f.primary_key and f.name not in exclude
    )
    clashes = [f.name for f in mirrored if f.name in RESERVED_NAMES]
    if clashes:
        raise ImproperlyConfigured(f"{entity_type} fields clash with history columns: {', '.join(clashes)}")

    attrs = {
        "__module__": model.__module__,
        "pk": models.CompositePrimaryKey("entity_id", "revision_id"),
        "entity_id": _entity_id_field(opts.pk),
        "revision": models.ForeignKey("audit.Revision", on_delete=models.PROTECT, related_name="+"),
        "change_kind": models.CharField(max_length=7, choices=ChangeKind.choices),
        "Meta": type("Meta", (), {
            "app_label": opts.app_label,
            "db_table": db_table or f"{opts.db_table}_aud",
            "verbose_name": f"{opts.verbose_name} history",
        }),
    }
    for f in mirrored:
        attrs[f.name] = _mirror(f)

    history_model = type(f"{model.__name__}History", (AppendOnlyModel,), attrs)
    history_fields = tuple(history_model._meta.get_field(f.name) for f in mirrored)

    _registry[entity_type] = TrackedEntity(
        model=model,
        history_model=history_model,
        entity_type=entity_type,
        fields=history_fields,
    )
    return history_model


def tracked_entity(model_or_type) -> TrackedEntity:
    if isinstance(model_or_type, str):
        name = model_or_type
    else:
        name = model_or_type._meta.concrete_model._meta.object_name

    entity = _registry.get(name)
    if entity is None:
        raise UnknownEntityType(f"{name} is not a tracked entity type")
    return entity


def is_tracked(model) -> bool:
    concrete = model._meta.concrete_model
    entity = _registry.get(concrete._meta.object_name)
    return entity is not None and entity.model is concrete


def tracked_entities() -> list[TrackedEntity]:
    return list(_registry.values())
