from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RevisionRecord:
    revision_id: int
    timestamp: datetime
    actor: str

    @classmethod
    def from_model(cls, row) -> "RevisionRecord":
        return cls(revision_id=row.revision_id, timestamp=row.timestamp, actor=row.actor)


@dataclass(frozen=True)
class Snapshot:
    entity_type: str
    entity_id: Any
    revision_id: int
    change_kind: str
    field_state: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime | None = None
    actor: str | None = None
