from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class AuditError(Exception):
    """Base class for every failure raised by the audit path."""

    code = "AUDIT_ERROR"


class ClockUnavailable(AuditError):
    code = "AUDIT_UNAVAILABLE"


class StoreUnavailable(AuditError):
    code = "AUDIT_UNAVAILABLE"


class InvariantViolation(AuditError):
    """
    Something that can only happen through a bug or an allocation race.
    Never retried, never overwritten: the transaction is aborted.
    """

    code = "AUDIT_INVARIANT"


@dataclass(eq=False)
class DuplicateRevision(InvariantViolation):
    revision_id: int

    def __str__(self) -> str:
        return f"revision {self.revision_id} already exists"


@dataclass(eq=False)
class DuplicateSnapshot(InvariantViolation):
    entity_type: str
    entity_id: Any
    revision_id: int

    def __str__(self) -> str:
        return f"{self.entity_type}#{self.entity_id} already has a snapshot at revision {self.revision_id}"


class AppendOnlyViolation(InvariantViolation):
    pass


class NotFound(AuditError, LookupError):
    code = "NOT_FOUND"


class UnknownEntityType(NotFound):
    pass


class UnauditedWrite(AuditError):
    code = "UNAUDITED_WRITE"
