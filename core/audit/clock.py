from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, NamedTuple

from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.utils import timezone

from core.audit.errors import ClockUnavailable
from core.audit.models import RevisionSequence

logger = logging.getLogger(__name__)


class Allocation(NamedTuple):
    revision_id: int
    timestamp: datetime


class RevisionClock:
    """
    Hands out revision numbers, one per transaction.

    Numbers come from the ``revinfo_seq`` identity column inside the caller's
    transaction. The identity never rewinds, so a number consumed by a
    rolled-back transaction is a gap and is never reused.

    Callers racing on one ``tx_id`` all get the first stored allocation; the
    numbers the others drew become gaps.
    """

    def __init__(self, *, using: str = DEFAULT_DB_ALIAS, now: Callable[[], datetime] = timezone.now):
        self.using = using
        self._now = now
        self._allocations: dict[str, Allocation] = {}
        self._lock = threading.Lock()

    def begin_or_join_transaction_revision(self, tx_id: str) -> int:
        with self._lock:
            existing = self._allocations.get(tx_id)
        if existing is not None:
            return existing.revision_id

        try:
            with transaction.atomic(using=self.using):
                slot = RevisionSequence.objects.using(self.using).create()
                RevisionSequence.objects.using(self.using).filter(pk=slot.pk).delete()
        except DatabaseError as exc:
            raise ClockUnavailable(f"could not allocate a revision for transaction {tx_id}") from exc

        # a concurrent caller with the same tx_id may have won; its number stands
        with self._lock:
            allocation = self._allocations.setdefault(tx_id, Allocation(revision_id=slot.pk, timestamp=self._now()))

        logger.debug("allocated revision %s for transaction %s", allocation.revision_id, tx_id)
        return allocation.revision_id

    def allocation(self, tx_id: str) -> Allocation | None:
        with self._lock:
            return self._allocations.get(tx_id)

    def release(self, tx_id: str) -> None:
        with self._lock:
            self._allocations.pop(tx_id, None)
