from datetime import datetime, timezone as dt_timezone
from unittest import mock

import pytest
from django.db import DatabaseError

from core.audit.clock import RevisionClock
from core.audit.errors import ClockUnavailable
from core.audit.models import RevisionSequence


@pytest.mark.django_db
def test_same_transaction_gets_same_revision():
    clock = RevisionClock()

    first = clock.begin_or_join_transaction_revision("tx-1")
    second = clock.begin_or_join_transaction_revision("tx-1")

    assert first == second


@pytest.mark.django_db
def test_new_transactions_get_increasing_revisions():
    clock = RevisionClock()

    r1 = clock.begin_or_join_transaction_revision("tx-1")
    r2 = clock.begin_or_join_transaction_revision("tx-2")
    r3 = clock.begin_or_join_transaction_revision("tx-3")

    assert r1 < r2 < r3


@pytest.mark.django_db
def test_allocation_records_timestamp_and_leaves_no_sequence_rows():
    fixed = datetime(2024, 5, 1, 12, 0, tzinfo=dt_timezone.utc)
    clock = RevisionClock(now=lambda: fixed)

    rev = clock.begin_or_join_transaction_revision("tx-1")

    allocation = clock.allocation("tx-1")
    assert allocation.revision_id == rev
    assert allocation.timestamp == fixed
    assert RevisionSequence.objects.count() == 0


@pytest.mark.django_db
def test_released_numbers_are_not_handed_out_again():
    clock = RevisionClock()

    rev = clock.begin_or_join_transaction_revision("tx-1")
    clock.release("tx-1")

    assert clock.allocation("tx-1") is None
    assert clock.begin_or_join_transaction_revision("tx-1") > rev


@pytest.mark.django_db
def test_database_failure_raises_clock_unavailable():
    clock = RevisionClock()

    with mock.patch.object(RevisionSequence.objects, "using", side_effect=DatabaseError("connection refused")):
        with pytest.raises(ClockUnavailable):
            clock.begin_or_join_transaction_revision("tx-1")

    assert clock.allocation("tx-1") is None


@pytest.mark.django_db
def test_racing_callers_on_one_transaction_share_the_first_allocation():
    clock = RevisionClock()
    real_using = RevisionSequence.objects.using
    raced = {"started": False}

    def interleave(alias):
        # another caller with the same tx_id finishes while this one is mid-allocation
        if not raced["started"]:
            raced["started"] = True
            raced["revision"] = clock.begin_or_join_transaction_revision("tx-1")
        return real_using(alias)

    with mock.patch.object(RevisionSequence.objects, "using", side_effect=interleave):
        rev = clock.begin_or_join_transaction_revision("tx-1")

    assert rev == raced["revision"]
    assert clock.allocation("tx-1").revision_id == rev
