"""Shared test helpers."""

from decimal import Decimal
from itertools import count

import pytest

from finfamily.models.record import ModuleId, Record, RecordKind


_ids = count(1)


def make_record(
    module_id: ModuleId,
    title: str,
    amount,
    date: str,
    kind: RecordKind = RecordKind.EXPENSE,
    record_id: str = None,
) -> Record:
    """Build a stored record with a unique id."""
    return Record(
        id=record_id or f"rec-{next(_ids)}",
        module_id=module_id,
        title=title,
        amount=Decimal(str(amount)),
        date=date,
        kind=kind,
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def travel_month():
    """The 'Viagem' goal with two realized travel expenses in March 2024."""
    return [
        make_record(ModuleId.PROJECTION, "Viagem", 2000, "2024-03-01", RecordKind.EXPENSE, "goal"),
        make_record(ModuleId.TRAVEL, "Viagem", 800, "2024-03-05", RecordKind.EXPENSE, "t1"),
        make_record(ModuleId.TRAVEL, "viagem ", 500, "2024-03-20", RecordKind.EXPENSE, "t2"),
    ]
