"""
Reconciliation Engine

Matches budget goals (records in the PROJECTION module) against realized
records of the other modules and computes goal-vs-actual progress.

A goal and a realized record belong together when:
1. Their titles are equal after trimming and lower-casing
2. Both fall in the same calendar month

Every function here is pure: it takes an immutable snapshot of records and
returns a value. No I/O, no shared state. A missing goal is a normal
outcome (None), not an error.
"""

from decimal import Decimal
from typing import Iterable, Optional

from finfamily.models.record import (
    ModuleId,
    Month,
    ProjectionMatch,
    Record,
    RecordKind,
)


def normalize_title(title: str) -> str:
    """Comparison key for goal matching: trimmed and case-insensitive."""
    return title.strip().lower()


def filter_month(records: Iterable[Record], month: Month) -> list[Record]:
    """Records whose date falls in the given calendar month."""
    return [record for record in records if month.contains(record.date)]


def _sum_amounts(records: Iterable[Record]) -> Decimal:
    return sum((record.amount for record in records), Decimal("0"))


def forward_match(
    module_record: Record,
    projections: Iterable[Record],
    same_month_module_records: Iterable[Record],
) -> Optional[ProjectionMatch]:
    """
    Progress of a realized record against its goal.

    Args:
        module_record: Record from budget, travel or investment
        projections: Candidate goals (the month's PROJECTION records)
        same_month_module_records: Records of the same module and month

    Returns:
        The match, or None when no goal shares the record's title.
        Projection records themselves never have a forward match.
    """
    if module_record.module_id == ModuleId.PROJECTION:
        return None

    key = normalize_title(module_record.title)
    goal = next(
        (
            p for p in projections
            if p.module_id == ModuleId.PROJECTION and normalize_title(p.title) == key
        ),
        None,
    )
    if goal is None:
        return None

    # All occurrences of a recurring entry count towards the same goal
    current_total = _sum_amounts(
        r for r in same_month_module_records if normalize_title(r.title) == key
    )

    return ProjectionMatch(
        goal_amount=goal.amount,
        current_total=current_total,
        is_over=current_total > goal.amount,
    )


def reverse_match(
    projection_record: Record,
    all_same_month_records: Iterable[Record],
) -> ProjectionMatch:
    """
    How much of a goal has been realized across the other modules.

    Always returns a result; a goal nobody spent against has total 0.

    Raises:
        ValueError: If the record is not a PROJECTION record
    """
    if projection_record.module_id != ModuleId.PROJECTION:
        raise ValueError(
            f"reverse_match needs a projection record, got {projection_record.module_id.value}"
        )

    key = normalize_title(projection_record.title)
    current_total = _sum_amounts(
        r for r in all_same_month_records
        if r.module_id != ModuleId.PROJECTION and normalize_title(r.title) == key
    )

    return ProjectionMatch(
        goal_amount=projection_record.amount,
        current_total=current_total,
        is_over=current_total > projection_record.amount,
    )


def match_for_record(
    record: Record,
    month_records: list[Record],
) -> Optional[ProjectionMatch]:
    """
    Pick the right direction for a record shown in its module's view.

    `month_records` is every record of the record's month, across all
    modules. Projection records look forward into realizations; other
    records look up their goal.
    """
    if record.module_id == ModuleId.PROJECTION:
        return reverse_match(record, month_records)

    projections = [r for r in month_records if r.module_id == ModuleId.PROJECTION]
    same_module = [r for r in month_records if r.module_id == record.module_id]
    return forward_match(record, projections, same_module)


def signed_total(records: Iterable[Record]) -> Decimal:
    """
    Income minus expenses.

    NOTE: asset records contribute nothing. This mirrors how totals have
    always been shown; see DESIGN.md before changing it.
    """
    total = Decimal("0")
    for record in records:
        if record.kind == RecordKind.INCOME:
            total += record.amount
        elif record.kind == RecordKind.EXPENSE:
            total -= record.amount
    return total


def module_total(module_id: ModuleId, records: Iterable[Record]) -> Decimal:
    """Signed total of one module's records, over all months."""
    return signed_total(r for r in records if r.module_id == module_id)


def grand_total(records: Iterable[Record]) -> Decimal:
    """Signed total of every record (the dashboard balance)."""
    return signed_total(records)


def kind_total(records: Iterable[Record], kind: RecordKind) -> Decimal:
    """Sum of amounts of one kind."""
    return _sum_amounts(r for r in records if r.kind == kind)
