"""
Read Models for the Dashboard and Module Views

DESIGN DECISION: Everything the screens display is computed here,
deterministically, from a snapshot of the user's records. The Streamlit
layer only renders these objects; it never sums or filters by itself.
"""

import html
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from finfamily.models.record import (
    MODULES,
    AdviceResult,
    ModuleConfig,
    ModuleId,
    Month,
    ProjectionMatch,
    Record,
    RecordKind,
    get_module,
)
from finfamily.reconciliation import (
    filter_month,
    grand_total,
    kind_total,
    match_for_record,
    module_total,
)


class RecordProgress(BaseModel):
    """A record as listed in its module view, with goal progress if any."""

    model_config = ConfigDict(frozen=True)

    record: Record
    match: Optional[ProjectionMatch] = None


class DailyPoint(BaseModel):
    """One bar of the monthly chart."""

    model_config = ConfigDict(frozen=True)

    day: str
    value: Decimal


class ModuleMonthView(BaseModel):
    """Everything the module detail screen shows for one month."""

    model_config = ConfigDict(frozen=True)

    module: ModuleConfig
    month: Month
    items: list[RecordProgress]
    monthly_income: Decimal
    monthly_expenses: Decimal
    monthly_provisions: Decimal
    daily_series: list[DailyPoint]
    activity_gauge: float

    @property
    def records(self) -> list[Record]:
        return [item.record for item in self.items]


class ModuleCard(BaseModel):
    model_config = ConfigDict(frozen=True)

    module: ModuleConfig
    total: Decimal


class DashboardSummary(BaseModel):
    """Everything the dashboard shows."""

    model_config = ConfigDict(frozen=True)

    cards: list[ModuleCard]
    balance: Decimal
    recent_activity: list[Record]


def _newest_first(records: list[Record]) -> list[Record]:
    # Stable sort keeps the store's order for records on the same day
    return sorted(records, key=lambda r: r.date_parts, reverse=True)


def daily_series(records: list[Record]) -> list[DailyPoint]:
    """
    Amounts summed per day of month, in chronological order.

    Days are keyed by the ISO day part ("05"), never a parsed date.

    Every kind is summed as a magnitude; the chart shows volume, not
    balance.
    """
    grouped: dict[str, Decimal] = {}
    for record in sorted(records, key=lambda r: r.date_parts):
        key = record.date.split("-")[2]
        grouped[key] = grouped.get(key, Decimal("0")) + record.amount
    return [DailyPoint(day=day, value=value) for day, value in grouped.items()]


def build_module_month_view(
    module_id: ModuleId,
    month: Month,
    records: list[Record],
    gauge_target: int = 20,
) -> ModuleMonthView:
    """
    Build the module detail view.

    Args:
        module_id: The active module
        month: The selected month
        records: Snapshot of ALL the user's records (every module, every
                 month); goal matching needs the other modules too
        gauge_target: Entries per month that fill the activity gauge
    """
    module = get_module(module_id)
    month_records = filter_month(records, month)
    module_records = _newest_first(
        [r for r in month_records if r.module_id == module.id]
    )

    items = [
        RecordProgress(record=record, match=match_for_record(record, month_records))
        for record in module_records
    ]

    provisions = sum(
        (r.amount for r in month_records if r.module_id == ModuleId.PROJECTION),
        Decimal("0"),
    )

    return ModuleMonthView(
        module=module,
        month=month,
        items=items,
        monthly_income=kind_total(module_records, RecordKind.INCOME),
        monthly_expenses=kind_total(module_records, RecordKind.EXPENSE),
        monthly_provisions=provisions,
        daily_series=daily_series(module_records),
        activity_gauge=min(len(module_records) / gauge_target * 100, 100.0),
    )


def build_dashboard(records: list[Record], recent_limit: int = 5) -> DashboardSummary:
    """Module cards, overall balance and the most recent records."""
    cards = [
        ModuleCard(module=module, total=module_total(module.id, records))
        for module in MODULES
    ]
    return DashboardSummary(
        cards=cards,
        balance=grand_total(records),
        recent_activity=_newest_first(records)[:recent_limit],
    )


def advice_html(advice: AdviceResult, heading: str) -> str:
    """
    Markup for the advice panel.

    The model's text can echo record titles typed by the user, so every
    piece of it is escaped.
    """
    tips = "".join(f"<li>{html.escape(tip)}</li>" for tip in advice.tips)
    return (
        '<div class="advice-box">'
        f"<h4>{html.escape(heading)}</h4>"
        f"<p>{html.escape(advice.summary)}</p>"
        f"<ul>{tips}</ul>"
        "</div>"
    )
