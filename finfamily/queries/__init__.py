"""Read models for the screens."""

from finfamily.queries.views import (
    DailyPoint,
    DashboardSummary,
    ModuleCard,
    ModuleMonthView,
    RecordProgress,
    advice_html,
    build_dashboard,
    build_module_month_view,
    daily_series,
)

__all__ = [
    "DailyPoint",
    "DashboardSummary",
    "ModuleCard",
    "ModuleMonthView",
    "RecordProgress",
    "advice_html",
    "build_dashboard",
    "build_module_month_view",
    "daily_series",
]
