"""
Core Data Models for FinFamily

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging
4. Stay immutable once built (edits produce new objects)

DESIGN DECISION: Dates are kept as ISO "YYYY-MM-DD" strings and compared
as plain (year, month, day) integer triples. They are never pushed through
a timezone-aware object, so a record can't drift into the neighbouring day
or month depending on where the app runs.
"""

from datetime import date as calendar_date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ModuleId(str, Enum):
    """
    The four financial modules records are grouped under.

    PROJECTION is special: its records are goals, matched by title against
    the realized records of the other three modules.
    """
    BUDGET = "budget"
    TRAVEL = "travel"
    INVESTMENT = "investment"
    PROJECTION = "projection"


class RecordKind(str, Enum):
    """Direction of a record. Amounts are always stored as magnitudes."""
    INCOME = "income"
    EXPENSE = "expense"
    ASSET = "asset"  # For investments


class ModuleIcon(str, Enum):
    """Icons available to module cards."""
    WALLET = "wallet"
    PLANE = "plane"
    TRENDING_UP = "trending_up"
    LINE_CHART = "line_chart"

    @property
    def emoji(self) -> str:
        return _ICON_EMOJI[self]


class ModuleStyle(str, Enum):
    """
    Colour descriptor for a module.

    DESIGN DECISION: Each module picks one of these at configuration time.
    Renderers read the hex values from here instead of building style keys
    out of strings, so a typo can't silently produce an unstyled card.
    """
    BLUE = "blue"
    EMERALD = "emerald"
    VIOLET = "violet"
    AMBER = "amber"

    @property
    def hex(self) -> str:
        return _STYLE_HEX[self][0]

    @property
    def light_hex(self) -> str:
        return _STYLE_HEX[self][1]


class RiskLevel(str, Enum):
    """Risk classification returned by the advisor."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


_ICON_EMOJI = {
    ModuleIcon.WALLET: "👛",
    ModuleIcon.PLANE: "✈️",
    ModuleIcon.TRENDING_UP: "📈",
    ModuleIcon.LINE_CHART: "🎯",
}

# (strong, light) pairs
_STYLE_HEX = {
    ModuleStyle.BLUE: ("#3b82f6", "#dbeafe"),
    ModuleStyle.EMERALD: ("#10b981", "#d1fae5"),
    ModuleStyle.VIOLET: ("#8b5cf6", "#ede9fe"),
    ModuleStyle.AMBER: ("#f59e0b", "#fef3c7"),
}


# =============================================================================
# DATES
# =============================================================================

def split_iso_date(value: str) -> tuple[int, int, int]:
    """
    Split an ISO "YYYY-MM-DD" string into integer (year, month, day).

    Raises ValueError if the string isn't a real calendar date.
    """
    parts = value.strip().split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Date must be in YYYY-MM-DD format, got {value!r}")

    year, month, day = (int(p) for p in parts)
    # Naive calendar check only; nothing here is timezone-aware
    calendar_date(year, month, day)
    return year, month, day


PT_BR_MONTHS = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)


class Month(BaseModel):
    """A calendar month, used to filter records and navigate the views."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def of(cls, iso_date: str) -> "Month":
        year, month, _ = split_iso_date(iso_date)
        return cls(year=year, month=month)

    @classmethod
    def current(cls) -> "Month":
        today = calendar_date.today()
        return cls(year=today.year, month=today.month)

    def previous(self) -> "Month":
        if self.month == 1:
            return Month(year=self.year - 1, month=12)
        return Month(year=self.year, month=self.month - 1)

    def next(self) -> "Month":
        if self.month == 12:
            return Month(year=self.year + 1, month=1)
        return Month(year=self.year, month=self.month + 1)

    def contains(self, iso_date: str) -> bool:
        """True if the ISO date's year and month parts equal this month."""
        year, month, _ = split_iso_date(iso_date)
        return year == self.year and month == self.month

    @property
    def label(self) -> str:
        """Localized label, e.g. 'março de 2024'."""
        return f"{PT_BR_MONTHS[self.month - 1]} de {self.year}"


# =============================================================================
# RECORDS
# =============================================================================

class RecordDraft(BaseModel):
    """
    A record that has not been stored yet.

    The store assigns the id when the draft is created.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    module_id: ModuleId
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the money was for (also the goal-matching key)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Non-negative magnitude; direction comes from kind"
    )
    date: str = Field(
        ...,
        description="ISO calendar date, YYYY-MM-DD"
    )
    kind: RecordKind
    category: Optional[str] = Field(default=None, max_length=100)
    note: Optional[str] = Field(default=None, max_length=1000)

    @field_validator('date')
    @classmethod
    def validate_date(cls, v: str) -> str:
        year, month, day = split_iso_date(v)
        return f"{year:04d}-{month:02d}-{day:02d}"

    @property
    def date_parts(self) -> tuple[int, int, int]:
        return split_iso_date(self.date)

    @property
    def day(self) -> int:
        return self.date_parts[2]


class Record(RecordDraft):
    """
    A stored financial record.

    CRITICAL: `id` is unique and stable once assigned. Editing a record
    produces a new Record with the same id.
    """

    id: str = Field(..., min_length=1)

    @classmethod
    def from_draft(cls, draft: RecordDraft, record_id: str) -> "Record":
        return cls(id=record_id, **draft.model_dump())

    def with_changes(self, **changes) -> "Record":
        """Return a validated copy with some fields replaced."""
        data = self.model_dump()
        data.update(changes)
        data["id"] = self.id
        return Record(**data)

    def to_prompt_dict(self) -> dict:
        """Plain JSON-friendly view of the record for the advisor prompt."""
        return {
            "id": self.id,
            "moduleId": self.module_id.value,
            "title": self.title,
            "amount": float(self.amount),
            "date": self.date,
            "type": self.kind.value,
            "category": self.category,
            "note": self.note,
        }


# =============================================================================
# MODULE CONFIGURATION
# =============================================================================

class ModuleConfig(BaseModel):
    """Static description of one module. Defined once, never mutated."""

    model_config = ConfigDict(frozen=True)

    id: ModuleId
    title: str
    description: str
    icon: ModuleIcon
    style: ModuleStyle


MODULES: tuple[ModuleConfig, ...] = (
    ModuleConfig(
        id=ModuleId.BUDGET,
        title="Orçamento Mensal",
        description="Controle de receitas e despesas domésticas.",
        icon=ModuleIcon.WALLET,
        style=ModuleStyle.BLUE,
    ),
    ModuleConfig(
        id=ModuleId.TRAVEL,
        title="Viagens",
        description="Planejamento e custos de férias.",
        icon=ModuleIcon.PLANE,
        style=ModuleStyle.EMERALD,
    ),
    ModuleConfig(
        id=ModuleId.INVESTMENT,
        title="Investimentos",
        description="Acompanhamento de patrimônio e ativos.",
        icon=ModuleIcon.TRENDING_UP,
        style=ModuleStyle.VIOLET,
    ),
    ModuleConfig(
        id=ModuleId.PROJECTION,
        title="Projeções",
        description="Metas futuras e planejamento a longo prazo.",
        icon=ModuleIcon.LINE_CHART,
        style=ModuleStyle.AMBER,
    ),
)

_MODULES_BY_ID = {module.id: module for module in MODULES}


def get_module(module_id: ModuleId) -> ModuleConfig:
    """Look up a module's configuration."""
    return _MODULES_BY_ID[ModuleId(module_id)]


# =============================================================================
# RECONCILIATION RESULTS
# =============================================================================

class ProjectionMatch(BaseModel):
    """
    Goal-vs-actual progress for one record.

    Derived per query, never stored.
    """

    model_config = ConfigDict(frozen=True)

    goal_amount: Decimal
    current_total: Decimal
    is_over: bool

    @property
    def percentage(self) -> float:
        """
        Progress clamped to [0, 100] for a progress bar.

        A zero goal has no meaningful progress and reports 0.
        """
        if self.goal_amount == 0:
            return 0.0
        return min(float(self.current_total / self.goal_amount * 100), 100.0)

    @property
    def raw_percentage(self) -> int:
        """Unclamped, rounded progress for labels (can exceed 100)."""
        if self.goal_amount == 0:
            return 0
        ratio = self.current_total / self.goal_amount * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def remaining(self) -> Optional[Decimal]:
        """Goal minus realized; negative when over. None for a zero goal."""
        if self.goal_amount == 0:
            return None
        return self.goal_amount - self.current_total

    @property
    def excess(self) -> Decimal:
        return max(self.current_total - self.goal_amount, Decimal("0"))


# =============================================================================
# ADVICE
# =============================================================================

class AdviceResult(BaseModel):
    """
    Natural-language analysis of a module's month.

    Field names follow the JSON the model is asked to return
    ("riskLevel"), but Python code can use risk_level.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    summary: str = Field(..., min_length=1)
    tips: list[str] = Field(..., min_length=3, max_length=3)
    risk_level: RiskLevel = Field(..., alias="riskLevel")
