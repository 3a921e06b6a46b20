"""
Data Models Package

This package contains all Pydantic models used in FinFamily.
All data flowing through the system must conform to these schemas.
"""

from finfamily.models.record import (
    MODULES,
    AdviceResult,
    ModuleConfig,
    ModuleIcon,
    ModuleId,
    ModuleStyle,
    Month,
    ProjectionMatch,
    Record,
    RecordDraft,
    RecordKind,
    RiskLevel,
    get_module,
    split_iso_date,
)
from finfamily.models.user import User
from finfamily.models.form import (
    FormFields,
    ValidationIssue,
    ValidationResult,
)
from finfamily.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "MODULES",
    "AdviceResult",
    "ModuleConfig",
    "ModuleIcon",
    "ModuleId",
    "ModuleStyle",
    "Month",
    "ProjectionMatch",
    "Record",
    "RecordDraft",
    "RecordKind",
    "RiskLevel",
    "get_module",
    "split_iso_date",
    # Identity
    "User",
    # Form models
    "FormFields",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
