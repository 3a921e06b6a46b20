"""Goal/provision reconciliation package."""

from finfamily.reconciliation.engine import (
    filter_month,
    forward_match,
    grand_total,
    kind_total,
    match_for_record,
    module_total,
    normalize_title,
    reverse_match,
    signed_total,
)

__all__ = [
    "filter_month",
    "forward_match",
    "grand_total",
    "kind_total",
    "match_for_record",
    "module_total",
    "normalize_title",
    "reverse_match",
    "signed_total",
]
