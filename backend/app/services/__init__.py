"""Internal application services."""

from .validation import validate_match_score
from .ledger import (
    apply_match_result,
    enroll_player,
    get_ledger_entry,
    list_ledger_entries,
    promote_category,
)
from .matches import create_match, validate_match, list_matches, get_match

__all__ = [
    "validate_match_score",
    "apply_match_result",
    "enroll_player",
    "get_ledger_entry",
    "list_ledger_entries",
    "promote_category",
    "create_match",
    "validate_match",
    "list_matches",
    "get_match",
]
