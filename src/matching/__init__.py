"""Issue matching and checklist comparison core."""

from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig, load_matching_config
from .operations import diff_checklist, find_duplicates, match_issue
from .types import (
    ChecklistDiffResult,
    DuplicateReport,
    IssueRecord,
    MatchResult,
    ScoredIssue,
)

__all__ = [
    "DEFAULT_MATCHING_CONFIG",
    "MatchingConfig",
    "load_matching_config",
    "match_issue",
    "find_duplicates",
    "diff_checklist",
    "IssueRecord",
    "MatchResult",
    "ScoredIssue",
    "DuplicateReport",
    "ChecklistDiffResult",
]
