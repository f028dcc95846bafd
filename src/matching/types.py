"""Typed contracts for issue matching."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class IssueRecord:
    """One catalogued troubleshooting entry.

    Treated as an immutable value by the matching core; the catalog adapter
    is responsible for translating stored field names into this shape.
    """

    id: str
    description: str = ""
    application: str = ""
    root_cause: str = ""
    checklist_items: tuple[str, ...] = field(default_factory=tuple)
    solution: str = ""
    created_at: str | None = None


@dataclass(frozen=True)
class MatchResult:
    issue: IssueRecord | None
    score: float

    @property
    def matched(self) -> bool:
        return self.issue is not None


@dataclass(frozen=True)
class ScoredIssue:
    issue: IssueRecord
    score: float


@dataclass(frozen=True)
class DuplicateReport:
    exact: IssueRecord | None
    suggestions: tuple[ScoredIssue, ...]

    @property
    def has_duplicates(self) -> bool:
        return self.exact is not None or bool(self.suggestions)


@dataclass(frozen=True)
class ChecklistDiffResult:
    missing_items: tuple[str, ...]

    @property
    def all_checked(self) -> bool:
        return not self.missing_items


def issue_to_dict(issue: IssueRecord | None) -> dict[str, Any] | None:
    """Serialize an issue using the catalog's camelCase field names."""
    if issue is None:
        return None
    return {
        "id": issue.id,
        "issueDescription": issue.description,
        "application": issue.application,
        "rootCause": issue.root_cause,
        "checklistItems": list(issue.checklist_items),
        "solution": issue.solution,
        "createdAt": issue.created_at,
    }
