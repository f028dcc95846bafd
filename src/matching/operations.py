"""Entry points used by the CLI, the MCP server and any other caller."""

from collections.abc import Sequence
from typing import Any

from .checklist import compute_missing, split_claimed_text
from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .matcher import find_best_match, find_similar, rank_issues
from .normalize import normalize_whitespace
from .types import DuplicateReport, IssueRecord, MatchResult, issue_to_dict


def match_issue(
    query: str | None,
    catalog: Sequence[IssueRecord],
    *,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> MatchResult:
    return find_best_match(query, catalog, config)


def find_duplicates(
    description: str | None,
    catalog: Sequence[IssueRecord],
    *,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> DuplicateReport:
    return find_similar(description, catalog, config)


def diff_checklist(
    standard_items: Sequence[str],
    claimed_text: str | None,
    *,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> list[str]:
    """Split raw claimed-checks text into lines and return the missing items."""
    claimed_items = split_claimed_text(claimed_text)
    return list(compute_missing(standard_items, claimed_items, config).missing_items)


def match_issue_structured(
    query: str | None,
    catalog: Sequence[IssueRecord],
    *,
    alternatives: int = 0,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> dict[str, Any]:
    """Run :func:`match_issue` and return a JSON-ready payload."""
    result = match_issue(query, catalog, config=config)
    payload: dict[str, Any] = {
        "success": True,
        "query": normalize_whitespace(query),
        "matched": result.matched,
        "score": result.score,
        "min_score": config.min_match_score,
        "issue": issue_to_dict(result.issue),
    }
    if alternatives > 0:
        payload["candidates"] = [
            {"score": hit.score, "issue": issue_to_dict(hit.issue)}
            for hit in rank_issues(query, catalog, limit=alternatives, config=config)
        ]
    return payload


def find_duplicates_structured(
    description: str | None,
    catalog: Sequence[IssueRecord],
    *,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> dict[str, Any]:
    report = find_duplicates(description, catalog, config=config)
    return {
        "success": True,
        "description": normalize_whitespace(description),
        "exact": issue_to_dict(report.exact),
        "suggestions": [
            {"score": hit.score, "issue": issue_to_dict(hit.issue)}
            for hit in report.suggestions
        ],
    }


def diff_checklist_structured(
    standard_items: Sequence[str],
    claimed_text: str | None,
    *,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> dict[str, Any]:
    missing = diff_checklist(standard_items, claimed_text, config=config)
    return {
        "success": True,
        "claimed_items": split_claimed_text(claimed_text),
        "missing_items": missing,
        "all_checked": not missing,
    }
