"""Issue matching, ranking and near-duplicate detection over a catalog."""

from collections.abc import Sequence
import logging

from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .normalize import coerce_text, normalize_light, normalize_loose
from .scoring import checklist_text, jaccard_score, weighted_substring_score
from .types import DuplicateReport, IssueRecord, MatchResult, ScoredIssue

log = logging.getLogger(__name__)

NO_MATCH = MatchResult(issue=None, score=0.0)


def _require_catalog(catalog: Sequence[IssueRecord]) -> Sequence[IssueRecord]:
    if isinstance(catalog, (str, bytes)) or not isinstance(catalog, Sequence):
        raise TypeError(
            f"catalog must be a sequence of IssueRecord, got {type(catalog).__name__}"
        )
    return catalog


def find_best_match(
    query: str | None,
    catalog: Sequence[IssueRecord],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> MatchResult:
    """Return the highest scoring record if it reaches ``min_match_score``.

    Ties keep the record that appears first in ``catalog``.
    """
    records = _require_catalog(catalog)
    if not normalize_light(query) or not records:
        return NO_MATCH

    best: IssueRecord | None = None
    best_score = 0.0
    for issue in records:
        score = weighted_substring_score(query, issue, config)
        if score > best_score:
            best = issue
            best_score = score

    if best is None or best_score < config.min_match_score:
        log.debug(
            f"No match for {normalize_light(query)!r}: best score {best_score:.2f} "
            f"< {config.min_match_score:.2f}"
        )
        return NO_MATCH

    log.debug(f"Matched {best.id} with score {best_score:.2f}")
    return MatchResult(issue=best, score=best_score)


def rank_issues(
    query: str | None,
    catalog: Sequence[IssueRecord],
    *,
    limit: int = 5,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> list[ScoredIssue]:
    """Score every record and return positive hits, best first.

    Unlike :func:`find_best_match` this applies no threshold; it is meant for
    showing runner-up candidates next to the chosen match.
    """
    records = _require_catalog(catalog)
    if limit <= 0 or not normalize_light(query):
        return []

    scored = [
        ScoredIssue(issue=issue, score=weighted_substring_score(query, issue, config))
        for issue in records
    ]
    # sorted() is stable, so catalog order breaks ties.
    ranked = sorted(
        (hit for hit in scored if hit.score > 0.0),
        key=lambda hit: -hit.score,
    )
    return ranked[:limit]


def find_similar(
    candidate_description: str | None,
    catalog: Sequence[IssueRecord],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> DuplicateReport:
    """Detect existing records that duplicate a new issue description.

    An exact loose-normalized description match wins outright and suppresses
    suggestions. Otherwise records whose description has Jaccard overlap of
    at least ``duplicate_threshold`` are returned, best first, capped at
    ``max_suggestions``.
    """
    records = _require_catalog(catalog)
    candidate = normalize_loose(candidate_description)
    if not candidate or not records:
        return DuplicateReport(exact=None, suggestions=tuple())

    for issue in records:
        if normalize_loose(issue.description) == candidate:
            log.info(f"Exact duplicate of {issue.id} detected")
            return DuplicateReport(exact=issue, suggestions=tuple())

    scored: list[ScoredIssue] = []
    for issue in records:
        score = jaccard_score(candidate_description, coerce_text(issue.description), config)
        if score >= config.duplicate_threshold:
            scored.append(ScoredIssue(issue=issue, score=score))

    ranked = sorted(scored, key=lambda hit: -hit.score)
    suggestions = tuple(ranked[: max(0, config.max_suggestions)])
    if suggestions:
        log.info(
            f"{len(suggestions)} near-duplicate(s) found; best {suggestions[0].issue.id} "
            f"at {suggestions[0].score:.2f}"
        )
    return DuplicateReport(exact=None, suggestions=suggestions)


def filter_catalog(
    query: str | None,
    catalog: Sequence[IssueRecord],
) -> list[IssueRecord]:
    """Plain search: records whose combined text contains the query."""
    records = _require_catalog(catalog)
    needle = normalize_light(query)
    if not needle:
        return list(records)

    hits: list[IssueRecord] = []
    for issue in records:
        haystack = normalize_light(
            " ".join(
                [
                    coerce_text(issue.description),
                    coerce_text(issue.application),
                    coerce_text(issue.root_cause),
                    checklist_text(issue.checklist_items),
                ]
            )
        )
        if needle in haystack:
            hits.append(issue)
    return hits
