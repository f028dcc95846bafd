"""Deterministic similarity scoring between queries and issue records."""

import re
from typing import Any

from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .normalize import coerce_text, normalize_light, normalize_loose
from .tokenize import token_set
from .types import IssueRecord

_DIGIT_RE = re.compile(r"\d")


def checklist_text(items: Any) -> str:
    """Join checklist entries into one string, skipping unusable entries."""
    if isinstance(items, str):
        return items
    if not isinstance(items, (list, tuple)):
        return ""
    parts: list[str] = []
    for item in items:
        if item is None:
            continue
        text = item if isinstance(item, str) else str(item)
        if text.strip():
            parts.append(text)
    return " ".join(parts)


def issue_fields(issue: IssueRecord) -> dict[str, str]:
    """Raw text per scored field, with missing values coerced to ''."""
    return {
        "description": coerce_text(issue.description),
        "application": coerce_text(issue.application),
        "root_cause": coerce_text(issue.root_cause),
        "checklist": checklist_text(issue.checklist_items),
    }


def jaccard_score(
    left: str | None,
    right: str | None,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> float:
    """Intersection-over-union of the two token sets, in [0, 1]."""
    left_tokens = token_set(left, config.min_token_length)
    right_tokens = token_set(right, config.min_token_length)
    if not left_tokens or not right_tokens:
        return 0.0

    union = left_tokens | right_tokens
    return len(left_tokens & right_tokens) / len(union)


def token_coverage(
    item: str | None,
    haystack_tokens: frozenset[str],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> float:
    """Fraction of the item's distinct tokens present in ``haystack_tokens``."""
    item_tokens = token_set(item, config.min_token_length)
    if not item_tokens:
        return 0.0
    return len(item_tokens & haystack_tokens) / len(item_tokens)


def _contains_words(haystack: str, needle: str) -> bool:
    return f" {needle} " in f" {haystack} "


def _contains_phrase(haystack: str, needle: str) -> bool:
    """Substring test that refuses to split an alphanumeric run."""
    pattern = rf"(?<![a-z0-9]){re.escape(needle)}(?![a-z0-9])"
    return re.search(pattern, haystack) is not None


def _has_signal(query_light: str, config: MatchingConfig) -> bool:
    """A query needs a real token or a code with a digit to earn phrase points."""
    return bool(token_set(query_light, config.min_token_length)) or bool(
        _DIGIT_RE.search(query_light)
    )


def _phrase_score(
    query_light: str,
    query_loose: str,
    fields: dict[str, str],
    config: MatchingConfig,
) -> float:
    weights = {
        "description": config.description_weight,
        "application": config.application_weight,
        "root_cause": config.root_cause_weight,
        "checklist": config.checklist_weight,
    }

    score = 0.0
    has_signal = _has_signal(query_light, config)
    for name, raw in fields.items():
        field_light = normalize_light(raw)
        if not field_light:
            continue
        if has_signal and _contains_phrase(field_light, query_light):
            score += weights[name]
            continue

        # Short fields such as an application name may sit inside a longer query.
        field_loose = normalize_loose(raw)
        if (
            field_loose
            and len(field_loose) <= config.short_field_max_len
            and len(field_loose) < len(query_loose)
            and _contains_words(query_loose, field_loose)
        ):
            score += weights[name]

    # Short codes like "409" still count when typed alone.
    if has_signal and len(query_light) <= config.short_query_max_len:
        description = normalize_light(fields["description"])
        checklist = normalize_light(fields["checklist"])
        if _contains_phrase(description, query_light) or _contains_phrase(
            checklist, query_light
        ):
            score += config.short_query_bonus

    return score


def _token_score(
    query: str,
    fields: dict[str, str],
    config: MatchingConfig,
) -> float:
    query_tokens = token_set(query, config.min_token_length)
    if not query_tokens:
        return 0.0

    min_length = config.min_token_length
    weighted_fields = [
        (config.description_token_weight, token_set(fields["description"], min_length)),
        (config.application_token_weight, token_set(fields["application"], min_length)),
        (config.root_cause_token_weight, token_set(fields["root_cause"], min_length)),
        (config.checklist_token_weight, token_set(fields["checklist"], min_length)),
    ]

    score = 0.0
    for token in sorted(query_tokens):
        score += max(
            (weight for weight, tokens in weighted_fields if token in tokens),
            default=0.0,
        )
    return score


def weighted_substring_score(
    query: str | None,
    issue: IssueRecord,
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> float:
    """Field-weighted containment score of ``query`` against ``issue``.

    Sums three kinds of evidence:

    - phrase hits: the light-normalized query found at word boundaries inside
      a field (or a short field found as whole words inside the query),
      weighted per field. Queries without a token or a digit earn no phrase hits
    - a short-query bonus for codes like ``409`` found in the description or
      checklist
    - token hits: each distinct query token present in a field, counted once
      at the weight of the strongest field containing it

    Returns 0.0 for a blank query or a record without usable text.
    """
    query_light = normalize_light(query)
    if not query_light:
        return 0.0

    fields = issue_fields(issue)
    if not any(value.strip() for value in fields.values()):
        return 0.0

    query_loose = normalize_loose(query)
    return _phrase_score(query_light, query_loose, fields, config) + _token_score(
        query_light, fields, config
    )
