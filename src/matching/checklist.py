"""Checklist differencing: which standard checks has the user not covered."""

from collections.abc import Sequence
import re

from .config import DEFAULT_MATCHING_CONFIG, MatchingConfig
from .normalize import normalize_light, normalize_loose, normalize_whitespace
from .scoring import token_coverage
from .tokenize import token_set
from .types import ChecklistDiffResult

_BULLET_RE = re.compile(r"^(?:[-*•]+\s*|\[[ xX]?\]\s*)+")


def split_claimed_text(text: str | None) -> list[str]:
    """Split free text into trimmed, non-empty lines without bullet markers."""
    if not isinstance(text, str):
        return []

    items: list[str] = []
    for line in text.splitlines():
        cleaned = normalize_whitespace(_BULLET_RE.sub("", line.strip()))
        if cleaned:
            items.append(cleaned)
    return items


def _item_text(item: object) -> str:
    if item is None:
        return ""
    return item if isinstance(item, str) else str(item)


def is_covered(
    item: str,
    claimed_loose: str,
    claimed_tokens: frozenset[str],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
    *,
    claimed_light: str = "",
) -> bool:
    """Loose containment: verbatim substring, else token coverage ratio.

    Items with nothing alphanumeric left after loose normalization (symbols,
    non-Latin scripts) fall back to a light-normalized substring test.
    """
    item_loose = normalize_loose(item)
    if not item_loose:
        item_light = normalize_light(item)
        return bool(item_light) and item_light in claimed_light
    if item_loose in claimed_loose:
        return True
    return token_coverage(item, claimed_tokens, config) >= config.coverage_threshold


def compute_missing(
    standard_items: Sequence[str],
    user_claimed_items: Sequence[str],
    config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
) -> ChecklistDiffResult:
    """Return standard items not covered by the user's claimed checks.

    The claimed items are concatenated and compared as one body of text, so
    a single claimed line may cover several standard items. Original order of
    ``standard_items`` is preserved; whitespace-only items are never reported.
    """
    claimed_text = "\n".join(_item_text(item) for item in user_claimed_items or ())
    claimed_loose = normalize_loose(claimed_text)
    claimed_light = normalize_light(claimed_text)
    claimed_tokens = token_set(claimed_text, config.min_token_length)

    missing: list[str] = []
    for raw_item in standard_items or ():
        item = _item_text(raw_item)
        if not item.strip():
            continue
        if not is_covered(
            item, claimed_loose, claimed_tokens, config, claimed_light=claimed_light
        ):
            missing.append(item)
    return ChecklistDiffResult(missing_items=tuple(missing))
