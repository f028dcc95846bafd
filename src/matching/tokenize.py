"""Deterministic tokenization of normalized text."""

from .config import DEFAULT_MATCHING_CONFIG
from .normalize import normalize_loose


def tokenize(
    text: str | None,
    min_length: int = DEFAULT_MATCHING_CONFIG.min_token_length,
) -> tuple[str, ...]:
    """Split loose-normalized text into tokens of at least ``min_length``."""
    normalized = normalize_loose(text)
    if not normalized:
        return tuple()
    return tuple(
        token for token in normalized.split(" ") if token and len(token) >= min_length
    )


def token_set(
    text: str | None,
    min_length: int = DEFAULT_MATCHING_CONFIG.min_token_length,
) -> frozenset[str]:
    """Tokenize and collapse duplicates."""
    return frozenset(tokenize(text, min_length))
