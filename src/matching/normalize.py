"""Text canonicalization for issue comparison.

Two strengths are built on the same whitespace-collapsing base:

- light: lowercase + collapsed whitespace, punctuation kept. Used for
  substring checks where error codes like ``0x80070005`` or ``AADSTS50076``
  must survive intact.
- loose: light plus removal of everything outside ``[a-z0-9]`` and
  whitespace. Used for token overlap.
"""

import re
from typing import Any

_WS_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def coerce_text(value: Any) -> str:
    """Return ``value`` if it is a string, otherwise an empty string."""
    if isinstance(value, str):
        return value
    return ""


def normalize_whitespace(text: str | None) -> str:
    """Collapse whitespace to single spaces."""
    if not isinstance(text, str):
        return ""
    return _WS_RE.sub(" ", text).strip()


def normalize_light(text: str | None) -> str:
    """Lowercase and collapse whitespace, keeping punctuation."""
    return normalize_whitespace(text).lower()


def normalize_loose(text: str | None) -> str:
    """Lowercase, strip non-alphanumerics and collapse whitespace."""
    lowered = coerce_text(text).lower()
    return normalize_whitespace(_NON_ALNUM_RE.sub("", lowered))


def normalize(text: str | None) -> str:
    """Default normalization used for token comparisons (loose)."""
    return normalize_loose(text)
