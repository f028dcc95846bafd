"""Deterministic rendering of the escalation hand-off prompt."""

from collections.abc import Sequence
from typing import Any

from ..matching.normalize import coerce_text, normalize_whitespace
from ..matching.types import IssueRecord, issue_to_dict

_MAX_FIELD_LEN = 400

ESCALATION_INSTRUCTIONS = (
    "Using the matched issue above, give step-by-step troubleshooting guidance. "
    "Start with the missing checks, then confirm the root cause and apply the solution."
)


def _sanitize_field(value: Any, *, max_len: int = _MAX_FIELD_LEN) -> str:
    cleaned = normalize_whitespace(coerce_text(value))
    if len(cleaned) <= max_len:
        return cleaned
    return cleaned[: max_len - 3].rstrip() + "..."


def _bullets(items: Sequence[str]) -> list[str]:
    lines = [f"- {_sanitize_field(item)}" for item in items if _sanitize_field(item)]
    return lines or ["- (none)"]


def _block(value: Any) -> list[str]:
    lines = [line.rstrip() for line in coerce_text(value).strip().splitlines()]
    return lines or ["(none)"]


def render_escalation_prompt(
    query: str,
    issue: IssueRecord | None,
    claimed_items: Sequence[str],
    missing_items: Sequence[str],
) -> str:
    """Render the hand-off prompt with a fixed section contract."""
    parts = ["## User Issue", _sanitize_field(query) or "(none)", ""]

    parts.append("## Matched Issue")
    if issue is None:
        parts.append("- (no catalogued issue matched)")
    else:
        parts.extend(
            [
                f"- Issue: {_sanitize_field(issue.description) or 'Untitled issue'}",
                f"- Application: {_sanitize_field(issue.application) or '-'}",
                f"- Root cause: {_sanitize_field(issue.root_cause) or '-'}",
            ]
        )
    parts.append("")

    parts.append("## Standard Checklist")
    parts.extend(_bullets(issue.checklist_items if issue else ()))
    parts.append("")

    parts.append("## Checks Already Performed")
    parts.extend(_bullets(claimed_items))
    parts.append("")

    parts.append("## Missing Checks")
    parts.extend(_bullets(missing_items))
    parts.append("")

    parts.append("## Known Solution")
    parts.extend(_block(issue.solution if issue else ""))
    parts.append("")

    parts.append("## Request")
    parts.append(ESCALATION_INSTRUCTIONS)
    return "\n".join(parts)


def build_escalation_payload(
    query: str,
    issue: IssueRecord | None,
    claimed_items: Sequence[str],
    missing_items: Sequence[str],
) -> dict[str, Any]:
    """Request body for an external guidance service.

    Dispatching the payload is left to the caller.
    """
    matched = issue_to_dict(issue)
    if matched is not None:
        matched.pop("id", None)
        matched.pop("createdAt", None)
    return {
        "issue": coerce_text(query),
        "matched": matched,
        "claimedChecks": list(claimed_items),
        "missingChecks": list(missing_items),
        "prompt": render_escalation_prompt(query, issue, claimed_items, missing_items),
    }
