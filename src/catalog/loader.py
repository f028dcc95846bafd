"""Catalog file loading and field-name translation into IssueRecord."""

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ..matching.checklist import split_claimed_text
from ..matching.normalize import coerce_text
from ..matching.types import IssueRecord

log = logging.getLogger(__name__)

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "issue_id", "docId"),
    "description": ("issueDescription", "description", "issue", "title"),
    "application": ("application", "app"),
    "root_cause": ("rootCause", "root_cause"),
    "checklist_items": ("checklistItems", "checklist_items", "checklist", "checklists"),
    "solution": ("solution",),
    "created_at": ("createdAt", "created_at"),
}

SUPPORTED_SUFFIXES = {".json", ".yaml", ".yml"}


class CatalogError(ValueError):
    """Raised when a catalog file cannot be read as a list of issues."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid catalog {self.path}: {reason}")


def _first(raw: dict[str, Any], field_name: str) -> Any:
    for key in _FIELD_ALIASES[field_name]:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _checklist(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(split_claimed_text(value))
    if not isinstance(value, (list, tuple)):
        return tuple()
    items: list[str] = []
    for entry in value:
        if entry is None:
            continue
        text = entry if isinstance(entry, str) else str(entry)
        text = text.strip()
        if text:
            items.append(text)
    return tuple(items)


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _timestamp(value: Any) -> str | None:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def issue_from_mapping(raw: dict[str, Any], fallback_id: str = "") -> IssueRecord:
    """Translate a stored issue document into an :class:`IssueRecord`."""
    issue_id = _first(raw, "id")
    return IssueRecord(
        id=str(issue_id).strip() if issue_id is not None else fallback_id,
        description=coerce_text(_first(raw, "description")).strip(),
        application=coerce_text(_first(raw, "application")).strip(),
        root_cause=coerce_text(_first(raw, "root_cause")).strip(),
        checklist_items=_checklist(_first(raw, "checklist_items")),
        solution=coerce_text(_first(raw, "solution")).strip(),
        created_at=_timestamp(_first(raw, "created_at")),
    )


def _created_sort_key(issue: IssueRecord) -> tuple[int, datetime, str]:
    raw = issue.created_at or ""
    text = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return 0, _OLDEST, raw
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return 1, parsed, ""


def sort_newest_first(issues: list[IssueRecord]) -> list[IssueRecord]:
    """Order by ``created_at`` descending; undated records keep file order last.

    Timestamps are compared as instants, so offsets are honoured. Naive values
    are taken as UTC. Dated values that do not parse sort after parseable
    ones, by their raw text.
    """
    dated = [issue for issue in issues if issue.created_at]
    undated = [issue for issue in issues if not issue.created_at]
    dated = sorted(dated, key=_created_sort_key, reverse=True)
    return dated + undated


def parse_catalog(data: Any, source: str | Path = "<memory>") -> list[IssueRecord]:
    """Convert decoded JSON/YAML data into ordered issue records."""
    if isinstance(data, dict):
        data = data.get("issues", [])
    if data is None:
        return []
    if not isinstance(data, list):
        raise CatalogError(source, "expected a list of issues or an 'issues' key")

    issues: list[IssueRecord] = []
    for index, entry in enumerate(data):
        if not isinstance(entry, dict):
            log.warning(f"Skipping catalog entry {index} in {source}: not a mapping")
            continue
        issues.append(issue_from_mapping(entry, fallback_id=f"issue-{index + 1}"))

    return sort_newest_first(issues)


def load_catalog(path: str | Path) -> list[IssueRecord]:
    """Read a JSON or YAML catalog file.

    The file holds either a list of issue documents or a mapping with an
    ``issues`` list.
    """
    catalog_path = Path(path)
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {catalog_path}")

    suffix = catalog_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise CatalogError(catalog_path, f"unsupported file type '{suffix}'")

    text = catalog_path.read_text(encoding="utf-8")
    try:
        if suffix == ".json":
            data = json.loads(text) if text.strip() else []
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise CatalogError(catalog_path, str(exc)) from exc

    issues = parse_catalog(data, source=catalog_path)
    log.info(f"Loaded {len(issues)} issue(s) from {catalog_path}")
    return issues
