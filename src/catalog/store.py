"""JSON-file issue store used by the CLI to persist new catalog entries."""

from __future__ import annotations

from datetime import datetime, timezone
import hashlib
import json
import logging
from pathlib import Path
from typing import Any

from ..matching.types import IssueRecord, issue_to_dict
from .loader import issue_from_mapping, parse_catalog

log = logging.getLogger(__name__)

_EDITABLE_FIELDS = {
    "issueDescription",
    "application",
    "rootCause",
    "checklistItems",
    "solution",
}


def _now_utc() -> str:
    return datetime.now(timezone.utc).isoformat()


def _issue_id(description: str, created_at: str) -> str:
    digest = hashlib.sha256(f"{created_at}\n{description}".encode("utf-8")).hexdigest()
    stamp = created_at.replace("-", "").replace(":", "").replace("T", "_")[:15]
    return f"{stamp}_{digest[:8]}"


class IssueStore:
    """Catalog persisted as a JSON list of issue documents."""

    def __init__(self, path: str | Path = "data/issues.json"):
        self.path = Path(path)

    def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return []
        data = json.loads(text)
        if isinstance(data, dict):
            data = data.get("issues", [])
        return [entry for entry in data if isinstance(entry, dict)]

    def _write(self, documents: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(documents, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )

    def list(self) -> list[IssueRecord]:
        """All issues, newest first."""
        return parse_catalog(self._read(), source=self.path)

    def get(self, issue_id: str) -> IssueRecord | None:
        for issue in self.list():
            if issue.id == issue_id:
                return issue
        return None

    def add(
        self,
        description: str,
        *,
        application: str = "",
        root_cause: str = "",
        checklist_items: list[str] | tuple[str, ...] = (),
        solution: str = "",
    ) -> IssueRecord:
        description = description.strip()
        if not description:
            raise ValueError("Issue description is required")

        created_at = _now_utc()
        document = issue_to_dict(
            IssueRecord(
                id=_issue_id(description, created_at),
                description=description,
                application=application.strip(),
                root_cause=root_cause.strip(),
                checklist_items=tuple(
                    item.strip() for item in checklist_items if item and item.strip()
                ),
                solution=solution.strip(),
                created_at=created_at,
            )
        )

        documents = self._read()
        documents.append(document)
        self._write(documents)
        log.info(f"Saved issue {document['id']} to {self.path}")
        return issue_from_mapping(document)

    def update(self, issue_id: str, fields: dict[str, Any]) -> IssueRecord | None:
        """Merge editable fields into an existing issue; unknown keys are ignored."""
        documents = self._read()
        for document in documents:
            if str(document.get("id")) != issue_id:
                continue
            for key, value in fields.items():
                if key in _EDITABLE_FIELDS:
                    document[key] = value
                else:
                    log.warning(f"Ignoring non-editable field {key} for {issue_id}")
            document["updatedAt"] = _now_utc()
            self._write(documents)
            return issue_from_mapping(document)
        return None
