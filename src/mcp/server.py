"""Issue Matcher MCP Server.

Exposes issue matching, duplicate detection and checklist comparison as MCP
tools. The catalog file is re-read on every call so edits are picked up
without restarting the server.
"""

import os
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from ..catalog.loader import CatalogError, load_catalog
from ..flow.prompt import build_escalation_payload
from ..matching.checklist import compute_missing, split_claimed_text
from ..matching.config import DEFAULT_MATCHING_CONFIG, MatchingConfig, load_matching_config
from ..matching.matcher import filter_catalog
from ..matching import operations
from ..matching.types import IssueRecord, issue_to_dict

mcp = FastMCP(
    "Issue Matcher",
    instructions="""
Troubleshooting catalog lookup.

Use match_issue to find the catalogued issue that best matches a problem description.
Use diff_checklist to see which standard checks the user has not confirmed yet.
Use find_duplicates before adding a new issue to the catalog.
Use escalation_prompt to assemble a hand-off prompt for further guidance.
""",
)

catalog_path: Path | None = None
config: MatchingConfig = DEFAULT_MATCHING_CONFIG


def init_server(
    catalog: str | Path = "data/issues.json",
    matching_config: MatchingConfig = DEFAULT_MATCHING_CONFIG,
):
    """Initialize server with the catalog location and thresholds."""
    global catalog_path, config
    catalog_path = Path(catalog)
    config = matching_config


def _require_catalog() -> list[IssueRecord]:
    """Load the catalog or raise error."""
    if catalog_path is None:
        raise RuntimeError("Server not initialized. Call init_server() first.")
    return load_catalog(catalog_path)


def _catalog_or_error() -> tuple[list[IssueRecord] | None, dict | None]:
    try:
        return _require_catalog(), None
    except (FileNotFoundError, CatalogError) as exc:
        return None, {"success": False, "error": str(exc)}


@mcp.tool()
def match_issue(query: str, alternatives: int = 0) -> dict:
    """Find the catalogued issue that best matches a problem description.

    Args:
        query: Free-text description of the problem (e.g. "409 AD error")
        alternatives: Number of runner-up candidates to include

    Returns:
        Dict with the matched issue (or null) and its score
    """
    catalog, error = _catalog_or_error()
    if error:
        return error
    return operations.match_issue_structured(
        query, catalog, alternatives=max(0, alternatives), config=config
    )


@mcp.tool()
def find_duplicates(description: str) -> dict:
    """Check whether a new issue description duplicates an existing entry.

    Args:
        description: Description of the issue about to be added

    Returns:
        Dict with an exact duplicate (or null) and ranked near-duplicates
    """
    catalog, error = _catalog_or_error()
    if error:
        return error
    return operations.find_duplicates_structured(description, catalog, config=config)


@mcp.tool()
def diff_checklist(
    claimed_text: str,
    issue_id: str | None = None,
    checklist_items: list[str] | None = None,
) -> dict:
    """List standard checks not covered by the user's claimed checks.

    Args:
        claimed_text: Free text, one check per line, of what was already done
        issue_id: Catalog issue whose checklist is the standard
        checklist_items: Explicit standard checklist (used when no issue_id)

    Returns:
        Dict with missing_items in checklist order and all_checked flag
    """
    if issue_id:
        catalog, error = _catalog_or_error()
        if error:
            return error
        issue = next((it for it in catalog if it.id == issue_id), None)
        if issue is None:
            return {"success": False, "error": f"Issue not found: {issue_id}"}
        standard = list(issue.checklist_items)
    elif checklist_items is not None:
        standard = checklist_items
    else:
        return {
            "success": False,
            "error": "Provide either issue_id or checklist_items",
        }

    return operations.diff_checklist_structured(standard, claimed_text, config=config)


@mcp.tool()
def search_issues(query: str = "") -> dict:
    """Search the catalog by plain text across all issue fields.

    Args:
        query: Text to look for; empty returns the whole catalog

    Returns:
        Dict with matching issues, newest first
    """
    catalog, error = _catalog_or_error()
    if error:
        return error
    hits = filter_catalog(query, catalog)
    return {
        "success": True,
        "count": len(hits),
        "issues": [issue_to_dict(issue) for issue in hits],
    }


@mcp.tool()
def escalation_prompt(query: str, claimed_text: str = "") -> dict:
    """Assemble the hand-off prompt for a problem and the checks already done.

    Args:
        query: Free-text description of the problem
        claimed_text: Checks the user already performed, one per line

    Returns:
        Dict with the request payload, including the rendered prompt
    """
    catalog, error = _catalog_or_error()
    if error:
        return error

    result = operations.match_issue(query, catalog, config=config)
    claimed_items = split_claimed_text(claimed_text)
    standard = result.issue.checklist_items if result.issue else ()
    missing = compute_missing(standard, claimed_items, config).missing_items

    return {
        "success": True,
        "matched": result.matched,
        "score": result.score,
        "payload": build_escalation_payload(query, result.issue, claimed_items, missing),
    }


def main():
    """Entry point for the issue-matcher-mcp console script.

    Reads ISSUE_CATALOG, an optional ISSUE_MATCH_CONFIG YAML file and the
    ISSUE_MATCH_* threshold overrides.
    """
    try:
        matching_config = load_matching_config(os.environ.get("ISSUE_MATCH_CONFIG") or None)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(str(exc)) from exc
    init_server(os.environ.get("ISSUE_CATALOG", "data/issues.json"), matching_config)
    mcp.run()
