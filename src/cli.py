"""CLI for issue-matcher."""

import json
import logging
from pathlib import Path

import click

from .catalog.loader import CatalogError, load_catalog
from .catalog.store import IssueStore
from .flow.orchestrator import (
    START,
    FlowStage,
    request_escalation,
    submit_claimed_checks,
    submit_query,
)
from .flow.prompt import build_escalation_payload
from .matching.checklist import split_claimed_text
from .matching.config import MatchingConfig, load_matching_config
from .matching.matcher import filter_catalog, find_similar, rank_issues
from .matching.operations import (
    diff_checklist,
    find_duplicates_structured,
    match_issue,
    match_issue_structured,
)
from .matching.types import IssueRecord

DEFAULT_CATALOG = "data/issues.json"


class _Context:
    def __init__(self, catalog: Path, config: MatchingConfig):
        self.catalog_path = catalog
        self.config = config

    def load(self) -> list[IssueRecord]:
        try:
            return load_catalog(self.catalog_path)
        except (FileNotFoundError, CatalogError) as exc:
            raise SystemExit(str(exc)) from exc


def _echo_json(payload: dict) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _echo_issue(issue: IssueRecord) -> None:
    click.echo(f"Issue:       {issue.description or 'Untitled issue'}")
    click.echo(f"ID:          {issue.id}")
    if issue.application:
        click.echo(f"Application: {issue.application}")
    click.echo(f"Root cause:  {issue.root_cause or '-'}")
    click.echo("Checklist:")
    if issue.checklist_items:
        for item in issue.checklist_items:
            click.echo(f"  - {item}")
    else:
        click.echo("  (no checklist items)")
    if issue.solution:
        click.echo("Solution:")
        for line in issue.solution.splitlines():
            click.echo(f"  {line}")


@click.group()
@click.option(
    "--catalog",
    "-c",
    type=click.Path(path_type=Path),
    default=DEFAULT_CATALOG,
    envvar="ISSUE_CATALOG",
    show_default=True,
    help="Catalog file (JSON or YAML)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML file with matching thresholds",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, catalog: Path, config_path: Path | None, verbose: bool):
    """Issue Matcher - find catalogued issues and missing checklist steps."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_matching_config(config_path)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    ctx.obj = _Context(catalog, config)


@cli.command()
@click.argument("query", type=str)
@click.option("--alternatives", "-n", type=int, default=0, help="Runner-up candidates to show")
@click.option("--json", "as_json", is_flag=True, help="Print JSON payload")
@click.pass_obj
def match(obj: _Context, query: str, alternatives: int, as_json: bool):
    """Find the catalogued issue that best matches QUERY."""
    catalog = obj.load()

    if as_json:
        _echo_json(
            match_issue_structured(
                query, catalog, alternatives=max(0, alternatives), config=obj.config
            )
        )
        return

    result = match_issue(query, catalog, config=obj.config)
    if not result.matched:
        click.echo(
            'No matching issue found. Try adding the system name (e.g. "409 Active Directory").'
        )
    else:
        click.echo(f"Matched [score={result.score:.2f}]\n")
        _echo_issue(result.issue)

    if alternatives > 0:
        ranked = rank_issues(query, catalog, limit=alternatives + 1, config=obj.config)
        others = [hit for hit in ranked if hit.issue is not result.issue][:alternatives]
        if others:
            click.echo("\nOther candidates:")
            for i, hit in enumerate(others, 1):
                click.echo(f"{i}. [{hit.score:.2f}] {hit.issue.description} ({hit.issue.id})")


@cli.command()
@click.argument("description", type=str)
@click.option("--json", "as_json", is_flag=True, help="Print JSON payload")
@click.pass_obj
def duplicates(obj: _Context, description: str, as_json: bool):
    """Check DESCRIPTION against existing issues for duplicates."""
    catalog = obj.load()

    if as_json:
        _echo_json(find_duplicates_structured(description, catalog, config=obj.config))
        return

    report = find_similar(description, catalog, obj.config)
    if report.exact:
        click.echo(f"Exact duplicate: {report.exact.description} ({report.exact.id})")
        return
    if not report.suggestions:
        click.echo("No similar issues found.")
        return

    click.echo("Similar issues:")
    for i, hit in enumerate(report.suggestions, 1):
        click.echo(f"{i}. [{hit.score:.2f}] {hit.issue.description} ({hit.issue.id})")


@cli.command()
@click.argument("issue_id", type=str)
@click.option(
    "--claimed",
    type=str,
    default=None,
    help="Checks already performed, one per line (reads stdin when omitted)",
)
@click.option("--json", "as_json", is_flag=True, help="Print JSON payload")
@click.pass_obj
def diff(obj: _Context, issue_id: str, claimed: str | None, as_json: bool):
    """Show checklist items of ISSUE_ID not covered by the claimed checks."""
    catalog = obj.load()
    issue = next((it for it in catalog if it.id == issue_id), None)
    if issue is None:
        raise SystemExit(f"Issue not found: {issue_id}")

    claimed_text = claimed if claimed is not None else click.get_text_stream("stdin").read()
    missing = diff_checklist(issue.checklist_items, claimed_text, config=obj.config)

    if as_json:
        _echo_json(
            {
                "success": True,
                "issue_id": issue.id,
                "claimed_items": split_claimed_text(claimed_text),
                "missing_items": missing,
                "all_checked": not missing,
            }
        )
        return

    if not missing:
        click.echo("All checklist items have been checked.")
        return

    click.echo(f"Missing checks ({len(missing)}):")
    for item in missing:
        click.echo(f"  - {item}")


@cli.command()
@click.argument("query", type=str, default="")
@click.pass_obj
def search(obj: _Context, query: str):
    """List catalog issues containing QUERY (all issues when empty)."""
    hits = filter_catalog(query, obj.load())
    click.echo(f"Found {len(hits)} issue(s)")
    for issue in hits:
        suffix = f" [{issue.application}]" if issue.application else ""
        click.echo(f"  {issue.id}  {issue.description or 'Untitled issue'}{suffix}")


def _prompt_multiline(message: str) -> str:
    click.echo(f"{message} (finish with an empty line):")
    lines: list[str] = []
    while True:
        line = click.prompt("", default="", show_default=False, prompt_suffix="> ")
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


@cli.command()
@click.option("--query", "-q", type=str, default=None, help="Problem description")
@click.option("--claimed", type=str, default=None, help="Checks already performed")
@click.option("--json", "as_json", is_flag=True, help="Print the escalation payload as JSON")
@click.pass_obj
def troubleshoot(obj: _Context, query: str | None, claimed: str | None, as_json: bool):
    """Guided flow: match an issue, compare checks, build an escalation prompt."""
    catalog = obj.load()

    if query is None:
        query = click.prompt("Describe the issue")

    state = submit_query(START, query, catalog, config=obj.config)
    if state.stage == FlowStage.UNMATCHED:
        click.echo(
            'No matching issue found. Try adding the system name (e.g. "409 Active Directory").'
        )
        return

    click.echo(f"Matched [score={state.match.score:.2f}]\n")
    _echo_issue(state.issue)
    click.echo()

    if claimed is None:
        claimed = _prompt_multiline("Which checks have you already done?")

    state = submit_claimed_checks(state, claimed, config=obj.config)
    if state.stage == FlowStage.COMPLIANCE_CHECKED:
        click.echo("All checklist items have been checked.")
    else:
        click.echo(f"Missing checks ({len(state.missing_items)}):")
        for item in state.missing_items:
            click.echo(f"  - {item}")

    state = request_escalation(state)
    if as_json:
        _echo_json(
            build_escalation_payload(
                state.query, state.issue, state.claimed_items, state.missing_items
            )
        )
    else:
        click.echo("\n" + state.prompt)


@cli.command("add-issue")
@click.option("--description", "-d", required=True, help="Issue description")
@click.option("--application", "-a", default="", help="Owning application")
@click.option("--root-cause", default="", help="Known root cause")
@click.option("--checklist", default="", help="Checklist items, one per line")
@click.option("--solution", default="", help="Solution text")
@click.pass_obj
def add_issue(
    obj: _Context,
    description: str,
    application: str,
    root_cause: str,
    checklist: str,
    solution: str,
):
    """Add an issue to the catalog (JSON catalogs only)."""
    if obj.catalog_path.suffix.lower() != ".json":
        raise SystemExit("add-issue only supports JSON catalogs")

    store = IssueStore(obj.catalog_path)
    try:
        existing = store.list()
    except (json.JSONDecodeError, CatalogError) as exc:
        raise SystemExit(f"Cannot read catalog {obj.catalog_path}: {exc}") from exc

    report = find_similar(description, existing, obj.config)
    if report.exact:
        click.echo(
            f"Warning: an issue with the same description exists ({report.exact.id})",
            err=True,
        )
    for hit in report.suggestions:
        click.echo(
            f"Warning: similar issue [{hit.score:.2f}] {hit.issue.description} ({hit.issue.id})",
            err=True,
        )

    try:
        issue = store.add(
            description,
            application=application,
            root_cause=root_cause,
            checklist_items=split_claimed_text(checklist),
            solution=solution,
        )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    click.echo(f"Saved: {issue.id}")


@cli.command("update-issue")
@click.argument("issue_id", type=str)
@click.option("--description", "-d", default=None, help="New issue description")
@click.option("--application", "-a", default=None, help="New owning application")
@click.option("--root-cause", default=None, help="New root cause")
@click.option("--checklist", default=None, help="Replacement checklist, one item per line")
@click.option("--solution", default=None, help="New solution text")
@click.pass_obj
def update_issue(
    obj: _Context,
    issue_id: str,
    description: str | None,
    application: str | None,
    root_cause: str | None,
    checklist: str | None,
    solution: str | None,
):
    """Edit fields of ISSUE_ID in the catalog (JSON catalogs only)."""
    if obj.catalog_path.suffix.lower() != ".json":
        raise SystemExit("update-issue only supports JSON catalogs")

    store = IssueStore(obj.catalog_path)
    try:
        existing = store.list()
    except (json.JSONDecodeError, CatalogError) as exc:
        raise SystemExit(f"Cannot read catalog {obj.catalog_path}: {exc}") from exc
    if store.get(issue_id) is None:
        raise SystemExit(f"Issue not found: {issue_id}")

    fields: dict[str, object] = {}
    if description is not None:
        if not description.strip():
            raise SystemExit("Issue description is required")
        fields["issueDescription"] = description.strip()
    if application is not None:
        fields["application"] = application.strip()
    if root_cause is not None:
        fields["rootCause"] = root_cause.strip()
    if checklist is not None:
        fields["checklistItems"] = split_claimed_text(checklist)
    if solution is not None:
        fields["solution"] = solution.strip()
    if not fields:
        raise SystemExit("Nothing to update")

    if description is not None:
        others = [issue for issue in existing if issue.id != issue_id]
        report = find_similar(description, others, obj.config)
        if report.exact:
            click.echo(
                f"Warning: an issue with the same description exists ({report.exact.id})",
                err=True,
            )
        for hit in report.suggestions:
            click.echo(
                f"Warning: similar issue [{hit.score:.2f}] {hit.issue.description} ({hit.issue.id})",
                err=True,
            )

    issue = store.update(issue_id, fields)
    if issue is None:
        raise SystemExit(f"Issue not found: {issue_id}")
    click.echo(f"Updated: {issue.id}")


@cli.command("mcp-server")
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse"]),
    default="stdio",
    help="MCP transport type",
)
@click.pass_obj
def mcp_server(obj: _Context, transport: str):
    """Run the Issue Matcher MCP server."""
    import asyncio

    from .mcp import init_server, mcp

    init_server(obj.catalog_path, obj.config)
    click.echo(f"Starting MCP server ({transport} transport)...", err=True)

    if transport == "stdio":
        asyncio.run(mcp.run_stdio_async())
    else:
        asyncio.run(mcp.run_sse_async())


if __name__ == "__main__":
    cli()
