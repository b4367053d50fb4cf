"""CLI application using Typer."""

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gherkin_dictionary.config import Config, get_config
from gherkin_dictionary.models import ALL_CATEGORIES, SearchResults, SearchState, Snapshot, SortMode
from gherkin_dictionary.utils.logging_config import configure_logging

app = typer.Typer(
    name="gherkin-dict",
    help="Search and rank Gherkin steps reused across Jira and AgileTest test cases",
    no_args_is_help=True,
)
console = Console()


def _setup() -> Config:
    config = get_config()
    configure_logging(config)
    return config


def _load(config: Config, snapshot_path: Optional[Path]) -> Snapshot:
    """Load the snapshot or exit with an error message."""
    from gherkin_dictionary.snapshot import load_snapshot

    path = snapshot_path or config.output_file
    try:
        return load_snapshot(path)
    except FileNotFoundError:
        console.print(f"[red]Snapshot not found: {escape(str(path))}[/red]")
        console.print("Run 'generate' or 'generate-jira' first.")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)


def _state(query: str, keyword: str, test_case: str, sort: str) -> SearchState:
    """Build a search state or exit on invalid options."""
    try:
        return SearchState(query=query, category=keyword, test_case=test_case, sort=SortMode(sort))
    except ValueError as e:
        message = e.errors()[0]["msg"] if isinstance(e, ValidationError) else str(e)
        console.print(f"[red]{escape(message)}[/red]")
        console.print(f"Valid sort modes: {', '.join(mode.value for mode in SortMode)}")
        raise typer.Exit(1)


def _print_results(
    snapshot: Snapshot,
    results: SearchResults,
    state: SearchState,
    top: int,
    links: bool,
) -> None:
    from gherkin_dictionary.search.engine import reuse_badge
    from gherkin_dictionary.snapshot import reference_url

    if not results.items:
        if state.test_case:
            console.print(f"[yellow]No matches in test case: {escape(state.test_case)}[/yellow]")
        else:
            console.print("[yellow]No matches found. Try simpler terms or different keywords.[/yellow]")
        return

    if not results.browse and state.query.strip():
        console.print(
            f"Found [bold]{len(results.items)}[/bold] steps. "
            f"Top match: [bold]{results.top_score}%[/bold] similar."
        )

    shown = results.items[:top]
    table = Table(title=f"Steps ({len(shown)} of {len(results.items)})")
    table.add_column("#", style="cyan", justify="right", width=4)
    table.add_column("Step", style="white")
    table.add_column("Uses", style="green", justify="right")
    table.add_column("Reuse", style="blue", justify="right")
    if not results.browse:
        table.add_column("Score", style="yellow", justify="right")

    for i, result in enumerate(shown, 1):
        entry = result.entry
        row = [
            str(i),
            escape(entry.text),
            f"{entry.usage_count} {reuse_badge(entry.usage_count)}".strip(),
            f"{result.reuse_rate}%",
        ]
        if not results.browse:
            row.append(str(result.score))
        table.add_row(*row)

    console.print(table)

    if links:
        for i, result in enumerate(shown, 1):
            console.print(f"\n[cyan]{i}.[/cyan] {escape(result.entry.text)}")
            for ref in result.entry.usage_references:
                url = reference_url(snapshot, ref)
                suffix = f" [dim]{escape(url)}[/dim]" if url else ""
                console.print(f"   - {escape(ref.label)}{suffix}")


def _results_json(results: SearchResults, top: int) -> str:
    payload = {
        "browse": results.browse,
        "total": len(results.items),
        "results": [
            {
                **item.entry.model_dump(mode="json", by_alias=True),
                "similarity": item.score,
                "reuse": item.reuse_rate,
            }
            for item in results.items[:top]
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


@app.command()
def generate(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Snapshot file (defaults to OUTPUT_FILE)",
    ),
):
    """Generate the step snapshot from AgileTest test cases."""
    from gherkin_dictionary.pipelines.generate import generate_from_agiletest
    from gherkin_dictionary.snapshot import save_snapshot
    from gherkin_dictionary.sources.agiletest_client import AgileTestError

    config = _setup()
    output = output or config.output_file

    console.print("[bold blue]Generating snapshot from AgileTest...[/bold blue]")

    try:
        snapshot = generate_from_agiletest(config)
    except (ValueError, AgileTestError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    save_snapshot(snapshot, output)

    console.print(f"\n[bold green]Generated {snapshot.total_steps} steps into {escape(str(output))}[/bold green]")
    console.print(f"Test cases: {snapshot.total_source_records}")


@app.command(name="generate-jira")
def generate_jira(
    project_key: Optional[str] = typer.Option(
        None,
        "--project-key",
        "-p",
        help="Jira project key (used when no JQL is given)",
    ),
    jql: Optional[str] = typer.Option(None, "--jql", help="Explicit JQL query"),
    field: Optional[str] = typer.Option(
        None,
        "--field",
        "-f",
        help="Field name or id holding Gherkin text (defaults to JIRA_GHERKIN_FIELD)",
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum issues to fetch"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Snapshot file (defaults to OUTPUT_FILE)",
    ),
):
    """Generate the step snapshot from a Jira issue field."""
    from gherkin_dictionary.pipelines.generate import generate_from_jira
    from gherkin_dictionary.snapshot import save_snapshot
    from gherkin_dictionary.sources.jira_client import JiraError

    config = _setup()
    output = output or config.output_file

    console.print("[bold blue]Generating snapshot from Jira...[/bold blue]")

    try:
        snapshot = generate_from_jira(config, project_key=project_key, jql=jql, field=field, limit=limit)
    except (ValueError, JiraError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    save_snapshot(snapshot, output)

    console.print(f"\n[bold green]Generated {snapshot.total_steps} steps into {escape(str(output))}[/bold green]")
    console.print(f"Issues: {snapshot.total_source_records}")


@app.command()
def search(
    query: str = typer.Argument("", help='Search text; quote literal parameters, e.g. login "admin"'),
    keyword: str = typer.Option(
        ALL_CATEGORIES,
        "--keyword",
        "-k",
        help="Only steps starting with Given, When, Then, And or But",
    ),
    test_case: str = typer.Option("", "--test-case", "-t", help="Only steps used by this test case"),
    sort: str = typer.Option(
        SortMode.RELEVANCE.value,
        "--sort",
        "-s",
        help="Sort mode: relevance, frequency, alphabetic, reuse",
    ),
    top: int = typer.Option(20, "--top", help="Number of results to show"),
    snapshot_path: Optional[Path] = typer.Option(None, "--snapshot", help="Snapshot file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    links: bool = typer.Option(False, "--links", help="List the test cases using each step"),
):
    """Search steps in the snapshot."""
    from gherkin_dictionary.search.engine import search as run_search

    config = _setup()
    state = _state(query, keyword, test_case, sort)
    snapshot = _load(config, snapshot_path)

    results = run_search(
        snapshot,
        state,
        threshold=config.similarity_threshold,
        reuse_denominator=config.reuse_denominator,
    )

    if json_output:
        typer.echo(_results_json(results, top))
    else:
        _print_results(snapshot, results, state, top, links)


@app.command()
def status(
    snapshot_path: Optional[Path] = typer.Option(None, "--snapshot", help="Snapshot file"),
):
    """Show snapshot statistics."""
    from gherkin_dictionary.search.engine import group_by_keyword, summarize

    config = _setup()
    snapshot = _load(config, snapshot_path)
    stats = summarize(snapshot)

    table = Table(title="Gherkin Dictionary Status")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")

    table.add_row("Unique steps", str(stats.total_steps))
    table.add_row("Test cases", str(stats.total_source_records))
    table.add_row("Average reuse", f"{stats.average_reuse}x")
    table.add_row("High reuse steps (3+)", str(stats.high_reuse_steps))
    table.add_row("", "")
    for label, count in group_by_keyword(snapshot).items():
        table.add_row(f"  {escape(label)}", str(count))

    console.print(table)

    project = snapshot.project_name or snapshot.project_id
    if project:
        console.print(f"\n[bold]Project:[/bold] {escape(project)}")
    console.print(f"[bold]Generated:[/bold] {snapshot.generated_at:%Y-%m-%d %H:%M}")


@app.command(name="test-cases")
def list_cases(
    snapshot_path: Optional[Path] = typer.Option(None, "--snapshot", help="Snapshot file"),
):
    """List test cases usable with 'search --test-case'."""
    from gherkin_dictionary.search.engine import list_test_cases

    config = _setup()
    snapshot = _load(config, snapshot_path)

    names = list_test_cases(snapshot)
    if not names:
        console.print("[yellow]No test cases in snapshot.[/yellow]")
        return

    for name in names:
        console.print(escape(name))


def _jira_client(config: Config):
    from gherkin_dictionary.sources.jira_client import JiraClient

    missing = config.missing_jira_settings()
    if missing:
        console.print(f"[red]Missing settings: {', '.join(missing)}[/red]")
        raise typer.Exit(1)

    return JiraClient(
        base_url=config.jira_base_url,
        email=config.jira_email,
        api_token=config.jira_api_token,
        timeout=config.request_timeout,
    )


@app.command()
def fields(
    query: str = typer.Option("", "--query", "-q", help="Filter by field name"),
):
    """List Jira fields, to find the one holding Gherkin text."""
    from gherkin_dictionary.sources.jira_client import JiraError

    config = _setup()
    client = _jira_client(config)

    try:
        found = client.list_fields(query)
    except JiraError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Jira fields ({len(found)})")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Custom", style="green")

    for item in found:
        table.add_row(escape(str(item["id"])), escape(str(item["name"])), "yes" if item["custom"] else "")

    console.print(table)


@app.command(name="issue-fields")
def issue_fields(
    issue_key: str = typer.Argument(..., help="Issue key, e.g. PROJ-42"),
):
    """Show the non-empty fields of one Jira issue."""
    from gherkin_dictionary.sources.jira_client import JiraError

    config = _setup()
    client = _jira_client(config)

    try:
        found = client.issue_fields(issue_key.strip())
    except JiraError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Fields of {escape(issue_key)}")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Preview", style="dim")

    for item in found:
        table.add_row(escape(item["id"]), escape(str(item["name"])), escape(item["preview"]))

    console.print(table)


@app.command()
def interactive(
    snapshot_path: Optional[Path] = typer.Option(None, "--snapshot", help="Snapshot file"),
    top: int = typer.Option(10, "--top", help="Number of results to show"),
):
    """Search steps interactively.

    Commands:
    - :keyword NAME   filter by keyword (all, Given, When, Then, And, But)
    - :sort MODE      relevance, frequency, alphabetic, reuse
    - :test-case NAME filter by test case (empty to clear)
    - :history        show recent queries
    - :quit           leave
    """
    from gherkin_dictionary.search.engine import search as run_search
    from gherkin_dictionary.search.history import SearchHistory

    config = _setup()
    snapshot = _load(config, snapshot_path)
    history = SearchHistory(max_size=config.history_size)
    state = SearchState()

    console.print(
        f"[bold]{snapshot.total_steps} unique steps from {snapshot.total_source_records} test cases[/bold]"
    )

    while True:
        line = typer.prompt("search", default="", show_default=False).strip()

        if line.startswith(":"):
            command, _, argument = line[1:].partition(" ")
            argument = argument.strip()

            if command in ("q", "quit", "exit"):
                break
            if command == "history":
                for i, entry in enumerate(history.entries, 1):
                    console.print(f"{i}. {escape(entry.query)} [dim]{entry.timestamp:%H:%M:%S}[/dim]")
                continue

            changes = {"keyword": "category", "sort": "sort", "test-case": "test_case"}
            if command not in changes:
                console.print(f"[red]Unknown command: {escape(command)}[/red]")
                continue
            try:
                state = SearchState(**{**state.model_dump(), changes[command]: argument or _default(command)})
            except ValueError as e:
                console.print(f"[red]{escape(str(e))}[/red]")
                continue
        else:
            history.record(line)
            state = SearchState(**{**state.model_dump(), "query": line})

        results = run_search(
            snapshot,
            state,
            threshold=config.similarity_threshold,
            reuse_denominator=config.reuse_denominator,
        )
        _print_results(snapshot, results, state, top, links=False)


def _default(command: str) -> str:
    return {"keyword": ALL_CATEGORIES, "sort": SortMode.RELEVANCE.value}.get(command, "")


if __name__ == "__main__":
    app()
