"""CLI entry point for the pre-sales research agent."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from presales_research.analysis.llm_client import check_connection
from presales_research.config import Config, load_config
from presales_research.db.database import Database
from presales_research.db.migrations import run_migrations
from presales_research.errors import PresalesError
from presales_research.models import Report
from presales_research.output.render import write_report
from presales_research.reports.service import ReportService
from presales_research.reports.store import ReportStore
from presales_research.utils.helpers import pluralize, relative_time
from presales_research.utils.validation import validation_message

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, show_time=False)],
    )


def _open_store(config: Config) -> ReportStore:
    db = Database(config.db_path)
    db.connect()
    run_migrations(db)
    return ReportStore(db)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """PreSales AI Research Agent: company research reports for sales preparation."""
    _setup_logging(verbose)
    ctx.obj = load_config()


@main.command()
@click.argument("company_name")
@click.argument("urls", nargs=-1, required=True)
@click.option("--purpose", "-p", default=None, help="What the report is for, e.g. 'sales call'")
@click.option("--full", is_flag=True, help="Scrape every URL instead of stopping once enough content is found")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False), help="Write the report to a .md or .json file")
@click.option("--no-save", is_flag=True, help="Do not store the report in the local database")
@click.pass_obj
def research(
    config: Config,
    company_name: str,
    urls: tuple[str, ...],
    purpose: str | None,
    full: bool,
    as_json: bool,
    output: str | None,
    no_save: bool,
) -> None:
    """Generate a research report for COMPANY_NAME from one or more URLS.

    Example: presales research "Acme Corp" https://acme.com https://linkedin.com/company/acme
    """
    for url in urls:
        problem = validation_message(url)
        if problem:
            console.print(f"[yellow]{url}: {problem}[/yellow]")

    store = None if no_save else _open_store(config)
    service = ReportService.from_config(config, store)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting...", total=100)

        def on_progress(message: str, pct: float) -> None:
            progress.update(task, description=message, completed=pct)

        try:
            report = asyncio.run(service.generate_report(
                company_name,
                list(urls),
                on_progress=on_progress,
                report_purpose=purpose,
                full=full or None,
            ))
        except PresalesError as e:
            progress.stop()
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
        finally:
            if store:
                store.db.close()

    if as_json:
        click.echo(report.model_dump_json(indent=2))
    else:
        _print_report(report)

    if output:
        path = write_report(report, output)
        console.print(f"\n[bold]Saved to {path}[/bold]")

    stats = service.optimizer.usage_stats()
    console.print(
        f"[dim]{pluralize(stats.total.count, 'metered request')}, "
        f"${stats.total.costs:.3f} estimated cost[/dim]"
    )


def _print_report(report: Report) -> None:
    console.print(f"\n[bold green]{report.company_name}[/bold green]")
    if report.report_purpose:
        console.print(f"[dim]Purpose: {report.report_purpose}[/dim]")
    console.print(f"\n[bold]Summary[/bold]\n{report.summary}")
    console.print(f"\n[bold]Company Info[/bold]\n{report.company_info}")
    for title, items in (
        ("Pain Points", report.pain_points),
        ("Conversation Starters", report.conversation_starters),
        ("Key Insights", report.key_insights),
    ):
        console.print(f"\n[bold]{title}[/bold]")
        for item in items:
            console.print(f"  - {item}")
    console.print(f"\n[bold]Recommendations[/bold]\n{report.recommendations}")
    if report.is_local:
        console.print("\n[yellow]Report was not saved to the database.[/yellow]")
    else:
        console.print(f"\n[dim]Report id: {report.id}[/dim]")


@main.command()
@click.option("--user", "user_id", default=None, help="Only reports for this user id")
@click.option("--limit", default=20, show_default=True, help="Maximum reports to list")
@click.pass_obj
def reports(config: Config, user_id: str | None, limit: int) -> None:
    """List saved reports, newest first."""
    store = _open_store(config)
    try:
        rows = store.list_reports(user_id=user_id, limit=limit)
    finally:
        store.db.close()

    if not rows:
        console.print("No saved reports.")
        return

    table = Table(title="Saved reports")
    table.add_column("ID", style="dim")
    table.add_column("Company", style="bold")
    table.add_column("Sources", justify="right")
    table.add_column("Generated")
    for r in rows:
        table.add_row(r.id, r.company_name, str(len(r.source_urls)), relative_time(r.generated_at))
    console.print(table)


@main.command()
@click.option("--check", is_flag=True, help="Verify the OpenAI key with a live request")
@click.pass_obj
def status(config: Config, check: bool) -> None:
    """Show which scraper, analyzer and database are configured."""
    if config.firecrawl_enabled:
        console.print("[green]Scraper:[/green] Firecrawl API")
    else:
        console.print("[yellow]Scraper:[/yellow] direct fetch (FIRECRAWL_API_KEY not set)")

    if config.openai_enabled:
        line = f"[green]Analyzer:[/green] OpenAI ({config.openai_model})"
        if check:
            ok = asyncio.run(check_connection(config.openai_api_key, config.openai_model))
            line += " [green]connected[/green]" if ok else " [red]connection failed[/red]"
        console.print(line)
    if config.anthropic_enabled:
        label = "Fallback analyzer" if config.openai_enabled else "Analyzer"
        console.print(f"[green]{label}:[/green] Anthropic ({config.anthropic_model})")
    if not (config.openai_enabled or config.anthropic_enabled):
        console.print("[yellow]Analyzer:[/yellow] heuristic (no LLM key set)")

    store = _open_store(config)
    try:
        console.print(f"[green]Database:[/green] {config.db_path} ({pluralize(store.count(), 'report')})")
    finally:
        store.db.close()


@main.command()
@click.option("--host", default=None, help="Bind address (default: WEB_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: WEB_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
@click.pass_obj
def serve(config: Config, host: str | None, port: int | None, reload: bool) -> None:
    """Run the web app."""
    import uvicorn

    uvicorn.run(
        "presales_research.web.app:app",
        host=host or config.web_host,
        port=port or config.web_port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
