#!/usr/bin/env python3
"""Job Hunt - automated job discovery and application documents."""

import asyncio
import json
import logging
import re
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config_loader import load_config
from data_store import DataStore
from models import ListingStatus
from pipeline_store import PipelineStore, allowed_transitions
from services import (
    ApplyService,
    JobService,
    ProfileService,
    ScanService,
    ConfigurationError,
    InvalidTransitionError,
    JobHuntError,
    ListingNotFoundError,
    ProfileNotFoundError,
    ValidationError,
)
from services.scan_service import describe_profile

console = Console()

STATUS_STYLES = {
    "pending": "yellow",
    "approved": "cyan",
    "skipped": "dim",
    "manual_required": "magenta",
    "generating_docs": "blue",
    "ready_to_apply": "green",
    "failed": "red",
    "applied": "bold green",
}


HELP_TEXT = """
Job Hunt - automated job discovery and application documents

WORKFLOW:
  1. Set up profile       → jobhunt profile --set-file profile.json
  2. Scan for jobs        → jobhunt scan
  3. Review jobs          → jobhunt jobs --status pending
  4. Approve the good ones → jobhunt status <job_id> approved
  5. Generate documents   → jobhunt apply
  6. Read / export them   → jobhunt docs <job_id> --export out/
  7. Record application   → jobhunt status <job_id> applied

STATUSES:
  pending → approved → generating_docs → ready_to_apply → applied
  side branches: skipped, manual_required, failed (retry by approving again)

API:
  serve          Start the Job Hunt API server
  api-key        Show the API key for the current user

EXAMPLES:
  jobhunt profile
  jobhunt scan
  jobhunt jobs --status approved
  jobhunt status JOB-GLOBEX-3FA9C1 approved
  jobhunt status JOB-GLOBEX-3FA9C1 --note "Recruiter call on Friday"
  jobhunt apply JOB-GLOBEX-3FA9C1
  jobhunt docs JOB-GLOBEX-3FA9C1 --export applications/
  jobhunt --user alice counts
  jobhunt serve --port 8000
"""


def _create_services(settings, data_store, pipeline):
    """Create all service instances sharing the same stores."""
    kwargs = {"settings": settings, "data_store": data_store, "pipeline": pipeline}
    return {
        "scan": ScanService(**kwargs),
        "apply": ApplyService(**kwargs),
        "job": JobService(**kwargs),
        "profile": ProfileService(**kwargs),
    }


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    # Request-level chatter from the HTTP clients
    for name in ("httpx", "httpcore", "anthropic"):
        logging.getLogger(name).setLevel(logging.WARNING)


@click.group(help=HELP_TEXT)
@click.option("--user", "user_id", default="local", show_default=True, help="User to act as.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to config.json.")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging.")
@click.pass_context
def cli(ctx, user_id: str, config_path: str | None, verbose: bool):
    """Job Hunt - automated job discovery and application documents."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["user_id"] = user_id
    ctx.obj["settings"] = load_config(config_path)
    ctx.obj["data_store"] = DataStore(ctx.obj["settings"])
    ctx.obj["pipeline"] = PipelineStore(ctx.obj["data_store"])
    ctx.obj["services"] = _create_services(
        ctx.obj["settings"], ctx.obj["data_store"], ctx.obj["pipeline"]
    )


# ============================================================================
# Profile Commands
# ============================================================================


@cli.command()
@click.option(
    "--set-file",
    "set_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Replace the profile with the contents of a JSON file.",
)
@click.pass_context
def profile(ctx, set_file: str | None):
    """View or replace your candidate profile."""
    svc = ctx.obj["services"]["profile"]
    user_id = ctx.obj["user_id"]

    if set_file:
        try:
            with open(set_file) as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            console.print(f"[red]Invalid JSON in {set_file}: {e}[/red]")
            return
        try:
            result = asyncio.run(svc.update_from_dict(user_id, raw))
        except ValidationError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            return
        console.print("[green]Profile saved[/green]")
    else:
        try:
            result = asyncio.run(svc.get_profile(user_id))
        except ProfileNotFoundError as e:
            console.print(f"[yellow]{e}[/yellow]")
            return

    _print_profile(result)


def _print_profile(profile):
    """Display formatted profile."""

    def joined(values, limit=8):
        if not values:
            return "[dim]-[/dim]"
        extra = f" [dim](+{len(values) - limit} more)[/dim]" if len(values) > limit else ""
        return ", ".join(values[:limit]) + extra

    console.print(Panel(
        f"[bold]{profile.user_id}[/bold]\n"
        f"[dim]{profile.experience_level.value} · {profile.location_preference.value}[/dim]",
        title="Candidate Profile",
    ))

    console.print("\n[bold]Search:[/bold]")
    console.print(f"  Titles: {joined(profile.target_titles)}")
    console.print(f"  Locations: {joined(profile.target_locations)}")
    console.print(f"  Companies: {joined(profile.target_companies)}")
    console.print(f"  Industries: {joined(profile.industries)}")
    console.print(f"  Skills: {joined(profile.skills, limit=12)}")

    console.print("\n[bold]Exclusions:[/bold]")
    console.print(f"  Companies: {joined(profile.excluded_companies)}")
    console.print(f"  Keywords: {joined(profile.keyword_blacklist)}")

    console.print("\n[bold]Applications:[/bold]")
    if profile.min_salary:
        console.print(f"  Minimum salary: ${profile.min_salary:,.0f}")
    console.print(f"  Max per run: {profile.max_applications_per_run}")
    if profile.resume_text:
        console.print(f"  Resume: inline ({len(profile.resume_text)} chars)")
    elif profile.resume_path:
        console.print(f"  Resume: {profile.resume_path}")
    else:
        console.print("  Resume: [yellow]not set[/yellow]")

    if profile.notes:
        console.print(f"\n[bold]Notes:[/bold]\n{profile.notes}")

    console.print(f"\n[dim]Profile updated: {profile.updated_at or 'Unknown'}[/dim]")


# ============================================================================
# Scan Commands
# ============================================================================


@cli.command()
@click.pass_context
def scan(ctx):
    """Search the web for new matching jobs."""
    svc = ctx.obj["services"]["scan"]
    user_id = ctx.obj["user_id"]

    try:
        profile = asyncio.run(ctx.obj["services"]["profile"].get_profile(user_id))
    except ProfileNotFoundError as e:
        console.print(f"[yellow]{e}[/yellow]")
        return

    console.print(f"\n[bold blue]Scanning for {describe_profile(profile)}...[/bold blue]\n")

    try:
        result = asyncio.run(svc.run_scan(user_id))
    except (ConfigurationError, ProfileNotFoundError) as e:
        console.print(f"[red]{e}[/red]")
        return

    table = Table(title="Scan Results", show_header=False)
    table.add_column("Stage", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Queries run", str(result.queries_run))
    table.add_row("Raw results", str(result.raw_results))
    table.add_row("Listings extracted", str(result.jobs_extracted))
    table.add_row("After exclusions", str(result.jobs_filtered))
    table.add_row("Scored as a match", str(result.jobs_scored))
    table.add_row("Company summaries", str(result.jobs_enriched))
    table.add_row("Already saved", str(result.duplicates))
    table.add_row("[bold]New listings saved[/bold]", f"[bold]{result.jobs_saved}[/bold]")
    console.print(table)

    if result.message:
        console.print(f"\n[green]{result.message}[/green]")
    if result.jobs_saved:
        console.print("[dim]Review them with 'jobhunt jobs --status pending'[/dim]")


# ============================================================================
# Listing Commands
# ============================================================================


@cli.command()
@click.option(
    "--status",
    "status_filter",
    type=click.Choice([s.value for s in ListingStatus]),
    help="Only show listings in this status.",
)
@click.option("--limit", type=int, default=None, help="Maximum listings to show.")
@click.pass_context
def jobs(ctx, status_filter: str | None, limit: int | None):
    """List saved job listings, best match first."""
    svc = ctx.obj["services"]["job"]
    status = ListingStatus(status_filter) if status_filter else None

    try:
        listings = asyncio.run(svc.get_listings(ctx.obj["user_id"], status=status, limit=limit))
    except ValidationError as e:
        console.print(f"[red]{e}[/red]")
        return

    if not listings:
        console.print("[yellow]No jobs found. Run 'jobhunt scan' to discover jobs.[/yellow]")
        return

    table = Table(title=f"Jobs ({len(listings)} total)")
    table.add_column("ID", style="dim")
    table.add_column("Company", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Location", style="green")
    table.add_column("Score", justify="right", style="yellow")
    table.add_column("Status")

    for listing in listings:
        style = STATUS_STYLES.get(listing.status.value, "white")
        table.add_row(
            listing.id,
            listing.company,
            listing.title,
            listing.location or "-",
            str(listing.score),
            f"[{style}]{listing.status.value}[/{style}]",
        )

    console.print(table)


@cli.command()
@click.pass_context
def counts(ctx):
    """Count listings per status."""
    svc = ctx.obj["services"]["job"]
    result = asyncio.run(svc.get_counts(ctx.obj["user_id"]))

    table = Table(title=f"Listings ({result.total} total)")
    table.add_column("Status")
    table.add_column("Count", justify="right")
    for name, count in result.by_status.items():
        style = STATUS_STYLES.get(name, "white")
        table.add_row(f"[{style}]{name}[/{style}]", str(count))
    console.print(table)


@cli.command("status")
@click.argument("job_id")
@click.argument("new_status", required=False, type=click.Choice([s.value for s in ListingStatus]))
@click.option("--note", default="", help="Note recorded in the audit log.")
@click.pass_context
def status(ctx, job_id: str, new_status: str | None, note: str):
    """View a listing's status history, move it to NEW_STATUS, or add a --note."""
    svc = ctx.obj["services"]["job"]
    user_id = ctx.obj["user_id"]

    try:
        listing = asyncio.run(svc.get_listing(user_id, job_id))
    except ListingNotFoundError:
        console.print(f"[red]Job not found: {job_id}[/red]")
        console.print("[dim]Use 'jobhunt jobs' to see available job IDs[/dim]")
        return

    if new_status is None and note:
        # NOTE MODE
        try:
            asyncio.run(svc.add_note(user_id, job_id, note))
            console.print(f"[green]Note added to {job_id}[/green]")
        except (ValidationError, ListingNotFoundError) as e:
            console.print(f"[red]{e}[/red]")
        return

    if new_status is None:
        # VIEW MODE
        entries = asyncio.run(svc.get_audit_log(user_id, job_id))
        console.print(f"\n[bold]{listing.title}[/bold] at [cyan]{listing.company}[/cyan]")
        style = STATUS_STYLES.get(listing.status.value, "white")
        console.print(f"Current status: [{style}]{listing.status.value}[/{style}]  Score: {listing.score}")
        if listing.company_summary:
            console.print(f"[dim]{listing.company_summary}[/dim]")
        allowed = allowed_transitions(listing.status)
        if allowed:
            console.print(f"[dim]Can move to: {', '.join(allowed)}[/dim]")
        _print_audit_log(entries)
        return

    # SET MODE
    try:
        asyncio.run(svc.set_status(user_id, job_id, ListingStatus(new_status), detail=note))
        console.print(f"\n[green]Updated:[/green] {listing.title} at {listing.company} -> {new_status}")
    except InvalidTransitionError as e:
        console.print(f"[red]{e}[/red]")
        allowed = e.details.get("allowed") or []
        console.print(f"[dim]Allowed from {e.current}: {', '.join(allowed) or 'none'}[/dim]")
    except (ValidationError, ListingNotFoundError) as e:
        console.print(f"[red]{e}[/red]")


def _print_audit_log(entries) -> None:
    if not entries:
        return
    console.print()
    table = Table(title="Audit Log")
    table.add_column("Time", style="dim")
    table.add_column("Step", style="magenta")
    table.add_column("Detail")
    for entry in entries:
        table.add_row(entry.timestamp[:19].replace("T", " "), entry.step, entry.detail)
    console.print(table)


# ============================================================================
# Application Commands
# ============================================================================


@cli.command("apply")
@click.argument("job_ids", nargs=-1)
@click.pass_context
def apply_jobs(ctx, job_ids: tuple[str, ...]):
    """Generate resumes and cover letters for approved jobs.

    With JOB_IDS, only those listings are processed (they must be approved).
    """
    svc = ctx.obj["services"]["apply"]

    console.print("\n[bold blue]Generating application documents...[/bold blue]\n")
    try:
        result = asyncio.run(svc.run_apply(ctx.obj["user_id"], job_ids=list(job_ids) or None))
    except (ConfigurationError, ProfileNotFoundError) as e:
        console.print(f"[red]{e}[/red]")
        return

    if not result.results:
        console.print(f"[yellow]{result.message}[/yellow]")
        console.print("[dim]Approve listings first with 'jobhunt status <job_id> approved'[/dim]")
        return

    table = Table(title=result.message)
    table.add_column("ID", style="dim")
    table.add_column("Company", style="cyan")
    table.add_column("Title")
    table.add_column("Result")
    for item in result.results:
        if item.error:
            outcome = f"[red]failed[/red] [dim]{item.error}[/dim]"
        else:
            outcome = "[green]ready_to_apply[/green]"
        table.add_row(item.id, item.company, item.title, outcome)
    console.print(table)


@cli.command()
@click.argument("job_id")
@click.option(
    "--export",
    "export_dir",
    type=click.Path(file_okay=False),
    help="Write resume and cover letter as markdown files into this directory.",
)
@click.pass_context
def docs(ctx, job_id: str, export_dir: str | None):
    """Show (or export) the generated documents for a job."""
    svc = ctx.obj["services"]["job"]

    try:
        documents = asyncio.run(svc.get_documents(ctx.obj["user_id"], job_id))
    except ListingNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        return

    if not documents.tailored_resume_text and not documents.cover_letter_text:
        console.print(
            f"[yellow]No documents yet for {job_id} (status: {documents.status.value}).[/yellow]"
        )
        _print_audit_log(documents.apply_log)
        return

    if export_dir:
        out = Path(export_dir)
        out.mkdir(parents=True, exist_ok=True)
        base = _slugify(f"{documents.company}-{documents.title}")
        written = []
        for suffix, text in (
            ("resume", documents.tailored_resume_text),
            ("cover-letter", documents.cover_letter_text),
        ):
            if text:
                path = out / f"{base}-{suffix}.md"
                path.write_text(text)
                written.append(path)
        for path in written:
            console.print(f"[green]Wrote[/green] {path}")
        return

    if documents.tailored_resume_text:
        console.print(Panel(documents.tailored_resume_text, title="Tailored Resume"))
    if documents.cover_letter_text:
        console.print(Panel(documents.cover_letter_text, title="Cover Letter"))


def _slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "document"


# ============================================================================
# API Server Commands
# ============================================================================


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to.")
@click.option("--port", default=8000, type=int, help="Port to bind to.")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development.")
def serve(host, port, reload):
    """Start the Job Hunt API server."""
    import uvicorn
    console.print(f"\n[bold blue]Starting Job Hunt API server...[/bold blue]")
    console.print(f"[dim]API docs at http://{host}:{port}/docs[/dim]\n")
    uvicorn.run("api.app:create_app", host=host, port=port, reload=reload, factory=True)


@cli.command("api-key")
@click.pass_context
def api_key(ctx):
    """Show (creating if needed) the API key for the current user."""
    from api.auth import get_or_create_api_key

    key = get_or_create_api_key(ctx.obj["settings"], ctx.obj["user_id"])
    console.print(f"\n  User:    {ctx.obj['user_id']}")
    console.print(f"  API Key: {key}\n")


def main():
    try:
        cli()
    except JobHuntError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
