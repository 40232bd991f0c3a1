"""CLI interface for car-lot."""

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from car_lot import __version__
from car_lot.config import load_settings
from car_lot.database.engine import get_session, init_db
from car_lot.export.csv_exporter import export_to_csv
from car_lot.export.json_exporter import export_to_json
from car_lot.models.pydantic_models import ListingRead, ListingStatus
from car_lot.services.errors import InvalidTransitionError, ListingNotFoundError
from car_lot.services.financing_service import FinancingService
from car_lot.services.listing_service import ListingService
from car_lot.services.moderation_service import ModerationService
from car_lot.storage.photo_store import PhotoStore

app = typer.Typer(
    name="car-lot",
    help="Vehicle listing moderation and financing applications",
    add_completion=False,
)
console = Console()

STATUS_STYLES = {
    ListingStatus.PENDING: "yellow",
    ListingStatus.APPROVED: "green",
    ListingStatus.REJECTED: "red",
}


def output_json(data: Any) -> None:
    """Output JSON to stdout (for programmatic consumption)."""
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"car-lot version {__version__}")
        raise typer.Exit()


def _status_label(status: ListingStatus) -> str:
    style = STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Vehicle listing moderation."""
    pass


@app.command()
def init_database(
    db_path: Path | None = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to SQLite database file.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Show SQL statements.",
    ),
) -> None:
    """Initialize the database, creating all tables.

    Without --db the configured database is used (db_path or database_url
    in settings, or the CAR_LOT_DB_PATH / DATABASE_URL environment variables).
    """
    console.print("[bold blue]Initializing database...[/bold blue]")

    try:
        engine = init_db(db_path, echo=verbose)
        db_location = engine.url.render_as_string(hide_password=True)
        console.print(f"[green]Database initialized at: {db_location}[/green]")
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1) from e


def _print_queue(listings: list[ListingRead], status: ListingStatus) -> None:
    """Render a moderation queue as a table."""
    if not listings:
        console.print(f"[yellow]No {status.value} listings.[/yellow]")
        return

    table = Table(title=f"{status.value.capitalize()} listings ({len(listings)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Vehicle", style="white", max_width=40)
    table.add_column("Mileage", style="blue", justify="right")
    table.add_column("Photos", justify="right")
    table.add_column("Seller", style="magenta")
    table.add_column("Submitted", style="dim")

    for listing in listings:
        table.add_row(
            listing.id,
            f"{listing.year} {listing.make} {listing.model}",
            f"{listing.mileage:,} km",
            str(len(listing.photo_urls)),
            listing.owner.username if listing.owner else "-",
            listing.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command(name="list")
def list_listings(
    status: ListingStatus = typer.Option(
        ListingStatus.PENDING,
        "--status",
        "-s",
        help="Moderation status to show.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON (for programmatic consumption).",
    ),
) -> None:
    """List listings in one moderation status, newest first."""
    with get_session() as session:
        listings = ModerationService(session).list_by_status(status)

    if json_output:
        output_json({
            "status": status.value,
            "listings": [listing.model_dump(mode="json") for listing in listings],
            "count": len(listings),
        })
        return

    _print_queue(listings, status)


@app.command()
def show(
    listing_id: str = typer.Argument(..., help="Listing ID to show."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON (for programmatic consumption).",
    ),
) -> None:
    """Show detailed information for a specific listing."""
    with get_session() as session:
        listing = ListingService(session).get_listing(listing_id)

    if listing is None:
        if json_output:
            output_json({"error": f"Listing {listing_id} not found"})
        else:
            console.print(f"[red]Listing {listing_id} not found.[/red]")
        raise typer.Exit(1)

    if json_output:
        output_json(listing.model_dump(mode="json"))
        return

    owner = listing.owner
    details = [
        f"[bold]Vehicle:[/bold] {listing.year} {listing.make} {listing.model}",
        f"[bold]Mileage:[/bold] {listing.mileage:,} km",
        f"[bold]Status:[/bold] {_status_label(listing.status)}",
        "",
        f"[bold]Seller:[/bold] {owner.username if owner else '-'}",
        f"[bold]Phone:[/bold] {(owner.phone_number if owner else None) or '-'}",
        f"[bold]Company:[/bold] {(owner.company_name if owner else None) or '-'}",
        "",
        f"[bold]Submitted:[/bold] {listing.created_at.strftime('%Y-%m-%d %H:%M')}",
    ]
    if listing.status_changed_at:
        details.append(
            f"[bold]Decided:[/bold] {listing.status_changed_at.strftime('%Y-%m-%d %H:%M')}"
        )

    details.extend(["", listing.description])

    if listing.photo_urls:
        details.append("")
        details.append("[bold]Photos:[/bold]")
        details.extend(f"  {url}" for url in listing.photo_urls)

    panel = Panel(
        "\n".join(details),
        title=f"[bold blue]Listing {listing.id}[/bold blue]",
        expand=False,
    )
    console.print(panel)


def _decide(listing_id: str, status: ListingStatus, json_output: bool) -> None:
    """Apply a moderation decision, then show what is still pending."""
    with get_session() as session:
        service = ModerationService(session)
        try:
            listing = service.transition(listing_id, status)
        except (ListingNotFoundError, InvalidTransitionError) as e:
            if json_output:
                output_json({"error": str(e)})
            else:
                console.print(f"[red]{e}[/red]")
            raise typer.Exit(1) from e

        pending = service.list_by_status(ListingStatus.PENDING)

    if json_output:
        output_json({"listing": listing.model_dump(mode="json"), "pending_count": len(pending)})
        return

    console.print(
        f"Listing {listing.id} ({listing.year} {listing.make} {listing.model}) "
        f"is now {_status_label(listing.status)}."
    )
    _print_queue(pending, ListingStatus.PENDING)


@app.command()
def approve(
    listing_id: str = typer.Argument(..., help="Listing ID to approve."),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Approve a pending listing."""
    _decide(listing_id, ListingStatus.APPROVED, json_output)


@app.command()
def reject(
    listing_id: str = typer.Argument(..., help="Listing ID to reject."),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Reject a pending listing."""
    _decide(listing_id, ListingStatus.REJECTED, json_output)


@app.command()
def applications(
    listing_id: str = typer.Argument(..., help="Listing ID."),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Show financing applications filed against a listing."""
    with get_session() as session:
        try:
            apps = FinancingService(session).list_applications(listing_id)
        except ListingNotFoundError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1) from e

    if json_output:
        output_json({
            "listing_id": listing_id,
            "applications": [a.model_dump(mode="json") for a in apps],
            "count": len(apps),
        })
        return

    if not apps:
        console.print("[yellow]No applications for this listing.[/yellow]")
        return

    table = Table(title=f"Financing applications ({len(apps)})")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Applicant", style="magenta")
    table.add_column("Monthly income", style="green", justify="right")
    table.add_column("Employer")
    table.add_column("Months", justify="right")
    table.add_column("Filed", style="dim")

    for application in apps:
        table.add_row(
            str(application.id),
            application.applicant_id,
            f"{application.monthly_income:,.2f}",
            application.employer,
            str(application.months_employed),
            application.created_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def export(
    status: ListingStatus | None = typer.Option(
        None,
        "--status",
        "-s",
        help="Only export listings with this status.",
    ),
    format: str = typer.Option(
        "csv",
        "--format",
        "-f",
        help="Export format (csv, json).",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path.",
    ),
) -> None:
    """Export listings to a file."""
    if format not in ("csv", "json"):
        console.print(f"[red]Unknown format: {format}. Use 'csv' or 'json'.[/red]")
        raise typer.Exit(1)

    with get_session() as session:
        service = ModerationService(session)
        statuses = [status] if status else list(ListingStatus)
        listings = [listing for s in statuses for listing in service.list_by_status(s)]

    if not listings:
        console.print("[yellow]No listings to export.[/yellow]")
        return

    listings.sort(key=lambda listing: listing.created_at, reverse=True)

    if output is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = Path(f"listings_{timestamp}.{format}")

    console.print(f"[bold blue]Exporting {len(listings)} listings to {output}...[/bold blue]")

    if format == "csv":
        export_to_csv(listings, output)
    else:
        export_to_json(listings, output)

    console.print(f"[green]Export complete: {output}[/green]")


@app.command()
def cleanup_staging(
    max_age_hours: int | None = typer.Option(
        None,
        "--max-age-hours",
        help="Remove staged photos older than this. Defaults to the configured value.",
        min=0,
    ),
) -> None:
    """Remove photos left in staging by submissions that never completed."""
    settings = load_settings()
    hours = max_age_hours if max_age_hours is not None else settings.staging_max_age_hours

    removed = PhotoStore.from_settings(settings).cleanup_stale_staging(timedelta(hours=hours))
    console.print(f"[green]Removed {removed} staged photo(s) older than {hours}h.[/green]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
    log_level: str = typer.Option("info", "--log-level", help="Logging level."),
) -> None:
    """Run the HTTP API."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    uvicorn.run(
        "car_lot.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level.lower(),
    )


if __name__ == "__main__":
    app()
