"""
ZipParents - CLI Entry Point.

Usage:
    zipparents serve                 Start the API server
    zipparents health                Check configuration
    zipparents db                    Check database connection and tables
    zipparents distance 10001 10002  Miles between two zip codes
    zipparents nearby 10001 -r 5     Known zip codes around a zip code
    zipparents project <uid>         Show a profile as another user sees it
    zipparents --help                Show help
"""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="zipparents",
    help="ZipParents - connect with parents near you.",
    add_completion=False,
)
console = Console()

TABLES = [
    "users",
    "connections",
    "conversations",
    "messages",
    "events",
    "event_comments",
    "reports",
    "blocked_users",
    "verification_requests",
    "moderation_logs",
]


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import os

    import uvicorn

    from zipparents.config import configure_logging

    configure_logging()
    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]ZipParents API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "zipparents.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def health() -> None:
    """Check system health and configuration."""
    from pydantic import ValidationError

    from zipparents.config import get_settings

    console.print("\n[bold]ZipParents Health Check[/bold]\n")

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"\n[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)

    console.print("[green]OK[/green] Configuration loaded")
    console.print(f"   Environment: {settings.zipparents_env}")
    console.print(f"   Log level: {settings.log_level}")

    if settings.supabase_url.startswith("https://"):
        console.print("[green]OK[/green] Supabase URL configured")
    else:
        console.print("[red]FAIL[/red] Supabase URL missing or invalid")
        raise typer.Exit(1)

    console.print(f"   Photo bucket: {settings.profile_photo_bucket}")
    console.print(f"   Minimum interests: {settings.min_interests}")
    console.print("\n[green]All checks passed![/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from zipparents import __version__

    console.print(f"ZipParents version {__version__}")


@app.command()
def db() -> None:
    """Check database connection and table row counts."""
    from zipparents.db.client import execute, get_service_client
    from zipparents.errors import StoreError

    console.print("\n[bold]Database Connection Check[/bold]\n")
    client = get_service_client()

    failed = False
    for table in TABLES:
        try:
            result = execute(client.table(table).select("*", count="exact").limit(0), f"count {table}")
        except StoreError as e:
            console.print(f"  [red]FAIL[/red] {table}: {e}")
            failed = True
            continue
        count = result.count if result.count is not None else "?"
        console.print(f"  [green]OK[/green] {table}: {count} rows")

    if failed:
        raise typer.Exit(1)
    console.print("\n[green]Database check complete![/green]")


@app.command()
def distance(zip_a: str, zip_b: str) -> None:
    """Miles between two zip codes."""
    from zipparents.discovery.zipcode import zip_code_distance

    miles = zip_code_distance(zip_a, zip_b)
    if miles is None:
        console.print(f"[yellow]Unknown location for {zip_a} or {zip_b}[/yellow]")
        raise typer.Exit(1)
    console.print(f"{zip_a} -> {zip_b}: [bold]{miles}[/bold] miles")


@app.command()
def nearby(
    zip_code: str,
    radius: float = typer.Option(5, "--radius", "-r", help="Radius in miles"),
) -> None:
    """List known zip codes within a radius, closest first."""
    from zipparents.discovery.zipcode import get_coordinates, zip_codes_within_radius

    if get_coordinates(zip_code) is None:
        console.print(f"[yellow]Unknown location for {zip_code}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"Within {radius:g} miles of {zip_code}")
    table.add_column("Zip code")
    table.add_column("Miles", justify="right")
    for other, miles in zip_codes_within_radius(zip_code, radius):
        table.add_row(other, f"{miles:.1f}")
    console.print(table)


@app.command()
def project(
    user_id: str,
    viewer: str = typer.Option(None, "--viewer", "-v", help="Viewer user id (anonymous if omitted)"),
) -> None:
    """Show what a viewer can see of a user's profile."""
    from zipparents.db.client import fetch_one, get_service_client
    from zipparents.models.profile import Viewer
    from zipparents.models.user import decode_user
    from zipparents.profiles.privacy import project as project_profile

    client = get_service_client()
    row = fetch_one(client, "users", "load user", id=user_id)
    if row is None:
        console.print(f"[red]No user {user_id}[/red]")
        raise typer.Exit(1)
    user = decode_user(row)

    viewing_as = None
    if viewer:
        viewer_row = fetch_one(client, "users", "load viewer", id=viewer)
        if viewer_row is None:
            console.print(f"[red]No user {viewer}[/red]")
            raise typer.Exit(1)
        viewer_user = decode_user(viewer_row)
        viewing_as = Viewer(uid=viewer_user.uid, verification_status=viewer_user.verification_status)

    profile = project_profile(user, viewing_as)
    if profile is None:
        console.print("[yellow]Profile is not visible to this viewer[/yellow]")
        return

    table = Table(title=f"{user.display_name or user.uid} as seen by {viewer or 'anonymous'}")
    table.add_column("Field")
    table.add_column("Value")
    for name, value in profile.model_dump(mode="json").items():
        table.add_row(name, "" if value is None else str(value))
    console.print(table)


@app.command()
def metrics(
    admin_id: str = typer.Argument(..., help="Staff user id to run as"),
) -> None:
    """Platform metrics, as shown on the admin dashboard."""
    from zipparents.admin.service import platform_metrics
    from zipparents.auth.context import session
    from zipparents.db.client import get_service_client

    async def _collect():
        async with session(get_service_client(), admin_id) as ctx:
            return await platform_metrics(ctx)

    result = asyncio.run(_collect())
    table = Table(title="Platform metrics")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for name, value in result.model_dump(mode="json").items():
        table.add_row(name, str(value))
    console.print(table)


if __name__ == "__main__":
    app()
