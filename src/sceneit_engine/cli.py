"""Typer CLI for the SceneIt engine."""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(name="sceneit", help="SceneIt engine: photo enhancement, gallery and analytics")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the SceneIt API server."""
    import uvicorn
    from sceneit_engine.app import create_app

    console.print(f"[bold green]Starting SceneIt engine on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command("init-db")
def init_db():
    """Create tables for the configured storage backend."""
    from sceneit_engine.deps import get_storage

    async def _run() -> str:
        storage = get_storage()
        await storage.init()
        await storage.close()
        return storage.name

    name = asyncio.run(_run())
    console.print(f"[bold green]Storage ready[/bold green] ({name})")


@app.command()
def stats():
    """Print the admin dashboard headline numbers."""
    from sceneit_engine.deps import get_stats_service, get_storage

    async def _run():
        storage = get_storage()
        await storage.init()
        try:
            return await get_stats_service().get_admin_stats()
        finally:
            await storage.close()

    result = asyncio.run(_run())

    table = Table(title="SceneIt stats")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Transformations", str(result.total_transformations))
    table.add_row("Last 24h", str(result.today_count))
    table.add_row("Last 7d", str(result.week_count))
    table.add_row("Last 30d", str(result.month_count))
    table.add_row("Storage bytes", str(result.total_storage_bytes))
    table.add_row("Avg processing (ms)", str(result.avg_processing_time_ms))
    table.add_row("Opt-in rate (%)", str(result.opt_in_rate))
    table.add_row("Error rate (%)", f"{result.error_rate:.2f}")
    console.print(table)

    funnel = result.funnel
    console.print(
        f"Funnel: {funnel.page_views} views → {funnel.uploads} uploads → "
        f"{funnel.enhances} enhances → {funnel.downloads} downloads"
    )


@app.command()
def export(
    export_type: str = typer.Argument("transformations", help="transformations, events, sessions or attribution"),
    fmt: str = typer.Option("json", "--format", help="json or csv"),
    date_from: str = typer.Option(None, "--from", help="Inclusive start date (ISO)"),
    date_to: str = typer.Option(None, "--to", help="Inclusive end date (ISO)"),
    output: Path = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
):
    """Export records as JSON or CSV."""
    from sceneit_engine.common.exceptions import SceneItError
    from sceneit_engine.deps import get_export_service, get_storage
    from sceneit_engine.export.service import FORMATS, PROJECTIONS, encode_csv

    if fmt not in FORMATS:
        console.print(f"[bold red]Unknown format:[/bold red] {fmt}")
        raise typer.Exit(1)

    async def _run():
        storage = get_storage()
        await storage.init()
        try:
            return await get_export_service().export(export_type, date_from=date_from, date_to=date_to)
        finally:
            await storage.close()

    try:
        rows = asyncio.run(_run())
    except SceneItError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        raise typer.Exit(1)

    if fmt == "csv":
        text = "".join(encode_csv(rows, PROJECTIONS[export_type]))
    else:
        text = json.dumps(rows, indent=2)

    if output is None:
        typer.echo(text)
    else:
        output.write_text(text, encoding="utf-8", newline="")
        console.print(f"[bold green]Wrote {len(rows)} rows[/bold green] to {output}")


@app.command()
def styles():
    """List the built-in style presets."""
    from sceneit_engine.enhance.prompts import STYLE_PRESETS

    table = Table(title="Style presets")
    table.add_column("Key")
    table.add_column("Name")
    table.add_column("Subtitle")
    for s in STYLE_PRESETS:
        table.add_row(s.key, s.name, s.subtitle)
    console.print(table)


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check SceneIt server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(
            f"[bold green]{data['status']}[/bold green] v{data['version']} (storage: {data['storage']})"
        )
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
