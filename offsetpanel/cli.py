"""OffsetPanel CLI.

Commands:
- serve: Run the web dashboard
- categories: List price categories and their filter selectors
- schema: Show the column schema of a category (default or inferred from a sample)
- fetch: Fetch and print a price table from the API
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from offsetpanel.api.client import ApiClient
from offsetpanel.api.errors import ApiError
from offsetpanel.api.services import PriceService
from offsetpanel.api.tokens import MemoryTokenStore
from offsetpanel.categories import PRICE_CATEGORIES, category_for
from offsetpanel.config import get_config
from offsetpanel.core.logging import configure_logging
from offsetpanel.models import FilterState
from offsetpanel.tables.editable import display_value
from offsetpanel.tables.nested import get_nested_value
from offsetpanel.tables.schema import default_schema, infer_schema

app = typer.Typer(
    name="offsetpanel",
    help="OffsetPanel - Price management dashboard for offset printing services",
    no_args_is_help=True,
)

console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8001, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the web dashboard."""
    import uvicorn

    typer.echo(f"Starting OffsetPanel on http://{host}:{port}")
    uvicorn.run("offsetpanel.web.app:app", host=host, port=port, reload=reload, workers=1)


@app.command()
def categories():
    """List price categories and the selectors each one uses."""
    table = Table(title="Price categories")
    table.add_column("Key", style="cyan")
    table.add_column("Title")
    table.add_column("Range")
    table.add_column("Box type")
    table.add_column("Bindery type")

    for category in PRICE_CATEGORIES.values():
        table.add_row(
            category.key,
            category.title,
            "✓" if category.needs_range_selector else "",
            "✓" if category.needs_box_type_selector else "",
            "✓" if category.needs_bindery_type_selector else "",
        )

    console.print(table)


@app.command()
def schema(
    category: str = typer.Argument(..., help="Category key (e.g. papers)"),
    sample: Path | None = typer.Option(
        None, "--sample", help="JSON file holding one price record (or a list of them)"
    ),
):
    """Show the column schema for a category."""
    if sample is not None:
        record = json.loads(sample.read_text(encoding="utf-8"))
        if isinstance(record, dict) and isinstance(record.get("data"), list):
            record = record["data"]
        if isinstance(record, list):
            if not record:
                console.print("[yellow]Sample is empty, using default schema[/yellow]")
                columns = default_schema(category)
            else:
                columns = infer_schema(record[0], category)
        else:
            columns = infer_schema(record, category)
    else:
        columns = default_schema(category)

    table = Table(title=f"{category_for(category).title} ({category})")
    table.add_column("Key", style="cyan")
    table.add_column("Label")
    table.add_column("Type")
    table.add_column("Editable")
    for column in columns:
        table.add_row(column.key, column.label, column.type, "yes" if column.editable else "no")
    console.print(table)


@app.command()
def fetch(
    category: str = typer.Argument(..., help="Category key (e.g. papers)"),
    token: str | None = typer.Option(
        None, "--token", envvar="OFFSETPANEL_TOKEN", help="API bearer token"
    ),
    cooperator: str | None = typer.Option(None, "--cooperator", help="Cooperator ID"),
    range_id: str | None = typer.Option(None, "--range", help="Circulation range ID"),
    box_type: str | None = typer.Option(None, "--box-type", help="Box type key"),
    bindery_type: str | None = typer.Option(None, "--bindery-type", help="Bindery type key"),
):
    """Fetch a price table from the API and print it."""
    configure_logging()
    config = get_config()
    console.print(f"[bold]Fetching:[/bold] {config.api.base_url}/client/offset/{category}")

    filters = FilterState(
        cooperator=cooperator,
        range_id=range_id,
        box_type=box_type,
        bindery_type=bindery_type,
    )

    async def _fetch():
        async with ApiClient(token_store=MemoryTokenStore(token)) as client:
            return await PriceService(client).get_price_table(category, filters)

    try:
        rows = asyncio.run(_fetch())
    except ApiError as exc:
        console.print(f"[bold red]✗[/bold red] {exc.error_type.value}: {exc.message}")
        raise typer.Exit(code=1)

    columns = infer_schema(rows[0], category) if rows else default_schema(category)
    table = Table(title=f"{category_for(category).title} ({len(rows)} rows)")
    for column in columns:
        table.add_column(column.label)
    for row in rows:
        table.add_row(
            *(display_value(column, get_nested_value(row, column.key), row).text for column in columns)
        )
    console.print(table)


if __name__ == "__main__":
    app()
