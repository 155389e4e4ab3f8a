"""Management commands for the service catalog backend."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import click

from service_catalog.container import build_container
from service_catalog.db.seed import seed_catalog
from service_catalog.db.session import create_tables as create_all_tables

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@click.group()
def cli() -> None:
    """Entry point for management commands."""


@cli.command("create-tables")
def create_tables() -> None:
    """Create every table of the catalog schema."""
    create_all_tables()
    click.echo("Tables created.")


@cli.command("seed")
def seed() -> None:
    """Seed categories and services on an empty database."""
    created = seed_catalog(build_container())
    if created:
        click.echo(f"Seeded {created} services.")
    else:
        click.echo("Catalog already has data; nothing seeded.")


@cli.command("replay")
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--source",
    type=click.Choice(["barber", "reservation"]),
    required=True,
    help="Which inbound queue the event belongs to.",
)
@click.option("--routing-key", default=None, help="Routing key to deliver with.")
def replay(event_file: Path, source: str, routing_key: str | None) -> None:
    """Feed a JSON event (or a JSON list of events) through the consumer."""
    container = build_container()
    binding = container.consumer.binding_for_source(source)
    if binding is None:
        raise click.ClickException(f"No consumer binding for source '{source}'")

    try:
        document = json.loads(event_file.read_text(encoding="utf-8"))
    except ValueError as e:
        raise click.ClickException(f"{event_file} is not valid JSON: {e}") from e

    events = document if isinstance(document, list) else [document]
    key = routing_key or f"{source}.replayed"
    for event in events:
        result = container.consumer.deliver(binding, key, json.dumps(event).encode("utf-8"))
        click.echo(
            f"{source} event {result.event_id}: {result.outcome.value}"
            + (f" ({result.detail})" if result.detail else "")
            + (f", published {result.published}" if result.published else "")
        )
    # Replay runs on the in-memory transport: show what would have been published
    for message in container.transport.sent:
        click.echo(f"-> {message.exchange} {message.routing_key} {message.body.decode('utf-8')}")


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=lambda: int(os.getenv("PORT", "5000")), show_default="PORT or 5000")
def serve(host: str, port: int) -> None:
    """Run the administrative API with the Flask development server."""
    from service_catalog.main import create_app

    app = create_app()
    app.run(host=host, port=port)


if __name__ == "__main__":
    cli()
