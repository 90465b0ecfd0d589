from datetime import date

import click
from flask import current_app
from flask.cli import with_appcontext

from services.usage_store import usage_key


@click.command("usage")
@click.argument("identity")
@click.option(
    "--day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Calendar day (YYYY-MM-DD), defaults to today",
)
@click.option("--reset", is_flag=True, help="Reset the counter instead of showing it")
@with_appcontext
def usage_command(identity, day, reset):
    """Show or reset the daily usage count for IDENTITY (a client IP)."""
    service = current_app.extensions["generation_service"]
    key = usage_key(identity, day.date() if day else date.today())

    if reset:
        service.usage_store.reset(key)
        click.echo(f"Usage for {key} has been reset.")
        return

    count = service.usage_store.get(key)
    limit = service.daily_limit or "off"
    click.echo(f"{key}: {count} (limit: {limit})")
