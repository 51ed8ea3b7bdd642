"""CLI for refreshing the held rate table."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from converter.providers import ProviderError
from converter.services.context import get_context


@click.command("refresh-rates")
@click.option("--base", default=None, help="Base currency (defaults to DEFAULT_BASE_CURRENCY)")
@with_appcontext
def refresh_rates(base: str | None) -> None:
    """Fetch a fresh rate table and print it."""

    context = get_context()
    requested = (base or context.base_currency).upper()
    click.echo(f"Refreshing rates for base {requested}...")
    try:
        table = context.refresh_rates(requested)
    except ProviderError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(
        f"{table.source}: {len(table.rates)} rates as of {table.fetched_at.isoformat()}"
    )
    for code in table.currencies:
        rate = "1" if code == table.base_currency else str(table.rates.get(code))
        click.echo(f"  {code} {rate}")
