"""CLI for one-off conversions."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import click
from flask.cli import with_appcontext

from converter.errors import PersistenceFailure
from converter.providers import ProviderError
from converter.services.context import get_context
from converter.services.fx_conversion import ConversionParams, RateUnavailable


@click.command("convert")
@click.argument("amount")
@click.argument("from_currency")
@click.argument("to_currency")
@click.option("--save/--no-save", default=True, show_default=True, help="Append to history")
@with_appcontext
def convert_amount(amount: str, from_currency: str, to_currency: str, save: bool) -> None:
    """Convert AMOUNT from FROM_CURRENCY to TO_CURRENCY using fresh rates."""

    try:
        params = ConversionParams(
            from_currency=from_currency, to_currency=to_currency, amount=Decimal(amount)
        )
    except (InvalidOperation, ValueError) as exc:
        raise click.BadParameter(str(exc)) from exc

    context = get_context()
    try:
        context.refresh_rates()
    except ProviderError as exc:
        raise click.ClickException(str(exc)) from exc

    outcome = context.convert(params, record=False)
    if isinstance(outcome, RateUnavailable):
        raise click.ClickException(outcome.message)

    click.echo(
        f"{outcome.amount} {outcome.from_currency} = {outcome.result} {outcome.to_currency}"
    )
    if save:
        try:
            context.ledger.append(outcome)
        except PersistenceFailure as exc:
            click.echo(f"Warning: conversion not saved ({exc.message})", err=True)
