from __future__ import annotations

import functools
import logging
import sys

import click
from dotenv import load_dotenv
from pydantic import ValidationError

from spread_check.checker import CheckResult, SpreadChecker
from spread_check.config import Settings
from spread_check.errors import SpreadCheckError
from spread_check.factory import DEFAULT_PROVIDER, ProviderFactory
from spread_check.formatting import (
  format_bar_time,
  format_pct,
  format_price,
  format_spread,
  format_time_delta,
  format_verdict,
)
from spread_check.history import HistoryStore
from spread_check.models import HistoryEntry, TransactionInput
from spread_check.storage import JsonFileStore
from spread_check.timestamps import local_offset_minutes
from spread_check.utils.savers import save_to_csv

# --- Error Handling Decorator ---


def cli_error_handler(func):
  """Decorator to handle common CLI errors, log them, and exit."""

  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    try:
      return func(*args, **kwargs)
    except ValidationError as e:
      for error in e.errors():
        field = ".".join(str(part) for part in error["loc"]) or "input"
        logging.error(f"Invalid {field}: {error['msg']}")
      sys.exit(1)
    except (SpreadCheckError, ValueError, TypeError) as e:
      logging.error(f"Error: {e}")
      sys.exit(1)
    except Exception as e:
      logging.error(f"An unexpected error occurred: {e}", exc_info=True)
      sys.exit(1)

  return wrapper


# --- Private Helpers ---


def _open_history(settings: Settings) -> HistoryStore:
  history = HistoryStore(JsonFileStore(settings.history_path))
  history.load()
  return history


def _print_result(result: CheckResult, offset_minutes: int) -> None:
  ticker, bar, spread = result.ticker, result.bar, result.spread
  currency = bar.currency

  label = f"{ticker.name} ({ticker.symbol})" if ticker.name else ticker.symbol
  click.echo(f"Ticker:                  {label}")
  click.echo(
    f"Market price:            {format_price(spread.yahoo_price, currency)}"
    f" at {format_bar_time(bar.bar_instant, offset_minutes)}"
    f" ({format_time_delta(bar.diff_seconds)})"
  )
  click.echo(f"Unit price (excl. fees): {format_price(spread.unit_price_excl_fees, currency)}")
  click.echo(f"Unit price (incl. fees): {format_price(spread.unit_price_incl_fees, currency)}")
  click.echo(
    f"Spread:                  {format_spread(spread.spread, currency)}"
    f" ({format_pct(spread.spread_pct)})"
  )
  click.echo(format_verdict(spread.spread))


def _history_row(index: int, entry: HistoryEntry) -> str:
  created = entry.created_at.astimezone()
  return (
    f"{index:>3}  {created:%Y-%m-%d %H:%M}  {entry.ticker}  "
    f"{format_spread(entry.spread, entry.currency)}  {format_pct(entry.spread_pct)}"
  )


# --- CLI Commands ---


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
@cli_error_handler
def cli(ctx, verbose):
  """Check the price you paid for a security against the market price."""
  load_dotenv()
  settings = Settings.from_env()
  logging.basicConfig(
    level=logging.DEBUG if verbose else settings.log_level,
    format="%(asctime)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
  )
  ctx.obj = settings


@cli.command()
@click.option("--identifier", "--isin", required=True, help="ISIN or other identifier.")
@click.option("--units", type=float, required=True, help="Number of units bought.")
@click.option("--total-paid", type=float, required=True, help="Total amount paid, fees included.")
@click.option("--fees", type=float, default=0.0, show_default=True, help="Fees included in the total.")
@click.option("--date", "date_str", required=True, help="Transaction date in YYYY-MM-DD format.")
@click.option("--hour", type=int, required=True, help="Transaction hour (0-23).")
@click.option("--minute", type=int, required=True, help="Transaction minute (0-59).")
@click.option(
  "--offset",
  type=int,
  default=None,
  help="UTC offset of the transaction time in minutes. Defaults to this machine's offset.",
)
@click.option(
  "--provider",
  type=click.Choice(ProviderFactory.available()),
  default=DEFAULT_PROVIDER,
  show_default=True,
  help="The market data provider to use.",
)
@click.option("--no-history", is_flag=True, help="Do not record this check in the history.")
@click.pass_obj
@cli_error_handler
def check(
  settings: Settings,
  identifier: str,
  units: float,
  total_paid: float,
  fees: float,
  date_str: str,
  hour: int,
  minute: int,
  offset: int | None,
  provider: str,
  no_history: bool,
) -> None:
  """Compare a purchase with the market price at execution time."""
  tx = TransactionInput(
    identifier=identifier,
    units=units,
    total_paid=total_paid,
    fees=fees,
    date=date_str,
    hour=hour,
    minute=minute,
    offset_minutes=local_offset_minutes() if offset is None else offset,
  )
  logging.info(f"Executing 'check' for {tx.identifier} on provider: {provider}")

  data_provider = ProviderFactory().create(provider, settings)
  try:
    history = None if no_history else _open_history(settings)
    checker = SpreadChecker(
      data_provider, history, max_staleness_seconds=settings.max_staleness_seconds
    )
    result = checker.check(tx)
  finally:
    data_provider.close()

  _print_result(result, tx.offset_minutes)


@cli.group()
def history():
  """Inspect and manage past checks."""
  pass


@history.command("list")
@click.pass_obj
@cli_error_handler
def list_history(settings: Settings) -> None:
  """Show past checks, newest first, with the average spread."""
  store = _open_history(settings)
  entries = store.all()
  if not entries:
    click.echo("No history yet.")
    return

  for index, entry in enumerate(entries):
    click.echo(_history_row(index, entry))

  average = store.average_spread_pct()
  click.echo(f"Average: {format_pct(average)} over {len(entries)} checks")


@history.command("remove")
@click.argument("index", type=int)
@click.pass_obj
@cli_error_handler
def remove_history(settings: Settings, index: int) -> None:
  """Remove the entry at INDEX as shown by `history list`."""
  store = _open_history(settings)
  if not store.remove(index):
    logging.error(f"No history entry at index {index} ({len(store)} entries).")
    sys.exit(1)
  click.echo(f"Removed entry {index}.")


@history.command("clear")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
@cli_error_handler
def clear_history(settings: Settings, yes: bool) -> None:
  """Delete every recorded check."""
  store = _open_history(settings)
  if not len(store):
    click.echo("History is already empty.")
    return
  if not yes and not click.confirm(f"Delete all {len(store)} history entries?"):
    click.echo("Aborted.")
    return
  store.clear()
  click.echo("History cleared.")


@history.command("export")
@click.option(
  "--filename", default="spread_history.csv", show_default=True, help="CSV file name."
)
@click.pass_obj
@cli_error_handler
def export_history(settings: Settings, filename: str) -> None:
  """Write the history to a CSV file under csv/."""
  store = _open_history(settings)
  rows = []
  for entry in store.all():
    row = entry.model_dump()
    row["created_at"] = entry.created_at.isoformat()
    rows.append(row)

  if not rows:
    logging.warning("History is empty; nothing to export.")
    return

  logging.info(f"Saving {len(rows)} history entries to {filename}...")
  if save_to_csv(rows, filename) is None:
    sys.exit(1)


if __name__ == "__main__":
  cli()
