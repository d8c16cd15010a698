from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer

from purchase_query.config import get_settings
from purchase_query.domain.models import YearMonth
from purchase_query.errors import InvalidArgumentError, RecordSourceError
from purchase_query.reporter import print_items, print_names, print_records
from purchase_query.service import QueryService
from purchase_query.sources import FixedClock, JsonFileRecordSource, SystemClock, resolve_timezone
from purchase_query.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Purchase Query CLI.", no_args_is_help=True)
log = get_logger(__name__)

T = TypeVar("T")


def _parse_now(value: str, zone: str) -> datetime:
    try:
        moment = datetime.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"'{value}' is not an ISO-8601 datetime", param_hint="--now") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=resolve_timezone(zone))
    return moment


def _parse_month(value: str) -> YearMonth:
    try:
        return YearMonth.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(f"'{value}' is not a valid YYYY-MM month") from exc


def _query(ctx: typer.Context, run: Callable[[QueryService], T]) -> T:
    service: QueryService = ctx.obj
    try:
        return run(service)
    except InvalidArgumentError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    except RecordSourceError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def setup(
    ctx: typer.Context,
    data: Optional[Path] = typer.Option(
        None,
        "--data",
        "-d",
        help="JSON file with purchase records (default from DATA_FILE).",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Pin the clock to an ISO-8601 datetime; naive values use TIMEZONE.",
    ),
) -> None:
    """
    Query purchase records stored in a JSON file.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    source = JsonFileRecordSource(data or settings.data_file)
    try:
        clock = FixedClock(_parse_now(now, settings.timezone)) if now else SystemClock(settings.timezone)
    except InvalidArgumentError as exc:
        raise typer.BadParameter(str(exc)) from exc
    ctx.obj = QueryService(source, clock)
    log.debug("Service ready", extra={"data_file": str(source.path), "fixed_now": now})


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"data={settings.data_file} | timezone={settings.timezone} | "
        f"env={settings.app_env} log_level={settings.log_level} json_logs={settings.log_json}"
    )


@app.command("sorted")
def sorted_records(
    ctx: typer.Context,
    by: str = typer.Option("date", "--by", "-b", help="Sort key: date or items."),
    desc: bool = typer.Option(False, "--desc", help="Sort in descending order."),
) -> None:
    """
    List all records sorted by date or by item count.
    """
    queries = {
        ("date", False): QueryService.sorted_by_date_ascending,
        ("date", True): QueryService.sorted_by_date_descending,
        ("items", False): QueryService.sorted_by_item_count_ascending,
        ("items", True): QueryService.sorted_by_item_count_descending,
    }
    key = (by.lower(), desc)
    if key not in queries:
        raise typer.BadParameter(f"Unknown sort key '{by}'. Available: date, items", param_hint="--by")
    records = _query(ctx, queries[key])
    print_records(records, f"Records by {by.lower()} ({'desc' if desc else 'asc'})")


@app.command()
def month(ctx: typer.Context, year_month: str = typer.Argument(..., help="Month as YYYY-MM.")) -> None:
    """
    List records from the given calendar month of any year.
    """
    ym = _parse_month(year_month)
    print_records(_query(ctx, lambda s: s.for_month(ym)), f"Records in month {ym.month:02d} (any year)")


@app.command("current-month")
def current_month(ctx: typer.Context) -> None:
    """
    List records from the current month.
    """
    print_records(_query(ctx, QueryService.for_current_month), "Records this month")


@app.command("last-days")
def last_days(ctx: typer.Context, days: int = typer.Argument(..., help="Number of days back.")) -> None:
    """
    List records from the last N days.
    """
    print_records(_query(ctx, lambda s: s.for_last_n_days(days)), f"Records in the last {days} day(s)")


@app.command("single-item")
def single_item(ctx: typer.Context) -> None:
    """
    List records with exactly one line item.
    """
    print_records(_query(ctx, QueryService.with_exactly_one_item), "Single-item records")


@app.command()
def products(ctx: typer.Context) -> None:
    """
    List product names sold in the current month.
    """
    print_names(_query(ctx, QueryService.products_sold_in_current_month), "Products sold this month")


@app.command()
def total(ctx: typer.Context, year_month: str = typer.Argument(..., help="Month as YYYY-MM.")) -> None:
    """
    Print the sum of final prices for a month.
    """
    ym = _parse_month(year_month)
    typer.echo(f"{_query(ctx, lambda s: s.total_for_month(ym)):.2f}")


@app.command()
def discount(ctx: typer.Context, year_month: str = typer.Argument(..., help="Month as YYYY-MM.")) -> None:
    """
    Print the sum of granted discounts for a month.
    """
    ym = _parse_month(year_month)
    typer.echo(f"{_query(ctx, lambda s: s.discount_total_for_month(ym)):.2f}")


@app.command()
def customer(ctx: typer.Context, email: str = typer.Argument(..., help="Exact customer email.")) -> None:
    """
    List items bought by the customer with the given email.
    """
    print_items(_query(ctx, lambda s: s.items_for_customer_email(email)), f"Items bought by {email}")


@app.command()
def over(ctx: typer.Context, threshold: str = typer.Argument(..., help="Exclusive lower bound.")) -> None:
    """
    List records whose total exceeds the threshold.
    """
    print_records(_query(ctx, lambda s: s.with_total_over(threshold)), f"Records over {threshold}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
