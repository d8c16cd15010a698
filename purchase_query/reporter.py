"""
Rich rendering of query results for the CLI.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from purchase_query.domain.models import LineItem, PurchaseRecord


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


def records_table(records: Sequence[PurchaseRecord], title: str) -> Table:
    """
    Build a table with one row per record, in the given order.
    """
    table = Table(title=title, box=box.ROUNDED, caption=f"{len(records)} record(s)")

    table.add_column("Purchased at", style="cyan", no_wrap=True)
    table.add_column("Customer", style="magenta")
    table.add_column("Items", justify="right", style="blue")
    table.add_column("Products")
    table.add_column("Total", justify="right", style="bold green")

    for record in records:
        table.add_row(
            record.purchased_at.isoformat(),
            record.customer.email,
            str(record.item_count),
            ", ".join(item.name for item in record.items),
            _money(record.total),
        )
    return table


def items_table(items: Sequence[LineItem], title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED, caption=f"{len(items)} item(s)")

    table.add_column("Product", style="cyan")
    table.add_column("Regular", justify="right", style="yellow")
    table.add_column("Final", justify="right", style="bold green")
    table.add_column("Discount", justify="right", style="red")

    for item in items:
        table.add_row(
            item.name,
            _money(item.regular_price),
            _money(item.final_price),
            _money(item.discount),
        )
    return table


def print_records(
    records: Iterable[PurchaseRecord], title: str, console: Optional[Console] = None
) -> None:
    """
    Render records as a rich table.

    Set-valued results have no order of their own; they are shown by date so
    the output is stable between runs.
    """
    console = console or Console()
    rows = records if isinstance(records, list) else sorted(records, key=lambda r: r.purchased_at)
    if not rows:
        console.print(f"[yellow]{title}: no records.[/yellow]")
        return
    console.print(records_table(rows, title))


def print_items(items: Sequence[LineItem], title: str, console: Optional[Console] = None) -> None:
    console = console or Console()
    if not items:
        console.print(f"[yellow]{title}: no items.[/yellow]")
        return
    console.print(items_table(items, title))


def print_names(names: Iterable[str], title: str, console: Optional[Console] = None) -> None:
    console = console or Console()
    ordered = sorted(names)
    if not ordered:
        console.print(f"[yellow]{title}: none.[/yellow]")
        return
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Product", style="cyan")
    for name in ordered:
        table.add_row(name)
    console.print(table)


__all__ = ["items_table", "print_items", "print_names", "print_records", "records_table"]
