"""
Sample data generator for Purchase Query.

Implements deterministic pseudo-random purchase generation and writes the
records as the JSON array read by JsonFileRecordSource.
"""

from __future__ import annotations

import random
import sys
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import typer

from purchase_query.domain.models import Customer, LineItem, PurchaseRecord
from purchase_query.sources.records import dump_records
from purchase_query.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Generate synthetic purchase records as JSON.")
log = get_logger(__name__)

PRODUCTS = {
    "Widget": Decimal("10.00"),
    "Gadget": Decimal("5.00"),
    "Gizmo": Decimal("24.99"),
    "Doohickey": Decimal("3.50"),
    "Sprocket": Decimal("12.75"),
}
FIRST_NAMES = ["Anna", "Jan", "Ola", "Piotr", "Kasia", "Marek"]
LAST_NAMES = ["Nowak", "Kowalski", "Wisniewski", "Zielinski"]


def _generate_records(rows: int, seed: int, end: datetime, span_days: int) -> list[PurchaseRecord]:
    rng = random.Random(seed)
    customers = [
        Customer(
            email=f"{first.lower()}.{last.lower()}@example.com",
            first_name=first,
            last_name=last,
        )
        for first in FIRST_NAMES
        for last in LAST_NAMES
    ]

    records: list[PurchaseRecord] = []
    for _ in range(rows):
        offset = timedelta(seconds=rng.randint(0, span_days * 24 * 3600))
        items = []
        for name in rng.sample(sorted(PRODUCTS), k=rng.randint(1, 4)):
            regular = PRODUCTS[name]
            percent_off = rng.choice([0, 0, 0, 5, 10, 20])
            final = (regular * (100 - percent_off) / 100).quantize(Decimal("0.01"))
            items.append(LineItem(name=name, regular_price=regular, final_price=final))
        records.append(
            PurchaseRecord(
                purchased_at=(end - offset).replace(microsecond=0),
                customer=rng.choice(customers),
                items=tuple(items),
            )
        )
    return records


def _write_records(path: Path, records: list[PurchaseRecord]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dump_records(records))


@app.command()
def generate(
    output: Path = typer.Option(Path("data/purchases.json"), "--output", "-o", help="Target JSON file."),
    rows: int = typer.Option(200, "--rows", "-r", min=0, help="Number of purchases to generate."),
    seed: int = typer.Option(42, "--seed", help="Random seed for reproducible output."),
    span_days: int = typer.Option(400, "--span-days", min=1, help="Spread purchases over this many days."),
) -> None:
    """
    Generate purchases ending now (UTC) and write them to OUTPUT.
    """
    configure_logging(level="INFO")
    records = _generate_records(rows, seed, datetime.now(UTC), span_days)
    _write_records(output, records)
    log.info("Sample data written", extra={"path": str(output), "rows": len(records)})
    typer.echo(f"Wrote {len(records)} purchase(s) to {output}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
