"""
Domain models for Purchase Query.

Defines the purchase record schema consumed by the query service. All models
are frozen, so equality and hashing are structural: two records holding the
same timestamp, customer and items compare equal and collapse inside a set.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import AwareDatetime, BaseModel, Field

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
}


class Customer(BaseModel):
    """
    The buyer attached to a purchase. Only `email` is used by queries.
    """

    email: str = Field(..., description="Email address, used as a lookup key.")
    first_name: Optional[str] = Field(None, description="Given name.")
    last_name: Optional[str] = Field(None, description="Family name.")

    model_config = _FROZEN


class LineItem(BaseModel):
    """
    One sold product line.
    """

    name: str = Field(..., description="Product name.")
    regular_price: Decimal = Field(..., ge=0, description="List price before discounts.")
    final_price: Decimal = Field(..., ge=0, description="Price actually charged.")

    model_config = _FROZEN

    @property
    def discount(self) -> Decimal:
        """Regular price minus final price; not clamped at zero."""
        return self.regular_price - self.final_price


class PurchaseRecord(BaseModel):
    """
    A single purchase transaction.
    """

    purchased_at: AwareDatetime = Field(..., description="Zoned purchase timestamp.")
    customer: Customer = Field(..., description="Purchasing customer.")
    items: Tuple[LineItem, ...] = Field(default=(), description="Ordered line items.")

    model_config = _FROZEN

    def _key(self) -> tuple:
        # Aware datetimes compare by instant; the offset decides the local month.
        return (self.purchased_at, self.purchased_at.utcoffset(), self.customer, self.items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PurchaseRecord):
            return NotImplemented
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total(self) -> Decimal:
        """Sum of the final prices of all line items."""
        total = Decimal("0")
        for item in self.items:
            total += item.final_price
        return total


class YearMonth(BaseModel):
    """
    A calendar month of a specific year.
    """

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    model_config = _FROZEN

    @classmethod
    def of(cls, moment: datetime) -> "YearMonth":
        return cls(year=moment.year, month=moment.month)

    @classmethod
    def parse(cls, value: str) -> "YearMonth":
        """
        Parse a ``YYYY-MM`` string.

        Raises ValueError (pydantic ValidationError included) on bad input.
        """
        year, sep, month = value.strip().partition("-")
        if not sep or not year.isdigit() or not month.isdigit():
            raise ValueError(f"Expected YYYY-MM, got '{value}'")
        return cls(year=int(year), month=int(month))

    def contains(self, moment: datetime) -> bool:
        """True when `moment` falls in this month and year, read in its own zone."""
        return moment.year == self.year and moment.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


__all__ = ["Customer", "LineItem", "PurchaseRecord", "YearMonth"]
