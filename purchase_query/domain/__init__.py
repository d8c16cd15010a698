"""
Domain package for Purchase Query.

Exports the immutable purchase models the query service reads.
Keep this package focused on data definitions and validation concerns.
"""

from purchase_query.domain.models import Customer, LineItem, PurchaseRecord, YearMonth

__all__ = [
    "Customer",
    "LineItem",
    "PurchaseRecord",
    "YearMonth",
]
