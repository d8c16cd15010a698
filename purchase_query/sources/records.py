"""
Concrete record sources.

- InMemoryRecordSource wraps a sequence handed over at construction.
- JsonFileRecordSource re-reads and validates a JSON array on every fetch, so
  edits to the file are visible to the next query without restarting.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from purchase_query.domain.models import PurchaseRecord
from purchase_query.errors import RecordSourceError
from purchase_query.sources.abstract import AbstractRecordSource
from purchase_query.utils.logging import get_logger

log = get_logger(__name__)

_RECORDS_ADAPTER = TypeAdapter(List[PurchaseRecord])


class InMemoryRecordSource(AbstractRecordSource):
    """
    Serve a fixed collection of records.
    """

    def __init__(self, records: Iterable[PurchaseRecord] = ()) -> None:
        self._records: Tuple[PurchaseRecord, ...] = tuple(records)

    def fetch_all(self) -> Sequence[PurchaseRecord]:
        return self._records


class JsonFileRecordSource(AbstractRecordSource):
    """
    Load records from a JSON file containing a top-level array.

    Parameters
    ----------
    path : Path | str
        Location of the JSON document.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def fetch_all(self) -> Sequence[PurchaseRecord]:
        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            log.error(
                f"Cannot read record file {self._path}",
                extra={"path": str(self._path), "error": str(exc)},
            )
            raise RecordSourceError(f"Cannot read record file '{self._path}': {exc}") from exc

        try:
            records = _RECORDS_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            log.error(
                f"Invalid record file {self._path}",
                extra={"path": str(self._path), "errors": exc.error_count()},
            )
            raise RecordSourceError(f"Invalid record file '{self._path}': {exc}") from exc

        log.debug("Records loaded", extra={"path": str(self._path), "records": len(records)})
        return tuple(records)


def dump_records(records: Iterable[PurchaseRecord]) -> bytes:
    """Serialize records to the JSON layout JsonFileRecordSource reads."""
    return _RECORDS_ADAPTER.dump_json(list(records), indent=2)


__all__ = ["InMemoryRecordSource", "JsonFileRecordSource", "dump_records"]
