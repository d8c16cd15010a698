"""
Concrete clocks.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from purchase_query.errors import InvalidArgumentError
from purchase_query.sources.abstract import AbstractClock


def resolve_timezone(name: str) -> tzinfo:
    """
    Map an IANA zone name to a tzinfo. ``UTC`` never touches the tz database.
    """
    if name.upper() in {"UTC", "Z"}:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidArgumentError(f"Unknown time zone '{name}'") from exc


class SystemClock(AbstractClock):
    """
    Wall clock reading in a fixed time zone.
    """

    def __init__(self, zone: str | tzinfo = "UTC") -> None:
        self._zone = resolve_timezone(zone) if isinstance(zone, str) else zone

    def now(self) -> datetime:
        return datetime.now(self._zone)


class FixedClock(AbstractClock):
    """
    Clock pinned to a single instant. Used by tests and by `--now` on the CLI.
    """

    def __init__(self, moment: datetime) -> None:
        if moment.tzinfo is None or moment.utcoffset() is None:
            raise InvalidArgumentError("FixedClock requires a timezone-aware datetime")
        self._moment = moment

    def now(self) -> datetime:
        return self._moment


__all__ = ["SystemClock", "FixedClock", "resolve_timezone"]
