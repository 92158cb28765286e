"""
Ordered local store of completion records.

The cache is keyed by problem id and always iterates in ascending
repeat-date order. Every mutating operation restores that order before it
returns.
"""

from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta, timezone

from .models import Record


def _by_repeat_date(records: Iterable[Record]) -> dict[str, Record]:
    # sorted() is stable, so equal repeat dates keep their relative order.
    ordered = sorted(records, key=lambda r: r.repeat_date)
    return {r.id: r for r in ordered}


class CompletionCache:
    """Key-unique collection of Records ordered by repeat date."""

    def __init__(self, records: Iterable[Record] = ()):
        self._entries: dict[str, Record] = {}
        self.replace_all(records)

    def insert_or_replace(self, record: Record) -> None:
        """Insert `record`, dropping any existing entry with the same id."""
        remaining = (r for r in self._entries.values() if r.id != record.id)
        self._entries = _by_repeat_date([*remaining, record])

    def delete(self, problem_id: str) -> None:
        self._entries.pop(problem_id, None)

    def replace_all(self, records: Iterable[Record]) -> None:
        """
        Rebuild the cache from `records`.

        Later duplicates of an id overwrite earlier ones before sorting.
        """
        deduped: dict[str, Record] = {}
        for record in records:
            deduped.pop(record.id, None)
            deduped[record.id] = record
        self._entries = _by_repeat_date(deduped.values())

    def was_completed_within(
        self, problem_id: str, window: timedelta, now: datetime | None = None
    ) -> bool:
        """Return True if `problem_id` was last completed inside `window` before `now`."""
        record = self._entries.get(problem_id)
        if record is None:
            return False
        now = now or datetime.now(timezone.utc)
        return record.last_completion_date > now - window

    def due(self, now: datetime | None = None) -> list[Record]:
        """Records whose repeat date has arrived, in repeat-date order."""
        now = now or datetime.now(timezone.utc)
        return [r for r in self._entries.values() if r.repeat_date <= now]

    def get(self, problem_id: str) -> Record | None:
        return self._entries.get(problem_id)

    def records(self) -> list[Record]:
        return list(self._entries.values())

    def __contains__(self, problem_id: object) -> bool:
        return problem_id in self._entries

    def __iter__(self) -> Iterator[Record]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CompletionCache({len(self)} records)"
