from datetime import date, datetime, timedelta

from journify.models import JournalEntry


class SteppingClock:
    """Clock that advances by a fixed step on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self._current = start
        self._step = step

    def __call__(self) -> datetime:
        value = self._current
        self._current += self._step
        return value


class FrozenClock:
    def __init__(self, value: datetime):
        self.value = value

    def __call__(self) -> datetime:
        return self.value


def make_entry(entry_date: date, **fields) -> JournalEntry:
    fields.setdefault("title", f"Entry {entry_date.isoformat()}")
    fields.setdefault("content", "Wrote a few words.")
    return JournalEntry(entry_date=entry_date, **fields)
