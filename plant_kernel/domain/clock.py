"""
Injectable time source.

Services and engines take a ``Clock`` instead of calling ``datetime.now()``
or ``date.today()``, so that punches, default payroll periods, upload
timestamps and the "is this day in the future?" check are reproducible in
tests.  ``SystemClock`` is the only place wall-clock time is read.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta


class Clock(ABC):
    """Source of timezone-aware ``datetime`` values."""

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    Clock that stands still until a test moves it.

    Defaults to 2024-01-01 12:00 UTC.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._current = fixed_time or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = time

    def advance(self, seconds: int = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def advance_hours(self, hours: float) -> None:
        """Move forward by ``hours``; fractions are kept to the second."""
        self.advance(int(hours * 3600))
