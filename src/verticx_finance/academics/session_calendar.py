"""Academic calendar resolution.

A session spans twelve months starting at the branch's session start month
and wrapping December -> January.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.constants import MONTH_NAMES, MONTHS_PER_SESSION


def session_months(start_date: date) -> list[str]:
    start = start_date.month - 1
    return list(MONTH_NAMES[start:]) + list(MONTH_NAMES[:start])


def elapsed_months(start_date: date, today: date) -> int:
    """Number of session months due so far, including the current one."""
    if today.year > start_date.year:
        count = (MONTHS_PER_SESSION - start_date.month) + today.month + 1
    elif today.year == start_date.year:
        count = today.month - start_date.month + 1
    else:
        count = 0
    return min(MONTHS_PER_SESSION, max(0, count))


def short_label(month_name: str) -> str:
    return (month_name or "").strip()[:3].title()


@dataclass(frozen=True)
class AcademicCalendar:
    start_date: date

    @property
    def months(self) -> list[str]:
        return session_months(self.start_date)

    @property
    def short_months(self) -> list[str]:
        return [short_label(m) for m in self.months]

    def year_of(self, month_name: str) -> int:
        """Calendar year in which the given session month falls."""
        month_number = [short_label(m) for m in MONTH_NAMES].index(short_label(month_name)) + 1
        if month_number < self.start_date.month:
            return self.start_date.year + 1
        return self.start_date.year

    def position_of(self, today: date) -> int:
        """1-based index of ``today``'s month in the session, 0 before it starts."""
        return elapsed_months(self.start_date, today)

    def months_due_so_far(self, today: date) -> list[str]:
        return self.months[: self.position_of(today)]
