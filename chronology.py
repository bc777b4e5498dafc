"""
In-simulation calendar.
Uses a fixed 30-day month and 12-month year, not the Gregorian calendar.
"""

from dataclasses import dataclass

DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class SimDate:
    year: int = 0
    month: int = 1
    day: int = 1

    def format(self) -> str:
        return f"{self.day}.{self.month:02d}.{self.year}"

    def __str__(self) -> str:
        return self.format()


def advance(date: SimDate, days: int) -> SimDate:
    """Add days to date, carrying overflow into months and then years."""
    if days < 0:
        raise ValueError(f"cannot advance the calendar by {days} days")

    day_offset = date.day - 1 + days
    day = day_offset % DAYS_PER_MONTH + 1

    month_offset = date.month - 1 + day_offset // DAYS_PER_MONTH
    month = month_offset % MONTHS_PER_YEAR + 1

    year = date.year + month_offset // MONTHS_PER_YEAR
    return SimDate(year=year, month=month, day=day)
