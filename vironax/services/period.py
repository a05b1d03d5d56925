"""
Reporting windows.

A window is an inclusive calendar-day range. Period-over-period analysis
always compares a window against the equal-length window that ends the
day before it starts.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Union


def _to_date(value: Union[date, str]) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive [start_date, end_date] range of calendar days"""
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError(
                f"Window end {self.end_date.isoformat()} is before start {self.start_date.isoformat()}"
            )

    @classmethod
    def from_iso(cls, start: Union[date, str], end: Union[date, str]) -> "PeriodWindow":
        return cls(_to_date(start), _to_date(end))

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def previous(self) -> "PeriodWindow":
        """Equal-length window ending the day before this one starts."""
        prev_end = self.start_date - timedelta(days=1)
        prev_start = prev_end - timedelta(days=self.days - 1)
        return PeriodWindow(prev_start, prev_end)

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": self.days,
        }
