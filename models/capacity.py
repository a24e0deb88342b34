"""Reading capacity models.

HistoryWindow describes how far back reading history is considered.
CapacityEstimate is the derived weekly article quota, recomputed every run.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

WindowUnit = Literal["days", "weeks", "months"]


def _subtract_months(moment: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping the day to the target month."""
    total = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class HistoryWindow(BaseModel):
    """A lookback window such as "6 weeks" or "6 months".

    Example:
        >>> window = HistoryWindow.parse("6 weeks")
        >>> window.days()
        42
    """

    model_config = ConfigDict(frozen=True)

    amount: int = Field(gt=0, description="Number of units to look back")
    unit: WindowUnit = Field(description="days, weeks or months")

    @classmethod
    def parse(cls, text: str) -> "HistoryWindow":
        """Parse "<amount> <unit>", accepting singular units ("1 month").

        Raises:
            ValueError: If the text is malformed
        """
        parts = text.split()
        if len(parts) != 2:
            raise ValueError("expected '<amount> <unit>'")
        amount, unit = parts
        unit = unit.lower()
        if not unit.endswith("s"):
            unit += "s"
        if unit not in ("days", "weeks", "months"):
            raise ValueError(f"unknown unit '{parts[1]}'")
        # pydantic's ValidationError is a ValueError subclass
        return cls(amount=int(amount), unit=unit)

    def cutoff(self, now: datetime | None = None) -> datetime:
        """Return the moment this window starts, counting back from now (UTC)."""
        now = now or datetime.now(timezone.utc)
        if self.unit == "days":
            return now - timedelta(days=self.amount)
        if self.unit == "weeks":
            return now - timedelta(weeks=self.amount)
        return _subtract_months(now, self.amount)

    def days(self, now: datetime | None = None) -> int:
        """Length of the window in whole days (calendar-accurate for months)."""
        if self.unit == "days":
            return self.amount
        if self.unit == "weeks":
            return self.amount * 7
        now = now or datetime.now(timezone.utc)
        return (now - self.cutoff(now)).days

    @property
    def label(self) -> str:
        """Human-readable form, e.g. "6 months" or "1 week"."""
        unit = self.unit[:-1] if self.amount == 1 else self.unit
        return f"{self.amount} {unit}"


class CapacityEstimate(BaseModel):
    """How many articles the reader can take on this week.

    Attributes:
        reading_capacity_per_day: Well-read documents per day in the window
        saving_capacity_per_day: Articles saved per day (reading * ratio)
        recommended_article_count: Weekly quota, clamped to [3, 25]
    """

    model_config = ConfigDict(frozen=True)

    reading_capacity_per_day: float = Field(ge=0.0)
    saving_capacity_per_day: float = Field(ge=0.0)
    recommended_article_count: int = Field(ge=3, le=25)
