from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum


class RangePreset(str, Enum):
    LAST_12_MONTHS = "last12"
    YEAR_TO_DATE = "ytd"
    LAST_YEAR = "lastYear"


LOOKBACK_DAYS = 365


@dataclass(frozen=True)
class ReportWindow:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("ReportWindow start must be on or before end.")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def resolve_report_window(preset: RangePreset | str, *, today: date) -> ReportWindow:
    """Translate a lookback preset into an inclusive date window ending at (or before) `today`."""
    try:
        preset = RangePreset(preset)
    except ValueError as exc:
        allowed = ", ".join(p.value for p in RangePreset)
        raise ValueError(f"Unknown range preset '{preset}' (expected one of: {allowed}).") from exc

    if preset == RangePreset.YEAR_TO_DATE:
        return ReportWindow(start=date(today.year, 1, 1), end=today)
    if preset == RangePreset.LAST_YEAR:
        return ReportWindow(start=date(today.year - 1, 1, 1), end=date(today.year - 1, 12, 31))
    return ReportWindow(start=today - timedelta(days=LOOKBACK_DAYS), end=today)
