from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

import pandas as pd

from report_compliance.domain.constants import DEFAULT_TREND_DAYS
from report_compliance.domain.models import SubmissionEvent, TrendPoint
from report_compliance.services.daily_scores import aggregate_by_day


def trend_window(window_days: int, today: date) -> tuple[date, date]:
    if window_days <= 0:
        raise ValueError(f"Trend window must be a positive number of days, got {window_days}.")
    return today - timedelta(days=window_days - 1), today


def build_trend(
    events: Iterable[SubmissionEvent],
    window_days: int = DEFAULT_TREND_DAYS,
    today: date | None = None,
) -> list[TrendPoint]:
    """System-wide points per day for the last ``window_days`` days, oldest first.

    The series is sparse: days without events are left out.
    """
    cutoff, last_day = trend_window(window_days, today or date.today())
    recent = [event for event in events if cutoff <= event.day <= last_day]
    totals = aggregate_by_day(recent, group_by_responsible=False)
    return [TrendPoint(day=day, normalized_score=totals[day]) for day in sorted(totals)]


def trend_to_frame(points: list[TrendPoint]) -> pd.DataFrame:
    df = pd.DataFrame(
        [{"day": point.day, "normalized_score": point.normalized_score} for point in points],
        columns=["day", "normalized_score"],
    )
    df["day"] = pd.to_datetime(df["day"])
    return df
