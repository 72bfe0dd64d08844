from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable

import pandas as pd

from report_compliance.domain.constants import RANKING_PERIODS
from report_compliance.domain.models import (
    AggregatedScore,
    ReportStatus,
    ReportTypeConfig,
    SubmissionEvent,
)
from report_compliance.services.daily_scores import group_events_by_day, to_decimal, to_points

RANKING_COLUMNS = {
    "responsible": "Responsible",
    "total_normalized_score": "Total score",
    "average_daily_score": "Average / day",
    "total_days": "Days",
    "total_on_time": "On time",
    "total_late": "Late",
    "total_errors": "Missed / wrong",
    "total_reports": "Reports",
}


def period_start(period: str, today: date) -> date | None:
    if period == "week":
        # Weeks start on Sunday.
        return today - timedelta(days=(today.weekday() + 1) % 7)
    if period == "month":
        return today.replace(day=1)
    if period == "total":
        return None
    raise ValueError(f"Unknown ranking period: {period!r} (expected one of {RANKING_PERIODS}).")


def _in_window(event: SubmissionEvent, start_date: date | None, end_date: date | None) -> bool:
    if start_date and event.day < start_date:
        return False
    if end_date and event.day > end_date:
        return False
    return True


def events_in_period(
    events: Iterable[SubmissionEvent],
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[SubmissionEvent]:
    return [event for event in events if _in_window(event, start_date, end_date)]


def rank_period(
    events: Iterable[SubmissionEvent],
    start_date: date | None = None,
    end_date: date | None = None,
    configs: Iterable[ReportTypeConfig] | None = None,
) -> list[AggregatedScore]:
    """Per-responsible totals over an optional date window.

    ``configs`` is accepted for callers that pass it alongside the events;
    ranking only uses the points frozen on each event. Ordered by total
    score descending, then responsible ascending.
    """
    filtered = events_in_period(events, start_date, end_date)

    stats: dict[str, dict[str, Any]] = {}

    def _ensure_stats(responsible: str) -> dict[str, Any]:
        if responsible not in stats:
            stats[responsible] = {
                "days": 0,
                "on_time": 0,
                "late": 0,
                "errors": 0,
                "reports": 0,
                "total": Decimal(0),
            }
        return stats[responsible]

    for (_, responsible), day_events in group_events_by_day(filtered).items():
        entry = _ensure_stats(responsible)
        entry["days"] += 1
        for event in day_events:
            entry["reports"] += 1
            entry["total"] += to_decimal(event.points)
            if event.status is ReportStatus.ON_TIME:
                entry["on_time"] += 1
            elif event.status is ReportStatus.LATE:
                entry["late"] += 1
            else:
                entry["errors"] += 1

    ranking = [
        AggregatedScore(
            responsible=responsible,
            total_on_time=entry["on_time"],
            total_late=entry["late"],
            total_errors=entry["errors"],
            total_reports=entry["reports"],
            total_days=entry["days"],
            total_normalized_score=to_points(entry["total"]),
            average_daily_score=to_points(entry["total"] / entry["days"]),
        )
        for responsible, entry in stats.items()
        if entry["days"] > 0
    ]
    ranking.sort(key=lambda score: (-score.total_normalized_score, score.responsible))
    return ranking


def ranking_to_frame(ranking: list[AggregatedScore]) -> pd.DataFrame:
    if not ranking:
        return pd.DataFrame(columns=["Rank", *RANKING_COLUMNS.values()])
    df = pd.DataFrame(
        [{label: getattr(score, field) for field, label in RANKING_COLUMNS.items()} for score in ranking]
    )
    df.insert(0, "Rank", range(1, len(df) + 1))
    return df
