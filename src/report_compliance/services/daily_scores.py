from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from report_compliance.domain.models import DailyScore, ReportStatus, SubmissionEvent

CENT = Decimal("0.01")


def to_decimal(points: float) -> Decimal:
    return Decimal(str(points))


def to_points(total: Decimal) -> float:
    return float(total.quantize(CENT, rounding=ROUND_HALF_UP))


def group_events_by_day(
    events: Iterable[SubmissionEvent],
) -> dict[tuple[date, str], list[SubmissionEvent]]:
    grouped: dict[tuple[date, str], list[SubmissionEvent]] = defaultdict(list)
    for event in events:
        grouped[(event.day, event.responsible)].append(event)
    return dict(grouped)


def aggregate_by_day(
    events: Iterable[SubmissionEvent],
    group_by_responsible: bool,
) -> dict[tuple[date, str], float] | dict[date, float]:
    """Sum stored points per day, optionally split per responsible.

    Keys are ``(day, responsible)`` when ``group_by_responsible`` is set and
    plain days otherwise. Days without events are absent.
    """
    totals: dict = defaultdict(Decimal)
    for event in events:
        key = (event.day, event.responsible) if group_by_responsible else event.day
        totals[key] += to_decimal(event.points)
    return {key: to_points(total) for key, total in totals.items()}


def build_daily_scores(events: Iterable[SubmissionEvent]) -> list[DailyScore]:
    scores: list[DailyScore] = []
    for (day, responsible), day_events in group_events_by_day(events).items():
        statuses = [event.status for event in day_events]
        scores.append(
            DailyScore(
                day=day,
                responsible=responsible,
                points=to_points(sum((to_decimal(e.points) for e in day_events), Decimal(0))),
                reports_count=len(day_events),
                on_time_count=statuses.count(ReportStatus.ON_TIME),
                late_count=statuses.count(ReportStatus.LATE),
                error_count=statuses.count(ReportStatus.MISSED_OR_WRONG),
            )
        )
    scores.sort(key=lambda score: (score.day, score.responsible))
    return scores
