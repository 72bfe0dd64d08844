from __future__ import annotations

import argparse
from datetime import date
import logging
import sqlite3
import sys

from report_compliance.config import db_path_from_env, trend_days_from_env
from report_compliance.data.db import connect, init_db
from report_compliance.data.repositories import ReportConfigRepository, SubmissionRepository
from report_compliance.domain.constants import RANKING_PERIODS
from report_compliance.domain.models import ReportStatus, SubmissionEvent
from report_compliance.services.points import score_submission
from report_compliance.services.ranking import period_start, rank_period, ranking_to_frame
from report_compliance.services.rows import parse_event_rows
from report_compliance.services.trend import build_trend

LOGGER = logging.getLogger(__name__)


def _parse_today(value: str | None) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError("Invalid date format (expected YYYY-MM-DD).") from exc


def _get_db_connection() -> sqlite3.Connection:
    con = connect(db_path_from_env())
    init_db(con)
    return con


def _load_events(con: sqlite3.Connection) -> list[SubmissionEvent]:
    events, issues = parse_event_rows(SubmissionRepository(con).list_rows())
    if issues:
        LOGGER.warning("Skipped %s submissions with an invalid date or missing points.", issues)
    return events


def run_ranking(con: sqlite3.Connection, period: str, today: date) -> str:
    events = _load_events(con)
    ranking = rank_period(events, start_date=period_start(period, today))
    if not ranking:
        return "No submissions in the selected period."
    return ranking_to_frame(ranking).to_string(index=False)


def run_trend(con: sqlite3.Connection, days: int, today: date) -> str:
    events = _load_events(con)
    points = build_trend(events, window_days=days, today=today)
    if not points:
        return f"No submissions in the last {days} days."
    return "\n".join(f"{point.day.isoformat()}  {point.normalized_score:8.2f}" for point in points)


def run_score(
    con: sqlite3.Connection,
    responsible: str,
    report_type: str,
    status: str,
    day: date,
    dry_run: bool,
) -> str:
    if dry_run:
        configs = ReportConfigRepository(con).list_configs()
        event = score_submission(responsible, day, report_type, status, configs)
        return f"{event.responsible} / {event.report_type} on {day.isoformat()}: {event.points:.2f} (not stored)"
    event = SubmissionRepository(con).create_submission(responsible, day, report_type, status)
    return f"{event.responsible} / {event.report_type} on {day.isoformat()}: {event.points:.2f}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Report compliance scoring and ranking.")
    sub = parser.add_subparsers(dest="mode", required=True)

    ranking = sub.add_parser("ranking", help="Print the period ranking.")
    ranking.add_argument("--period", choices=RANKING_PERIODS, default="total")
    ranking.add_argument("--today", help="Override today date (YYYY-MM-DD).")

    trend = sub.add_parser("trend", help="Print the daily trend series.")
    trend.add_argument("--days", type=int, default=None, help="Window length in days.")
    trend.add_argument("--today", help="Override today date (YYYY-MM-DD).")

    score = sub.add_parser("score", help="Score and store one submission.")
    score.add_argument("responsible")
    score.add_argument("report_type")
    score.add_argument("status", type=str.upper, choices=[status.value for status in ReportStatus])
    score.add_argument("--date", dest="day", help="Submission date (YYYY-MM-DD), default today.")
    score.add_argument("--dry-run", action="store_true", help="Print points without storing.")
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = build_parser().parse_args(argv)

    con = _get_db_connection()
    try:
        if args.mode == "ranking":
            output = run_ranking(con, args.period, _parse_today(args.today))
        elif args.mode == "trend":
            days = args.days if args.days is not None else trend_days_from_env()
            output = run_trend(con, days, _parse_today(args.today))
        else:
            output = run_score(
                con,
                args.responsible,
                args.report_type,
                args.status,
                _parse_today(args.day),
                args.dry_run,
            )
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 1
    finally:
        con.close()

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
