from __future__ import annotations

from datetime import date, datetime
import json
import re
from typing import Any

import pandas as pd

from report_compliance.domain.constants import (
    DEFAULT_DEADLINE,
    DEFAULT_POINTS_LATE,
    DEFAULT_POINTS_MISSED,
    DEFAULT_POINTS_ON_TIME,
)
from report_compliance.domain.models import ReportStatus, ReportTypeConfig, SubmissionEvent


def normalize_name(value: str | None) -> str:
    if not value:
        return ""
    cleaned = value.replace("\ufeff", "").replace("\u00a0", " ").strip()
    return re.sub(r"\s+", " ", cleaned)


def parse_responsibles(value: Any) -> tuple[str, ...]:
    """Ordered, de-duplicated responsible names from a list, JSON text or CSV text."""
    if value in (None, ""):
        return ()
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError:
                value = re.split(r"[,;\n]+", text.strip("[]"))
        else:
            value = re.split(r"[,;\n]+", text)
    names: list[str] = []
    for token in value:
        name = normalize_name(str(token).strip().strip('"'))
        if name and name not in names:
            names.append(name)
    return tuple(names)


def parse_date(value: Any) -> date | None:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    if value in (None, ""):
        return None
    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()


def _to_int(value: Any, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_config_row(row: dict[str, Any]) -> ReportTypeConfig:
    name = normalize_name(row.get("name"))
    if not name:
        raise ValueError("Report type config requires a name.")
    return ReportTypeConfig(
        name=name,
        responsibles=parse_responsibles(row.get("responsibles")),
        deadline=str(row.get("deadline") or DEFAULT_DEADLINE),
        points_on_time=_to_int(row.get("points_on_time"), DEFAULT_POINTS_ON_TIME),
        points_late=_to_int(row.get("points_late"), DEFAULT_POINTS_LATE),
        points_missed=_to_int(row.get("points_missed"), DEFAULT_POINTS_MISSED),
        config_id=row.get("id"),
    )


def parse_event_row(row: dict[str, Any]) -> SubmissionEvent:
    day = parse_date(row.get("day"))
    if day is None:
        raise ValueError(f"Submission row has an invalid date: {row.get('day')!r}")
    points = row.get("points")
    if points in (None, ""):
        raise ValueError("Submission row is missing its frozen points.")
    return SubmissionEvent(
        responsible=normalize_name(row.get("responsible")),
        day=day,
        report_type=str(row.get("report_type") or ""),
        status=ReportStatus.parse(row.get("status")),
        points=round(float(points), 2),
        note=row.get("note"),
        event_id=row.get("id"),
    )


def parse_event_rows(rows: list[dict[str, Any]]) -> tuple[list[SubmissionEvent], int]:
    """Parse store rows, counting rows with unusable dates or points.

    Unknown status codes are not counted; they raise.
    """
    parsed: list[SubmissionEvent] = []
    issues = 0
    for row in rows:
        if parse_date(row.get("day")) is None or row.get("points") in (None, ""):
            issues += 1
            continue
        parsed.append(parse_event_row(row))
    return parsed, issues
