from __future__ import annotations

from datetime import date
from fractions import Fraction
import logging
import math
from typing import Iterable

from report_compliance.domain.constants import DAILY_POINTS_POOL, LATE_PENALTY_FACTOR
from report_compliance.domain.models import ReportStatus, ReportTypeConfig, SubmissionEvent
from report_compliance.services.rows import normalize_name

LOGGER = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """The responsible is not assigned to any report type config."""


def round_points(value: Fraction) -> float:
    # Two decimals, halves away from zero.
    cents = math.floor(abs(value) * 100 + Fraction(1, 2))
    return (cents if value >= 0 else -cents) / 100


def compute_points(status: ReportStatus, workload: int) -> float:
    """Normalized points for one submission.

    The daily pool of 20 points is split evenly across the report types the
    responsible is assigned to: on time earns the full share, late loses
    half of it and missed / wrong loses all of it.
    """
    if workload <= 0:
        raise ConfigurationError(
            f"Workload must be a positive number of report types, got {workload}."
        )
    if not isinstance(status, ReportStatus):
        raise ValueError(f"Unknown report status: {status!r}")

    base = Fraction(DAILY_POINTS_POOL, workload)
    if status is ReportStatus.ON_TIME:
        points = base
    elif status is ReportStatus.LATE:
        points = -base / LATE_PENALTY_FACTOR
    elif status is ReportStatus.MISSED_OR_WRONG:
        points = -base
    else:
        raise ValueError(f"Unknown report status: {status!r}")
    return round_points(points)


def workload_for(responsible: str, configs: Iterable[ReportTypeConfig]) -> int:
    clean_responsible = normalize_name(responsible)
    return sum(1 for config in configs if config.lists(clean_responsible))


def score_submission(
    responsible: str,
    day: date,
    report_type: str,
    status: ReportStatus | str,
    configs: Iterable[ReportTypeConfig],
    note: str | None = None,
) -> SubmissionEvent:
    """Score one submission against the configs in force now.

    Raises ``ConfigurationError`` when the responsible has no report types and
    ``ValueError`` when ``report_type`` is unknown or does not list them.
    """
    configs = list(configs)
    clean_responsible = normalize_name(responsible)
    clean_report_type = normalize_name(report_type)
    parsed_status = ReportStatus.parse(status)
    workload = workload_for(clean_responsible, configs)
    if workload == 0:
        raise ConfigurationError(
            f"Responsible '{clean_responsible}' is not assigned to any report type."
        )
    config = next((item for item in configs if item.name == clean_report_type), None)
    if config is None:
        raise ValueError(f"Unknown report type '{clean_report_type}'.")
    if not config.lists(clean_responsible):
        raise ValueError(
            f"Responsible '{clean_responsible}' is not assigned to report type '{clean_report_type}'."
        )
    points = compute_points(parsed_status, workload)
    LOGGER.debug(
        "Scored %s/%s on %s: %s (workload=%s) -> %.2f",
        clean_responsible,
        clean_report_type,
        day.isoformat(),
        parsed_status.value,
        workload,
        points,
    )
    return SubmissionEvent(
        responsible=clean_responsible,
        day=day,
        report_type=clean_report_type,
        status=parsed_status,
        points=points,
        note=note,
    )
