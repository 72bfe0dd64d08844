from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from report_compliance.domain.constants import (
    DEFAULT_DEADLINE,
    DEFAULT_POINTS_LATE,
    DEFAULT_POINTS_MISSED,
    DEFAULT_POINTS_ON_TIME,
    LEGACY_STATUS_CODES,
)


class ReportStatus(str, Enum):
    ON_TIME = "ON_TIME"
    LATE = "LATE"
    MISSED_OR_WRONG = "MISSED_OR_WRONG"

    @classmethod
    def parse(cls, value: ReportStatus | str) -> ReportStatus:
        """Map an enum member, its value or a legacy store code to a status.

        Unknown codes raise ``ValueError``; there is no fallback status.
        """
        if isinstance(value, cls):
            return value
        code = str(value or "").strip().upper()
        code = LEGACY_STATUS_CODES.get(code, code)
        try:
            return cls(code)
        except ValueError as exc:
            raise ValueError(f"Unknown report status: {value!r}") from exc

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    ReportStatus.ON_TIME: "On time",
    ReportStatus.LATE: "Late",
    ReportStatus.MISSED_OR_WRONG: "Missed / wrong",
}


@dataclass(frozen=True)
class ReportTypeConfig:
    name: str
    responsibles: tuple[str, ...] = ()
    deadline: str = DEFAULT_DEADLINE
    points_on_time: int = DEFAULT_POINTS_ON_TIME
    points_late: int = DEFAULT_POINTS_LATE
    points_missed: int = DEFAULT_POINTS_MISSED
    config_id: str | None = None

    def lists(self, responsible: str) -> bool:
        return responsible.strip() in self.responsibles


@dataclass(frozen=True)
class SubmissionEvent:
    responsible: str
    day: date
    report_type: str
    status: ReportStatus
    points: float
    note: str | None = None
    event_id: str | None = None


@dataclass(frozen=True)
class DailyScore:
    day: date
    responsible: str
    points: float
    reports_count: int
    on_time_count: int
    late_count: int
    error_count: int


@dataclass(frozen=True)
class AggregatedScore:
    responsible: str
    total_on_time: int
    total_late: int
    total_errors: int
    total_reports: int
    total_days: int
    total_normalized_score: float
    average_daily_score: float


@dataclass(frozen=True)
class TrendPoint:
    day: date
    normalized_score: float
