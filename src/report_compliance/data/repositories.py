from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
import json
import logging
import sqlite3
from typing import Any
from uuid import uuid4

from report_compliance.domain.constants import (
    DEFAULT_DEADLINE,
    DEFAULT_POINTS_LATE,
    DEFAULT_POINTS_MISSED,
    DEFAULT_POINTS_ON_TIME,
)
from report_compliance.domain.models import ReportStatus, ReportTypeConfig, SubmissionEvent
from report_compliance.services.points import score_submission
from report_compliance.services.rows import (
    normalize_name,
    parse_config_row,
    parse_event_row,
    parse_responsibles,
)

LOGGER = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReportConfigRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def list_rows(self) -> list[dict[str, Any]]:
        cur = self.con.execute(
            """
            SELECT id, name, deadline, points_on_time, points_late, points_missed,
                   responsibles, created_at, updated_at
            FROM report_configs
            ORDER BY name ASC
            """
        )
        return [dict(row) for row in cur.fetchall()]

    def list_configs(self) -> list[ReportTypeConfig]:
        return [parse_config_row(row) for row in self.list_rows()]

    def get_config(self, config_id: str) -> ReportTypeConfig | None:
        row = self.con.execute(
            """
            SELECT id, name, deadline, points_on_time, points_late, points_missed, responsibles
            FROM report_configs
            WHERE id = ?
            """,
            (config_id,),
        ).fetchone()
        return parse_config_row(dict(row)) if row else None

    def save_config(self, payload: dict[str, Any], config_id: str | None = None) -> str:
        """Insert a new report type, or update the one with ``config_id``.

        Point values missing from ``payload`` keep their stored value on update.
        Already stored submissions keep their points.
        """
        name = normalize_name(payload.get("name"))
        if not name:
            raise ValueError("Report type name is required.")
        if self._name_exists(name, exclude_id=config_id):
            raise ValueError(f"Report type '{name}' already exists.")

        current = self.get_config(config_id) if config_id else None
        stored_points = {
            "points_on_time": current.points_on_time if current else DEFAULT_POINTS_ON_TIME,
            "points_late": current.points_late if current else DEFAULT_POINTS_LATE,
            "points_missed": current.points_missed if current else DEFAULT_POINTS_MISSED,
        }
        responsibles_json = json.dumps(
            list(parse_responsibles(payload.get("responsibles"))), ensure_ascii=False
        )
        values = (
            name,
            str(payload.get("deadline") or DEFAULT_DEADLINE),
            *(int(payload.get(key, default)) for key, default in stored_points.items()),
            responsibles_json,
        )
        now = _now()
        if config_id:
            self.con.execute(
                """
                UPDATE report_configs
                SET name = ?, deadline = ?, points_on_time = ?, points_late = ?,
                    points_missed = ?, responsibles = ?, updated_at = ?
                WHERE id = ?
                """,
                (*values, now, config_id),
            )
            LOGGER.info("Updated report type %s (%s)", name, config_id)
        else:
            config_id = str(uuid4())
            self.con.execute(
                """
                INSERT INTO report_configs (
                  id, name, deadline, points_on_time, points_late, points_missed,
                  responsibles, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (config_id, *values, now, now),
            )
            LOGGER.info("Created report type %s (%s)", name, config_id)
        self.con.commit()
        return config_id

    def delete_config(self, config_id: str) -> None:
        self.con.execute("DELETE FROM report_configs WHERE id = ?", (config_id,))
        self.con.commit()
        LOGGER.info("Deleted report type %s", config_id)

    def list_responsibles(self) -> list[str]:
        names: set[str] = set()
        for config in self.list_configs():
            names.update(config.responsibles)
        return sorted(names)

    def _name_exists(self, name: str, exclude_id: str | None = None) -> bool:
        query = "SELECT 1 FROM report_configs WHERE lower(name) = lower(?)"
        params: list[Any] = [name]
        if exclude_id:
            query += " AND id != ?"
            params.append(exclude_id)
        return self.con.execute(query, params).fetchone() is not None


class SubmissionRepository:
    def __init__(self, con: sqlite3.Connection) -> None:
        self.con = con

    def list_rows(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
        responsible: str | None = None,
        report_type: str | None = None,
    ) -> list[dict[str, Any]]:
        query = """
            SELECT id, day, report_type, responsible, status, points, note, created_at
            FROM submission_events
        """
        filters: list[str] = []
        params: list[Any] = []
        if date_from:
            filters.append("day >= ?")
            params.append(date_from.isoformat())
        if date_to:
            filters.append("day <= ?")
            params.append(date_to.isoformat())
        if responsible:
            filters.append("responsible = ?")
            params.append(responsible)
        if report_type:
            filters.append("report_type = ?")
            params.append(report_type)
        if filters:
            query += " WHERE " + " AND ".join(filters)
        query += " ORDER BY day DESC, created_at DESC"
        cur = self.con.execute(query, params)
        return [dict(row) for row in cur.fetchall()]

    def list_events(
        self,
        date_from: date | None = None,
        date_to: date | None = None,
        responsible: str | None = None,
        report_type: str | None = None,
    ) -> list[SubmissionEvent]:
        rows = self.list_rows(date_from, date_to, responsible, report_type)
        return [parse_event_row(row) for row in rows]

    def create_submission(
        self,
        responsible: str,
        day: date,
        report_type: str,
        status: ReportStatus | str,
        note: str | None = None,
    ) -> SubmissionEvent:
        """Score a submission against the current configs and store it.

        Raises ``ConfigurationError`` before writing when the responsible has
        no report types, and ``ValueError`` for an unknown report type, a report
        type that does not list the responsible or a duplicate
        (day, report type, responsible).
        """
        configs = ReportConfigRepository(self.con).list_configs()
        event = score_submission(responsible, day, report_type, status, configs, note=note)
        event_id = str(uuid4())
        try:
            self.con.execute(
                """
                INSERT INTO submission_events (
                  id, day, report_type, responsible, status, points, note, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event_id,
                    event.day.isoformat(),
                    event.report_type,
                    event.responsible,
                    event.status.value,
                    event.points,
                    event.note,
                    _now(),
                ),
            )
        except sqlite3.IntegrityError as exc:
            self.con.rollback()
            LOGGER.warning(
                "Rejected duplicate submission %s/%s on %s",
                event.responsible,
                event.report_type,
                event.day.isoformat(),
            )
            raise ValueError(
                "A submission for this responsible, date and report type already exists."
            ) from exc
        self.con.commit()
        LOGGER.info(
            "Stored submission %s/%s on %s worth %.2f",
            event.responsible,
            event.report_type,
            event.day.isoformat(),
            event.points,
        )
        return replace(event, event_id=event_id)

    def delete_submission(self, event_id: str) -> None:
        self.con.execute("DELETE FROM submission_events WHERE id = ?", (event_id,))
        self.con.commit()
        LOGGER.info("Deleted submission %s", event_id)
