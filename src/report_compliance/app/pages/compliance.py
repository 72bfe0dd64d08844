from __future__ import annotations

from datetime import date
import sqlite3

import altair as alt
import pandas as pd
import streamlit as st

from report_compliance.data.repositories import ReportConfigRepository, SubmissionRepository
from report_compliance.domain.constants import (
    DAILY_POINTS_POOL,
    DEFAULT_DEADLINE,
    DEFAULT_POINTS_LATE,
    DEFAULT_POINTS_MISSED,
    DEFAULT_POINTS_ON_TIME,
)
from report_compliance.domain.models import ReportStatus, ReportTypeConfig
from report_compliance.services.daily_scores import build_daily_scores
from report_compliance.services.points import compute_points, workload_for
from report_compliance.services.ranking import (
    events_in_period,
    period_start,
    rank_period,
    ranking_to_frame,
)
from report_compliance.services.rows import parse_event_rows
from report_compliance.services.trend import build_trend, trend_to_frame

PERIOD_OPTIONS = {
    "This week": "week",
    "This month": "month",
    "Total": "total",
}


def _render_methodology() -> None:
    example_rows = []
    for workload in (1, 2, 3, 4, 6):
        example_rows.append(
            {
                "Report types": workload,
                "On time": compute_points(ReportStatus.ON_TIME, workload),
                "Late": compute_points(ReportStatus.LATE, workload),
                "Missed / wrong": compute_points(ReportStatus.MISSED_OR_WRONG, workload),
            }
        )
    with st.expander("Show methodology", expanded=False):
        st.markdown(
            f"""
**Daily pool**: every responsible can earn at most {DAILY_POINTS_POOL} points per day,
split evenly across the report types they are assigned to.

- base = {DAILY_POINTS_POOL} / number of report types of the responsible
- On time: **+base**
- Late: **-base / 2**
- Missed or wrong: **-base**

Points are rounded to 2 decimals and frozen when the submission is stored;
editing a report type later does not change historical points.

**Ranking**: total points in the period, average per day with at least one submission.
Ties are ordered by name.
"""
        )
        st.dataframe(pd.DataFrame(example_rows), use_container_width=True, hide_index=True)


def _render_entry_form(
    submission_repo: SubmissionRepository,
    configs: list[ReportTypeConfig],
) -> None:
    st.subheader("New submission")
    configs = [config for config in configs if config.responsibles]
    if not configs:
        st.info("Configure at least one report type with responsibles first.")
        return
    # Outside the form so the responsible list follows the selected report type.
    by_name = {config.name: config for config in configs}
    report_type = st.selectbox("Report type", list(by_name.keys()))
    with st.form("submission_form"):
        c1, c2, c3 = st.columns(3)
        day = c1.date_input("Date", value=date.today())
        responsible = c2.selectbox("Responsible", list(by_name[report_type].responsibles))
        status = c3.selectbox(
            "Status",
            list(ReportStatus),
            format_func=lambda value: value.label,
        )
        note = st.text_input("Note", value="")
        submitted = st.form_submit_button("Save")
    if submitted:
        try:
            event = submission_repo.create_submission(
                responsible, day, report_type, status, note=note or None
            )
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success(f"Saved: {event.points:+.2f} points.")


def _render_config_editor(config_repo: ReportConfigRepository) -> None:
    st.subheader("Report types")
    configs = config_repo.list_configs()
    if configs:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Report type": config.name,
                        "Deadline": config.deadline,
                        "Responsibles": ", ".join(config.responsibles),
                    }
                    for config in configs
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )

    options = {"(new)": None}
    options.update({config.name: config for config in configs})
    selected = st.selectbox("Edit report type", list(options.keys()))
    current = options[selected]
    with st.form("report_type_form"):
        name = st.text_input("Name", value=current.name if current else "")
        deadline = st.text_input("Deadline", value=current.deadline if current else DEFAULT_DEADLINE)
        responsibles = st.text_area(
            "Responsibles (comma separated)",
            value=", ".join(current.responsibles) if current else "",
        )
        p1, p2, p3 = st.columns(3)
        points_on_time = p1.number_input(
            "Points on time",
            value=current.points_on_time if current else DEFAULT_POINTS_ON_TIME,
            step=1,
        )
        points_late = p2.number_input(
            "Points late",
            value=current.points_late if current else DEFAULT_POINTS_LATE,
            step=1,
        )
        points_missed = p3.number_input(
            "Points missed / wrong",
            value=current.points_missed if current else DEFAULT_POINTS_MISSED,
            step=1,
        )
        saved = st.form_submit_button("Save report type")
    if saved:
        try:
            config_repo.save_config(
                {
                    "name": name,
                    "deadline": deadline,
                    "responsibles": responsibles,
                    "points_on_time": int(points_on_time),
                    "points_late": int(points_late),
                    "points_missed": int(points_missed),
                },
                config_id=current.config_id if current else None,
            )
        except ValueError as exc:
            st.error(str(exc))
        else:
            st.success("Report type saved.")
    if current and st.button("Delete report type"):
        config_repo.delete_config(current.config_id)
        st.success("Report type deleted.")


def render(con: sqlite3.Connection, trend_days: int) -> None:
    st.title("Report compliance")
    st.caption("Normalized points for daily report submissions.")

    config_repo = ReportConfigRepository(con)
    submission_repo = SubmissionRepository(con)

    configs = config_repo.list_configs()
    _render_entry_form(submission_repo, configs)

    events, row_issues = parse_event_rows(submission_repo.list_rows())
    today = date.today()

    st.subheader("Ranking")
    selected_period = st.radio("Period", list(PERIOD_OPTIONS.keys()), horizontal=True)
    start_date = period_start(PERIOD_OPTIONS[selected_period], today)
    ranking = rank_period(events, start_date=start_date, configs=configs)
    if ranking:
        st.dataframe(ranking_to_frame(ranking), use_container_width=True, hide_index=True)
    else:
        st.info("No submissions for the selected period.")

    if row_issues:
        st.caption(f"Skipped {row_issues} submissions with an invalid date or missing points.")

    if ranking:
        selected_responsible = st.selectbox(
            "Daily breakdown", [score.responsible for score in ranking], index=0
        )
        daily = [
            score
            for score in build_daily_scores(events_in_period(events, start_date))
            if score.responsible == selected_responsible
        ]
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Date": score.day,
                        "Points": score.points,
                        "Reports": score.reports_count,
                        "On time": score.on_time_count,
                        "Late": score.late_count,
                        "Missed / wrong": score.error_count,
                    }
                    for score in reversed(daily)
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )

    st.subheader(f"Daily trend (last {trend_days} days)")
    trend_df = trend_to_frame(build_trend(events, window_days=trend_days, today=today))
    if trend_df.empty:
        st.info("No submissions in the trend window.")
    else:
        chart = (
            alt.Chart(trend_df)
            .mark_line(point=True)
            .encode(
                x=alt.X("day:T", title="Date"),
                y=alt.Y("normalized_score:Q", title="Points"),
                tooltip=[
                    alt.Tooltip("day:T", title="Date"),
                    alt.Tooltip("normalized_score:Q", title="Points", format=".2f"),
                ],
            )
            .properties(height=320)
        )
        st.altair_chart(chart, use_container_width=True)

    _render_methodology()

    st.subheader("Recent submissions")
    recent = events[:50]
    if recent:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Date": event.day,
                        "Responsible": event.responsible,
                        "Report type": event.report_type,
                        "Status": event.status.label,
                        "Points": event.points,
                        "Workload now": workload_for(event.responsible, configs),
                    }
                    for event in recent
                ]
            ),
            use_container_width=True,
            hide_index=True,
        )
        to_delete = st.selectbox(
            "Delete submission",
            [None] + [event.event_id for event in recent],
            format_func=lambda event_id: "(none)"
            if event_id is None
            else next(
                f"{e.day} · {e.responsible} · {e.report_type}" for e in recent if e.event_id == event_id
            ),
        )
        if to_delete and st.button("Delete"):
            submission_repo.delete_submission(to_delete)
            st.success("Submission deleted.")
    else:
        st.caption("No submissions yet.")

    _render_config_editor(config_repo)
