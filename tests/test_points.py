import sys
import unittest
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from report_compliance.domain.models import ReportStatus, ReportTypeConfig
from report_compliance.services.points import (
    ConfigurationError,
    compute_points,
    score_submission,
    workload_for,
)

CONFIGS = [
    ReportTypeConfig(name="Fuel", responsibles=("Ana", "Bruno")),
    ReportTypeConfig(name="Mileage", responsibles=("Ana", "Bruno")),
    ReportTypeConfig(name="Checklist", responsibles=("Bruno",)),
    ReportTypeConfig(name="Incidents", responsibles=("Bruno",)),
]


class ComputePointsTests(unittest.TestCase):
    def test_on_time_with_two_report_types(self) -> None:
        self.assertEqual(compute_points(ReportStatus.ON_TIME, 2), 10.0)

    def test_late_and_missed_with_four_report_types(self) -> None:
        self.assertEqual(compute_points(ReportStatus.LATE, 4), -2.5)
        self.assertEqual(compute_points(ReportStatus.MISSED_OR_WRONG, 4), -5.0)

    def test_rounding_is_exact_to_two_decimals(self) -> None:
        self.assertEqual(compute_points(ReportStatus.ON_TIME, 3), 6.67)
        self.assertEqual(compute_points(ReportStatus.LATE, 3), -3.33)
        self.assertEqual(compute_points(ReportStatus.MISSED_OR_WRONG, 3), -6.67)
        self.assertEqual(compute_points(ReportStatus.LATE, 6), -1.67)
        self.assertEqual(compute_points(ReportStatus.ON_TIME, 7), 2.86)

    def test_halves_round_away_from_zero(self) -> None:
        self.assertEqual(compute_points(ReportStatus.ON_TIME, 32), 0.63)
        self.assertEqual(compute_points(ReportStatus.MISSED_OR_WRONG, 32), -0.63)
        self.assertEqual(compute_points(ReportStatus.LATE, 16), -0.63)

    def test_daily_pool_is_twenty_for_any_workload(self) -> None:
        for workload in range(1, 60):
            on_time = compute_points(ReportStatus.ON_TIME, workload)
            self.assertLessEqual(abs(on_time * workload - 20), 0.005 * workload + 1e-9)

    def test_late_and_missed_mirror_on_time(self) -> None:
        for workload in range(1, 60):
            on_time = compute_points(ReportStatus.ON_TIME, workload)
            self.assertEqual(compute_points(ReportStatus.MISSED_OR_WRONG, workload), -on_time)
            late = compute_points(ReportStatus.LATE, workload)
            self.assertLessEqual(abs(late + on_time / 2), 0.01)

    def test_zero_workload_is_rejected(self) -> None:
        with self.assertRaises(ConfigurationError):
            compute_points(ReportStatus.ON_TIME, 0)

    def test_raw_status_string_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            compute_points("ON_TIME", 2)


class ScoreSubmissionTests(unittest.TestCase):
    def test_workload_counts_configs_listing_the_responsible(self) -> None:
        self.assertEqual(workload_for("Ana", CONFIGS), 2)
        self.assertEqual(workload_for(" Bruno ", CONFIGS), 4)
        self.assertEqual(workload_for("Carla", CONFIGS), 0)

    def test_scored_event_carries_frozen_points(self) -> None:
        event = score_submission("Bruno", date(2024, 1, 10), "Fuel", "LATE", CONFIGS)
        self.assertEqual(event.status, ReportStatus.LATE)
        self.assertEqual(event.points, -2.5)
        self.assertEqual(event.day, date(2024, 1, 10))

    def test_legacy_status_code_is_accepted(self) -> None:
        event = score_submission("Ana", date(2024, 1, 10), "Fuel", "NO_HORARIO", CONFIGS)
        self.assertEqual(event.status, ReportStatus.ON_TIME)
        self.assertEqual(event.points, 10.0)

    def test_unassigned_responsible_raises(self) -> None:
        with self.assertRaises(ConfigurationError):
            score_submission("Carla", date(2024, 1, 10), "Fuel", ReportStatus.ON_TIME, CONFIGS)

    def test_report_type_not_listing_responsible_raises(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            score_submission("Ana", date(2024, 1, 10), "Checklist", "ON_TIME", CONFIGS)
        self.assertNotIsInstance(ctx.exception, ConfigurationError)
        with self.assertRaises(ValueError):
            score_submission("Ana", date(2024, 1, 10), "Payroll", "ON_TIME", CONFIGS)

    def test_unknown_status_raises(self) -> None:
        with self.assertRaises(ValueError):
            score_submission("Ana", date(2024, 1, 10), "Fuel", "EARLY", CONFIGS)


if __name__ == "__main__":
    unittest.main()
