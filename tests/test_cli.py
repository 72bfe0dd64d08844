import io
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from datetime import date
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from report_compliance import config
from report_compliance.cli import ranking as cli
from report_compliance.data.db import connect, init_db, table_count
from report_compliance.data.repositories import ReportConfigRepository, SubmissionRepository


class CliHandlerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.con = connect(":memory:")
        init_db(self.con)
        ReportConfigRepository(self.con).save_config({"name": "Fuel", "responsibles": "Ana, Bruno"})
        ReportConfigRepository(self.con).save_config({"name": "Mileage", "responsibles": "Ana"})

    def tearDown(self) -> None:
        self.con.close()

    def test_run_score_dry_run_does_not_store(self) -> None:
        output = cli.run_score(self.con, "Ana", "Fuel", "LATE", date(2024, 1, 10), dry_run=True)
        self.assertIn("-5.00", output)
        self.assertEqual(table_count(self.con, "submission_events"), 0)

    def test_run_ranking_and_trend(self) -> None:
        repo = SubmissionRepository(self.con)
        repo.create_submission("Ana", date(2024, 1, 10), "Fuel", "ON_TIME")
        repo.create_submission("Bruno", date(2024, 1, 12), "Fuel", "MISSED_OR_WRONG")

        ranking = cli.run_ranking(self.con, "total", date(2024, 1, 12))
        lines = ranking.splitlines()
        self.assertIn("Rank", lines[0])
        self.assertIn("Ana", lines[1])
        self.assertIn("Bruno", lines[2])

        trend = cli.run_trend(self.con, 3, date(2024, 1, 12)).splitlines()
        self.assertEqual(len(trend), 2)
        self.assertTrue(trend[0].startswith("2024-01-10"))
        self.assertTrue(trend[1].startswith("2024-01-12"))

    def test_unusable_rows_are_skipped_and_logged(self) -> None:
        SubmissionRepository(self.con).create_submission("Ana", date(2024, 1, 10), "Fuel", "ON_TIME")
        self.con.execute(
            """
            INSERT INTO submission_events (id, day, report_type, responsible, status, points, note, created_at)
            VALUES ('broken', 'not-a-date', 'Fuel', 'Bruno', 'LATE', -5.0, NULL, '2024-01-10T08:00:00+00:00')
            """
        )
        self.con.commit()

        with self.assertLogs("report_compliance.cli.ranking", level="WARNING") as logs:
            ranking = cli.run_ranking(self.con, "total", date(2024, 1, 12))
            trend = cli.run_trend(self.con, 5, date(2024, 1, 12))
        self.assertIn("Ana", ranking)
        self.assertNotIn("Bruno", ranking)
        self.assertTrue(trend.startswith("2024-01-10"))
        self.assertIn("Skipped 1", logs.output[0])

    def test_score_rejects_report_type_without_responsible(self) -> None:
        with self.assertRaises(ValueError):
            cli.run_score(self.con, "Bruno", "Mileage", "ON_TIME", date(2024, 1, 10), dry_run=True)
        with self.assertRaises(ValueError):
            cli.run_score(self.con, "Ana", "Payroll", "ON_TIME", date(2024, 1, 10), dry_run=False)
        self.assertEqual(table_count(self.con, "submission_events"), 0)

    def test_empty_outputs(self) -> None:
        self.assertIn("No submissions", cli.run_ranking(self.con, "week", date(2024, 1, 12)))
        self.assertIn("No submissions", cli.run_trend(self.con, 30, date(2024, 1, 12)))


class CliMainTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.db_path = Path(self.tmp.name) / "app.db"
        con = connect(self.db_path)
        init_db(con)
        ReportConfigRepository(con).save_config({"name": "Fuel", "responsibles": "Ana"})
        con.close()
        self.env = mock.patch.dict(os.environ, {"REPORT_COMPLIANCE_DB_PATH": str(self.db_path)})
        self.env.start()

    def tearDown(self) -> None:
        self.env.stop()
        self.tmp.cleanup()

    def test_score_then_rank(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            self.assertEqual(cli.main(["score", "Ana", "Fuel", "on_time", "--date", "2024-01-10"]), 0)
            self.assertEqual(cli.main(["ranking", "--period", "month", "--today", "2024-01-20"]), 0)
        output = buffer.getvalue()
        self.assertIn("20.00", output)
        self.assertIn("Ana", output)

    def test_unassigned_responsible_fails(self) -> None:
        with self.assertLogs("report_compliance.cli.ranking", level="ERROR"):
            code = cli.main(["score", "Carla", "Fuel", "ON_TIME", "--date", "2024-01-10"])
        self.assertEqual(code, 1)

    def test_invalid_today(self) -> None:
        with self.assertLogs("report_compliance.cli.ranking", level="ERROR"):
            self.assertEqual(cli.main(["trend", "--today", "10/01/2024"]), 1)


class ConfigTests(unittest.TestCase):
    def test_trend_days_from_env(self) -> None:
        with mock.patch.dict(os.environ, {"REPORT_COMPLIANCE_TREND_DAYS": "14"}):
            self.assertEqual(config.trend_days_from_env(), 14)
        with mock.patch.dict(os.environ, {"REPORT_COMPLIANCE_TREND_DAYS": "abc"}):
            self.assertEqual(config.trend_days_from_env(), 30)
        with mock.patch.dict(os.environ, {"REPORT_COMPLIANCE_TREND_DAYS": ""}):
            self.assertEqual(config.trend_days_from_env(), 30)

    def test_db_path_from_env(self) -> None:
        with mock.patch.dict(os.environ, {"REPORT_COMPLIANCE_DATA_DIR": "/tmp/rc"}, clear=False):
            os.environ.pop("REPORT_COMPLIANCE_DB_PATH", None)
            self.assertEqual(config.db_path_from_env(), Path("/tmp/rc") / "app.db")


if __name__ == "__main__":
    unittest.main()
