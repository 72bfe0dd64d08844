from __future__ import annotations

import logging
import os
from pathlib import Path

from report_compliance.domain.constants import DEFAULT_TREND_DAYS

LOGGER = logging.getLogger(__name__)


def db_path_from_env() -> Path:
    data_dir = Path(os.getenv("REPORT_COMPLIANCE_DATA_DIR", "./data"))
    return Path(os.getenv("REPORT_COMPLIANCE_DB_PATH", data_dir / "app.db"))


def trend_days_from_env() -> int:
    raw = os.getenv("REPORT_COMPLIANCE_TREND_DAYS")
    if not raw:
        return DEFAULT_TREND_DAYS
    try:
        days = int(raw)
    except ValueError:
        days = 0
    if days <= 0:
        LOGGER.warning("Ignoring invalid REPORT_COMPLIANCE_TREND_DAYS=%r", raw)
        return DEFAULT_TREND_DAYS
    return days
