from __future__ import annotations

DAILY_POINTS_POOL = 20
LATE_PENALTY_FACTOR = 2

DEFAULT_DEADLINE = "ATÉ 09:00"
DEFAULT_POINTS_ON_TIME = 20
DEFAULT_POINTS_LATE = -10
DEFAULT_POINTS_MISSED = -40

DEFAULT_TREND_DAYS = 30

RANKING_PERIODS = ("week", "month", "total")

# Status codes written by the previous dashboard; accepted when reading rows.
LEGACY_STATUS_CODES = {
    "NO_HORARIO": "ON_TIME",
    "FORA_DO_HORARIO": "LATE",
    "ESQUECEU_ERRO": "MISSED_OR_WRONG",
}
