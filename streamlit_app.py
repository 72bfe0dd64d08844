from __future__ import annotations

import os
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import streamlit as st

import report_compliance
from report_compliance.config import db_path_from_env, trend_days_from_env
from report_compliance.data.db import connect, init_db
from report_compliance.app.pages import compliance

st.set_page_config(page_title="report compliance", layout="wide")

# --- DB init (once per app start) ---
con = connect(db_path_from_env())
init_db(con)

build_number = (
    os.getenv("APP_BUILD")
    or os.getenv("BUILD_NUMBER")
    or report_compliance.__version__
)
st.sidebar.title("Report compliance")
st.sidebar.caption(f"Build: {build_number}")

compliance.render(con, trend_days=trend_days_from_env())
