# config.py

from __future__ import annotations
import os

# --------- SERVER ---------

DASHBOARD_HOST  = os.getenv("DASHBOARD_HOST", "127.0.0.1")
DASHBOARD_PORT  = int(os.getenv("DASHBOARD_PORT", "8050"))
DASHBOARD_DEBUG = os.getenv("DASHBOARD_DEBUG", "0") == "1"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --------- DATA ---------

# Optional CSV export loaded into the store at startup
INTERACTIONS_CSV_PATH = os.getenv("INTERACTIONS_CSV_PATH")

# dcc.Upload max_size, -1 = unlimited
UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", str(50 * 1024 * 1024)))

# --------- EXPORT ---------

PDF_MAX_ROWS      = int(os.getenv("PDF_MAX_ROWS", "50"))
PDF_ROWS_PER_PAGE = int(os.getenv("PDF_ROWS_PER_PAGE", "25"))
