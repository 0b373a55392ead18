"""
CSV and PDF renditions of a filtered interaction set.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime
from typing import Optional

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
import pandas as pd

from . import config
from .metrics import format_duration

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    ("agent", "Agent"),
    ("customer", "Customer"),
    ("queue", "Queue"),
    ("media_type", "Media Type"),
    ("duration", "Duration"),
    ("wrap_up", "Wrap-up"),
    ("start_time", "Start Time"),
    ("end_time", "End Time"),
    ("conversation_id", "Conversation ID"),
]
PDF_HEADERS = ["Agent", "Customer", "Queue", "Media Type", "Duration", "Wrap-up", "Start Date", "End Date", "Conv ID"]
PDF_TITLE = "Genesys Cloud Interactions Report"
PDF_HEADER_COLOR = "#3B82F6"
PDF_STRIPE_COLOR = "#F5F7FA"


def export_filename(kind: str, today: Optional[date] = None) -> str:
    stamp = (today or date.today()).isoformat()
    if kind == "pdf":
        return f"interactions-report-{stamp}.pdf"
    return f"interactions-export-{stamp}.csv"


def _iso(values: pd.Series) -> pd.Series:
    return values.map(lambda t: "" if pd.isna(t) else t.isoformat())


def to_csv(df: pd.DataFrame) -> str:
    out = pd.DataFrame(
        {
            label: (_iso(df[key]) if key in ("start_time", "end_time") else df[key])
            for key, label in CSV_COLUMNS
        }
    )
    for label in ("Agent", "Customer", "Queue", "Media Type", "Wrap-up", "Conversation ID"):
        out[label] = out[label].astype("string").fillna("").astype(str)
    out["Duration"] = out["Duration"].astype("int64")
    return out.to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")


def _pdf_rows(df: pd.DataFrame, max_rows: int) -> list:
    rows = []
    for r in df.head(max_rows).itertuples(index=False):
        conv = str(r.conversation_id)
        rows.append(
            [
                str(r.agent),
                str(r.customer),
                str(r.queue),
                str(r.media_type),
                format_duration(r.duration),
                "-" if pd.isna(r.wrap_up) else str(r.wrap_up),
                "" if pd.isna(r.start_time) else r.start_time.strftime("%m/%d/%Y"),
                "" if pd.isna(r.end_time) else r.end_time.strftime("%m/%d/%Y"),
                conv[:8] + "..." if len(conv) > 8 else conv,
            ]
        )
    return rows


def _report_page(rows, header_lines, page_no, page_count):
    fig = plt.figure(figsize=(11.69, 8.27))  # A4 landscape
    ax = fig.add_axes([0.04, 0.05, 0.92, 0.78])
    ax.axis("off")

    if header_lines:
        fig.text(0.04, 0.93, PDF_TITLE, fontsize=20, fontweight="bold")
        for i, line in enumerate(header_lines):
            fig.text(0.04, 0.89 - i * 0.03, line, fontsize=12)
    fig.text(0.96, 0.02, f"Page {page_no} of {page_count}", fontsize=8, ha="right", color="#605E5C")

    if not rows:
        ax.text(0.0, 1.0, "No interactions for the selected filters.", fontsize=11, va="top")
        return fig

    table = ax.table(cellText=rows, colLabels=PDF_HEADERS, loc="upper center", cellLoc="left")
    table.auto_set_font_size(False)
    table.set_fontsize(8)
    table.scale(1, 1.3)
    for (row, _col), cell in table.get_celld().items():
        cell.set_edgecolor("#EDEBE9")
        if row == 0:
            cell.set_facecolor(PDF_HEADER_COLOR)
            cell.set_text_props(color="white", fontweight="bold")
        elif row % 2 == 0:
            cell.set_facecolor(PDF_STRIPE_COLOR)
    return fig


def to_pdf(
    df: pd.DataFrame,
    generated_at: Optional[datetime] = None,
    max_rows: Optional[int] = None,
    rows_per_page: Optional[int] = None,
) -> bytes:
    max_rows = config.PDF_MAX_ROWS if max_rows is None else max_rows
    rows_per_page = max(rows_per_page or config.PDF_ROWS_PER_PAGE, 1)
    generated_at = generated_at or datetime.now()

    rows = _pdf_rows(df, max_rows)
    chunks = [rows[i:i + rows_per_page] for i in range(0, len(rows), rows_per_page)] or [[]]
    header_lines = [
        f"Generated on: {generated_at.strftime('%m/%d/%Y')}",
        f"Total Interactions: {len(df)}",
    ]

    buf = io.BytesIO()
    with PdfPages(buf) as pdf:
        for page_no, chunk in enumerate(chunks, start=1):
            fig = _report_page(chunk, header_lines if page_no == 1 else None, page_no, len(chunks))
            try:
                pdf.savefig(fig)
            finally:
                plt.close(fig)
    logger.info("Rendered PDF report: %d of %d interactions, %d pages", len(rows), len(df), len(chunks))
    return buf.getvalue()
