"""
Genesys Cloud Interactions Dashboard
Upload Genesys Cloud CSV exports, then explore volume, handle time, queues, agents and wrap-up codes.
"""

from __future__ import annotations

import base64
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import dash
from dash import dcc, html, dash_table, Input, Output, State, callback, ctx, no_update
from dash.exceptions import PreventUpdate
import dash_bootstrap_components as dbc
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from . import config
from .api import create_api_blueprint
from .export import export_filename, to_csv, to_pdf
from .metrics import (
    SummaryMetrics,
    agent_performance,
    format_duration,
    hourly_trend,
    queue_distribution,
    summary_metrics,
    unique_values,
    wrap_up_codes,
    wrap_up_distribution,
)
from .records import CSVImportError, NormalizedBatch, load_csv_file, parse_csv
from .store import InteractionStore, InvalidInteractionData
from .table import (
    ALL,
    CHECKBOX_COLUMNS,
    COLUMN_LABELS,
    DEFAULT_VISIBLE_COLUMNS,
    PAGE_SIZE_OPTIONS,
    SEARCH_COLUMNS,
    SORT_FIELDS,
    TABLE_COLUMNS,
    FilterState,
    Page,
    TableState,
    apply_filters,
)

logger = logging.getLogger(__name__)


POWERBI_COLORS = {
    "primary": "#00BCF2",
    "secondary": "#742774",
    "success": "#00A86B",
    "warning": "#FFB900",
    "danger": "#E81123",
    "dark": "#252423",
    "light": "#F3F2F1",
}
CHART_COLORS = ["#3B82F6", "#8B5CF6", "#10B981", "#F59E0B", "#EF4444", "#06B6D4", "#F97316", "#84CC16"]
GRAPH_CONFIG = {"responsive": True, "displayModeBar": False}

DT_STYLE_HEADER = {
    "backgroundColor": "#0078D4",
    "color": "white",
    "fontWeight": "700",
    "fontSize": "0.75rem",
    "textTransform": "uppercase",
    "letterSpacing": "0.4px",
    "border": "none",
    "padding": "10px 12px",
    "fontFamily": "Segoe UI, sans-serif",
}
DT_STYLE_DATA = {
    "backgroundColor": "white",
    "color": "#201F1E",
    "fontSize": "0.83rem",
    "fontFamily": "Segoe UI, sans-serif",
    "border": "1px solid #EDEBE9",
    "padding": "8px 12px",
}
DT_STYLE_CONDITIONAL = [
    {"if": {"row_index": "odd"}, "backgroundColor": "#F8F8F8"},
    {
        "if": {"state": "selected"},
        "backgroundColor": "rgba(0,188,242,0.08)",
        "border": "1px solid #00BCF2",
    },
]

# Genesys exports WhatsApp conversations as media type "message"
MEDIA_TYPE_LABELS = {"message": "WhatsApp"}
TABLE_TIME_FORMAT = "%m/%d/%Y %I:%M %p"
FILTER_DIMENSIONS = [
    ("queue", "QUEUE", "queue-filter"),
    ("agent", "AGENT", "agent-filter"),
    ("media_type", "MEDIA TYPE", "media-filter"),
    ("wrap_up", "WRAP-UP", "wrapup-filter"),
    ("flow", "FLOW", "flow-filter"),
]
ANALYSIS_VIEWS = [
    ("queue", "Queue Analysis", "Detailed breakdown of interaction distribution across different queues"),
    ("agent", "Agent Performance Analysis", "Performance metrics and statistics for individual agents"),
    ("time", "Time Series Analysis", "Hourly distribution of interactions throughout the day"),
    ("wrapup", "Wrap-up Code Analysis", "Analysis of wrap-up codes used in customer interactions"),
]

FILTER_INPUTS = [
    Input("date-filter", "start_date"),
    Input("date-filter", "end_date"),
    *[Input(control_id, "value") for _, _, control_id in FILTER_DIMENSIONS],
]
FILTER_STATES = [
    State("date-filter", "start_date"),
    State("date-filter", "end_date"),
    *[State(control_id, "value") for _, _, control_id in FILTER_DIMENSIONS],
]
FILTER_TRIGGERS = {"data-version", "date-filter", *[control_id for _, _, control_id in FILTER_DIMENSIONS]}


# ==================================
# DATA
# ==================================

store = InteractionStore()


def _human_size(n_bytes: int) -> str:
    if n_bytes >= 1024 * 1024:
        return f"{n_bytes / (1024 * 1024):.1f} MB"
    if n_bytes >= 1024:
        return f"{n_bytes / 1024:.0f} KB"
    return f"{n_bytes} B"


def decode_upload(contents: str) -> bytes:
    """dcc.Upload hands over a data URL: 'data:text/csv;base64,<payload>'."""
    _header, _, payload = contents.partition(",")
    return base64.b64decode(payload)


def upload_entry(name: str, batch: NormalizedBatch, size_bytes: int) -> Dict[str, Any]:
    return {
        "name": name,
        "uploaded_at": datetime.now().isoformat(timespec="seconds"),
        "records": len(batch),
        "dropped": batch.dropped_rows,
        "warnings": len(batch.warnings),
        "size": _human_size(size_bytes),
    }


def import_csv_bytes(raw: bytes, name: str) -> Dict[str, Any]:
    batch = parse_csv(raw)
    store.insert_many(batch.interactions)
    logger.info("Imported %d interactions from %s", len(batch), name)
    return upload_entry(name, batch, len(raw))


def preload_interactions(path: str) -> List[Dict[str, Any]]:
    try:
        batch = load_csv_file(path)
        store.insert_many(batch.interactions)
    except (OSError, CSVImportError, InvalidInteractionData):
        logger.exception("Could not preload interactions from %s", path)
        return []
    return [upload_entry(os.path.basename(path), batch, os.path.getsize(path))]


initial_uploads = preload_interactions(config.INTERACTIONS_CSV_PATH) if config.INTERACTIONS_CSV_PATH else []


def current_filters(start_date, end_date, queue, agent, media_type, wrap_up, flow) -> FilterState:
    return FilterState.from_inputs(
        start_date, end_date,
        queue=queue, agent=agent, media_type=media_type, wrap_up=wrap_up, flow=flow,
    )


def filtered_interactions(filters: FilterState) -> pd.DataFrame:
    return apply_filters(store.list_all(), filters)


def dropdown_options(values: List[str], all_label: str) -> List[Dict[str, str]]:
    return [{"label": all_label, "value": ALL}] + [{"label": v, "value": v} for v in values]


def short_queue_name(queue: str) -> str:
    return queue.split("_")[-1] or queue


# ==================================
# COMPONENTS
# ==================================

def graph_component(fig: go.Figure, height: int = 360) -> dcc.Graph:
    fig.update_layout(
        autosize=True,
        height=height,
        margin=dict(l=40, r=20, t=60, b=50),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(family="Segoe UI"),
    )
    return dcc.Graph(
        figure=fig,
        config=GRAPH_CONFIG,
        style={"width": "100%", "height": f"{height}px"},
    )


def slicer(label: str, control) -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.Span(
                        label,
                        style={
                            "fontSize": "0.7rem",
                            "fontWeight": "700",
                            "color": "#444",
                            "letterSpacing": "0.5px",
                        },
                    )
                ],
                className="slicer-header",
            ),
            html.Div([control], className="slicer-body"),
        ],
        className="slicer-card",
    )


def kpi_card(title: str, value: str, subtitle: str, variant: str) -> dbc.Col:
    return dbc.Col(
        [
            html.Div(
                [
                    html.H4(title),
                    html.H2(value),
                    html.P(subtitle, style={"fontSize": "0.75rem", "color": "#888", "marginBottom": "0"}),
                ],
                className=f"kpi-card kpi-{variant}",
            )
        ],
        md=3,
    )


def no_data_alert(what: str) -> dbc.Alert:
    return dbc.Alert(
        [
            html.H5("No Data Available", style={"fontWeight": "700"}),
            html.P(f"Upload interaction data to view {what}.", style={"marginBottom": "0"}),
        ],
        color="warning",
    )


def data_table(df: pd.DataFrame, columns: List[tuple], page_size: int = 10) -> dash_table.DataTable:
    return dash_table.DataTable(
        columns=[{"name": label, "id": key} for key, label in columns],
        data=df.to_dict("records"),
        page_size=page_size,
        sort_action="native",
        style_table={"overflowX": "auto"},
        style_header=DT_STYLE_HEADER,
        style_data=DT_STYLE_DATA,
        style_data_conditional=DT_STYLE_CONDITIONAL,
        style_cell={"textAlign": "left", "whiteSpace": "normal", "height": "auto"},
    )


def build_metric_cards(metrics: SummaryMetrics) -> dbc.Row:
    channel = metrics.primary_channel or "-"
    channel = MEDIA_TYPE_LABELS.get(channel, channel)
    return dbc.Row(
        [
            kpi_card("Total Interactions", f"{metrics.total_interactions:,}", "in current filter", "info"),
            kpi_card("Avg Handle Time", f"{metrics.avg_handle_time}m", "minutes per interaction", "warning"),
            kpi_card("Active Agents", f"{metrics.active_agents:,}", "distinct agents", "success"),
            kpi_card(
                f"{channel} Volume",
                f"{metrics.primary_channel_volume:,}",
                f"{metrics.primary_channel_percentage}% of total",
                "danger",
            ),
        ],
        className="mb-4",
    )


def build_trend_figure(df: pd.DataFrame, first_hour: int = 7, last_hour: int = 18) -> go.Figure:
    trend = hourly_trend(df, first_hour, last_hour)
    fig = px.line(trend, x="hour", y="count", markers=True, title="Interactions Trend")
    fig.update_traces(line=dict(color=POWERBI_COLORS["primary"], width=3))
    fig.update_layout(xaxis_title="Hour", yaxis_title="Interactions")
    return fig


def build_queue_pie(queues: pd.DataFrame) -> go.Figure:
    top = queues.head(5)
    fig = go.Figure(
        go.Pie(
            labels=[short_queue_name(q) for q in top["queue"]],
            values=top["interactions"],
            hole=0.45,
            marker=dict(colors=CHART_COLORS[: len(top)]),
        )
    )
    fig.update_layout(title="Queue Distribution")
    return fig


def build_duration_bar(queues: pd.DataFrame) -> go.Figure:
    top = queues.head(4)
    fig = go.Figure(
        go.Bar(
            x=[short_queue_name(q) for q in top["queue"]],
            y=top["avg_duration"],
            marker_color=CHART_COLORS[: len(top)],
        )
    )
    fig.update_layout(title="Average Duration by Queue", yaxis_title="Minutes")
    return fig


def agents_frame(agents: pd.DataFrame) -> pd.DataFrame:
    out = agents.copy()
    out["queues"] = out["queues"].map(lambda qs: ", ".join(qs))
    return out


def build_dashboard(df: pd.DataFrame) -> html.Div:
    if df.empty:
        return no_data_alert("the dashboard")
    queues = queue_distribution(df)
    agents = agents_frame(agent_performance(df))
    return html.Div(
        [
            build_metric_cards(summary_metrics(df)),
            dbc.Row(
                [
                    dbc.Col([graph_component(build_trend_figure(df))], md=6),
                    dbc.Col([graph_component(build_queue_pie(queues))], md=6),
                ]
            ),
            html.Hr(className="divider"),
            dbc.Row(
                [
                    dbc.Col([graph_component(build_duration_bar(queues))], md=6),
                    dbc.Col(
                        [
                            html.H6("Top Agents", style={"fontWeight": "600"}),
                            data_table(
                                agents,
                                [
                                    ("agent", "Agent"),
                                    ("interactions", "Interactions"),
                                    ("avg_duration", "Avg Duration (min)"),
                                    ("queues", "Queues"),
                                ],
                            ),
                        ],
                        md=6,
                    ),
                ]
            ),
        ]
    )


def build_analysis(view: str, df: pd.DataFrame) -> html.Div:
    title, description = next(((t, d) for v, t, d in ANALYSIS_VIEWS if v == view), ("Analysis", ""))
    if df.empty:
        return no_data_alert(title.lower())

    header = html.Div(
        [
            html.H5(title, style={"fontWeight": "700", "marginBottom": "0.3rem"}),
            html.P(description, className="text-muted mb-1"),
            dbc.Badge(f"{len(df):,} total interactions", color="secondary", className="mb-3"),
        ]
    )

    if view == "agent":
        agents = agents_frame(agent_performance(df, limit=10))
        fig = px.bar(agents, x="agent", y="interactions", title="Interactions per Agent (Top 10)")
        fig.update_traces(marker_color=POWERBI_COLORS["secondary"])
        body = [
            graph_component(fig, 420),
            data_table(
                agents,
                [
                    ("agent", "Agent"),
                    ("interactions", "Interactions"),
                    ("avg_duration", "Avg Duration (min)"),
                    ("queues", "Queues"),
                ],
            ),
        ]
    elif view == "time":
        fig = build_trend_figure(df, 0, 23)
        fig.update_layout(title="Interactions by Hour of Day")
        body = [graph_component(fig, 420)]
    elif view == "wrapup":
        codes = wrap_up_distribution(df)
        if codes.empty:
            body = [dbc.Alert("No wrap-up codes in the current selection.", color="info")]
        else:
            fig = px.bar(codes.head(15), x="count", y="wrap_up", orientation="h", title="Wrap-up Codes")
            fig.update_traces(marker_color=POWERBI_COLORS["primary"])
            fig.update_layout(yaxis=dict(autorange="reversed"), yaxis_title="", xaxis_title="Interactions")
            body = [
                graph_component(fig, 460),
                data_table(codes, [("wrap_up", "Wrap-up Code"), ("count", "Interactions")]),
            ]
    else:
        queues = queue_distribution(df)
        fig = px.bar(queues, x="queue", y="interactions", title="Interactions per Queue")
        fig.update_traces(marker_color=POWERBI_COLORS["primary"])
        body = [
            graph_component(fig, 420),
            data_table(
                queues,
                [
                    ("queue", "Queue"),
                    ("interactions", "Interactions"),
                    ("avg_duration", "Avg Duration (min)"),
                    ("percentage", "% of Total"),
                ],
            ),
        ]

    return html.Div([header, *body])


def table_records(df: pd.DataFrame, columns) -> List[Dict[str, str]]:
    view = {}
    for c in columns:
        if c in ("start_time", "end_time"):
            values = df[c].dt.strftime(TABLE_TIME_FORMAT)
        elif c == "duration":
            values = df[c].map(format_duration)
        elif c == "media_type":
            values = df[c].astype("string").map(lambda m: MEDIA_TYPE_LABELS.get(m, m), na_action="ignore")
        else:
            values = df[c]
        view[c] = values.astype("string").fillna("").astype(str).tolist()
    return [dict(zip(view, row)) for row in zip(*view.values())] if view else [{} for _ in range(len(df))]


def upload_list(uploads: List[Dict[str, Any]]) -> html.Div:
    if not uploads:
        return html.P("No files uploaded yet.", className="text-muted", style={"fontSize": "0.85rem"})
    items = [
        dbc.ListGroupItem(
            [
                html.Div(u["name"], style={"fontWeight": "600", "fontSize": "0.85rem"}),
                html.Div(
                    f"{u['records']:,} records · {u['dropped']:,} dropped · {u['warnings']:,} warnings · "
                    f"{u['size']} · {u['uploaded_at'].replace('T', ' ')}",
                    style={"fontSize": "0.75rem", "color": "#888"},
                ),
            ]
        )
        for u in uploads
    ]
    return dbc.ListGroup(items, flush=True)


def import_status(entry: Dict[str, Any]) -> dbc.Alert:
    text = f"Successfully imported {entry['records']:,} interactions from {entry['name']}"
    extras = []
    if entry["dropped"]:
        extras.append(f"{entry['dropped']:,} rows skipped (missing required fields)")
    if entry["warnings"]:
        extras.append(f"{entry['warnings']:,} fields replaced with fallback values")
    color = "warning" if extras else "success"
    return dbc.Alert([html.Div(text), *[html.Div(e, style={"fontSize": "0.8rem"}) for e in extras]], color=color)


# ==================================
# TABLE STATE
# ==================================

PAGER_BUTTONS = ("page-prev", "page-next")


def next_table_state(
    state: TableState,
    trigger: Optional[str],
    value: Any,
    df: Optional[pd.DataFrame] = None,
    filters: Optional[FilterState] = None,
) -> TableState:
    """Apply one control change to the table state; any filtering change goes back to page 1."""
    if trigger == "table-search":
        return state.with_search(value, state.search_column)
    if trigger == "table-search-column":
        return state.with_search(state.search_term, value)
    if trigger == "page-size":
        return state.with_page_size(value)
    if trigger == "table-columns":
        return state.with_visible_columns(value)
    if trigger and trigger.startswith("column-filter-"):
        return state.with_column_filter(trigger[len("column-filter-"):], value or ())
    if trigger and trigger.startswith("sort-"):
        return state.toggle_sort(trigger[len("sort-"):])
    if trigger in PAGER_BUTTONS:
        if df is None:
            return state
        current = state.apply(df, filters).page
        moved = state.go_to(current - 1 if trigger == "page-prev" else current + 1)
        return moved.go_to(moved.apply(df, filters).page)
    if trigger in FILTER_TRIGGERS:
        return state.reset_page()
    return state


def sort_button_label(field: str, state: TableState) -> str:
    label = COLUMN_LABELS[field]
    if state.sort.field != field:
        return label
    return f"{label} {'↓' if state.sort.descending else '↑'}"


def page_summary(page: Page) -> str:
    if page.total_matched == 0:
        return "No interactions match the current filters"
    return (
        f"Showing {page.first_row:,} to {page.last_row:,} of {page.total_matched:,} interactions "
        f"· page {page.page} of {page.total_pages}"
    )


# ==================================
# APP & LAYOUT
# ==================================

app = dash.Dash(__name__, external_stylesheets=[dbc.themes.BOOTSTRAP], suppress_callback_exceptions=True)
app.title = "Genesys Cloud Interactions"
server = app.server
server.register_blueprint(create_api_blueprint(store))


upload_panel = dbc.Row(
    [
        dbc.Col(
            [
                dcc.Upload(
                    id="csv-upload",
                    children=html.Div(
                        [
                            html.Div("Drag and drop a Genesys Cloud CSV export here", style={"fontWeight": "600"}),
                            html.Div("or click to select a file", style={"fontSize": "0.8rem", "color": "#888"}),
                        ]
                    ),
                    accept=".csv,text/csv,application/vnd.ms-excel",
                    multiple=False,
                    max_size=config.UPLOAD_MAX_BYTES,
                    className="upload-zone",
                ),
                html.Div(id="upload-status", className="mt-2"),
            ],
            md=7,
        ),
        dbc.Col(
            [
                html.Div(
                    [
                        html.Span(
                            "UPLOADED FILES",
                            style={"fontSize": "0.7rem", "fontWeight": "700", "color": "#777", "letterSpacing": "1.3px"},
                        ),
                        dbc.Button(
                            "Clear Data",
                            id="clear-data",
                            color="danger",
                            outline=True,
                            size="sm",
                            n_clicks=0,
                            className="ms-auto",
                        ),
                    ],
                    className="d-flex align-items-center mb-2",
                ),
                html.Div(id="uploaded-files", children=upload_list(initial_uploads)),
            ],
            md=5,
        ),
    ],
    className="filter-panel mb-3 g-3",
)

filter_panel = html.Div(
    [
        html.Div(
            [
                html.Span(
                    "REPORT FILTERS",
                    style={"fontSize": "0.7rem", "fontWeight": "700", "color": "#777", "letterSpacing": "1.3px"},
                ),
                html.Div(
                    [
                        dbc.Button("Export CSV", id="btn-export-csv", color="primary", outline=True, size="sm", n_clicks=0),
                        dbc.Button(
                            "Export PDF", id="btn-export-pdf", color="primary", outline=True, size="sm",
                            n_clicks=0, className="ms-2",
                        ),
                        dcc.Download(id="download-csv"),
                        dcc.Download(id="download-pdf"),
                    ],
                    className="ms-auto",
                ),
            ],
            className="d-flex align-items-center",
            style={"paddingBottom": "10px", "marginBottom": "12px", "borderBottom": "1px solid #E0E0E0"},
        ),
        dbc.Row(
            [
                dbc.Col(
                    slicer(
                        "DATE RANGE",
                        dcc.DatePickerRange(
                            id="date-filter",
                            display_format="MM/DD/YYYY",
                            clearable=True,
                            style={"fontSize": "0.82rem"},
                        ),
                    ),
                    md=4,
                ),
                *[
                    dbc.Col(
                        slicer(
                            label,
                            dcc.Dropdown(
                                id=control_id,
                                options=[{"label": "All", "value": ALL}],
                                value=ALL,
                                clearable=False,
                                style={"fontSize": "0.82rem"},
                            ),
                        ),
                        md=True,
                    )
                    for _, label, control_id in FILTER_DIMENSIONS
                ],
            ],
            className="g-3",
        ),
    ],
    className="filter-panel mb-3",
)

table_panel = html.Div(
    [
        dbc.Row(
            [
                dbc.Col(
                    dcc.Input(
                        id="table-search",
                        type="search",
                        placeholder="Search interactions...",
                        debounce=True,
                        className="form-control form-control-sm",
                    ),
                    md=5,
                ),
                dbc.Col(
                    dcc.Dropdown(
                        id="table-search-column",
                        options=[{"label": "All columns", "value": ALL}]
                        + [{"label": COLUMN_LABELS[c], "value": c} for c in SEARCH_COLUMNS],
                        value=ALL,
                        clearable=False,
                        style={"fontSize": "0.82rem"},
                    ),
                    md=3,
                ),
                dbc.Col(
                    dcc.Dropdown(
                        id="table-columns",
                        options=[{"label": label, "value": key} for key, label in TABLE_COLUMNS],
                        value=list(DEFAULT_VISIBLE_COLUMNS),
                        multi=True,
                        placeholder="Visible columns",
                        style={"fontSize": "0.82rem"},
                    ),
                    md=4,
                ),
            ],
            className="g-2 mb-2",
        ),
        dbc.Row(
            [
                dbc.Col(
                    dcc.Dropdown(
                        id=f"column-filter-{c}",
                        options=[],
                        value=[],
                        multi=True,
                        placeholder=f"{COLUMN_LABELS[c]}: all",
                        style={"fontSize": "0.8rem"},
                    ),
                    md=True,
                )
                for c in CHECKBOX_COLUMNS
            ],
            className="g-2 mb-2",
        ),
        html.Div(
            [html.Span("Sort by:", style={"fontSize": "0.75rem", "color": "#888", "marginRight": "0.5rem"})]
            + [
                dbc.Button(
                    COLUMN_LABELS[f], id=f"sort-{f}", color="secondary", outline=True, size="sm",
                    n_clicks=0, className="me-1 mb-1",
                )
                for f in SORT_FIELDS
            ],
            className="mb-2",
        ),
        dash_table.DataTable(
            id="interactions-table",
            columns=[{"name": COLUMN_LABELS[c], "id": c} for c in DEFAULT_VISIBLE_COLUMNS],
            data=[],
            page_action="none",
            sort_action="none",
            style_table={"overflowX": "auto", "borderRadius": "6px"},
            style_header=DT_STYLE_HEADER,
            style_data=DT_STYLE_DATA,
            style_data_conditional=DT_STYLE_CONDITIONAL,
            style_cell={
                "textAlign": "left", "minWidth": "90px", "maxWidth": "260px",
                "overflow": "hidden", "textOverflow": "ellipsis",
            },
        ),
        html.Div(
            [
                html.Span(id="page-info", style={"fontSize": "0.8rem", "color": "#605E5C"}),
                html.Div(
                    [
                        dcc.Dropdown(
                            id="page-size",
                            options=[{"label": f"{n} / page", "value": n} for n in PAGE_SIZE_OPTIONS],
                            value=PAGE_SIZE_OPTIONS[0],
                            clearable=False,
                            style={"width": "120px", "fontSize": "0.8rem"},
                        ),
                        dbc.Button("Previous", id="page-prev", size="sm", color="secondary", outline=True, n_clicks=0, className="ms-2"),
                        dbc.Button("Next", id="page-next", size="sm", color="secondary", outline=True, n_clicks=0, className="ms-1"),
                    ],
                    className="d-flex align-items-center ms-auto",
                ),
            ],
            className="d-flex align-items-center mt-2",
        ),
    ]
)

app.layout = dbc.Container(
    [
        dcc.Store(id="data-version", data=len(store)),
        dcc.Store(id="uploads", data=initial_uploads),
        dcc.Store(id="table-state", data=TableState().to_dict()),
        html.Div(
            [
                html.H1(
                    "Genesys Cloud Interactions",
                    style={
                        "color": POWERBI_COLORS["primary"],
                        "fontWeight": "700",
                        "fontSize": "1.8rem",
                        "marginBottom": "0.15rem",
                        "lineHeight": "1.2",
                    },
                ),
                html.P(
                    "Interaction volume, handle time, queues, agents and wrap-up codes from Genesys Cloud exports",
                    style={"color": "#605E5C", "fontSize": "0.88rem", "marginBottom": "0"},
                ),
                html.Hr(className="divider", style={"marginTop": "0.9rem", "marginBottom": "0"}),
            ],
            className="mb-3",
            style={"paddingTop": "0.5rem"},
        ),
        upload_panel,
        filter_panel,
        dcc.Tabs(
            id="tabs",
            value="dashboard",
            children=[
                dcc.Tab(label="Dashboard", value="dashboard", children=[html.Div(id="dashboard-content", className="mt-3")]),
                dcc.Tab(
                    label="Analysis",
                    value="analysis",
                    children=[
                        html.Div(
                            [
                                dbc.RadioItems(
                                    id="analysis-view",
                                    options=[{"label": title, "value": v} for v, title, _ in ANALYSIS_VIEWS],
                                    value="queue",
                                    inline=True,
                                    input_class_name="btn-check",
                                    label_class_name="btn btn-outline-primary btn-sm me-2",
                                    label_checked_class_name="active",
                                    className="mb-3",
                                ),
                                html.Div(id="analysis-content"),
                            ],
                            className="mt-3",
                        )
                    ],
                ),
                dcc.Tab(label="Interactions", value="interactions", children=[html.Div(table_panel, className="mt-3")]),
            ],
        ),
    ],
    fluid=True,
)


# ==================================
# CALLBACKS
# ==================================

@callback(
    Output("upload-status", "children"),
    Output("uploads", "data"),
    Output("data-version", "data"),
    Input("csv-upload", "contents"),
    Input("clear-data", "n_clicks"),
    State("csv-upload", "filename"),
    State("uploads", "data"),
    State("data-version", "data"),
    prevent_initial_call=True,
)
def update_dataset(contents, clear_clicks, filename, uploads, version):
    uploads = uploads or []
    version = (version or 0) + 1

    if ctx.triggered_id == "clear-data":
        if not clear_clicks:
            raise PreventUpdate
        store.clear()
        return dbc.Alert("All interactions have been removed from the system", color="info"), [], version

    if not contents:
        raise PreventUpdate
    name = filename or "upload.csv"
    try:
        entry = import_csv_bytes(decode_upload(contents), name)
    except (CSVImportError, InvalidInteractionData, ValueError) as exc:
        logger.warning("Upload of %s rejected: %s", name, exc)
        return dbc.Alert(f"Upload failed: {exc}", color="danger"), no_update, no_update
    return import_status(entry), uploads + [entry], version


@callback(Output("uploaded-files", "children"), Input("uploads", "data"))
def render_uploads(uploads):
    return upload_list(uploads or [])


@callback(
    Output("date-filter", "min_date_allowed"),
    Output("date-filter", "max_date_allowed"),
    *[Output(control_id, "options") for _, _, control_id in FILTER_DIMENSIONS],
    *[Output(f"column-filter-{c}", "options") for c in CHECKBOX_COLUMNS],
    Input("data-version", "data"),
)
def refresh_filter_options(_version):
    df = store.list_all()
    if df.empty:
        min_date = max_date = None
    else:
        min_date = df["start_time"].min().date()
        max_date = df["start_time"].max().date()

    dimension_options = []
    for dim, label, _ in FILTER_DIMENSIONS:
        values = wrap_up_codes(df) if dim == "wrap_up" else unique_values(df, dim)
        dimension_options.append(dropdown_options(values, "All"))

    column_options = []
    for c in CHECKBOX_COLUMNS:
        column_options.append([{"label": v, "value": v} for v in unique_values(df, c)])

    return (min_date, max_date, *dimension_options, *column_options)


@callback(Output("dashboard-content", "children"), Input("data-version", "data"), *FILTER_INPUTS)
def update_dashboard(_version, start_date, end_date, queue, agent, media_type, wrap_up, flow):
    filters = current_filters(start_date, end_date, queue, agent, media_type, wrap_up, flow)
    return build_dashboard(filtered_interactions(filters))


@callback(
    Output("analysis-content", "children"),
    Input("analysis-view", "value"),
    Input("data-version", "data"),
    *FILTER_INPUTS,
)
def update_analysis(view, _version, start_date, end_date, queue, agent, media_type, wrap_up, flow):
    filters = current_filters(start_date, end_date, queue, agent, media_type, wrap_up, flow)
    return build_analysis(view or "queue", filtered_interactions(filters))


@callback(
    Output("table-state", "data"),
    Input("table-search", "value"),
    Input("table-search-column", "value"),
    Input("page-size", "value"),
    Input("table-columns", "value"),
    *[Input(f"column-filter-{c}", "value") for c in CHECKBOX_COLUMNS],
    *[Input(f"sort-{f}", "n_clicks") for f in SORT_FIELDS],
    Input("page-prev", "n_clicks"),
    Input("page-next", "n_clicks"),
    Input("data-version", "data"),
    *FILTER_INPUTS,
    State("table-state", "data"),
    prevent_initial_call=True,
)
def update_table_state(*args):
    state_data = args[-1]
    start_date, end_date, queue, agent, media_type, wrap_up, flow = args[-8:-1]
    trigger = ctx.triggered_id
    if trigger is None:
        raise PreventUpdate
    value = ctx.triggered[0]["value"]
    if (trigger.startswith("sort-") or trigger in PAGER_BUTTONS) and not value:
        raise PreventUpdate

    filters = current_filters(start_date, end_date, queue, agent, media_type, wrap_up, flow)
    df = store.list_all() if trigger in PAGER_BUTTONS else None
    state = next_table_state(TableState.from_dict(state_data), trigger, value, df, filters)
    return state.to_dict()


@callback(
    Output("interactions-table", "data"),
    Output("interactions-table", "columns"),
    Output("page-info", "children"),
    Output("page-prev", "disabled"),
    Output("page-next", "disabled"),
    *[Output(f"sort-{f}", "children") for f in SORT_FIELDS],
    Input("table-state", "data"),
    Input("data-version", "data"),
    *FILTER_INPUTS,
)
def render_table(state_data, _version, start_date, end_date, queue, agent, media_type, wrap_up, flow):
    state = TableState.from_dict(state_data)
    filters = current_filters(start_date, end_date, queue, agent, media_type, wrap_up, flow)
    page = state.apply(store.list_all(), filters)
    columns = [c for c in state.visible_columns if c in COLUMN_LABELS] or list(DEFAULT_VISIBLE_COLUMNS)
    return (
        table_records(page.interactions, columns),
        [{"name": COLUMN_LABELS[c], "id": c} for c in columns],
        page_summary(page),
        not page.has_previous,
        not page.has_next,
        *[sort_button_label(f, state) for f in SORT_FIELDS],
    )


@callback(
    Output("download-csv", "data"),
    Input("btn-export-csv", "n_clicks"),
    *FILTER_STATES,
    prevent_initial_call=True,
)
def download_csv(n_clicks, start_date, end_date, queue, agent, media_type, wrap_up, flow):
    if not n_clicks:
        raise PreventUpdate
    df = filtered_interactions(current_filters(start_date, end_date, queue, agent, media_type, wrap_up, flow))
    logger.info("Exporting %d interactions to CSV", len(df))
    return dcc.send_string(to_csv(df), export_filename("csv"))


@callback(
    Output("download-pdf", "data"),
    Input("btn-export-pdf", "n_clicks"),
    *FILTER_STATES,
    prevent_initial_call=True,
)
def download_pdf(n_clicks, start_date, end_date, queue, agent, media_type, wrap_up, flow):
    if not n_clicks:
        raise PreventUpdate
    df = filtered_interactions(current_filters(start_date, end_date, queue, agent, media_type, wrap_up, flow))
    return dcc.send_bytes(to_pdf(df), export_filename("pdf"))


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(host=config.DASHBOARD_HOST, port=config.DASHBOARD_PORT, debug=config.DASHBOARD_DEBUG)


if __name__ == "__main__":
    main()
