"""
CodeLense Data Visualizer: Streamlit entry point.
"""
import logging

import streamlit as st

logging.basicConfig(level=logging.INFO, format="%(name)s | %(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

from analytics.cells import format_fixed2
from analytics.config import AGGREGATORS, ALL, CHART_KINDS, DATE_GRANULARITIES, GROUP_MODES, ChartMappings
from analytics.pipeline import live_series
from analytics.schema import classify_columns, detect_date_column, filter_columns, value_column_choices
from analytics.stats import summarize_field
from db import mongo
from report.assembler import build_report, report_filename
from utils.auth import check_credentials
from utils.table_io import TableParseError, data_filename, parse_table, to_csv

CHART_TITLES = {
    "bar": "Bar",
    "line": "Line",
    "pie": "Pie",
    "area": "Area",
    "tree": "Treemap",
}
TOP_N_CHOICES = [5, 10, 20, 50, ALL]
PREVIEW_ROWS = 200
WIDGET_PREFIX = "map_"

st.set_page_config(page_title="CodeLense Data Visualizer", page_icon="📊", layout="wide", initial_sidebar_state="expanded")


# ---------------------------------------------------------------------------
# Login gate
# ---------------------------------------------------------------------------
def _login_form():
    st.title("CodeLense Data Visualizer")
    st.caption("Sign in to upload a table and build charts.")
    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")
    if submitted:
        profile = check_credentials(username, password)
        if profile is None:
            logger.info("login_failed: username=%s", username)
            st.error("Invalid username or password.")
        else:
            logger.info("login_ok: username=%s", username)
            st.session_state.user = profile
            st.rerun()


if not st.session_state.get("user"):
    _login_form()
    st.stop()


def _plotly_default_layout(fig, title: str = "", is_pie: bool = False):
    """Apply hover, zoom, and legend so all charts support them."""
    fig.update_layout(
        title=title or None,
        hovermode="closest",
        showlegend=is_pie,
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        margin=dict(t=50, b=50, l=50, r=50),
    )
    if not is_pie:
        fig.update_xaxes(rangeslider_visible=False, fixedrange=False)
        fig.update_yaxes(fixedrange=False)
    return fig


def _render_chart(kind: str, series, title: str = "") -> bool:
    """
    Render one live chart from a series: bar, line, pie, area or treemap.
    Returns True if rendered; an empty series shows "No data" instead.
    """
    if not series:
        st.caption("No data")
        return False
    import plotly.express as px

    names = [p.name for p in series]
    values = [p.value for p in series]
    if kind == "bar":
        fig = px.bar(x=names, y=values, labels={"x": "", "y": ""}, title=title)
    elif kind == "line":
        fig = px.line(x=names, y=values, labels={"x": "", "y": ""}, title=title, markers=True)
    elif kind == "pie":
        fig = px.pie(values=values, names=names, title=title)
        fig.update_traces(textposition="inside", textinfo="percent+label")
    elif kind == "area":
        fig = px.area(x=names, y=values, labels={"x": "", "y": ""}, title=title)
    elif kind == "tree":
        # plotly treemap rejects negative sizes
        fig = px.treemap(names=names, parents=[""] * len(names), values=[max(v, 0) for v in values], title=title)
    else:
        return False

    fig = _plotly_default_layout(fig, title, is_pie=kind in ("pie", "tree"))
    st.plotly_chart(
        fig,
        use_container_width=True,
        config=dict(displayModeBar=True, displaylogo=False),
    )
    return True


def _reset_widgets():
    for key in [k for k in st.session_state.keys() if str(k).startswith(WIDGET_PREFIX)]:
        del st.session_state[key]


def _stored_record() -> dict:
    """Stored mapping record: MongoDB first, then the session fallback."""
    record = mongo.load_mappings(mongo.DEFAULT_PROFILE)
    if record:
        return record
    return st.session_state.get("session_mappings") or {}


def _index(options, value) -> int:
    return options.index(value) if value in options else 0


def _column_text(column: str) -> str:
    return column or "(none)"


# ---------------------------------------------------------------------------
# Sidebar: account, upload, persistence
# ---------------------------------------------------------------------------
with st.sidebar:
    user = st.session_state.user
    st.caption(f"Signed in as **{user['name']}** ({user['email']})")
    if st.button("Sign out"):
        st.session_state.clear()
        st.rerun()
    st.divider()
    st.header("Upload table")
    uploaded_file = st.file_uploader(
        "Choose a file",
        type=["csv", "tsv", "txt", "xlsx", "xls"],
        key="table_upload",
        help="Delimited text with a header row, or an Excel workbook (all sheets are concatenated).",
    )

if uploaded_file is not None:
    upload_key = f"{uploaded_file.name}:{uploaded_file.size}"
    if st.session_state.get("upload_key") != upload_key:
        try:
            table = parse_table(uploaded_file.getvalue(), uploaded_file.name)
        except TableParseError as e:
            st.session_state.pop("table", None)
            st.session_state.upload_key = upload_key
            st.sidebar.error(str(e))
        else:
            st.session_state.table = table
            st.session_state.upload_key = upload_key
            st.session_state.mappings = ChartMappings.with_defaults(table.columns, _stored_record())
            _reset_widgets()
            st.sidebar.success(f"Loaded {uploaded_file.name}: {len(table)} rows, {len(table.columns)} columns.")

table = st.session_state.get("table")

with st.sidebar:
    st.divider()
    if mongo.get_db() is None:
        st.warning("MongoDB not connected. Set **MONGODB_URI** in `.env` to keep chart mappings between sessions.")
    with st.expander("How to use", expanded=False):
        st.markdown("""
1. **Upload** a CSV, TSV or Excel file with a header row.
2. **Map** a category and a value column per chart, or one global mapping for all.
3. **Group** by numeric bins or by day / month / year when the category is numeric or a date.
4. **Export** a standalone HTML report or the raw table as CSV.
        """)

st.title("CodeLense Data Visualizer")

if table is None:
    st.info("Upload a table (sidebar) to get started.")
    st.stop()

if table.is_empty:
    st.info("The uploaded table has no rows.")
    st.stop()

columns = list(table.columns)
value_columns = value_column_choices(columns)
mappings: ChartMappings = st.session_state.get("mappings") or ChartMappings.with_defaults(columns, _stored_record())

# ---------------------------------------------------------------------------
# Columns: search, numeric badge, date hint
# ---------------------------------------------------------------------------
with st.expander("Columns", expanded=False):
    query = st.text_input("Search columns", value="", key="column_search")
    numeric = classify_columns(table)
    rows = []
    for col in filter_columns(columns, query):
        detection = detect_date_column(table, col)
        rows.append({
            "Column": col,
            "Numeric": "yes" if col in numeric else "",
            "Date": f"{detection.parse_rate:.0%}" if detection.is_date else "",
        })
    if rows:
        st.dataframe(rows, use_container_width=True, hide_index=True)
    else:
        st.caption("No columns match.")

with st.expander(f"Preview (first {PREVIEW_ROWS} rows)", expanded=False):
    st.dataframe(table.head(PREVIEW_ROWS), use_container_width=True)

# ---------------------------------------------------------------------------
# Mapping editors
# ---------------------------------------------------------------------------
st.subheader("Chart mappings")
g1, g2, g3 = st.columns(3)
with g1:
    use_global = st.checkbox("Use one mapping for all charts", value=mappings.use_global, key=f"{WIDGET_PREFIX}use_global")
    top_n = st.selectbox("Top N (bar, pie, area)", TOP_N_CHOICES, index=_index(TOP_N_CHOICES, mappings.top_n), key=f"{WIDGET_PREFIX}top_n")
with g2:
    threshold = st.slider(
        "Pie: merge slices below share",
        min_value=0.0,
        max_value=0.5,
        value=min(float(mappings.pie_others_threshold), 0.5),
        step=0.01,
        key=f"{WIDGET_PREFIX}pie_threshold",
    )
with g3:
    review_field = st.selectbox("Review field", columns, index=_index(columns, mappings.review_field), key=f"{WIDGET_PREFIX}review_field")

mappings = mappings.edit(use_global=use_global, top_n=top_n, pie_others_threshold=threshold, review_field=review_field)

if use_global:
    c1, c2, c3, c4 = st.columns(4)
    global_x = c1.selectbox("Category", columns, index=_index(columns, mappings.global_x), key=f"{WIDGET_PREFIX}global_x")
    global_y = c2.selectbox("Value", value_columns, index=_index(value_columns, mappings.global_y), format_func=_column_text, key=f"{WIDGET_PREFIX}global_y")
    global_agg = c3.selectbox("Aggregate", AGGREGATORS, index=_index(AGGREGATORS, mappings.global_agg), key=f"{WIDGET_PREFIX}global_agg")
    global_group = c4.selectbox("Group", GROUP_MODES, index=_index(GROUP_MODES, mappings.global_group), key=f"{WIDGET_PREFIX}global_group")
    mappings = mappings.edit(global_x=global_x, global_y=global_y, global_agg=global_agg, global_group=global_group)

tabs = st.tabs([CHART_TITLES[k] for k in CHART_KINDS])
for kind, tab in zip(CHART_KINDS, tabs):
    with tab:
        m = getattr(mappings, kind)
        c1, c2, c3, c4 = st.columns(4)
        category = c1.selectbox("Category", columns, index=_index(columns, m.category_key), key=f"{WIDGET_PREFIX}{kind}_x", disabled=use_global)
        value = c2.selectbox("Value", value_columns, index=_index(value_columns, m.value_key), format_func=_column_text, key=f"{WIDGET_PREFIX}{kind}_y", disabled=use_global)
        agg = c3.selectbox("Aggregate", AGGREGATORS, index=_index(AGGREGATORS, m.aggregator), key=f"{WIDGET_PREFIX}{kind}_agg", disabled=use_global)
        group = c4.selectbox("Group", GROUP_MODES, index=_index(GROUP_MODES, m.group_mode), key=f"{WIDGET_PREFIX}{kind}_group", disabled=use_global)
        bin_count = m.bin_count
        granularity = m.date_granularity
        effective_group = mappings.global_group if use_global else group
        if effective_group == "bins":
            bin_count = int(st.number_input("Bins", min_value=1, value=m.bin_count, step=1, key=f"{WIDGET_PREFIX}{kind}_bins"))
        elif effective_group == "date":
            granularity = st.selectbox(
                "Date granularity",
                DATE_GRANULARITIES,
                index=_index(DATE_GRANULARITIES, m.date_granularity),
                key=f"{WIDGET_PREFIX}{kind}_granularity",
            )
            effective_x = mappings.global_x if use_global else category
            if not detect_date_column(table, effective_x).is_date:
                st.caption(f"'{effective_x}' does not look like a date column; unparsable values show as 'Invalid date'.")
        mappings = mappings.edit_chart(
            kind,
            category_key=category,
            value_key=value,
            aggregator=agg,
            group_mode=group,
            bin_count=bin_count,
            date_granularity=granularity,
        )

st.session_state.mappings = mappings

s1, s2, _ = st.columns([1, 1, 4])
if s1.button("Save mappings"):
    record = mappings.to_record()
    if mongo.save_mappings(mongo.DEFAULT_PROFILE, record):
        st.success("Mappings saved.")
    else:
        st.session_state.session_mappings = record
        st.warning("MongoDB not connected. Mappings kept for this session only.")
if s2.button("Reset to defaults"):
    mongo.clear_mappings(mongo.DEFAULT_PROFILE)
    st.session_state.pop("session_mappings", None)
    st.session_state.mappings = ChartMappings.with_defaults(columns)
    _reset_widgets()
    st.rerun()

# ---------------------------------------------------------------------------
# Live charts
# ---------------------------------------------------------------------------
st.divider()
series_by_chart = live_series(table, mappings)
left, right = st.columns(2)
for i, kind in enumerate(CHART_KINDS):
    with (left if i % 2 == 0 else right):
        effective = mappings.chart(kind)
        _render_chart(kind, series_by_chart[kind], f"{CHART_TITLES[kind]}: {effective.aggregator}({effective.value_key}) by {effective.category_key}")

# ---------------------------------------------------------------------------
# Review field summary
# ---------------------------------------------------------------------------
st.divider()
st.subheader(f"Review: {mappings.review_field}")
summary = summarize_field(table, mappings.review_field)
m1, m2, m3, m4, m5 = st.columns(5)
m1.metric("Records", summary.count)
m2.metric("Sum", format_fixed2(summary.total))
m3.metric("Avg", format_fixed2(summary.average))
m4.metric("Max", format_fixed2(summary.maximum))
m5.metric("Min", format_fixed2(summary.minimum))

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
st.divider()
e1, e2, _ = st.columns([1, 1, 4])
e1.download_button(
    "Download report (HTML)",
    data=build_report(table, mappings),
    file_name=report_filename(),
    mime="text/html",
)
e2.download_button(
    "Download data (CSV)",
    data=to_csv(table),
    file_name=data_filename(),
    mime="text/csv",
)
