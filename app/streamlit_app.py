"""Streamlit dashboard for per-author overtime rankings."""

from __future__ import annotations

import plotly.graph_objects as go
import streamlit as st

from overtime_index.exceptions import OptionError
from overtime_index.git_source import GitDataSource
from overtime_index.models import AnalyzeOptions, AuthorRankingResult, SortMode, TrendResult
from overtime_index.ranking import rank_authors
from overtime_index.report import ranking_dataframe, trend_dataframe
from overtime_index.trend import analyze_trend

_SORT_LABELS = {
    "Composite score": SortMode.SCORE,
    "Overtime index": SortMode.INDEX,
    "Overtime commits": SortMode.OVERTIME,
    "Total commits": SortMode.COMMITS,
}


# ── Data loading (cached) ──────────────────────────────────────────────────

@st.cache_data(show_spinner="Analyzing commits...")
def _load_ranking(
    path: str,
    days: str | None,
    year: str | None,
    all_time: bool,
    merge: bool,
    sort_by: str,
) -> AuthorRankingResult | None:
    options = AnalyzeOptions(
        all_time=all_time, days=days, year=year, merge=merge, sort_by=SortMode(sort_by)
    )
    return rank_authors(GitDataSource(), path, options)


@st.cache_data(show_spinner="Building monthly trend...")
def _load_trend(path: str, days: str | None, year: str | None, all_time: bool) -> TrendResult | None:
    options = AnalyzeOptions(all_time=all_time, days=days, year=year)
    return analyze_trend(GitDataSource(), path, options)


# ── Dashboard ───────────────────────────────────────────────────────────────

def main() -> None:
    """Render the Streamlit dashboard."""
    st.set_page_config(page_title="Overtime Index", layout="wide")

    with st.sidebar:
        st.header("Repository")
        path = st.text_input("Path", value=".")
        window = st.radio("Time range", ["Auto", "Last N days", "Year", "All time"])
        days = year = None
        if window == "Last N days":
            days = str(st.number_input("Days", min_value=1, value=90, step=1))
        elif window == "Year":
            year = st.text_input("Year (YYYY or YYYY-YYYY)", value="")
        all_time = window == "All time"

        st.header("Ranking")
        sort_label = st.selectbox("Sort by", list(_SORT_LABELS))
        merge = st.toggle("Merge identities with the same name", value=False)
        top_n = st.slider("Top N authors", min_value=3, max_value=50, value=10)

    try:
        result = _load_ranking(path, days, year or None, all_time, merge, _SORT_LABELS[sort_label].value)
    except OptionError as exc:
        st.error(str(exc))
        return
    except Exception as exc:
        st.error(f"Analysis failed: {exc}")
        return

    if result is None:
        st.warning(
            "Not enough commits to rank authors in this window. "
            "Try a wider time range or 'All time'."
        )
        return

    st.markdown("## Overtime Index")
    st.caption(f"{result.total_authors} authors · {result.time_range.describe()}")

    df = ranking_dataframe(result).head(top_n)

    col_table, col_chart = st.columns([3, 2])

    with col_table:
        st.markdown(f"**Top {len(df)} authors ({sort_label.lower()})**")
        display_df = df[
            ["rank", "author", "commits", "overtime_commits", "index_996", "overtime_ratio", "weekend_percent"]
        ].rename(columns={
            "rank": "Rank",
            "author": "Author",
            "commits": "Commits",
            "overtime_commits": "Overtime",
            "index_996": "Index",
            "overtime_ratio": "Overtime %",
            "weekend_percent": "Weekend %",
        })
        st.dataframe(display_df, use_container_width=True, hide_index=True)

    with col_chart:
        st.markdown("**Working hours vs overtime**")
        fig = go.Figure()
        fig.add_trace(go.Bar(
            x=df["author"],
            y=df["working_hour_commits"],
            name="Working hours",
            marker_color="#4ECDC4",
        ))
        fig.add_trace(go.Bar(
            x=df["author"],
            y=df["overtime_commits"],
            name="Overtime",
            marker_color="#FF6B6B",
        ))
        fig.update_layout(
            barmode="stack",
            xaxis_title="Author",
            yaxis_title="Commits",
            legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
            margin=dict(t=10, b=40, l=50, r=10),
        )
        st.plotly_chart(fig, use_container_width=True)

    with st.expander("Monthly trend"):
        trend = _load_trend(path, days, year or None, all_time)
        if trend is None:
            st.info("Not enough commits for a trend in this window.")
        else:
            tdf = trend_dataframe(trend)
            fig = go.Figure()
            fig.add_trace(go.Scatter(x=tdf["month"], y=tdf["index_996"], mode="lines+markers", name="Index"))
            fig.add_trace(go.Bar(x=tdf["month"], y=tdf["commits"], name="Commits", yaxis="y2", opacity=0.3))
            fig.update_layout(
                yaxis=dict(title="Index"),
                yaxis2=dict(title="Commits", overlaying="y", side="right"),
                margin=dict(t=10, b=40, l=50, r=50),
            )
            st.plotly_chart(fig, use_container_width=True)

    with st.expander("How the index works"):
        st.markdown("""
**Overtime ratio** = ceil(round(x + y · n / (m + n)) / (x + y) · 100)

where *y* = working-hour commits, *x* = overtime commits, *m* = weekday commits, *n* = weekend commits.

**Index** = 3 × ratio. When there is no overtime and commits cover fewer than 9 hours of
the day, the index goes negative to flag an under-saturated working day.

**Composite score** = index × min(1, log10(commits) / 2) + min(overtime, 50) / 5,
or the raw index when it is negative.
""")


if __name__ == "__main__":
    main()
