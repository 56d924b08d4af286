"""Explore screen: live incident feed with category filters."""

from __future__ import annotations

import os
from datetime import datetime

import httpx
import pandas as pd
import plotly.express as px
import pydeck as pdk
import streamlit as st

API_URL = os.getenv("FEED_API_URL", "http://localhost:8000").strip().rstrip("/")
POLL_SECONDS = float(os.getenv("FEED_DASHBOARD_POLL", "30"))
CHART_COLOR = "#007aff"
DISABLED_COLOR = "#cccccc"

# ── Page config ────────────────────────────────────────────────────────
st.set_page_config(
    page_title="Explore",
    page_icon="🔒",
    layout="wide",
)
st.title("Explore")
st.caption("Recent incidents near you, refreshed every few minutes.")


# ── Helpers ────────────────────────────────────────────────────────────
def call(method: str, path: str) -> dict | None:
    """Call the feed API. Shows the failure and returns None if it can't be reached."""
    try:
        resp = httpx.request(method, f"{API_URL}{path}", timeout=30)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPError as exc:
        st.error(f"Feed API unavailable at {API_URL}: {exc}")
        return None


def _fmt_time(value: str | None) -> str:
    if not value:
        return "never"
    return datetime.fromisoformat(value).astimezone().strftime("%H:%M:%S")


def _queue(method: str, path: str) -> None:
    st.session_state["pending"] = (method, path)


# ── Live feed ──────────────────────────────────────────────────────────
# Polls /feed so timer refreshes on the API side show up without a click.
@st.fragment(run_every=POLL_SECONDS)
def live_feed() -> None:
    if "pending" in st.session_state:
        method, path = st.session_state.pop("pending")
        feed = call(method, path)
    else:
        feed = call("GET", "/feed")

    if feed is None:
        return

    # ── Filters ───────────────────────────────────────────────────────
    st.subheader("Filter by Crime Type")
    counts = feed["counts"]
    cols = st.columns(len(counts))
    for col, row in zip(cols, counts):
        col.button(
            f"{row['category']} ({row['count']})",
            key=f"toggle-{row['category']}",
            type="primary" if row["enabled"] else "secondary",
            use_container_width=True,
            on_click=_queue,
            args=("POST", f"/filters/{row['category']}/toggle"),
        )

    st.button("Refresh Data", key="refresh", on_click=_queue, args=("POST", "/refresh"))

    if feed["status"] == "loading":
        st.info("Loading…")
    if feed["error"]:
        st.error(feed["error"])
        if feed["consecutive_failures"] > 1:
            st.caption(f"{feed['consecutive_failures']} refreshes failed in a row.")
    if feed["last_updated"]:
        st.caption(f"Last updated: {_fmt_time(feed['last_updated'])}")

    # ── Counts chart & map ────────────────────────────────────────────
    incidents_df = pd.DataFrame(feed["incidents"])
    counts_df = pd.DataFrame(counts)
    counts_df["shown"] = counts_df["enabled"].map({True: "shown", False: "hidden"})

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Incidents by Type")
        fig = px.bar(
            counts_df, x="category", y="count", color="shown",
            color_discrete_map={"shown": CHART_COLOR, "hidden": DISABLED_COLOR},
        )
        fig.update_layout(xaxis_title="", yaxis_title="Incidents", showlegend=False)
        st.plotly_chart(fig, use_container_width=True)

    with col2:
        st.subheader("Crime Map")
        if incidents_df.empty:
            st.caption("Nothing to map.")
        else:
            layer = pdk.Layer(
                "ScatterplotLayer",
                data=incidents_df,
                get_position=["lng", "lat"],
                get_radius=60,
                get_fill_color=[217, 83, 79, 180],
                pickable=True,
            )
            view = pdk.ViewState(
                latitude=float(incidents_df["lat"].mean()),
                longitude=float(incidents_df["lng"].mean()),
                zoom=13, pitch=0,
            )
            st.pydeck_chart(pdk.Deck(
                layers=[layer], initial_view_state=view, map_style="light",
                tooltip={"text": "{category}\n{description}"},
            ))

    # ── Recent incidents ──────────────────────────────────────────────
    st.subheader(f"Recent Incidents ({feed['total']})")
    if incidents_df.empty and feed["status"] != "loading":
        st.write("No incidents to display with current filters.")
    for incident in feed["incidents"]:
        with st.container(border=True):
            st.markdown(f"**{incident['category']}**")
            st.write(incident["description"])
            occurred = datetime.fromisoformat(incident["occurred_at"]).astimezone()
            st.caption(occurred.strftime("%Y-%m-%d %H:%M"))


live_feed()
