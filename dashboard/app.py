import plotly.express as px
import streamlit as st

from cost_settings import BUCKET, PREFIX, REGION
from lib.data_utils import (
    daily_costs_frame, kpis, summary_json_bytes, top_services_with_others,
)
from lib.ui_shared import format_currency, kpi_row, load_summary, render_source_sidebar, service_cards

st.set_page_config(page_title="AWS Cost Dashboard", page_icon="💸", layout="wide")
st.title("💸 AWS Cost Dashboard")

# --- Sidebar: Data source ---
opts = render_source_sidebar(BUCKET, PREFIX, REGION)
if st.sidebar.button("Load", type="primary"):
    summary, source = load_summary(opts)
    if summary is not None:
        # Pages share the loaded summary
        st.session_state["summary"], st.session_state["source"] = summary, source

if "summary" not in st.session_state:
    st.info("Pick a data source and press **Load**.")
    st.stop()

summary = st.session_state["summary"]
st.caption(f"Source: {st.session_state['source']}")

# --- KPIs ---
kpi_row(kpis(summary))

# --- Cost by service (top 5 + Others) ---
cA, cB = st.columns([2, 3])
with cA:
    st.subheader("Cost by Service")
    pie = top_services_with_others(summary)
    fig = px.pie(pie, values="cost", names="name", hole=0.35, custom_data=["percentage"])
    fig.update_traces(
        textposition="inside",
        texttemplate="%{label} (%{customdata[0]:.1f}%)",
        hovertemplate="%{label}: $%{value:,.2f}<extra></extra>",
    )
    st.plotly_chart(fig, use_container_width=True, key="service_pie")

# --- Daily costs (stacked by service) ---
with cB:
    st.subheader("Daily Cost")
    daily = daily_costs_frame(summary)
    if daily["date"].nunique() > 1:
        fig2 = px.bar(daily, x="date", y="cost", color="service")
        fig2.update_layout(barmode="stack", xaxis_title="Date", yaxis_title="Cost ($)", hovermode="x unified")
        st.plotly_chart(fig2, use_container_width=True, key="daily_bar")
    else:
        st.info("Only one day of data in this window.")

# --- Service details ---
st.subheader("Service Details")
service_cards(summary)

st.download_button(
    "Download summary (JSON)",
    data=summary_json_bytes(summary),
    file_name="cost_summary.json",
    mime="application/json",
)

st.caption(
    f"Total {format_currency(summary.total_cost)}. Costs of $0.01 or less are left out. "
    "The Services page breaks a single service down by usage type and day."
)
