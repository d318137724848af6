import plotly.express as px
import streamlit as st

from lib.data_utils import service_daily_frame, services_frame, usage_types_frame
from lib.ui_shared import format_currency

st.title("🔎 Services")

summary = st.session_state.get("summary")
if summary is None:
    st.info("Load cost data on the main page first.")
    st.stop()

st.caption(f"Source: {st.session_state.get('source', '')}")

# ----------------------------
# Service picker (ordered by cost, biggest first)
# ----------------------------
names = [s.name for s in summary.services]
name = st.sidebar.selectbox("Service", names, index=0)
svc = summary.service(name)

c1, c2 = st.columns(2)
c1.metric(name, format_currency(svc.cost))
c2.metric("Share of total", f"{svc.percentage:.1f}%")

# ----------------------------
# Usage types
# ----------------------------
st.subheader("Usage Types")
usage = usage_types_frame(summary, name)
if usage.empty:
    st.info("No usage type above $0.01 for this service.")
else:
    top_n = len(usage)
    if top_n > 1:
        top_n = st.slider("How many?", min_value=1, max_value=top_n, value=min(10, top_n), key="topn_usage")
    fig = px.bar(usage.head(top_n), x="cost", y="usage_type", orientation="h")
    fig.update_layout(yaxis={"categoryorder": "total ascending"}, xaxis_title="Cost ($)", yaxis_title="Usage type")
    st.plotly_chart(fig, use_container_width=True, key="usage_bar")

    fmt = usage.copy()
    fmt["cost"] = fmt["cost"].map(format_currency)
    st.dataframe(fmt, use_container_width=True, hide_index=True)

# ----------------------------
# Daily trend for this service
# ----------------------------
st.subheader("Daily Cost")
trend = service_daily_frame(summary, name)
if trend["date"].nunique() > 1:
    fig2 = px.line(trend, x="date", y="cost", markers=True)
    fig2.update_layout(xaxis_title="Date", yaxis_title="Cost ($)")
    st.plotly_chart(fig2, use_container_width=True, key="service_trend")
else:
    st.info("Only one day of data in this window.")

# ----------------------------
# All services table
# ----------------------------
with st.expander("All services", expanded=False):
    table = services_frame(summary)
    table["cost"] = table["cost"].map(format_currency)
    table["percentage"] = table["percentage"].map(lambda x: f"{x:.1f}%")
    st.dataframe(table, use_container_width=True, hide_index=True)
