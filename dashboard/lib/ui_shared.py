import streamlit as st
from botocore.exceptions import BotoCoreError, ClientError

from cost_models import EmptyInputError, InvalidRecordError
from lib.data_utils import load_latest_summary, load_live_summary, summary_from_csv


def format_currency(value: float) -> str:
    """$1,234.56 (rounding happens here, never in the aggregation)."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def render_source_sidebar(default_bucket: str, default_prefix: str, default_region: str):
    st.sidebar.header("Data source")
    mode = st.sidebar.radio("Load from", ["Cost Explorer (live)", "S3 bucket", "Upload CSV"], index=0)
    opts = {"mode": mode}
    if mode == "Cost Explorer (live)":
        opts["days"] = int(st.sidebar.number_input("Look-back (days)", min_value=1, max_value=365, value=30, step=1))
        opts["region"] = st.sidebar.text_input("AWS Region", value=default_region)
    elif mode == "S3 bucket":
        opts["bucket"] = st.sidebar.text_input("S3 bucket", value=default_bucket)
        opts["prefix"] = st.sidebar.text_input("Prefix", value=default_prefix)
        opts["region"] = st.sidebar.text_input("AWS Region", value=default_region)
    else:
        opts["upload"] = st.sidebar.file_uploader("Upload cost records CSV", type=["csv"])
    return opts


def load_summary(opts: dict):
    """
    Resolve the sidebar choice into (summary, source label).
    Errors are shown in the page; (None, None) means nothing to draw.
    """
    mode = opts["mode"]
    try:
        if mode == "Cost Explorer (live)":
            summary = load_live_summary(opts["days"], region_name=opts["region"] or None)
            return summary, f"Cost Explorer, last {opts['days']} days"
        if mode == "S3 bucket":
            summary, key = load_latest_summary(opts["bucket"], opts["prefix"], region_name=opts["region"] or None)
            if summary is None:
                st.warning("No cost_summary JSON found under this bucket/prefix.")
                return None, None
            return summary, f"s3://{opts['bucket']}/{key}"
        if opts.get("upload") is not None:
            return summary_from_csv(opts["upload"]), "(uploaded file)"
    except EmptyInputError as e:
        st.warning(f"No cost data to show: {e}")
    except (InvalidRecordError, ValueError) as e:
        st.error(f"Could not read cost data: {e}")
    except (ClientError, BotoCoreError) as e:
        st.error(f"Failed to fetch cost data. Please check your AWS credentials and try again. ({e})")
    return None, None


def kpi_row(m: dict):
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total AWS Cost", format_currency(m["total_cost"]))
    c2.metric("Avg / day", format_currency(m["avg_daily_cost"]))
    c3.metric("Services", f"{m['services']:,}")
    c4.metric("Top service", m["top_service"] or "n/a", f"{m['top_service_pct']:.1f}% of total", delta_color="off")


def service_cards(summary, per_row: int = 3):
    """Service grid; each card expands to its usage-type breakdown."""
    services = list(summary.services)
    for i in range(0, len(services), per_row):
        cols = st.columns(per_row)
        for col, s in zip(cols, services[i:i + per_row]):
            with col:
                with st.container(border=True):
                    st.markdown(f"**{s.name}**")
                    st.markdown(f"### {format_currency(s.cost)}")
                    st.caption(f"{s.percentage:.1f}% of total")
                    with st.expander("Usage types"):
                        for u in s.usage_types:
                            st.write(f"{u.name}: {format_currency(u.cost)}")
