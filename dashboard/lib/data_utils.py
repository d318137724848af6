# dashboard/lib/data_utils.py
import io
import json

import pandas as pd
from dateutil import parser

from cost_aggregator import aggregate
from cost_explorer import ce_client, fetch_cost_summary
from cost_models import CostSummary, UNKNOWN_USAGE_TYPE

from lib.s3_utils import list_objects, read_bytes


# Accept Cost Explorer / CUR style headers as well as our own CSV
MAP = {
    "date": ["Date", "date", "TimePeriod", "usage_date", "lineItem/UsageStartDate"],
    "service": ["Service", "service", "ProductName", "product/ProductName", "lineItem/ProductCode"],
    "usage_type": ["Usage Type", "UsageType", "usageType", "usage_type", "lineItem/UsageType"],
    "cost": ["Cost ($)", "Cost", "cost", "UnblendedCost", "Amount", "lineItem/UnblendedCost"],
}

# Pie shows the biggest N services; everything else is folded into "Others"
TOP_N_SERVICES = 5
OTHERS = "Others"


def _pick(df, names):
    for n in names:
        if n in df.columns:
            return n


def _iso_day(x):
    if pd.isna(x) or str(x).strip() == "":
        return pd.NA
    try:
        return parser.parse(str(x)).date().isoformat()
    except (ValueError, OverflowError):
        return pd.NA


def normalize(df: pd.DataFrame) -> pd.DataFrame:
    """Map whatever headers the CSV has to date/service/usage_type/cost."""
    ren = {}
    for canon, cands in MAP.items():
        c = _pick(df, cands)
        if c:
            ren[c] = canon
    out = df.rename(columns=ren)

    missing = [k for k in ("date", "service", "cost") if k not in out.columns]
    if missing:
        raise ValueError(f"CSV has no column for: {', '.join(missing)}")
    if "usage_type" not in out.columns:
        out["usage_type"] = UNKNOWN_USAGE_TYPE

    out = out[list(MAP.keys())].copy()
    out["date"] = out["date"].apply(_iso_day)
    out["usage_type"] = out["usage_type"].fillna(UNKNOWN_USAGE_TYPE).astype(str)
    out["cost"] = pd.to_numeric(out["cost"], errors="coerce")
    return out


def records_from_frame(df: pd.DataFrame) -> list:
    """Normalized frame -> record dicts for the aggregator (rows without date/service/cost dropped)."""
    tmp = normalize(df).dropna(subset=["date", "service", "cost"])
    return [
        {"date": d, "service": s, "usageType": u, "cost": float(c)}
        for d, s, u, c in zip(tmp["date"], tmp["service"], tmp["usage_type"], tmp["cost"])
    ]


def summary_from_csv(buf) -> CostSummary:
    """Raw cost records CSV (path, buffer or upload) -> CostSummary."""
    return aggregate(records_from_frame(pd.read_csv(buf)))


def summary_from_json(raw) -> CostSummary:
    """Summary JSON (bytes, str or already-parsed dict) -> CostSummary."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        raw = json.loads(raw)
    return CostSummary.from_dict(raw)


# ---------- Loaders ----------

def load_live_summary(days: int, region_name=None, profile_name=None) -> CostSummary:
    """Straight from Cost Explorer (no caching)."""
    return fetch_cost_summary(days=days, client=ce_client(region_name=region_name, profile_name=profile_name))


def load_latest_summary(bucket: str, prefix: str = "reports/", region_name=None):
    """
    Newest cost_summary*.json under bucket/prefix.
    Returns (summary, key) or (None, None) when nothing is there.
    """
    items = list_objects(bucket, prefix, suffix=".json", region_name=region_name)
    keys = [k for (k, _, _) in items if "cost_summary" in k.lower()]
    if not keys:
        return None, None
    key = keys[0]
    return summary_from_json(read_bytes(bucket, key, region_name=region_name)), key


# ---------- Summary -> frames for charts/tables ----------

def services_frame(summary: CostSummary) -> pd.DataFrame:
    return pd.DataFrame(
        [{"name": s.name, "cost": s.cost, "percentage": s.percentage} for s in summary.services],
        columns=["name", "cost", "percentage"],
    )


def top_services_with_others(summary: CostSummary, n: int = TOP_N_SERVICES) -> pd.DataFrame:
    """
    Top `n` services by cost; the remainder is summed into a single "Others" row
    (cost and percentage). Nothing is folded when there are <= n services.
    """
    df = services_frame(summary).sort_values("cost", ascending=False, kind="stable")
    if len(df) <= n:
        return df.reset_index(drop=True)
    rest = df.iloc[n:]
    others = pd.DataFrame([{
        "name": OTHERS,
        "cost": float(rest["cost"].sum()),
        "percentage": float(rest["percentage"].sum()),
    }])
    return pd.concat([df.iloc[:n], others], ignore_index=True)


def usage_types_frame(summary: CostSummary, service: str) -> pd.DataFrame:
    s = summary.service(service)
    rows = [{"usage_type": u.name, "cost": u.cost} for u in s.usage_types] if s else []
    return pd.DataFrame(rows, columns=["usage_type", "cost"])


def daily_costs_frame(summary: CostSummary) -> pd.DataFrame:
    """Long format (date, service, cost), dates ascending, for stacked bars / lines."""
    rows = [
        {"date": d.date, "service": s.name, "cost": s.cost}
        for d in summary.daily_costs
        for s in d.services
    ]
    df = pd.DataFrame(rows, columns=["date", "service", "cost"])
    df["date"] = pd.to_datetime(df["date"])
    return df


def service_daily_frame(summary: CostSummary, service: str) -> pd.DataFrame:
    """One service across all days (days where it fell under the noise filter are 0)."""
    rows = []
    for d in summary.daily_costs:
        cost = next((s.cost for s in d.services if s.name == service), 0.0)
        rows.append({"date": d.date, "cost": cost})
    df = pd.DataFrame(rows, columns=["date", "cost"])
    df["date"] = pd.to_datetime(df["date"])
    return df


def kpis(summary: CostSummary) -> dict:
    days = len(summary.daily_costs)
    top = summary.services[0] if summary.services else None
    return {
        "total_cost": summary.total_cost,
        "services": len(summary.services),
        "days": days,
        "avg_daily_cost": summary.total_cost / days if days else 0.0,
        "top_service": top.name if top else "",
        "top_service_pct": top.percentage if top else 0.0,
    }


def summary_json_bytes(summary: CostSummary) -> bytes:
    buf = io.StringIO()
    json.dump(summary.to_dict(), buf, indent=2)
    return buf.getvalue().encode("utf-8")
