# cost_aggregator.py
"""
Turn a flat list of daily cost records into the nested summary the dashboard
draws: total, per-service totals with percentages and usage-type breakdown,
and per-day service costs.

Steps:
  1) drop noise (cost <= NOISE_THRESHOLD)
  2) fail on an empty window (percentages would divide by zero)
  3) group by service, (service, usage type) and (date, service)
  4) sort: services / usage types / day entries by cost DESC, days by date ASC

Ties keep first-seen order (groupby(sort=False) + stable sorts).
"""
import logging
from typing import Iterable, List

import pandas as pd

from cost_models import (
    AggregationError,
    CostItem,
    CostRecord,
    CostSummary,
    DailyCost,
    EmptyInputError,
    InvalidRecordError,
    ServiceSummary,
)

__all__ = [
    "NOISE_THRESHOLD",
    "AggregationError",
    "EmptyInputError",
    "InvalidRecordError",
    "aggregate",
    "filter_noise",
    "records_frame",
]

logger = logging.getLogger(__name__)

# Anything at or below one cent is dropped before grouping
NOISE_THRESHOLD = 0.01

_COLUMNS = ["date", "service", "usage_type", "cost"]


def records_frame(records: Iterable) -> pd.DataFrame:
    """
    Validate every record (CostRecord or mapping) and load them into a frame.
    Raises InvalidRecordError on the first bad record; nothing is grouped yet.
    """
    rows = []
    for i, raw in enumerate(records):
        try:
            rec = CostRecord.coerce(raw)
        except InvalidRecordError as e:
            raise InvalidRecordError(f"record #{i}: {e}") from e
        rows.append((rec.date, rec.service, rec.usage_type, rec.cost))
    df = pd.DataFrame(rows, columns=_COLUMNS)
    df["cost"] = df["cost"].astype("float64")
    return df


def filter_noise(df: pd.DataFrame, threshold: float = NOISE_THRESHOLD) -> pd.DataFrame:
    return df[df["cost"] > threshold]


def _sorted_items(g: pd.DataFrame, name_col: str) -> tuple:
    """(name, cost) rows -> CostItems above the threshold, cost DESC, ties in input order."""
    g = filter_noise(g).sort_values("cost", ascending=False, kind="stable")
    return tuple(CostItem(name=str(n), cost=float(c)) for n, c in zip(g[name_col], g["cost"]))


def aggregate(records: Iterable) -> CostSummary:
    """
    Aggregate cost records into a CostSummary.

    records: CostRecord values or mappings with date/service/usageType/cost
             (see cost_models.FIELD_ALIASES for accepted spellings)

    Raises:
      InvalidRecordError  a record is malformed (checked before any grouping)
      EmptyInputError     nothing left after the noise filter
    """
    df = filter_noise(records_frame(records))
    if df.empty:
        raise EmptyInputError(f"no cost records above {NOISE_THRESHOLD} to aggregate")

    total_cost = float(df["cost"].sum())

    # ---------- Services ----------
    by_service = (
        df.groupby("service", sort=False)["cost"].sum()
          .reset_index()
          .sort_values("cost", ascending=False, kind="stable")
    )
    by_usage = df.groupby(["service", "usage_type"], sort=False)["cost"].sum().reset_index()

    services: List[ServiceSummary] = []
    for name, cost in zip(by_service["service"], by_service["cost"]):
        usage = by_usage[by_usage["service"] == name]
        services.append(ServiceSummary(
            name=str(name),
            cost=float(cost),
            percentage=float(cost) / total_cost * 100.0,
            usage_types=_sorted_items(usage, "usage_type"),
        ))

    # ---------- Daily ----------
    by_day = df.groupby(["date", "service"], sort=False)["cost"].sum().reset_index()
    daily = [
        DailyCost(date=str(day), services=_sorted_items(by_day[by_day["date"] == day], "service"))
        for day in sorted(by_day["date"].unique())  # ISO strings sort as dates
    ]

    logger.debug(
        "Aggregated %d records: %d services, %d days, total %.4f",
        len(df), len(services), len(daily), total_cost,
    )
    return CostSummary(total_cost=total_cost, services=tuple(services), daily_costs=tuple(daily))
