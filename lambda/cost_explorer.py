# cost_explorer.py
import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cost_aggregator import aggregate
from cost_models import CostRecord, CostSummary, EmptyInputError, UNKNOWN_USAGE_TYPE
from cost_settings import COST_METRIC, LOOKBACK_DAYS, REGION

logger = logging.getLogger(__name__)

GROUP_BY = [
    {"Type": "DIMENSION", "Key": "SERVICE"},
    {"Type": "DIMENSION", "Key": "USAGE_TYPE"},
]


def ce_client(region_name: Optional[str] = None, profile_name: Optional[str] = None, session=None):
    """
    Cost Explorer client. Credentials come from the normal boto3 chain
    (env, profile, instance role); pass a session or profile to override.
    """
    if session is None:
        session = boto3.Session(profile_name=profile_name, region_name=region_name)
    return session.client("ce", region_name=region_name or session.region_name or REGION)


def date_range(days: int = LOOKBACK_DAYS, end: Optional[date] = None) -> Tuple[str, str]:
    """(start, end) ISO dates covering the last `days` days. End is exclusive for Cost Explorer."""
    if days <= 0:
        raise ValueError(f"days must be positive, got {days}")
    end = end or date.today()
    start = end - timedelta(days=days)
    return start.isoformat(), end.isoformat()


def _records_from_page(resp: dict, metric: str) -> List[CostRecord]:
    out = []
    for result in resp.get("ResultsByTime", []):
        day = (result.get("TimePeriod") or {}).get("Start")
        if not day:
            continue
        for group in result.get("Groups", []):
            keys = group.get("Keys") or []
            amount = ((group.get("Metrics") or {}).get(metric) or {}).get("Amount")
            if amount is None:
                continue
            cost = float(amount)
            if cost <= 0:
                continue  # credits/refunds and zero lines
            out.append(CostRecord(
                date=day,
                service=keys[0] if len(keys) > 0 and keys[0] else "Unknown",
                usage_type=keys[1] if len(keys) > 1 and keys[1] else UNKNOWN_USAGE_TYPE,
                cost=cost,
            ))
    return out


def get_cost_records(start: str, end: str, client=None, metric: str = COST_METRIC) -> List[CostRecord]:
    """
    Daily cost per (service, usage type) between start (inclusive) and end (exclusive).
    Follows NextPageToken until Cost Explorer has nothing left.
    """
    ce = client or ce_client()
    records: List[CostRecord] = []
    token = None
    pages = 0
    try:
        while True:
            kwargs = dict(
                TimePeriod={"Start": start, "End": end},
                Granularity="DAILY",
                Metrics=[metric],
                GroupBy=GROUP_BY,
            )
            if token:
                kwargs["NextPageToken"] = token
            resp = ce.get_cost_and_usage(**kwargs)
            records.extend(_records_from_page(resp, metric))
            pages += 1
            token = resp.get("NextPageToken")
            if not token:
                break
    except (ClientError, BotoCoreError):
        logger.exception("Error fetching cost data for %s..%s", start, end)
        raise

    logger.info("Fetched %d cost records (%s..%s, %d page(s))", len(records), start, end, pages)
    return records


def fetch_window(
    days: int = LOOKBACK_DAYS,
    client=None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    metric: str = COST_METRIC,
) -> Tuple[List[CostRecord], CostSummary]:
    """
    Fetch a billing window (explicit start/end, else the last `days`) and aggregate it.
    Raises EmptyInputError when Cost Explorer returned nothing.
    """
    if not (start and end):
        start, end = date_range(days)
    records = get_cost_records(start, end, client=client, metric=metric)
    if not records:
        raise EmptyInputError(f"No cost data found for {start}..{end}")
    return records, aggregate(records)


def fetch_cost_summary(days: int = LOOKBACK_DAYS, client=None, **kwargs) -> CostSummary:
    return fetch_window(days=days, client=client, **kwargs)[1]
