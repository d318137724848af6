# lambda_handler.py
import datetime
import logging
import os

from cost_settings import BUCKET, LOOKBACK_DAYS, PREFIX, configure_logging
from run_report import build_reports  # returns file paths + records + summary
from s3_reports import s3_client, upload_reports

configure_logging()
logger = logging.getLogger(__name__)


def lambda_handler(event, context, ce=None, s3=None):
    """
    1) Fetch the billing window and aggregate it (files go to /tmp inside Lambda).
    2) Upload both reports to S3 using env vars (cost_settings defaults when unset):
       - ACD_BUCKET (your bucket name)
       - ACD_PREFIX (folder/prefix in the bucket)
    3) Return a small JSON summary.

    event (optional): {"days": 14} or {"start": "2024-01-01", "end": "2024-02-01"}
    """
    event = event or {}
    days = int(event.get("days") or LOOKBACK_DAYS)
    start, end = event.get("start"), event.get("end")
    if bool(start) != bool(end):
        raise ValueError("event needs both 'start' and 'end', or neither")

    records_path, summary_path, records, summary = build_reports(
        days=days, start=start, end=end, client=ce
    )

    # ---- S3 destination (Lambda environment, else cost_settings defaults) ----
    bucket = os.environ.get("ACD_BUCKET") or BUCKET
    prefix = os.environ.get("ACD_PREFIX", PREFIX)
    keys = upload_reports(s3 or s3_client(), records_path, summary_path, bucket=bucket, prefix=prefix)

    logger.info("Uploaded %d records / %d services to s3://%s", len(records), len(summary.services), bucket)

    return {
        "status": "ok",
        "saved_to": {name: f"s3://{bucket}/{key}" for name, key in keys.items()},
        "counts": {
            "records": len(records),
            "services": len(summary.services),
            "days": len(summary.daily_costs),
        },
        "total_cost": summary.total_cost,
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z"),
    }
