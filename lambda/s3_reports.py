# s3_reports.py – upload/list/download cost reports in S3
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

import boto3
from botocore.exceptions import ClientError

from cost_settings import BUCKET, PREFIX, RECORDS_FILE, REGION, SUMMARY_FILE

logger = logging.getLogger(__name__)


def s3_client(region_name: Optional[str] = None, endpoint_url: Optional[str] = None):
    return boto3.client("s3", region_name=region_name or REGION, endpoint_url=endpoint_url)


def _ts():
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H%MZ")


def _prefix(prefix: str) -> str:
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return prefix


def upload_report(client, local_path: str, base_name: str, bucket: str = BUCKET,
                  prefix: str = PREFIX, timestamped: bool = True) -> List[str]:
    """
    Upload one report. With timestamped=True it lands as <name>-<ts>.<ext> and is
    then copied to <name>.<ext> so the dashboard can always read the latest.
    Returns the keys written.
    """
    prefix = _prefix(prefix)
    latest_key = f"{prefix}{base_name}"

    if not timestamped:
        logger.info("Uploading %s -> s3://%s/%s", local_path, bucket, latest_key)
        client.upload_file(local_path, bucket, latest_key)
        return [latest_key]

    stem, ext = os.path.splitext(base_name)
    ts_key = f"{prefix}{stem}-{_ts()}{ext}"
    logger.info("Uploading %s -> s3://%s/%s", local_path, bucket, ts_key)
    client.upload_file(local_path, bucket, ts_key)

    logger.info("Copying to latest -> s3://%s/%s", bucket, latest_key)
    client.copy_object(Bucket=bucket, CopySource={"Bucket": bucket, "Key": ts_key}, Key=latest_key)
    return [ts_key, latest_key]


def upload_reports(client, records_path: str, summary_path: str, bucket: str = BUCKET,
                   prefix: str = PREFIX, timestamped: bool = True) -> dict:
    """Upload the records CSV and the summary JSON. Returns {report name: latest key}."""
    out = {}
    for path, name in ((records_path, RECORDS_FILE), (summary_path, SUMMARY_FILE)):
        keys = upload_report(client, path, name, bucket=bucket, prefix=prefix, timestamped=timestamped)
        out[name] = keys[-1]
    return out


def list_reports(client, bucket: str = BUCKET, prefix: str = PREFIX, suffix: str = "", max_keys: int = 1000):
    """
    Objects under prefix whose key ends in `suffix`, newest first.
    Follows ContinuationToken pages; returns a list of (key, size, last_modified).
    """
    found = []
    cont = None
    while True:
        kwargs = dict(Bucket=bucket, Prefix=_prefix(prefix), MaxKeys=max_keys)
        if cont:
            kwargs["ContinuationToken"] = cont
        resp = client.list_objects_v2(**kwargs)
        for obj in resp.get("Contents", []):
            if obj["Key"].lower().endswith(suffix.lower()):
                found.append((obj["Key"], obj["Size"], obj["LastModified"]))
        if not resp.get("IsTruncated"):
            break
        cont = resp.get("NextContinuationToken")
    found.sort(key=lambda x: x[2], reverse=True)
    return found


def download_latest(client, which: str = SUMMARY_FILE, bucket: str = BUCKET,
                    prefix: str = PREFIX, dest_dir: str = "."):
    """
    Download the latest copy of a report.
    which: 'cost_summary.json' or 'cost_records.csv'
    Saves to <dest_dir>/latest_<which>; returns the path, or None if missing.
    """
    latest_key = f"{_prefix(prefix)}{which}"
    local = os.path.join(dest_dir, f"latest_{which}")
    try:
        client.head_object(Bucket=bucket, Key=latest_key)
    except ClientError:
        logger.warning("Latest key not found: s3://%s/%s", bucket, latest_key)
        return None
    client.download_file(bucket, latest_key, local)
    return local


if __name__ == "__main__":
    s3 = s3_client()
    for key, size, when in list_reports(s3):
        print(f"{when:%Y-%m-%d %H:%M:%S %Z}  {size:8}  s3://{BUCKET}/{key}")
