# cost_settings.py
import logging
import os

# === Config (override with environment variables) ===
LOOKBACK_DAYS = int(os.getenv("ACD_LOOKBACK_DAYS", "30"))          # default billing window (days)
COST_METRIC = os.getenv("ACD_COST_METRIC", "UnblendedCost")         # Cost Explorer metric

# --- Report storage (S3) ---
BUCKET = os.getenv("ACD_BUCKET", "aws-cost-dashboard-reports")
PREFIX = os.getenv("ACD_PREFIX", "reports/")                         # keep trailing slash
REGION = os.getenv("AWS_DEFAULT_REGION", "us-east-1")

RECORDS_FILE = "cost_records.csv"
SUMMARY_FILE = "cost_summary.json"

LOG_LEVEL = os.getenv("ACD_LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL):
    """Root logging for the CLI and Lambda entry points."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Lambda pre-installs a root handler, so basicConfig alone won't change its level
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))
