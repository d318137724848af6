# run_report.py
import argparse
import json
import logging
import os
import sys

from cost_explorer import fetch_window
from cost_models import AggregationError
from cost_settings import LOOKBACK_DAYS, RECORDS_FILE, SUMMARY_FILE, configure_logging
from report_writer import write_cost_records, write_cost_summary

logger = logging.getLogger(__name__)


def _out(path: str) -> str:
    """
    Return a writable path. In AWS Lambda the code volume is read-only, so
    we must write to /tmp. Locally we keep the given filename.
    """
    if os.environ.get("AWS_LAMBDA_FUNCTION_NAME"):
        return os.path.join("/tmp", path)
    return path


def build_reports(days: int = LOOKBACK_DAYS, start=None, end=None, client=None):
    """
    Builds the records CSV and the summary JSON and writes them to a writable location.
    Returns:
      (records_csv_path, summary_json_path, records, summary)
    """
    records, summary = fetch_window(days=days, start=start, end=end, client=client)

    records_path = _out(RECORDS_FILE)
    summary_path = _out(SUMMARY_FILE)

    write_cost_records(records, filename=records_path)
    write_cost_summary(summary, filename=summary_path)
    logger.info("Wrote %s (%d records) and %s", records_path, len(records), summary_path)

    return records_path, summary_path, records, summary


def _parse_args(argv=None):
    p = argparse.ArgumentParser(description="Fetch AWS daily costs and aggregate them by service.")
    p.add_argument("--days", type=int, default=LOOKBACK_DAYS, help="look-back window in days")
    p.add_argument("--start", help="start date YYYY-MM-DD (inclusive)")
    p.add_argument("--end", help="end date YYYY-MM-DD (exclusive)")
    p.add_argument("--json", action="store_true", help="print the summary JSON instead of writing files")
    args = p.parse_args(argv)
    if bool(args.start) != bool(args.end):
        p.error("--start and --end go together")
    return args


def main(argv=None, client=None) -> int:
    args = _parse_args(argv)
    configure_logging()
    try:
        if args.json:
            # Same JSON the web front-end reads; nothing is written to disk
            _, summary = fetch_window(days=args.days, start=args.start, end=args.end, client=client)
            print(json.dumps(summary.to_dict(), indent=2))
        else:
            records_p, summary_p, *_ = build_reports(days=args.days, start=args.start, end=args.end, client=client)
            print(f"✅ Reports saved: {records_p}, {summary_p}")
    except AggregationError as e:
        print(f"⚠️  {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
