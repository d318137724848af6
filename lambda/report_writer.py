# report_writer.py
import csv
import datetime
import json

from cost_models import CostSummary

RECORD_HEADERS = ["Date", "Service", "Usage Type", "Cost ($)"]


def write_cost_records(records, filename="cost_records.csv"):
    """
    records: CostRecord values (date, service, usage_type, cost).
    Costs keep full precision; rounding is left to whoever displays them.
    """
    today = datetime.date.today().isoformat()
    with open(filename, mode="w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(RECORD_HEADERS)
        if not records:
            w.writerow([today, "None", "N/A", "N/A"])
            return

        for r in records:
            w.writerow([r.date, r.service, r.usage_type, repr(float(r.cost))])


def write_cost_summary(summary: CostSummary, filename="cost_summary.json"):
    """Summary JSON in the front-end shape, stamped with generatedAt (UTC)."""
    payload = summary.to_dict()
    payload["generatedAt"] = datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    with open(filename, mode="w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def read_cost_summary(filename="cost_summary.json") -> CostSummary:
    with open(filename, encoding="utf-8") as f:
        return CostSummary.from_dict(json.load(f))
