"""Tests for the dashboard data helpers (no Streamlit rendering)."""

import io
import json

import pandas as pd
import pytest

from cost_aggregator import aggregate
from cost_models import EmptyInputError
from lib import data_utils, s3_utils
from lib.ui_shared import format_currency


def _summary_with(n_services):
    records = [
        {"date": "2024-01-01", "service": f"svc{i}", "usageType": "u", "cost": float(n_services - i)}
        for i in range(n_services)
    ]
    return aggregate(records)


class TestNormalize:
    def test_csv_headers(self):
        df = pd.DataFrame({
            "Date": ["2024-01-02", "2024-01-01"],
            "Service": ["EC2", "S3"],
            "Usage Type": ["BoxUsage", None],
            "Cost ($)": ["1.5", "x"],
        })
        out = data_utils.normalize(df)
        assert list(out.columns) == ["date", "service", "usage_type", "cost"]
        assert out["usage_type"].tolist() == ["BoxUsage", "N/A"]
        assert out["cost"].iloc[0] == 1.5
        assert pd.isna(out["cost"].iloc[1])

    def test_timestamp_dates_become_days(self):
        df = pd.DataFrame({"lineItem/UsageStartDate": ["2024-01-01T05:00:00Z"], "Service": ["EC2"], "Cost": [1.0]})
        out = data_utils.normalize(df)
        assert out["date"].tolist() == ["2024-01-01"]
        assert out["usage_type"].tolist() == ["N/A"]

    def test_missing_required_column(self):
        with pytest.raises(ValueError, match="cost"):
            data_utils.normalize(pd.DataFrame({"Date": ["2024-01-01"], "Service": ["EC2"]}))


class TestSummaryFromCsv:
    def test_upload_is_aggregated(self):
        csv_text = (
            "Date,Service,Usage Type,Cost ($)\n"
            "2024-01-01,EC2,BoxUsage,10.0\n"
            "2024-01-01,S3,Storage,5.0\n"
            "2024-01-02,EC2,BoxUsage,15.0\n"
            "bad-date,EC2,BoxUsage,1.0\n"
        )
        summary = data_utils.summary_from_csv(io.StringIO(csv_text))
        assert summary.total_cost == pytest.approx(30.0)
        assert [s.name for s in summary.services] == ["EC2", "S3"]

    def test_all_noise(self):
        csv_text = "Date,Service,Usage Type,Cost ($)\n2024-01-01,S3,Requests,0.01\n"
        with pytest.raises(EmptyInputError):
            data_utils.summary_from_csv(io.StringIO(csv_text))


class TestSummaryFromJson:
    def test_bytes(self, example_records):
        summary = aggregate(example_records)
        assert data_utils.summary_from_json(json.dumps(summary.to_dict()).encode()) == summary

    def test_download_bytes_round_trip(self, example_records):
        summary = aggregate(example_records)
        assert data_utils.summary_from_json(data_utils.summary_json_bytes(summary)) == summary


class TestTopServicesWithOthers:
    def test_five_or_fewer_untouched(self):
        df = data_utils.top_services_with_others(_summary_with(5))
        assert df["name"].tolist() == ["svc0", "svc1", "svc2", "svc3", "svc4"]

    def test_rest_folded_into_others(self):
        summary = _summary_with(8)  # costs 8..1, total 36
        df = data_utils.top_services_with_others(summary)
        assert df["name"].tolist() == ["svc0", "svc1", "svc2", "svc3", "svc4", "Others"]
        others = df.iloc[-1]
        assert others["cost"] == pytest.approx(3 + 2 + 1)
        assert others["percentage"] == pytest.approx(6 / 36 * 100)
        assert df["percentage"].sum() == pytest.approx(100.0)


class TestFrames:
    def test_daily_costs_long_format(self, example_records):
        df = data_utils.daily_costs_frame(aggregate(example_records))
        assert list(df.columns) == ["date", "service", "cost"]
        assert len(df) == 3
        assert df["date"].is_monotonic_increasing

    def test_service_daily_fills_missing_days(self, example_records):
        df = data_utils.service_daily_frame(aggregate(example_records), "S3")
        assert df["cost"].tolist() == [5.0, 0.0]

    def test_usage_types(self, mixed_records):
        df = data_utils.usage_types_frame(aggregate(mixed_records), "Amazon EC2")
        assert df["usage_type"].tolist() == ["BoxUsage:t3.micro", "EBS:VolumeUsage.gp3"]
        assert data_utils.usage_types_frame(aggregate(mixed_records), "missing").empty

    def test_kpis(self, example_records):
        m = data_utils.kpis(aggregate(example_records))
        assert m["total_cost"] == pytest.approx(30.0)
        assert m["days"] == 2
        assert m["avg_daily_cost"] == pytest.approx(15.0)
        assert m["top_service"] == "EC2"
        assert m["top_service_pct"] == pytest.approx(83.333, rel=1e-4)


class TestLoadLatestSummary:
    def test_picks_newest_summary(self, monkeypatch, example_records):
        summary = aggregate(example_records)
        monkeypatch.setattr(data_utils, "list_objects", lambda bucket, prefix, suffix, region_name: [
            ("reports/cost_summary-2024-01-03T0600Z.json", 10, 2),
            ("reports/other.json", 10, 1),
        ])
        seen = {}

        def fake_read(bucket, key, region_name=None):
            seen["key"] = key
            return json.dumps(summary.to_dict()).encode()

        monkeypatch.setattr(data_utils, "read_bytes", fake_read)
        loaded, key = data_utils.load_latest_summary("b", "reports/")
        assert key == seen["key"] == "reports/cost_summary-2024-01-03T0600Z.json"
        assert loaded == summary

    def test_nothing_there(self, monkeypatch):
        monkeypatch.setattr(data_utils, "list_objects", lambda *a, **k: [])
        assert data_utils.load_latest_summary("b") == (None, None)


class TestListObjects:
    def test_reads_every_page(self, monkeypatch):
        pages = {
            None: {"Contents": [{"Key": "r/cost_summary-1.json", "Size": 1, "LastModified": 1}],
                   "IsTruncated": True, "NextContinuationToken": "t2"},
            "t2": {"Contents": [{"Key": "r/cost_summary-2.json", "Size": 1, "LastModified": 2},
                               {"Key": "r/cost_records.csv", "Size": 1, "LastModified": 3}]},
        }

        class Client:
            def list_objects_v2(self, **kwargs):
                return pages[kwargs.get("ContinuationToken")]

        monkeypatch.setattr(s3_utils, "_client", lambda region_name=None, endpoint_url=None: Client())
        keys = [k for k, _, _ in s3_utils.list_objects("b", "r/")]
        assert keys == ["r/cost_summary-2.json", "r/cost_summary-1.json"]


class TestFormatCurrency:
    @pytest.mark.parametrize("value, text", [(0, "$0.00"), (1234.567, "$1,234.57"), (-2.5, "-$2.50")])
    def test_format(self, value, text):
        assert format_currency(value) == text
