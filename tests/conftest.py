"""Shared pytest fixtures for the cost dashboard tests."""

import boto3
import pytest
from botocore.stub import Stubber

from cost_models import CostRecord


@pytest.fixture
def example_records():
    """Three records: EC2 on two days, S3 on the first."""
    return [
        {"date": "2024-01-01", "service": "EC2", "usageType": "BoxUsage", "cost": 10.0},
        {"date": "2024-01-01", "service": "S3", "usageType": "Storage", "cost": 5.0},
        {"date": "2024-01-02", "service": "EC2", "usageType": "BoxUsage", "cost": 15.0},
    ]


@pytest.fixture
def mixed_records():
    """Several services, usage types and days, plus noise that must be dropped."""
    return [
        CostRecord("2024-03-02", "Amazon EC2", "BoxUsage:t3.micro", 4.5),
        CostRecord("2024-03-01", "Amazon EC2", "BoxUsage:t3.micro", 4.0),
        CostRecord("2024-03-01", "Amazon EC2", "EBS:VolumeUsage.gp3", 1.25),
        CostRecord("2024-03-01", "Amazon S3", "TimedStorage-ByteHrs", 0.75),
        CostRecord("2024-03-02", "Amazon S3", "Requests-Tier1", 0.01),   # noise
        CostRecord("2024-03-02", "AWS Lambda", "Request", 0.005),        # noise
        CostRecord("2024-03-03", "Amazon RDS", "InstanceUsage:db.t3", 6.0),
        CostRecord("2024-03-03", "Amazon S3", "TimedStorage-ByteHrs", 0.8),
    ]


@pytest.fixture
def ce():
    """A Cost Explorer client that never reaches AWS."""
    return boto3.client(
        "ce",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def ce_stub(ce):
    with Stubber(ce) as stub:
        yield stub
        stub.assert_no_pending_responses()


def ce_page(days, next_token=None, metric="UnblendedCost"):
    """
    Build a GetCostAndUsage response.
    days: {"2024-01-01": [("EC2", "BoxUsage", "10.0"), ...], ...}
    """
    results = []
    for day, groups in days.items():
        results.append({
            "TimePeriod": {"Start": day, "End": day},
            "Total": {},
            "Groups": [
                {"Keys": list(keys), "Metrics": {metric: {"Amount": amount, "Unit": "USD"}}}
                for *keys, amount in groups
            ],
            "Estimated": False,
        })
    resp = {"ResultsByTime": results}
    if next_token:
        resp["NextPageToken"] = next_token
    return resp


def ce_params(start, end, token=None, metric="UnblendedCost"):
    params = {
        "TimePeriod": {"Start": start, "End": end},
        "Granularity": "DAILY",
        "Metrics": [metric],
        "GroupBy": [
            {"Type": "DIMENSION", "Key": "SERVICE"},
            {"Type": "DIMENSION", "Key": "USAGE_TYPE"},
        ],
    }
    if token:
        params["NextPageToken"] = token
    return params
