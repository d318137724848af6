import boto3

from s3_reports import list_reports


def _client(region_name=None, endpoint_url=None):
    # Let AWS creds/region come from env/instance role; override if passed
    return boto3.client("s3", region_name=region_name, endpoint_url=endpoint_url)


def list_objects(bucket: str, prefix: str = "", suffix: str = ".json", max_keys: int = 1000,
                 region_name=None, endpoint_url=None):
    """(key, size, last_modified) for objects under prefix ending in `suffix`, newest first."""
    return list_reports(_client(region_name, endpoint_url), bucket=bucket, prefix=prefix,
                        suffix=suffix, max_keys=max_keys)


def read_bytes(bucket: str, key: str, region_name=None, endpoint_url=None) -> bytes:
    s3 = _client(region_name, endpoint_url)
    obj = s3.get_object(Bucket=bucket, Key=key)
    return obj["Body"].read()
