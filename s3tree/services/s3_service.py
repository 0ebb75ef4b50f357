from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ProfileNotFound

from ..tree import ObjectRecord

logger = logging.getLogger(__name__)


def create_s3_client(
    profile: Optional[str] = None,
    region: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> Any:
    session_kwargs: Dict[str, Any] = {}
    if profile:
        session_kwargs["profile_name"] = profile
    if region:
        session_kwargs["region_name"] = region
    try:
        session = boto3.session.Session(**session_kwargs)
    except ProfileNotFound:
        raise ValueError(f"AWS profile not found: {profile}")
    client_kwargs: Dict[str, Any] = {"config": Config(signature_version="s3v4")}
    if endpoint_url:
        client_kwargs["endpoint_url"] = endpoint_url
    return session.client("s3", **client_kwargs)


def list_objects(client: Any, bucket: str, prefix: str = "") -> List[ObjectRecord]:
    """List the objects under prefix with a single request.

    Continuation is not followed; a truncated listing is logged and the
    first page is used as-is.
    """
    kwargs: Dict[str, Any] = {"Bucket": bucket}
    if prefix:
        kwargs["Prefix"] = prefix
    resp = client.list_objects_v2(**kwargs)
    out: List[ObjectRecord] = []
    for item in resp.get("Contents", []) or []:
        key = item.get("Key")
        if key is None:
            continue
        out.append(ObjectRecord(key=key, size=int(item.get("Size") or 0), modified_at=item.get("LastModified")))
    if resp.get("IsTruncated"):
        logger.warning(
            "Listing of s3://%s/%s was truncated after %d objects; showing the first page only",
            bucket,
            prefix,
            len(out),
        )
    logger.debug("Listed %d objects from s3://%s/%s", len(out), bucket, prefix)
    return out
