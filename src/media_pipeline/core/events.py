"""S3 upload notification parsing."""

import urllib.parse
from typing import Any, Dict, Optional

from .exceptions import EventParseError
from .models import SourceReference
from .protocols import LoggerProtocol


def parse_upload_event(
    event: Dict[str, Any], logger: Optional[LoggerProtocol] = None
) -> SourceReference:
    """
    Extract the uploaded object from an S3 notification.

    Only the first record is used. Keys arrive URL-encoded (spaces as ``+``)
    and are decoded here.

    Args:
        event: Lambda event payload
        logger: Receives a warning when extra records are ignored

    Returns:
        Reference to the uploaded object

    Raises:
        EventParseError: If the event has no usable S3 record
    """
    records = event.get("Records") if isinstance(event, dict) else None
    if not records:
        raise EventParseError("Event contains no Records")

    if len(records) > 1 and logger is not None:
        logger.warning(
            f"Notification carries {len(records)} records, ignoring all but the first"
        )

    try:
        s3_info = records[0]["s3"]
        bucket = s3_info["bucket"]["name"]
        raw_key = s3_info["object"]["key"]
    except (KeyError, TypeError) as exc:
        raise EventParseError(f"Malformed S3 record: missing {exc}") from exc

    key = urllib.parse.unquote_plus(raw_key)
    if not bucket or not key:
        raise EventParseError("S3 record has an empty bucket or key")

    return SourceReference(bucket=bucket, key=key)
