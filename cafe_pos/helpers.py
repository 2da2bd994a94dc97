"""Helper functions shared across the POS core."""

import uuid
from datetime import datetime, timezone

from google.protobuf.timestamp_pb2 import Timestamp

from .errors import ValidationError

CURRENCY = "DH"


# Identity


def new_id(prefix: str) -> str:
    """Return a fresh unique id such as ``order-<uuid4 hex>``."""
    return f"{prefix}-{uuid.uuid4().hex}"


# Timestamp helpers


def now() -> Timestamp:
    """Return the current time as a protobuf Timestamp."""
    ts = Timestamp()
    ts.GetCurrentTime()
    return ts


def now_iso() -> str:
    """Return the current UTC time as an RFC3339 string."""
    return now().ToJsonString()


def parse_timestamp(rfc3339: str) -> Timestamp:
    """Parse an RFC3339 timestamp string."""
    try:
        ts = Timestamp()
        ts.FromJsonString(rfc3339)
        return ts
    except ValueError as e:
        raise ValidationError(f"invalid timestamp: {rfc3339}", e) from e


def to_datetime(rfc3339: str) -> datetime:
    """Parse an RFC3339 string into an aware UTC datetime."""
    return parse_timestamp(rfc3339).ToDatetime(tzinfo=timezone.utc)


# Money


def format_money(cents: int) -> str:
    """Render integer minor units as ``12.50 DH``."""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}{whole}.{frac:02d} {CURRENCY}"

