# app/utils/datetime_utils.py
"""
Central date/time handling for the backend.

- every timestamp is a timezone-aware UTC datetime
- values are normalised before Firestore writes and after Firestore reads
- ISO-8601 strings are parsed and produced in one place
"""

import logging
from datetime import datetime, date, timezone, time
from typing import Any, Optional, Union
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """Static helpers for UTC datetimes and Firestore conversion."""

    @staticmethod
    def now() -> datetime:
        """Current time as a UTC-aware datetime."""
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        Parses an ISO-8601 string into a UTC-aware datetime.

        Accepted forms:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00 (assumed UTC)
        """
        try:
            if not iso_string:
                raise ValueError("Cannot parse an empty string")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"Failed to parse ISO datetime: {iso_string} - {e}")
            raise ValueError(f"Invalid ISO datetime: {iso_string}")

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """Formats a datetime as ISO-8601 in UTC with a 'Z' suffix."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat().replace('+00:00', 'Z')

    @staticmethod
    def from_timestamp(seconds: Union[int, float]) -> datetime:
        """Unix timestamp (seconds, e.g. a JWT 'exp' claim) to a UTC datetime."""
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Prepares a value for a Firestore write.

        - date -> datetime at 00:00 UTC
        - naive datetime -> UTC-aware datetime
        - dicts and lists are converted recursively
        """
        if isinstance(obj, date) and not isinstance(obj, datetime):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        elif isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Normalises a value read from Firestore.

        Firestore timestamps (DatetimeWithNanoseconds) become plain UTC datetimes;
        dicts and lists are converted recursively. Conversion failures are logged
        and the original value is returned.
        """
        try:
            if isinstance(obj, datetime):
                if obj.tzinfo is None:
                    return obj.replace(tzinfo=timezone.utc)
                return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)
            elif isinstance(obj, dict):
                return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]
            return obj
        except Exception as e:
            logger.error(f"Failed to convert Firestore value: {obj} ({type(obj)}) - {e}")
            return obj

    @staticmethod
    def coerce_datetime(value: Any) -> Optional[datetime]:
        """Accepts a datetime, an ISO string or None and returns a UTC datetime or None."""
        if value is None:
            return None
        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)
        return DateTimeUtils.from_firestore(value)
