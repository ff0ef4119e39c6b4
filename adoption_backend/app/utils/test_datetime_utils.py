# app/utils/test_datetime_utils.py
"""
Tests for the datetime helpers.

Usage: python -m pytest app/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from app.utils.datetime_utils import DateTimeUtils


def test_parse_iso_datetime():
    """Every accepted ISO form parses to a UTC-aware datetime."""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+09:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc


def test_parse_iso_datetime_normalises_offset():
    dt = DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+09:00")
    assert dt.hour == 1


def test_for_firestore():
    test_data = {
        'created_at': datetime(2024, 1, 15, 10, 30),
        'nested': {
            'event_date': date(2023, 12, 25)
        },
        'list_data': [
            {'reviewed_at': datetime(2024, 1, 1)}
        ]
    }

    converted = DateTimeUtils.for_firestore(test_data)

    assert isinstance(converted['nested']['event_date'], datetime)
    assert converted['created_at'].tzinfo == timezone.utc
    assert converted['list_data'][0]['reviewed_at'].tzinfo == timezone.utc


def test_from_firestore_converts_aware_datetimes_to_utc():
    kst = timezone(timedelta(hours=9))
    value = {'reviewed_at': datetime(2024, 1, 15, 9, 0, tzinfo=kst)}

    converted = DateTimeUtils.from_firestore(value)

    assert converted['reviewed_at'] == datetime(2024, 1, 15, 0, 0, tzinfo=timezone.utc)
    assert converted['reviewed_at'].tzinfo == timezone.utc


def test_coerce_datetime():
    assert DateTimeUtils.coerce_datetime(None) is None
    assert DateTimeUtils.coerce_datetime("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def test_to_iso_string():
    assert DateTimeUtils.to_iso_string(datetime(2024, 1, 15, 10, 30)) == "2024-01-15T10:30:00Z"


def test_error_handling():
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")
