# app/utils/__init__.py
"""
Helpers shared across the backend. ``DateTimeUtils`` normalises datetimes to
UTC and converts documents to and from Firestore.
"""

from .datetime_utils import DateTimeUtils

__all__ = ['DateTimeUtils']
