# app/repositories/__init__.py
"""Firestore-backed document stores."""

from .base import ListQuery, TextMatch
from .pet_repository import PetRepository
from .application_repository import ApplicationRepository
from .user_repository import UserRepository

__all__ = [
    'ListQuery', 'TextMatch',
    'PetRepository', 'ApplicationRepository', 'UserRepository',
]
