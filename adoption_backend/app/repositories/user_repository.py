# app/repositories/user_repository.py
from typing import Any, Dict, Optional

from app.models.user import User
from app.repositories.base import FirestoreRepository
from app.utils.datetime_utils import DateTimeUtils


class UserRepository(FirestoreRepository):
    """User store backed by the 'users' collection. Emails are stored lower-case."""

    collection_name = 'users'

    def find_by_id(self, user_id: str) -> Optional[User]:
        data = self._get_dict(user_id)
        return User.from_dict(data) if data else None

    def find_by_email(self, email: str) -> Optional[User]:
        query = self.collection.where('email', '==', email.strip().lower()).limit(1).stream()
        user_doc = next(query, None)
        if not user_doc:
            return None
        return User.from_dict(DateTimeUtils.from_firestore(user_doc.to_dict()))

    def exists_by_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def create(self, user: User) -> User:
        user.email = user.email.strip().lower()
        self.collection.document(user.user_id).set(DateTimeUtils.for_firestore(user.to_dict()))
        return user

    def update(self, user_id: str, update_data: Dict[str, Any]) -> Optional[User]:
        if not self._update(user_id, update_data):
            return None
        return self.find_by_id(user_id)
