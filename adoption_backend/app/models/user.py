# app/models/user.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, Dict, Any

from app.core.security import Role
from app.utils.datetime_utils import DateTimeUtils


@dataclass
class User:
    """
    Document structure of the Firestore 'users' collection.
    """
    user_id: str
    name: str
    email: str
    password_hash: str
    role: Role = Role.USER
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        processed_data = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if isinstance(processed_data.get('role'), str):
            processed_data['role'] = Role(processed_data['role'])
        if 'created_at' in processed_data:
            processed_data['created_at'] = DateTimeUtils.coerce_datetime(processed_data['created_at'])
        return cls(**processed_data)

    def to_dict(self) -> Dict[str, Any]:
        user_dict = asdict(self)
        user_dict['role'] = self.role.value
        return user_dict

    def to_summary(self) -> Dict[str, Any]:
        """Snapshot stored on applications."""
        return {'user_id': self.user_id, 'name': self.name, 'email': self.email}
