# app/api/auth/services.py
import uuid
import logging
from datetime import datetime
from typing import Dict, Any, Optional
from flask_jwt_extended import create_access_token, create_refresh_token

from app.core.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from app.core.security import Role
from app.models.user import User
from app.repositories import UserRepository
from app.utils.datetime_utils import DateTimeUtils
from app.utils.password_hash import hash_password, verify_password


class AuthService:
    """Accounts, credentials and the token blocklist."""
    def __init__(self, user_repository: UserRepository):
        self.users = user_repository
        self.revoked_tokens_ref = user_repository.db.collection('revoked_tokens')

    def register(self, user_data: Dict[str, Any], role: Role = Role.USER) -> User:
        """Creates an account. Self-registration always yields the ``user`` role."""
        if self.users.exists_by_email(user_data['email']):
            raise BadRequestError("User already exists")

        new_user = User(
            user_id=str(uuid.uuid4()),
            name=user_data['name'],
            email=user_data['email'],
            password_hash=hash_password(user_data['password']),
            role=role,
            phone=user_data.get('phone'),
            address=user_data.get('address'),
        )
        self.users.create(new_user)
        logging.info(f"User registered: {new_user.user_id} ({role.value})")
        return new_user

    def login(self, email: str, password: str) -> User:
        user = self.users.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")
        return user

    @staticmethod
    def issue_tokens(user: User) -> Dict[str, str]:
        """Access and refresh JWTs; identity is the user id, the role travels as a claim."""
        claims = {'role': user.role.value}
        return {
            'access_token': create_access_token(identity=user.user_id, additional_claims=claims),
            'refresh_token': create_refresh_token(identity=user.user_id, additional_claims=claims),
        }

    def refresh_access_token(self, user_id: str) -> str:
        """New access token carrying the user's current role."""
        user = self.get_profile(user_id)
        return create_access_token(identity=user.user_id, additional_claims={'role': user.role.value})

    def get_profile(self, user_id: str) -> User:
        user = self.users.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, update_data: Dict[str, Any]) -> User:
        """Updates name, phone and address only."""
        allowed = {k: v for k, v in update_data.items() if k in ('name', 'phone', 'address')}
        if not allowed:
            raise BadRequestError("No fields provided to update")
        user = self.users.update(user_id, allowed)
        if not user:
            raise NotFoundError("User not found")
        return user

    # --- blocklist ---
    def add_token_to_blocklist(self, jti: str, expires: datetime) -> None:
        """Stores the token's jti with its expiry; the JWT loader rejects listed tokens."""
        token_data = {
            'revoked_at': DateTimeUtils.now(),
            'expires_at': expires
        }
        self.revoked_tokens_ref.document(jti).set(DateTimeUtils.for_firestore(token_data))

    def is_token_revoked(self, jwt_payload: dict) -> bool:
        return self.revoked_tokens_ref.document(jwt_payload['jti']).get().exists

    def logout_user(self, access_jti: str, access_exp: int,
                    refresh_jti: Optional[str] = None, refresh_exp: Optional[int] = None) -> None:
        """Revokes the access token and, when given, its refresh token."""
        self.add_token_to_blocklist(access_jti, DateTimeUtils.from_timestamp(access_exp))
        if refresh_jti:
            self.add_token_to_blocklist(refresh_jti, DateTimeUtils.from_timestamp(refresh_exp))
        logging.info(f"User logged out. JTI: {access_jti[:8]}...")
