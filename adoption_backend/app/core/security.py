# app/core/security.py
"""
Role-based authorization.

Roles form a closed enum and every guarded operation names one Permission.
``ROLE_PERMISSIONS`` is the single table answering "may this role do X";
routes and services never branch on the role string themselves.
"""
from dataclasses import dataclass
from enum import Enum
from functools import wraps
from typing import Dict, FrozenSet, Optional

from flask import g
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity

from app.core.exceptions import ForbiddenError, UnauthorizedError


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


class Permission(Enum):
    APPLICATION_SUBMIT = "application:submit"
    APPLICATION_REVIEW = "application:review"
    APPLICATION_VIEW_ANY = "application:view_any"
    APPLICATION_MANAGE_ANY = "application:manage_any"
    PET_MANAGE = "pet:manage"
    PET_VIEW_ALL = "pet:view_all"
    STATISTICS_VIEW = "statistics:view"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.USER: frozenset({
        Permission.APPLICATION_SUBMIT,
    }),
    Role.ADMIN: frozenset(Permission),
}


@dataclass(frozen=True)
class Actor:
    """The authenticated requester: who they are and which role they act in."""
    user_id: str
    role: Role

    def can(self, permission: Permission) -> bool:
        return has_permission(self.role, permission)


def has_permission(role: Role, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())


def authorize(actor: Optional[Actor], permission: Permission, message: Optional[str] = None) -> Actor:
    """Raises unless ``actor`` holds ``permission``; returns the actor for chaining."""
    if actor is None:
        raise UnauthorizedError("Not authorized to access this route")
    if not actor.can(permission):
        raise ForbiddenError(message or f"User role '{actor.role.value}' is not authorized to perform this action")
    return actor


def actor_from_jwt() -> Optional[Actor]:
    """Builds the Actor from the JWT verified for the current request, if any."""
    user_id = get_jwt_identity()
    if user_id is None:
        return None
    try:
        role = Role(get_jwt().get('role', Role.USER.value))
    except ValueError:
        raise UnauthorizedError("Token carries an unknown role")
    return Actor(user_id=user_id, role=role)


def current_actor() -> Optional[Actor]:
    return g.get('actor')


def permission_required(permission: Optional[Permission] = None, optional: bool = False):
    """
    Verifies the bearer token, stores the Actor on ``flask.g`` and checks ``permission``.

    With ``optional=True`` anonymous requests pass through with no actor.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request(optional=optional)
            actor = actor_from_jwt()
            g.actor = actor
            if permission is not None:
                authorize(actor, permission)
            return f(*args, **kwargs)
        return decorated_function
    return decorator
