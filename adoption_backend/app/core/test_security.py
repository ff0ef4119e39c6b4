# app/core/test_security.py
"""
Usage: python -m pytest app/core/test_security.py -v
"""
import pytest
from flask_jwt_extended import create_access_token

from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.core.security import Actor, Permission, Role, ROLE_PERMISSIONS, authorize, has_permission


def test_admin_holds_every_permission():
    assert ROLE_PERMISSIONS[Role.ADMIN] == frozenset(Permission)


@pytest.mark.parametrize('permission', [p for p in Permission if p is not Permission.APPLICATION_SUBMIT])
def test_user_lacks_admin_permissions(permission):
    assert not has_permission(Role.USER, permission)


def test_user_may_apply():
    assert Actor('u1', Role.USER).can(Permission.APPLICATION_SUBMIT)


def test_authorize_returns_actor():
    actor = Actor('a1', Role.ADMIN)

    assert authorize(actor, Permission.PET_MANAGE) is actor


def test_authorize_anonymous_is_unauthorized():
    with pytest.raises(UnauthorizedError):
        authorize(None, Permission.APPLICATION_SUBMIT)


def test_authorize_wrong_role_is_forbidden_with_default_message():
    with pytest.raises(ForbiddenError) as exc:
        authorize(Actor('u1', Role.USER), Permission.PET_MANAGE)
    assert exc.value.message == "User role 'user' is not authorized to perform this action"


def test_authorize_custom_message():
    with pytest.raises(ForbiddenError) as exc:
        authorize(Actor('u1', Role.USER), Permission.APPLICATION_REVIEW, "Only admins can update application status")
    assert exc.value.status_code == 403
    assert exc.value.message == "Only admins can update application status"


def test_token_with_unknown_role_is_rejected(client, alice):
    token = create_access_token(identity=alice.user_id, additional_claims={'role': 'superuser'})

    res = client.get('/api/applications', headers={'Authorization': f'Bearer {token}'})

    assert res.status_code == 401
    assert res.get_json()['message'] == 'Token carries an unknown role'
