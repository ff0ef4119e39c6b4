# app/api/auth/routes.py
import jwt
from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from app.core.exceptions import BadRequestError
from app.utils.api_response import success_response, created_response
from .schemas import (
    RegisterSchema,
    LoginSchema,
    ProfileUpdateSchema,
    LogoutRequestSchema,
    UserResponseSchema
)

auth_bp = Blueprint('auth_bp', __name__)


def _session(user):
    """Token pair plus the public user view returned by register and login."""
    auth_service = current_app.services['auth']
    data = auth_service.issue_tokens(user)
    data['user'] = UserResponseSchema().dump(user.to_dict())
    return data


@auth_bp.route('/register', methods=['POST'])
def register():
    """Creates a ``user`` account and signs it in."""
    auth_service = current_app.services['auth']
    validated_data = RegisterSchema().load(request.get_json(silent=True) or {})
    user = auth_service.register(validated_data)
    return created_response('User registered successfully', _session(user))


@auth_bp.route('/login', methods=['POST'])
def login():
    auth_service = current_app.services['auth']
    validated_data = LoginSchema().load(request.get_json(silent=True) or {})
    user = auth_service.login(validated_data['email'], validated_data['password'])
    return success_response('Login successful', _session(user))


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_me():
    auth_service = current_app.services['auth']
    user = auth_service.get_profile(get_jwt_identity())
    return success_response('User retrieved successfully', UserResponseSchema().dump(user.to_dict()))


@auth_bp.route('/profile', methods=['PUT'])
@jwt_required()
def update_profile():
    """Updates the requester's name, phone and address."""
    auth_service = current_app.services['auth']
    update_data = ProfileUpdateSchema().load(request.get_json(silent=True) or {})
    user = auth_service.update_profile(get_jwt_identity(), update_data)
    return success_response('Profile updated successfully', UserResponseSchema().dump(user.to_dict()))


@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """Issues a new access token from a valid, non-revoked refresh token."""
    auth_service = current_app.services['auth']
    access_token = auth_service.refresh_access_token(get_jwt_identity())
    return success_response('Token refreshed successfully', {'access_token': access_token})


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """Revokes the bearer access token and, if sent in the body, the refresh token."""
    auth_service = current_app.services['auth']
    data = LogoutRequestSchema().load(request.get_json(silent=True) or {})
    access = get_jwt()

    refresh_jti = refresh_exp = None
    if data['refresh_token']:
        try:
            decoded_refresh = decode_token(data['refresh_token'], allow_expired=True)
        except (jwt.PyJWTError, JWTExtendedException):
            raise BadRequestError("Invalid refresh token")
        if decoded_refresh.get('sub') != access['sub']:
            raise BadRequestError("Refresh token does not belong to this user")
        refresh_jti, refresh_exp = decoded_refresh['jti'], decoded_refresh['exp']

    auth_service.logout_user(access['jti'], access['exp'], refresh_jti, refresh_exp)
    return success_response('Logged out successfully')
