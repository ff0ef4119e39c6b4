# app/api/auth/schemas.py
from marshmallow import Schema, fields, validate, EXCLUDE


class RegisterSchema(Schema):
    """POST /api/auth/register"""
    class Meta:
        # a client-sent role is ignored; admins come from the create-admin command
        unknown = EXCLUDE

    name = fields.Str(required=True, validate=validate.Length(min=1, max=100, error="Name is required"))
    email = fields.Email(required=True, error_messages={"invalid": "Please provide a valid email"})
    password = fields.Str(required=True, load_only=True,
                          validate=validate.Length(min=6, error="Password must be at least 6 characters"))
    phone = fields.Str(allow_none=True, validate=validate.Length(max=30))
    address = fields.Str(allow_none=True, validate=validate.Length(max=300))


class LoginSchema(Schema):
    """POST /api/auth/login"""
    email = fields.Email(required=True, error_messages={"invalid": "Please provide a valid email"})
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=1, error="Password is required"))


class ProfileUpdateSchema(Schema):
    """PUT /api/auth/profile"""
    name = fields.Str(validate=validate.Length(min=1, max=100))
    phone = fields.Str(allow_none=True, validate=validate.Length(max=30))
    address = fields.Str(allow_none=True, validate=validate.Length(max=300))


class UserResponseSchema(Schema):
    """Public view of an account; the password hash never leaves the service."""
    user_id = fields.Str(dump_only=True)
    name = fields.Str()
    email = fields.Str()
    role = fields.Str()
    phone = fields.Str(allow_none=True)
    address = fields.Str(allow_none=True)
    created_at = fields.DateTime()


class LogoutRequestSchema(Schema):
    """POST /api/auth/logout. The access token comes from the Authorization header."""
    refresh_token = fields.Str(load_default=None, allow_none=True)
