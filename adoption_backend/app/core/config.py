# app/core/config.py

import os
from datetime import timedelta


class Config:
    """Settings shared by every environment."""
    # Signs and verifies the JWT access/refresh tokens.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES_HOURS', 24)))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.getenv('JWT_REFRESH_TOKEN_EXPIRES_DAYS', 30)))

    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # Pet photo uploads (multipart). MAX_CONTENT_LENGTH caps the whole request.
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024
    PET_PHOTO_MAX_BYTES = 5 * 1024 * 1024
    PET_PHOTO_MAX_FILES = 10
    PET_PHOTO_EXTENSIONS = ('jpeg', 'jpg', 'png', 'gif', 'webp')


class DevelopmentConfig(Config):
    """Local development: debug mode and the development Firebase project."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')


class TestingConfig(Config):
    """Test runs. Tests inject an in-memory Firestore client instead of credentials."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'testing-secret-key-with-enough-length')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET', 'test-bucket')


class ProductionConfig(Config):
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')


# create_app picks the class from FLASK_ENV.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
